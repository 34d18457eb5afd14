"""Run mtr as a child process and collect its report.

The binary is looked up on PATH; mtr_ext never probes the network itself.

Example:
    >>> async def main():
    ...     result = await MtrExt("8.8.8.8").traceroute()
    ...     for hop in result.hops:
    ...         print(hop.hop, hop.host, hop.loss)
    >>> asyncio.run(main())
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import shlex
import time

from .config import MtrOptions
from .exceptions import MtrExecutionError, MtrSpawnError
from .invocation import build_args
from .models import MtrResult, RawEnvelope, Status, Target
from .report import parse_report

DEFAULT_BINARY = "mtr"
DEFAULT_CHUNK_SIZE = 4096


async def _drain(stream: asyncio.StreamReader, buffer: bytearray, chunk_size: int) -> None:
    while True:
        chunk = await stream.read(chunk_size)
        if not chunk:
            break
        buffer.extend(chunk)


class MtrExt:
    """One mtr target plus the options to run it with.

    The target is validated here, so an invalid address fails before any
    process is started. Each call to :meth:`traceroute` owns its buffers
    and its timer; calls may overlap safely.

    Args:
        target: IPv4 or IPv6 address literal.
        options: Command line options, defaults to ``MtrOptions()``.
        binary: mtr executable, resolved through PATH.
        chunk_size: Maximum bytes read from a pipe at a time.

    Raises:
        InvalidTargetError: If ``target`` is not an IPv4 or IPv6 address.
    """

    def __init__(
        self,
        target: str,
        options: MtrOptions | None = None,
        binary: str = DEFAULT_BINARY,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self.target = Target.parse(target)
        self.options = options or MtrOptions()
        self.binary = binary
        self.chunk_size = chunk_size

    @property
    def args(self) -> list[str]:
        return build_args(self.target, self.options)

    def start(self) -> asyncio.Task[MtrResult]:
        """Schedule :meth:`traceroute` on the running loop and return its task.

        Nothing runs until the caller yields to the event loop. The task
        resolves to an MtrResult or raises the same errors as traceroute.
        """
        return asyncio.get_running_loop().create_task(self.traceroute())

    async def traceroute(self) -> MtrResult:
        """Run mtr once and return the parsed report.

        Returns:
            MtrResult with the envelope and the parsed hops.

        Raises:
            MtrSpawnError: The binary could not be started.
            MtrExecutionError: mtr exited non-zero; ``envelope`` holds the
                exit code, duration, arguments and stderr text.
        """
        args = self.args
        started = time.perf_counter()
        logging.info(f"Running {shlex.join([self.binary, *args])}")

        try:
            process = await asyncio.create_subprocess_exec(
                self.binary,
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logging.error(f"Could not start {self.binary}: {e}")
            raise MtrSpawnError(self.binary, e) from e

        stdout = bytearray()
        stderr = bytearray()
        try:
            await asyncio.gather(
                _drain(process.stdout, stdout, self.chunk_size),
                _drain(process.stderr, stderr, self.chunk_size),
            )
            code = await process.wait()
        except BaseException:
            # Cancelled, e.g. by wait_for: mtr must not outlive the run
            if process.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    process.kill()
                await process.wait()
            raise
        timetaken = time.perf_counter() - started
        logging.info(f"mtr {self.target} exited with {code} after {timetaken:.2f}s")

        if code != 0:
            envelope = RawEnvelope(
                args=tuple(args),
                code=code,
                status=Status.FAILED,
                timetaken=timetaken,
                raw=stderr.decode("utf-8", errors="replace"),
            )
            logging.warning(f"mtr {self.target} failed: {envelope.raw.strip()}")
            raise MtrExecutionError(envelope)

        output = stdout.decode("utf-8", errors="replace")
        envelope = RawEnvelope(
            args=tuple(args),
            code=code,
            status=Status.SUCCESS,
            timetaken=timetaken,
            raw=output,
        )
        return MtrResult(target=self.target, envelope=envelope, parsed=parse_report(output))


async def run_mtr(
    ip: str,
    options: MtrOptions | None = None,
    binary: str = DEFAULT_BINARY,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> MtrResult:
    """Validate ``ip``, run mtr against it and return the result."""
    return await MtrExt(ip, options, binary=binary, chunk_size=chunk_size).traceroute()
