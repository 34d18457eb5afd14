"""Errors raised while running mtr.

Three failures reach the caller: an invalid target (raised before anything
is spawned), a spawn failure (no process ever ran) and a non-zero exit
(the process ran, its envelope is attached).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import RawEnvelope


class MtrError(Exception):
    """Base class for mtr_ext errors."""

    envelope: RawEnvelope | None = None


class InvalidTargetError(MtrError, ValueError):
    """Target is not a valid IPv4 or IPv6 address."""

    def __init__(self, target: object) -> None:
        super().__init__(f"Target is not a valid IPv4 or IPv6 address: {target!r}")
        self.target = target


class MtrSpawnError(MtrError):
    """The mtr binary could not be started."""

    def __init__(self, binary: str, cause: OSError) -> None:
        super().__init__(f"Failed to start {binary}: {cause}")
        self.binary = binary


class MtrExecutionError(MtrError):
    """mtr exited with a non-zero status."""

    def __init__(self, envelope: RawEnvelope) -> None:
        lines = envelope.raw.strip().splitlines()
        detail = lines[0] if lines else "no error output"
        super().__init__(f"mtr exited with code {envelope.code}: {detail}")
        self.envelope = envelope

    @property
    def code(self) -> int:
        return self.envelope.code
