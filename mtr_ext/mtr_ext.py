#!/usr/bin/env python

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from csv import DictWriter
from pathlib import Path
from typing import Any

from .config import LoggingConfig, MtrExtConfig
from .config import load_config as load_modern_config
from .exceptions import MtrError
from .models import MtrResult
from .supervisor import run_mtr


def setup_logger(config: LoggingConfig | None = None) -> None:
    """Set up logging."""
    if config is None:
        config = LoggingConfig()

    if config.file is None:
        logging.basicConfig(level=config.level, format="%(message)s")
        return

    logging.basicConfig(
        level=config.level,
        format="%(asctime)s %(levelname)-8s %(message)s",
        datefmt="%m-%d %H:%M",
        filename=config.file,
        filemode="w",
    )
    console = logging.StreamHandler()
    console.setLevel(config.level)
    formatter = logging.Formatter("%(message)s")
    console.setFormatter(formatter)
    logging.getLogger("").addHandler(console)


def flatten_dict(dd: Any, separator: str = "_", prefix: str = "") -> dict[str, Any]:
    """Flatten nested dictionary using separator."""
    return (
        {
            prefix + separator + k if prefix else k: v
            for kk, vv in dd.items()
            for k, v in flatten_dict(vv, separator, kk).items()
        }
        if isinstance(dd, dict)
        else {prefix: dd}
    )


def load_config(config_file: str | Path | None = None) -> MtrExtConfig:
    """Load configuration using the Pydantic-based system.

    Args:
        config_file: Path to configuration file. If None, searches standard locations.

    Returns:
        Typed and validated configuration object.
    """
    if isinstance(config_file, str):
        config_file = Path(config_file)

    return load_modern_config(config_file)


def hops_to_rows(ip: str, result: MtrResult) -> list[dict[str, Any]]:
    """One flat row per hop, keyed like ``output.columns``."""
    rows = []
    for hop in result.hops:
        row = {"ip": ip, "mtr.host": result.host, "mtr.datetime": result.datetime}
        row.update(flatten_dict({"hop": hop.to_dict()}, separator="."))
        rows.append(row)
    return rows


def mtr(config: MtrExtConfig, ip: str) -> dict[str, Any]:
    """Get path statistics using mtr

    Args:
        config: Typed configuration object.
        ip (str): an IP address

    Returns:
        dict: mtr report information

    Raises:
        MtrError: invalid address, mtr missing, or mtr exited non-zero.

    Example:
        mtr(config, '8.8.8.8')
    """
    result = asyncio.run(
        run_mtr(
            ip,
            config.mtr,
            binary=config.process.binary,
            chunk_size=config.process.chunk_size,
        )
    )
    return flatten_dict({"mtr": result.to_dict()}, separator=".")


async def run_targets(
    config: MtrExtConfig, ips: list[str]
) -> list[MtrResult | MtrError]:
    """Run mtr against every address, at most ``max_concurrency`` at a time.

    Failures are returned in place of results, in the order of ``ips``.
    """
    semaphore = asyncio.Semaphore(config.process.max_concurrency)

    async def run_one(ip: str) -> MtrResult | MtrError:
        async with semaphore:
            try:
                return await run_mtr(
                    ip,
                    config.mtr,
                    binary=config.process.binary,
                    chunk_size=config.process.chunk_size,
                )
            except MtrError as e:
                logging.error(f"{ip}: {e}")
                return e

    return await asyncio.gather(*(run_one(ip) for ip in ips))


def error_to_dict(ip: str, error: MtrError) -> dict[str, Any]:
    data = {"ip": ip, "error": str(error)}
    if error.envelope is not None:
        data.update(error.envelope.to_dict())
    return data


def main() -> int:
    parser = argparse.ArgumentParser(description="mtr report runner")
    parser.add_argument("ip", nargs="*", help="IP Address(es)")
    parser.add_argument("-f", "--file", help="List of IP addresses file")
    parser.add_argument("-c", "--config", help="Configuration file (TOML format)")
    parser.add_argument("-o", "--output", help="Output CSV file name")
    parser.add_argument(
        "--json", action="store_true", help="Print results as JSON to stdout"
    )
    parser.add_argument(
        "-n", "--max-conn", type=int, help="Max concurrent mtr processes"
    )
    parser.add_argument("--packet-length", type=int, help="Probe packet size in bytes")
    parser.add_argument(
        "--resolve-dns",
        action="store_true",
        default=None,
        help="Resolve hop addresses to hostnames",
    )
    parser.add_argument(
        "--legacy-report",
        action="store_true",
        help="Omit AS numbers and hostnames from the report",
    )
    parser.add_argument(
        "-v", "--verbose", dest="verbose", action="store_true", help="Verbose mode"
    )
    parser.add_argument(
        "--no-header",
        dest="header",
        action="store_false",
        help="Output without header at the first row",
    )
    parser.set_defaults(header=True)
    parser.set_defaults(verbose=False)

    args = parser.parse_args()

    if args.file is None and len(args.ip) == 0:
        parser.error("at least one of IP address and --file is required")

    config = load_config(args.config)
    if args.verbose:
        config.logging.level = "DEBUG"
    setup_logger(config.logging)

    overrides = {}
    if args.packet_length is not None:
        overrides["packet_length"] = args.packet_length
    if args.resolve_dns is not None:
        overrides["resolve_dns"] = args.resolve_dns
    if args.legacy_report:
        overrides["extended_report"] = False
    if overrides:
        config.mtr = config.mtr.model_copy(update=overrides)
    if args.max_conn:
        config.process.max_concurrency = args.max_conn

    if args.file:
        with open(args.file) as f:
            args.ip.extend(
                a.strip()
                for a in f.read().split("\n")
                if ((a.strip() != "") and not a.startswith("#"))
            )

    results = asyncio.run(run_targets(config, args.ip))
    failed = sum(1 for r in results if isinstance(r, MtrError))

    if args.json:
        out = []
        for ip, r in zip(args.ip, results):
            if isinstance(r, MtrError):
                out.append(error_to_dict(ip, r))
            else:
                out.append({"ip": ip, **r.to_dict()})
        print(json.dumps(out, indent=2))
    elif args.output:
        with open(args.output, "w", newline="") as f:
            writer = DictWriter(
                f, fieldnames=config.output.columns, extrasaction="ignore"
            )
            if args.header:
                writer.writeheader()
            for ip, r in zip(args.ip, results):
                if isinstance(r, MtrResult):
                    writer.writerows(hops_to_rows(ip, r))
        logging.info(f"Wrote {len(results) - failed} report(s) to {args.output}")
    else:
        for r in results:
            if isinstance(r, MtrResult):
                print(r)

    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
