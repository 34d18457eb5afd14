"""Data types shared by the builder, the supervisor and the report parser."""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .exceptions import InvalidTargetError


class Status(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"


class ReportFormat(str, Enum):
    """Known layouts of an mtr report row."""

    LEGACY = "legacy"
    EXTENDED = "extended"


@dataclass(frozen=True)
class Target:
    """An IPv4 or IPv6 address to trace.

    Example:
        >>> Target.parse("8.8.8.8").version
        4
        >>> Target.parse("2001:4860:4860::8888").is_ipv6
        True

    Anything else, hostnames included, raises InvalidTargetError.
    """

    address: ipaddress.IPv4Address | ipaddress.IPv6Address

    @classmethod
    def parse(cls, value: str) -> Target:
        if not isinstance(value, str):
            raise InvalidTargetError(value)
        try:
            address = ipaddress.ip_address(value)
        except ValueError as e:
            raise InvalidTargetError(value) from e
        return cls(address)

    @property
    def version(self) -> int:
        return self.address.version

    @property
    def is_ipv6(self) -> bool:
        return self.address.version == 6

    def __str__(self) -> str:
        return str(self.address)


# Report column keys, in the order mtr prints them with "-o LSDR NBAW JMXI".
HOP_COLUMNS = {
    "hop": "hop",
    "asn": "asn",
    "host": "host",
    "loss": "loss",
    "sent": "snt",
    "dropped": "drop",
    "received": "rcv",
    "last": "last",
    "best": "best",
    "avg": "avg",
    "worst": "wrst",
    "jitter": "jttr",
    "jitter_avg": "javg",
    "jitter_max": "jmax",
    "jitter_interval": "jint",
}


def _to_float(value: str | None) -> float | None:
    if value is None:
        return None
    try:
        return float(value.rstrip("%"))
    except ValueError:
        return None


@dataclass(frozen=True)
class HopRecord:
    """One row of an mtr report.

    Values are kept exactly as printed; placeholders such as ``???`` or
    ``AS???`` survive untouched. Use :meth:`number` or the typed properties
    to read a column as a number.
    """

    hop: str
    host: str
    loss: str
    sent: str
    dropped: str
    received: str
    last: str
    best: str
    avg: str
    worst: str
    jitter: str
    jitter_avg: str
    jitter_max: str
    jitter_interval: str
    asn: str | None = None
    report_format: ReportFormat = ReportFormat.LEGACY

    def number(self, name: str) -> float | None:
        """Return column ``name`` as a float, or None for placeholders."""
        return _to_float(getattr(self, name))

    @property
    def index(self) -> int:
        return int(self.hop)

    @property
    def loss_percent(self) -> float | None:
        return _to_float(self.loss)

    @property
    def as_number(self) -> int | None:
        if self.asn is None:
            return None
        digits = self.asn[2:]
        return int(digits) if digits.isdigit() else None

    def to_dict(self) -> dict[str, str | None]:
        return {key: getattr(self, attr) for attr, key in HOP_COLUMNS.items()}


@dataclass(frozen=True)
class ParsedResult:
    raw: str
    hops: tuple[HopRecord, ...] = ()
    host: str | None = None
    datetime: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"raw": self.raw, "hops": [hop.to_dict() for hop in self.hops]}


@dataclass(frozen=True)
class RawEnvelope:
    """What is known about one finished mtr process."""

    args: tuple[str, ...]
    code: int
    status: Status
    timetaken: float
    raw: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "args": list(self.args),
            "code": self.code,
            "status": self.status.value,
            "timetaken": self.timetaken,
            "results": {"raw": self.raw},
        }


@dataclass(frozen=True)
class MtrResult:
    target: Target
    envelope: RawEnvelope
    parsed: ParsedResult = field(default_factory=lambda: ParsedResult(raw=""))

    @property
    def hops(self) -> tuple[HopRecord, ...]:
        return self.parsed.hops

    @property
    def host(self) -> str | None:
        return self.parsed.host

    @property
    def datetime(self) -> str | None:
        return self.parsed.datetime

    def to_dict(self) -> dict[str, Any]:
        data = self.envelope.to_dict()
        data["results"] = self.parsed.to_dict()
        data["host"] = self.parsed.host
        data["datetime"] = self.parsed.datetime
        return data

    def __str__(self) -> str:
        lines = [
            f"MTR to {self.target} ({self.host or '?'}), "
            f"started {self.datetime or '?'}, {self.envelope.timetaken:.2f}s"
        ]
        lines.append(
            f"{'Hop':<4}"
            f" {'ASN':<8}"
            f" {'Host':<40}"
            f" {'Loss%':>6}"
            f" {'Snt':>4}"
            f" {'Rcv':>4}"
            f" {'Best':>7}"
            f" {'Avg':>7}"
            f" {'Wrst':>7}"
            f" {'Jttr':>6}"
        )
        for hop in self.hops:
            lines.append(
                f"{hop.hop:<4}"
                f" {hop.asn or '-':<8}"
                f" {hop.host:<40}"
                f" {hop.loss:>6}"
                f" {hop.sent:>4}"
                f" {hop.received:>4}"
                f" {hop.best:>7}"
                f" {hop.avg:>7}"
                f" {hop.worst:>7}"
                f" {hop.jitter:>6}"
            )
        return "\n".join(lines) + "\n"
