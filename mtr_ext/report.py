"""Parse mtr report output into hop records.

mtr is run with ``-o LSDR NBAW JMXI``, so every data row carries, after the
hop index and address, twelve columns: loss, sent, dropped, received, last,
best, avg, worst, jitter, jitter mean, jitter max and interarrival jitter.

Two row layouts are recognised:

Legacy (no AS column)::

      1.|-- 10.0.0.1   0.0%    5    0    5   1.2  1.0  1.1   1.5   0.1  0.1  0.2  0.3

Extended (``-z``, optionally ``-b``)::

      2.|-- AS15169  dns.google (8.8.8.8)   0.0%  5  0  5  9.1  8.7  9.0  9.8  0.4  0.5  1.1  1.9
      3.|-- AS???    ???                  100.0   5  5  0  0.0  0.0  0.0  0.0  0.0  0.0  0.0  0.0

Grammar, whitespace separated:
    hop     digits, optionally followed by "." and "|--"
    asn     "AS" then digits or "?" (extended only)
    host    one token (legacy); letters, digits, ".:_-?()" and inner
            spaces (extended) so "name (address)", IPv6 literals and
            "???" all fit
    loss    number, optional "%" suffix
    rest    eleven tokens of letters, digits and "."

Anything else (header, "Start:" banner, blank lines) is skipped.
"""

from __future__ import annotations

import logging
import re

from .models import HopRecord, ParsedResult, ReportFormat

_HOP = r"^\s*(?P<hop>\d+)\.?(?:\|--)?\s+"
_VALUE = r"[a-z\d.]+"
_COLUMNS = (
    rf"(?P<loss>{_VALUE})%?\s+"
    rf"(?P<sent>{_VALUE})\s+"
    rf"(?P<dropped>{_VALUE})\s+"
    rf"(?P<received>{_VALUE})\s+"
    rf"(?P<last>{_VALUE})\s+"
    rf"(?P<best>{_VALUE})\s+"
    rf"(?P<avg>{_VALUE})\s+"
    rf"(?P<worst>{_VALUE})\s+"
    rf"(?P<jitter>{_VALUE})\s+"
    rf"(?P<jitter_avg>{_VALUE})\s+"
    rf"(?P<jitter_max>{_VALUE})\s+"
    rf"(?P<jitter_interval>{_VALUE})\s*$"
)

HOP_PATTERNS: dict[ReportFormat, re.Pattern[str]] = {
    ReportFormat.EXTENDED: re.compile(
        _HOP
        + r"(?P<asn>AS[\d?]+)\s+"
        + r"(?P<host>[a-z\d.:_\-?()\s]+?)\s+"
        + _COLUMNS,
        re.IGNORECASE,
    ),
    ReportFormat.LEGACY: re.compile(
        _HOP + r"(?P<host>\S+)\s+" + _COLUMNS,
        re.IGNORECASE,
    ),
}

HOST_PATTERN = re.compile(r"^HOST:\s+(?P<value>\S+)", re.IGNORECASE)
START_PATTERN = re.compile(r"^Start:\s+(?P<value>.+?)\s*$", re.IGNORECASE)


def parse_line(line: str) -> HopRecord | None:
    """Parse a single report row, or return None if it is not a hop row."""
    for report_format, pattern in HOP_PATTERNS.items():
        match = pattern.match(line)
        if match:
            fields = match.groupdict()
            fields["host"] = fields["host"].strip()
            return HopRecord(report_format=report_format, **fields)
    return None


def get_value(pattern: re.Pattern[str], output: str) -> str | None:
    """Return the ``value`` group of the last line matching ``pattern``."""
    value = None
    for line in output.splitlines():
        match = pattern.match(line)
        if match:
            value = match.group("value")
    return value


def extract_host(output: str) -> str | None:
    return get_value(HOST_PATTERN, output)


def extract_datetime(output: str) -> str | None:
    return get_value(START_PATTERN, output)


def parse_report(output: str) -> ParsedResult:
    """Parse raw mtr report output.

    Args:
        output: Text printed by ``mtr -r`` on stdout.

    Returns:
        ParsedResult with the raw text, the hop rows in the order they were
        printed, and the HOST / Start values when present.
    """
    hops = []
    skipped = 0
    for line in output.splitlines():
        hop = parse_line(line)
        if hop is None:
            skipped += 1
            continue
        hops.append(hop)

    logging.debug(f"Parsed {len(hops)} hops, skipped {skipped} lines")
    return ParsedResult(
        raw=output,
        hops=tuple(hops),
        host=extract_host(output),
        datetime=extract_datetime(output),
    )
