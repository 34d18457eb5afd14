"""Tests for report parsing."""

import re

import pytest

from mtr_ext import ReportFormat, get_value, parse_report
from mtr_ext.report import (
    HOST_PATTERN,
    START_PATTERN,
    extract_datetime,
    extract_host,
    parse_line,
)

LEGACY_ROW = "  1.|-- 10.0.0.1   0.0%    5    5    5   1.2  1.0  1.1   1.5   0.1  0.1  0.2  0.3"


class TestParseLine:
    """Test single row parsing."""

    def test_legacy_row(self):
        """Test a row without an AS column."""
        hop = parse_line(LEGACY_ROW)
        assert hop is not None
        assert hop.report_format is ReportFormat.LEGACY
        assert hop.hop == "1"
        assert hop.host == "10.0.0.1"
        assert hop.asn is None
        assert hop.loss == "0.0"
        assert (hop.sent, hop.dropped, hop.received) == ("5", "5", "5")
        assert (hop.last, hop.best, hop.avg, hop.worst) == ("1.2", "1.0", "1.1", "1.5")
        assert (hop.jitter, hop.jitter_avg, hop.jitter_max, hop.jitter_interval) == (
            "0.1",
            "0.1",
            "0.2",
            "0.3",
        )

    def test_legacy_row_without_bars(self):
        """Test a row without the \""""
        hop = parse_line(" 4. 172.16.0.1 25.0 4 1 3 3.0 2.9 3.1 3.4 0.2 0.3 0.5 0.6")
        assert hop.hop == "4"
        assert hop.loss_percent == 25.0

    def test_extended_row_with_hostname(self):
        """Test a row with AS number and "name (address)" host."""
        hop = parse_line(
            "  3.|-- AS15169  dns.google (8.8.8.8)  0.0%  10  0  10  9.1  8.7  9.0  9.8  0.4  0.5  1.1  1.9"
        )
        assert hop.report_format is ReportFormat.EXTENDED
        assert hop.asn == "AS15169"
        assert hop.as_number == 15169
        assert hop.host == "dns.google (8.8.8.8)"
        assert hop.jitter_interval == "1.9"

    def test_extended_row_unresolved(self):
        """Test a row with unresolved AS and host."""
        hop = parse_line(
            "  2.|-- AS???    ???              100.0    10    10     0   0.0   0.0   0.0   0.0   0.0   0.0   0.0   0.0"
        )
        assert hop.asn == "AS???"
        assert hop.as_number is None
        assert hop.host == "???"
        assert hop.loss == "100.0"

    def test_extended_row_ipv6(self):
        """Test a row with an IPv6 host."""
        hop = parse_line(
            " 12.|-- AS6939   2001:470:0:1::2   0.0%  5  0  5  20.1  19.8  20.0  20.4  0.2  0.3  0.6  0.4"
        )
        assert hop.hop == "12"
        assert hop.host == "2001:470:0:1::2"

    @pytest.mark.parametrize(
        "line",
        [
            "",
            "Start: 2024-05-01T10:15:02+0000",
            "HOST: probe-01   Loss%   Snt   Drop   Rcv  Last  Best   Avg  Wrst  Jttr  Javg  Jmax  Jint",
            "  1.|-- 10.0.0.1   0.0%    5",
            "mtr: unexpected output",
        ],
    )
    def test_non_hop_lines(self, line):
        """Test banners, headers and short rows are skipped."""
        assert parse_line(line) is None


class TestParseReport:
    """Test whole report parsing."""

    def test_sample_report(self, sample_report):
        """Test parsing a full report."""
        result = parse_report(sample_report)
        assert result.raw == sample_report
        assert [hop.hop for hop in result.hops] == ["1", "2", "3"]
        assert result.host == "probe-01"
        assert result.datetime == "2024-05-01T10:15:02+0000"

    def test_banner_lines_interspersed(self):
        """Test hop count ignores lines between rows."""
        rows = [
            LEGACY_ROW,
            "  2.|-- 10.0.0.2   0.0%    5    0    5   2.2  2.0  2.1   2.5   0.1  0.1  0.2  0.3",
            "  3.|-- 10.0.0.3   0.0%    5    0    5   3.2  3.0  3.1   3.5   0.1  0.1  0.2  0.3",
        ]
        text = "\n".join(
            ["banner", rows[0], "", "-----", rows[1], "noise here", rows[2], "footer"]
        )
        result = parse_report(text)
        assert len(result.hops) == 3
        assert [hop.host for hop in result.hops] == ["10.0.0.1", "10.0.0.2", "10.0.0.3"]

    def test_report_order_kept(self):
        """Test rows keep report order, not hop order."""
        text = "\n".join(
            [
                "  5.|-- 10.0.0.5   0.0%  5  0  5  1.0  1.0  1.0  1.0  0.0  0.0  0.0  0.0",
                "  2.|-- 10.0.0.2   0.0%  5  0  5  1.0  1.0  1.0  1.0  0.0  0.0  0.0  0.0",
                "  9.|-- 10.0.0.9   0.0%  5  0  5  1.0  1.0  1.0  1.0  0.0  0.0  0.0  0.0",
            ]
        )
        assert [hop.hop for hop in parse_report(text).hops] == ["5", "2", "9"]

    def test_mixed_formats(self):
        """Test both layouts in one report."""
        text = "\n".join(
            [
                LEGACY_ROW,
                "  2.|-- AS64500  10.0.0.2   0.0%  5  0  5  1.0  1.0  1.0  1.0  0.0  0.0  0.0  0.0",
            ]
        )
        formats = [hop.report_format for hop in parse_report(text).hops]
        assert formats == [ReportFormat.LEGACY, ReportFormat.EXTENDED]

    def test_crlf_line_endings(self):
        """Test CRLF line endings."""
        text = "HOST: example.com\r\n" + LEGACY_ROW + "\r\n"
        result = parse_report(text)
        assert len(result.hops) == 1
        assert result.host == "example.com"

    def test_empty(self):
        """Test empty output."""
        result = parse_report("")
        assert result.hops == ()
        assert result.host is None
        assert result.datetime is None

    def test_idempotent(self, sample_report):
        """Test parsing twice gives equal results."""
        assert parse_report(sample_report) == parse_report(sample_report)


class TestGetValue:
    """Test metadata extraction."""

    def test_last_match_wins(self):
        """Test the last HOST line wins."""
        text = "HOST: first.example\nrow\nHOST: second.example\nHOST: last.example\n"
        assert extract_host(text) == "last.example"

    def test_host_header_with_columns(self):
        """Test HOST value from a header line with columns."""
        text = "HOST: probe-01    Loss%   Snt   Last   Avg\n"
        assert extract_host(text) == "probe-01"

    def test_legacy_start_format(self):
        """Test a ctime style Start line."""
        text = "Start: Wed May  1 10:15:02 2024\n"
        assert extract_datetime(text) == "Wed May  1 10:15:02 2024"

    def test_no_match(self):
        """Test None when nothing matches."""
        assert get_value(HOST_PATTERN, "nothing here\n") is None
        assert get_value(START_PATTERN, "") is None

    def test_custom_pattern(self):
        """Test get_value with another pattern."""
        pattern = re.compile(r"^Keys:\s+(?P<value>\w+)")
        assert get_value(pattern, "Keys: a\nKeys: b\n") == "b"
