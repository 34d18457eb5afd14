"""Shared fixtures."""

import itertools
import sys

import pytest

SAMPLE_REPORT = """\
Start: 2024-05-01T10:15:02+0000
HOST: probe-01                    Loss%   Snt   Drop   Rcv  Last  Best   Avg  Wrst  Jttr  Javg  Jmax  Jint
  1.|-- AS???    192.168.1.1       0.0%    10     0    10   0.6   0.5   0.6   0.9   0.1   0.1   0.3   0.4
  2.|-- AS???    ???              100.0    10    10     0   0.0   0.0   0.0   0.0   0.0   0.0   0.0   0.0
  3.|-- AS15169  dns.google (8.8.8.8)  0.0%  10  0  10  9.1  8.7  9.0  9.8  0.4  0.5  1.1  1.9
"""


@pytest.fixture
def sample_report():
    return SAMPLE_REPORT


@pytest.fixture
def fake_mtr(tmp_path):
    """Build an executable that stands in for mtr.

    It records its arguments to ``<name>.args``, prints the given stdout and
    stderr, optionally sleeps first, and exits with ``code``.
    """
    if sys.platform == "win32":
        pytest.skip("fake mtr binary needs a POSIX shell")

    counter = itertools.count()

    def make(stdout="", stderr="", code=0, delay=0.0):
        name = f"mtr{next(counter)}"
        out_file = tmp_path / f"{name}.out"
        err_file = tmp_path / f"{name}.err"
        args_file = tmp_path / f"{name}.args"
        out_file.write_text(stdout, encoding="utf-8")
        err_file.write_text(stderr, encoding="utf-8")
        script = tmp_path / name
        lines = ["#!/bin/sh", f"printf '%s\\n' \"$@\" > '{args_file}'"]
        if delay:
            lines.append(f"sleep {delay}")
        lines += [f"cat '{out_file}'", f"cat '{err_file}' >&2", f"exit {code}"]
        script.write_text("\n".join(lines) + "\n")
        script.chmod(0o755)
        return str(script)

    return make
