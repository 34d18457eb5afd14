"""Build the mtr command line."""

from __future__ import annotations

from .config import MtrOptions
from .models import Target

# Loss, Sent, Dropped, Received / Newest, Best, Avg, Worst / Jitter, Mean, Max, Interarrival.
# Both report layouts in report.py depend on this order.
FIELD_ORDER = "LSDR NBAW JMXI"


def build_args(target: Target, options: MtrOptions | None = None) -> list[str]:
    """Return the argument vector for one mtr run against ``target``.

    Args:
        target: Validated target address.
        options: Command line options, defaults to ``MtrOptions()``.

    Returns:
        Arguments to pass after the binary name, target last.

    Example:
        >>> build_args(Target.parse("8.8.8.8"), MtrOptions(extended_report=False))
        ['-4', '--no-dns', '-o', 'LSDR NBAW JMXI', '-r', '-w', '--psize', '60', '8.8.8.8']
    """
    if options is None:
        options = MtrOptions()

    args = ["-6" if target.is_ipv6 else "-4"]

    # Numeric addresses only, skip reverse lookups
    if not options.resolve_dns:
        args.append("--no-dns")

    args.extend(["-o", FIELD_ORDER])

    # Report mode: run once, print, exit
    args.append("-r")

    if options.extended_report:
        # AS numbers, and both address and hostname
        args.extend(["-z", "-b"])

    # Wide report: do not truncate hostnames
    args.append("-w")

    if options.packet_length:
        args.extend(["--psize", str(options.packet_length)])

    args.append(str(target))
    return args
