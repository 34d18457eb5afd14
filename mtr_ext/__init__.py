"""mtr-ext

Run the mtr network diagnostic tool from Python and get typed results:
- Argument construction for IPv4/IPv6 targets
- Asynchronous process supervision with asyncio
- Report parsing into per-hop loss, latency and jitter records
- AS numbers, resolved host label and start time (extended report)

mtr itself must be installed and on PATH.
"""

from importlib.metadata import version

__version__ = version("mtr-ext")

from .config import MtrExtConfig, MtrOptions, load_config
from .exceptions import (
    InvalidTargetError,
    MtrError,
    MtrExecutionError,
    MtrSpawnError,
)
from .invocation import build_args
from .models import (
    HopRecord,
    MtrResult,
    ParsedResult,
    RawEnvelope,
    ReportFormat,
    Status,
    Target,
)
from .mtr_ext import mtr
from .report import get_value, parse_report
from .supervisor import MtrExt, run_mtr

__all__ = [
    "MtrExtConfig",
    "MtrOptions",
    "load_config",
    "InvalidTargetError",
    "MtrError",
    "MtrExecutionError",
    "MtrSpawnError",
    "build_args",
    "HopRecord",
    "MtrResult",
    "ParsedResult",
    "RawEnvelope",
    "ReportFormat",
    "Status",
    "Target",
    "mtr",
    "get_value",
    "parse_report",
    "MtrExt",
    "run_mtr",
]
