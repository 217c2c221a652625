"""
Uniswap V2 Sandwich Scanner.

Scans a pair's historical Swap events backward in adaptive block windows,
matches frontrun/victim/backrun triads and reports gas-adjusted attacker
profit.
"""

PROJECT_NAME = "sandwich-scan"

from sandwich_scan.version import __version__  # noqa: E402

VERSION = __version__

from sandwich_scan.crawler import BlockWindowCrawler, next_chunk_size  # noqa: E402
from sandwich_scan.exceptions import (  # noqa: E402
    ConfigurationError,
    ConversionError,
    CrawlerExhaustedError,
    ResolutionError,
    RetrievalError,
    SandwichScanError,
)
from sandwich_scan.matcher import find_sandwiches, group_by_block, is_match  # noqa: E402
from sandwich_scan.revenue import RevenueEngine, build_report, revenue  # noqa: E402
from sandwich_scan.session import SessionDriver  # noqa: E402
from sandwich_scan.types import (  # noqa: E402
    GasCost,
    Pair,
    Sandwich,
    SandwichReport,
    Swap,
    Token,
    TransactionGas,
    WindowResult,
)
from sandwich_scan.utils import to_decimal  # noqa: E402

__all__ = [
    "PROJECT_NAME",
    "VERSION",
    "BlockWindowCrawler",
    "ConfigurationError",
    "ConversionError",
    "CrawlerExhaustedError",
    "GasCost",
    "Pair",
    "ResolutionError",
    "RetrievalError",
    "RevenueEngine",
    "Sandwich",
    "SandwichReport",
    "SandwichScanError",
    "SessionDriver",
    "Swap",
    "Token",
    "TransactionGas",
    "WindowResult",
    "build_report",
    "find_sandwiches",
    "group_by_block",
    "is_match",
    "next_chunk_size",
    "revenue",
    "to_decimal",
]
