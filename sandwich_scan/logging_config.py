"""
Logging configuration for cleaner console output.

Usage:
    from sandwich_scan import logging_config
    logging_config.setup()
"""

import logging
import sys


def setup(level=logging.INFO):
    """
    Configure the root logger for CLI use.

    - Uses a short timestamp format (HH:MM:SS)
    - Sends diagnostics to stderr so reports on stdout stay readable
    - Quiets HTTP request logs from web3's transport
    """
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-7s | %(message)s", datefmt="%H:%M:%S"
    )
    console.setFormatter(formatter)
    root.addHandler(console)

    # Suppress noisy loggers
    logging.getLogger("web3").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    logging.getLogger("sandwich_scan").setLevel(level)


def setup_debug():
    """
    Verbose logging for debugging.
    Shows per-window timings and web3 provider traffic.
    """
    setup(level=logging.DEBUG)
    logging.getLogger("web3").setLevel(logging.DEBUG)
