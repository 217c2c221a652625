"""
Sandwich scanner CLI.

Resolves the configured pairs, lets the user pick one and scans it backward
from the chain head, printing a report per block window.

Usage:
    sandwich-scan
    sandwich-scan --config configs/sandwich_scan.yaml --pair 1
    sandwich-scan --pair 2 --start-block 15000000 --max-windows 5 --yes
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from . import logging_config
from .adapters.v2 import Web3PairClient, create_web3
from .config import (
    DEFAULT_CONFIG_PATH,
    ScanConfig,
    load_config,
    parse_config,
    resolve_rpc_url,
)
from .exceptions import ConfigurationError
from .report import format_window
from .revenue import RevenueEngine
from .session import SessionDriver
from .types import Pair, WindowResult

CONTINUE_ANSWERS = ("y", "yes")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Scan a Uniswap V2 pair's history for sandwich trades",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Pick a pair interactively, scan from the chain head
  sandwich-scan

  # Scan the second configured pair from a fixed block, no pauses
  sandwich-scan --pair 2 --start-block 15000000 --max-windows 5 --yes
        """,
    )

    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to config YAML file (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "--rpc-url",
        default=None,
        help="Provider URL (overrides config file and MAINNET_URL/RPC_URL)",
    )
    parser.add_argument(
        "--pair",
        type=int,
        default=None,
        help="1-based index of the pair to scan (prompted if omitted)",
    )
    parser.add_argument(
        "--start-block",
        type=int,
        default=None,
        help="Scan backward from this block instead of the chain head",
    )
    parser.add_argument(
        "--max-windows",
        type=int,
        default=None,
        help="Stop after this many block windows",
    )
    parser.add_argument(
        "--yes",
        action="store_true",
        help="Continue automatically after windows with sandwiches",
    )
    parser.add_argument(
        "--no-color", action="store_true", help="Disable ANSI colors in reports"
    )
    parser.add_argument("--debug", action="store_true", help="Verbose logging")

    return parser.parse_args(argv)


def apply_overrides(config: ScanConfig, args: argparse.Namespace) -> ScanConfig:
    """
    Return a copy of config with CLI flags applied, validated like the file.

    Raises:
        ConfigurationError: If a flag value is out of range
    """
    data = config.model_dump()
    if args.start_block is not None:
        data["crawler"]["start_block"] = args.start_block
    if args.max_windows is not None:
        data["crawler"]["max_windows"] = args.max_windows
    if args.yes:
        data["session"]["auto_continue"] = True
    return parse_config(data)


def prompt_rpc_url() -> str:
    return input("Please input your mainnet provider url: ").strip()


def prompt_pair(pairs: List[Pair]) -> Pair:
    """Ask for a pair number until a valid one is given."""
    while True:
        answer = input("\nChoose a pair number: ").strip()
        try:
            number = int(answer)
        except ValueError:
            number = 0
        if 1 <= number <= len(pairs):
            return pairs[number - 1]
        print(f"Please choose a number from 1 to {len(pairs)}.")


def prompt_continue(result: WindowResult) -> bool:
    answer = input("Continue? (y/n) : ").strip().lower()
    return answer in CONTINUE_ANSWERS


async def run_session(
    driver: SessionDriver, pair_index: Optional[int], color: bool
) -> int:
    """Resolve pairs, choose one and scan it. Returns an exit code."""
    pairs = await driver.resolve_pairs()
    for address, reason in driver.failed_pairs.items():
        print(f"An error was encountered when fetching the pair at {address}:")
        print(reason)

    if not pairs:
        print("❌ No pairs could be resolved", file=sys.stderr)
        return 1

    print(f"\nFetched {len(pairs)} Pairs:\n")
    for i, pair in enumerate(pairs, start=1):
        print(f"{i}. {pair}")

    if pair_index is not None:
        if not 1 <= pair_index <= len(pairs):
            print(
                f"❌ --pair must be between 1 and {len(pairs)}", file=sys.stderr
            )
            return 1
        pair = pairs[pair_index - 1]
    else:
        pair = prompt_pair(pairs)

    def show(result: WindowResult) -> None:
        print(format_window(result, pair, color=color))

    await driver.run(pair, on_result=show)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = parse_args(argv)

    if args.debug:
        logging_config.setup_debug()
    else:
        logging_config.setup()

    try:
        config = apply_overrides(load_config(args.config), args)
    except ConfigurationError as e:
        print(f"❌ Config error: {e}", file=sys.stderr)
        return 1

    try:
        rpc_url = resolve_rpc_url(config, args.rpc_url)
    except ConfigurationError as e:
        if not sys.stdin.isatty():
            print(f"❌ Config error: {e}", file=sys.stderr)
            return 1
        rpc_url = prompt_rpc_url()

    try:
        web3 = create_web3(rpc_url, timeout_sec=config.rpc.timeout_sec)
    except ConfigurationError as e:
        print(f"❌ Initialization failed: {e}", file=sys.stderr)
        return 1

    client = Web3PairClient(
        web3,
        max_retries=config.rpc.max_retries,
        backoff_sec=config.rpc.backoff_sec,
        timeout_sec=config.rpc.timeout_sec,
    )
    engine = RevenueEngine(client, concurrency=config.rpc.gas_concurrency)
    driver = SessionDriver(
        resolver=client,
        event_source=client,
        block_oracle=client,
        revenue_engine=engine,
        config=config,
        confirm=None if config.session.auto_continue else prompt_continue,
    )

    try:
        return asyncio.run(run_session(driver, args.pair, color=not args.no_color))
    except KeyboardInterrupt:
        print("\n\n⏸ Stopped by user")
        return 0


if __name__ == "__main__":
    sys.exit(main())
