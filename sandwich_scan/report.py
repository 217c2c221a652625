"""
Human-readable window reports.

Formats statistics and per-sandwich details for the console. Nothing here
talks to the chain; reports are built from WindowResult values.
"""

import re
from typing import List

from .types import Pair, Sandwich, SandwichReport, Swap, WindowResult
from .utils import format_signed

BANNER_WIDTH = 70


# ANSI color codes for pretty output
class Colors:
    """ANSI color codes for terminal output."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    CYAN = "\033[96m"

    @staticmethod
    def strip(text: str) -> str:
        """Remove all ANSI codes from text."""
        return re.sub(r"\033\[[0-9;]+m", "", text)


def amounts_str(swap: Swap, pair: Pair, side: str) -> str:
    """
    Describe one side of a swap, e.g. "1.5 WETH" or "1.5 WETH & 20.0 USDC".

    Args:
        swap: Swap to describe
        pair: Pair the swap belongs to
        side: "in" or "out"
    """
    token0, token1 = pair.token0, pair.token1
    if side == "in":
        amt0, amt1 = swap.in0(token0.decimals), swap.in1(token1.decimals)
    elif side == "out":
        amt0, amt1 = swap.out0(token0.decimals), swap.out1(token1.decimals)
    else:
        raise ValueError(f"side must be 'in' or 'out': {side}")

    if amt0 > 0 and amt1 > 0:
        return f"{amt0} {token0.symbol} & {amt1} {token1.symbol}"
    if amt0 > 0:
        return f"{amt0} {token0.symbol}"
    if amt1 > 0:
        return f"{amt1} {token1.symbol}"
    return ""


def format_swap(swap: Swap, pair: Pair) -> str:
    return (
        f"Tx Hash: {swap.tx_hash}\n"
        f"Swap   : {amounts_str(swap, pair, 'in')} -> {amounts_str(swap, pair, 'out')}"
    )


def _leg_header(label: str, swap: Swap) -> str:
    return f"-- {label}: Tx Idx {swap.tx_index} --".center(BANNER_WIDTH).rstrip()


def format_profit(report: SandwichReport, pair: Pair, color: bool = True) -> str:
    """Attacker balance change: one line per token plus the gas line."""
    lines = [
        "*** Attacker Account Δ ***",
        f" {format_signed(report.profit0)} {pair.token0.symbol}",
        f" {format_signed(report.profit1)} {pair.token1.symbol}",
        f" -{report.gas.total} ETH (gas)",
    ]
    text = "\n".join(lines)
    if color:
        if report.profit0 >= 0 and report.profit1 >= 0:
            tone = Colors.GREEN
        elif report.profit0 < 0 and report.profit1 < 0:
            tone = Colors.RED
        else:
            tone = Colors.YELLOW
        text = f"{tone}{text}{Colors.RESET}"
    return text


def format_sandwich(report: SandwichReport, pair: Pair, color: bool = True) -> str:
    sandwich: Sandwich = report.sandwich
    banner = f" Block {sandwich.block_number} ".center(BANNER_WIDTH, "=")
    if color:
        banner = f"{Colors.BOLD}{banner}{Colors.RESET}"

    parts = [banner]
    for label, swap in (
        ("Frontrun", sandwich.frontrun),
        ("Lunchmeat", sandwich.lunchmeat),
        ("Backrun", sandwich.backrun),
    ):
        parts.append("")
        parts.append(_leg_header(label, swap))
        parts.append(format_swap(swap, pair))

    parts.append("")
    parts.append(format_profit(report, pair, color))
    return "\n".join(parts)


def format_statistics(result: WindowResult) -> str:
    return "\n".join(
        [
            " -- Statistics -- ",
            f"Total Blocks Scanned : {result.blocks_scanned}",
            f"Total Swaps Completed: {result.total_swaps}",
            f"Blocks with 3+ Swaps : {result.qualifying_blocks}",
            f"Sandwiches Found     : {result.sandwich_count}",
        ]
    )


def format_window(result: WindowResult, pair: Pair, color: bool = True) -> str:
    """Full report for one crawler window."""
    parts: List[str] = [
        f"Fetching {pair.ticker} sandwiches from blocks "
        f"{result.from_block} to {result.to_block}",
        "",
        format_statistics(result),
        "",
    ]

    if result.found_sandwiches:
        header = "* Sandwiches Found! *"
        parts.append(f"{Colors.CYAN}{header}{Colors.RESET}" if color else header)
        parts.append("")
        for report in result.reports:
            parts.append(format_sandwich(report, pair, color))
            parts.append("")
    else:
        header = "* No Sandwiches *"
        parts.append(f"{Colors.DIM}{header}{Colors.RESET}" if color else header)

    return "\n".join(parts)
