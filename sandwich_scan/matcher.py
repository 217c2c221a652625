"""
Triad matcher: finds frontrun/lunchmeat/backrun runs within one block.

Pure functions only; the crawler feeds them swaps grouped by block.
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from .types import Sandwich, Swap, Token

# Attacker's entry and exit amounts may differ by this factor (pool fee, slippage)
DEFAULT_TOLERANCE = 1.01

MIN_SWAPS_PER_BLOCK = 3


def _ratio(numerator: float, denominator: float) -> Optional[float]:
    if denominator == 0:
        return None
    return numerator / denominator


def _within(ratio: Optional[float], tolerance: float) -> bool:
    if ratio is None:
        return False
    return 1.0 / tolerance <= ratio <= tolerance


def is_match(
    a: Swap,
    b: Swap,
    token0: Token,
    token1: Token,
    tolerance: float = DEFAULT_TOLERANCE,
) -> bool:
    """
    Decide whether two swaps look like a frontrun/backrun pair.

    The attacker's input on the way in should roughly equal its output on
    the way out, for whichever token it entered with. Each axis is checked
    independently; a zero denominator means that axis cannot match.

    Args:
        a: Candidate frontrun
        b: Candidate backrun
        token0: Pair token0 (for decimals)
        token1: Pair token1 (for decimals)
        tolerance: Accepted ratio band is [1/tolerance, tolerance]

    Returns:
        True if either token axis matches
    """
    ratio0 = _ratio(a.in0(token0.decimals), b.out0(token0.decimals))
    if _within(ratio0, tolerance):
        return True

    ratio1 = _ratio(a.in1(token1.decimals), b.out1(token1.decimals))
    return _within(ratio1, tolerance)


def find_sandwiches(
    bundle: List[Swap],
    token0: Token,
    token1: Token,
    tolerance: float = DEFAULT_TOLERANCE,
) -> List[Sandwich]:
    """
    Scan one block's swaps for sandwiches.

    Greedy and left-to-right: a match consumes all three swaps and the
    cursor jumps past them, otherwise it slides by one. A later, better
    triad can therefore lose a swap to an earlier match; that is the
    intended policy.

    Args:
        bundle: Swaps from a single block sorted by tx_index ascending
        token0: Pair token0
        token1: Pair token1
        tolerance: Matching tolerance passed to is_match

    Returns:
        Non-overlapping sandwiches in block order
    """
    sandwiches: List[Sandwich] = []
    i = 0

    while i + 2 < len(bundle):
        frontrun, lunchmeat, backrun = bundle[i], bundle[i + 1], bundle[i + 2]

        if is_match(frontrun, backrun, token0, token1, tolerance):
            sandwiches.append(Sandwich(frontrun, lunchmeat, backrun))
            i += 3
        else:
            i += 1

    return sandwiches


def group_by_block(
    swaps: Iterable[Swap], min_swaps: int = MIN_SWAPS_PER_BLOCK
) -> Dict[int, List[Swap]]:
    """
    Group swaps by block, keeping only blocks that can hold a triad.

    Args:
        swaps: Swaps from any number of blocks
        min_swaps: Groups smaller than this are dropped

    Returns:
        Dict of {block_number -> swaps sorted by tx_index}, ordered by block
    """
    groups: Dict[int, List[Swap]] = defaultdict(list)
    for swap in swaps:
        groups[swap.block_number].append(swap)

    return {
        block: sorted(group, key=lambda s: s.tx_index)
        for block, group in sorted(groups.items())
        if len(group) >= min_swaps
    }
