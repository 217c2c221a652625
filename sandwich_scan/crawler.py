"""
Block-window crawler.

Walks a pair's history backward from a starting block, one inclusive block
range per call, and resizes the next range so each query returns roughly
the same number of swaps regardless of how busy the pair was at the time.
"""

import time
from typing import List, Optional, Tuple

from .exceptions import CrawlerExhaustedError
from .interfaces import EventSource
from .matcher import DEFAULT_TOLERANCE, find_sandwiches, group_by_block
from .revenue import RevenueEngine
from .types import Pair, Sandwich, WindowResult
from .utils import clamp, format_duration, get_logger

logger = get_logger(__name__)

DEFAULT_INITIAL_CHUNK_SIZE = 999
DEFAULT_TARGET_SWAPS_PER_CHUNK = 300
DEFAULT_MAX_CHUNK_SIZE = 9999


def next_chunk_size(
    chunk_size: int, total_swaps: int, target_swaps: int, max_chunk_size: int
) -> int:
    """
    Retarget the chunk size to the observed swap density.

    density = total_swaps / chunk_size and next = floor(target / density),
    evaluated as floor(target * chunk_size / total_swaps) so no float error
    creeps in. A window without swaps jumps straight to the ceiling.

    Returns:
        Next chunk size clamped to [1, max_chunk_size]
    """
    if total_swaps <= 0:
        return max_chunk_size
    return clamp((target_swaps * chunk_size) // total_swaps, 1, max_chunk_size)


class BlockWindowCrawler:
    """
    Backward-moving crawler over one pair's Swap events.

    Each run_one_window() call processes exactly one range; callers decide
    whether to continue. State only advances once a window has fully
    succeeded, so a window that failed on a remote call can be retried as is.
    """

    def __init__(
        self,
        pair: Pair,
        event_source: EventSource,
        revenue_engine: RevenueEngine,
        start_block: int,
        initial_chunk_size: int = DEFAULT_INITIAL_CHUNK_SIZE,
        target_swaps_per_chunk: int = DEFAULT_TARGET_SWAPS_PER_CHUNK,
        max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE,
        tolerance: float = DEFAULT_TOLERANCE,
    ):
        """
        Initialize the crawler.

        Args:
            pair: Pair to scan
            event_source: Source of Swap events
            revenue_engine: Gas-adjusted report builder
            start_block: Upper boundary of the first window (usually chain head)
            initial_chunk_size: Chunk size of the first window
            target_swaps_per_chunk: Desired number of swaps per window
            max_chunk_size: Ceiling for the chunk size
            tolerance: Matching tolerance for the triad matcher

        Raises:
            ValueError: If any size parameter is out of range
        """
        if start_block < 0:
            raise ValueError(f"start_block must be non-negative: {start_block}")
        if max_chunk_size < 1:
            raise ValueError(f"max_chunk_size must be at least 1: {max_chunk_size}")
        if target_swaps_per_chunk < 1:
            raise ValueError(
                f"target_swaps_per_chunk must be at least 1: {target_swaps_per_chunk}"
            )

        self.pair = pair
        self.event_source = event_source
        self.revenue_engine = revenue_engine
        self.target_swaps_per_chunk = target_swaps_per_chunk
        self.max_chunk_size = max_chunk_size
        self.tolerance = tolerance

        self.upper_block: Optional[int] = start_block
        self.chunk_size: int = clamp(initial_chunk_size, 1, max_chunk_size)
        self.windows_completed = 0

    @property
    def exhausted(self) -> bool:
        """True once block 0 has been scanned."""
        return self.upper_block is None

    def next_window(self) -> Tuple[int, int]:
        """
        Inclusive (from_block, to_block) range of the pending window.

        Raises:
            CrawlerExhaustedError: If block 0 has already been scanned
        """
        if self.upper_block is None:
            raise CrawlerExhaustedError(
                f"{self.pair.ticker}: history exhausted, block 0 already scanned"
            )
        return max(0, self.upper_block - self.chunk_size), self.upper_block

    async def run_one_window(self) -> WindowResult:
        """
        Retrieve, match and report one block window, then move backward.

        Returns:
            WindowResult with statistics and sandwich reports

        Raises:
            CrawlerExhaustedError: If block 0 has already been scanned
            RetrievalError: If a remote call failed; crawler state is unchanged
        """
        from_block, to_block = self.next_window()
        started = time.perf_counter()

        logger.info(
            f"Fetching {self.pair.ticker} sandwiches from blocks "
            f"{from_block} to {to_block}"
        )

        swaps = await self.event_source.fetch_swaps(self.pair, from_block, to_block)
        groups = group_by_block(swaps)

        token0, token1 = self.pair.token0, self.pair.token1
        sandwiches: List[Sandwich] = []
        for block in groups:
            sandwiches.extend(
                find_sandwiches(groups[block], token0, token1, self.tolerance)
            )

        reports = await self.revenue_engine.report_many(sandwiches, token0, token1)

        result = WindowResult(
            from_block=from_block,
            to_block=to_block,
            chunk_size=self.chunk_size,
            total_swaps=len(swaps),
            qualifying_blocks=len(groups),
            reports=reports,
        )

        self._advance(from_block, len(swaps))
        result.next_chunk_size = self.chunk_size

        logger.debug(
            f"Window {from_block}-{to_block}: {len(swaps)} swaps, "
            f"{len(groups)} blocks with 3+ swaps, {len(reports)} sandwiches "
            f"in {format_duration(time.perf_counter() - started)}; "
            f"next chunk size {self.chunk_size}"
        )
        return result

    def _advance(self, from_block: int, total_swaps: int) -> None:
        # Next window ends right below this one: no overlap, no gap
        self.upper_block = from_block - 1 if from_block > 0 else None
        self.chunk_size = next_chunk_size(
            self.chunk_size,
            total_swaps,
            self.target_swaps_per_chunk,
            self.max_chunk_size,
        )
        self.windows_completed += 1
