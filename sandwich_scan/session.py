"""
Session driver: resolves pairs, drives a crawler window by window and
decides whether to keep going.

Windows without sandwiches continue automatically. Windows with sandwiches
pause for a confirm() decision, so a human (or a test) can review results
before the next window is fetched.
"""

from typing import Callable, Dict, List, Optional

from .config import ScanConfig
from .crawler import BlockWindowCrawler
from .exceptions import ResolutionError, RetrievalError
from .interfaces import ChainMetadataResolver, EventSource, LatestBlockOracle
from .revenue import RevenueEngine
from .types import Pair, WindowResult
from .utils import get_logger

logger = get_logger(__name__)

ConfirmFn = Callable[[WindowResult], bool]
ResultFn = Callable[[WindowResult], None]


def always_continue(result: WindowResult) -> bool:
    return True


class SessionDriver:
    """
    Outer control loop around BlockWindowCrawler.

    All remote access goes through the injected collaborators; the driver
    itself only sequences windows and applies the continuation policy.
    """

    def __init__(
        self,
        resolver: ChainMetadataResolver,
        event_source: EventSource,
        block_oracle: LatestBlockOracle,
        revenue_engine: RevenueEngine,
        config: ScanConfig,
        confirm: Optional[ConfirmFn] = None,
    ):
        """
        Args:
            resolver: Pair metadata resolver
            event_source: Swap event source handed to the crawler
            block_oracle: Chain head lookup, queried once per started pair
            revenue_engine: Gas-adjusted report builder
            config: Validated scanner configuration
            confirm: Called after a window with sandwiches; returning False
                ends the session. Defaults to continuing when auto_continue
                is set and stopping otherwise.
        """
        self.resolver = resolver
        self.event_source = event_source
        self.block_oracle = block_oracle
        self.revenue_engine = revenue_engine
        self.config = config

        if confirm is None:
            confirm = always_continue if config.session.auto_continue else None
        self.confirm = confirm

        self.pairs: List[Pair] = []
        self.failed_pairs: Dict[str, str] = {}
        self.crawler: Optional[BlockWindowCrawler] = None
        self.windows_run = 0

    async def resolve_pairs(self, addresses: Optional[List[str]] = None) -> List[Pair]:
        """
        Resolve every configured pair, skipping those that fail.

        Args:
            addresses: Pair addresses (default: config.pairs)

        Returns:
            Successfully resolved pairs, in the order given
        """
        addresses = addresses if addresses is not None else self.config.pairs
        logger.info(f"Fetching {len(addresses)} pairs")

        self.pairs = []
        self.failed_pairs = {}
        for address in addresses:
            try:
                pair = await self.resolver.resolve_pair(address)
            except ResolutionError as e:
                logger.error(f"Skipping pair {address}: {e}")
                self.failed_pairs[address] = str(e)
                continue

            self.pairs.append(pair)
            logger.info(f"{len(self.pairs)}. {pair}")

        return self.pairs

    async def start(self, pair: Pair) -> BlockWindowCrawler:
        """
        Create a crawler for the pair, starting at the chain head unless a
        start block is configured.
        """
        settings = self.config.crawler
        if settings.start_block is not None:
            start_block = settings.start_block
        else:
            start_block = await self.block_oracle.latest_block()

        self.crawler = BlockWindowCrawler(
            pair=pair,
            event_source=self.event_source,
            revenue_engine=self.revenue_engine,
            start_block=start_block,
            initial_chunk_size=settings.initial_chunk_size,
            target_swaps_per_chunk=settings.target_swaps_per_chunk,
            max_chunk_size=settings.max_chunk_size,
            tolerance=self.config.matcher.tolerance,
        )
        self.windows_run = 0
        logger.info(f"Scanning {pair.ticker} backward from block {start_block}")
        return self.crawler

    async def run_one_iteration(self) -> WindowResult:
        """
        Run exactly one crawler window.

        Raises:
            RuntimeError: If start() has not been called
            RetrievalError: If the window failed; it can be retried
        """
        if self.crawler is None:
            raise RuntimeError("Session not started; call start(pair) first")
        result = await self.crawler.run_one_window()
        self.windows_run += 1
        return result

    def should_continue(self, result: WindowResult) -> bool:
        """Apply the continuation policy to the latest window."""
        if self.crawler is not None and self.crawler.exhausted:
            logger.info("Reached block 0; nothing left to scan")
            return False

        max_windows = self.config.crawler.max_windows
        if max_windows is not None and self.windows_run >= max_windows:
            logger.info(f"Reached max_windows={max_windows}")
            return False

        if not result.found_sandwiches:
            logger.info("No sandwiches in this window; continuing")
            return True

        if self.confirm is None:
            return False
        return bool(self.confirm(result))

    async def run(self, pair: Pair, on_result: Optional[ResultFn] = None) -> int:
        """
        Scan a pair until the continuation policy says stop.

        A failed window is reported with its block range and retried; after
        max_failed_windows consecutive failures the session ends.

        Args:
            pair: Pair to scan
            on_result: Called with every completed window (e.g. to print it)

        Returns:
            Number of windows completed
        """
        await self.start(pair)
        max_failures = self.config.session.max_failed_windows
        failures = 0

        while True:
            try:
                result = await self.run_one_iteration()
            except RetrievalError as e:
                failures += 1
                from_block, to_block = self.crawler.next_window()
                logger.error(
                    f"Window {from_block}-{to_block} failed on {e.call} "
                    f"({failures}/{max_failures}): {e}"
                )
                if failures >= max_failures:
                    logger.error("Too many consecutive failed windows; stopping")
                    break
                continue

            failures = 0
            if on_result is not None:
                on_result(result)

            if not self.should_continue(result):
                break

        return self.windows_run
