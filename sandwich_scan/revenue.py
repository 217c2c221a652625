"""
Revenue engine: attacker profit per token and gas cost for a sandwich.

The profit math is pure; RevenueEngine adds the gas lookups, issued
concurrently through an injected TransactionSource.
"""

import asyncio
from typing import List, Optional, Sequence, Tuple

from .interfaces import TransactionSource
from .types import GasCost, Sandwich, SandwichReport, Token, TransactionGas
from .utils import get_logger, to_decimal

logger = get_logger(__name__)

NATIVE_DECIMALS = 18

DEFAULT_GAS_CONCURRENCY = 8


def revenue(sandwich: Sandwich, token0: Token, token1: Token) -> Tuple[float, float]:
    """
    Net attacker gain per token, before gas.

    profit_k = (backrun.out_k - frontrun.in_k) + (frontrun.out_k - backrun.in_k)

    The first term is the long leg (bought with the frontrun, sold with the
    backrun), the second the short leg. Both are summed because either
    token axis may carry nonzero amounts.

    Args:
        sandwich: Matched triad
        token0: Pair token0
        token1: Pair token1

    Returns:
        Tuple of (profit0, profit1) in token units
    """
    front, back = sandwich.frontrun, sandwich.backrun
    d0, d1 = token0.decimals, token1.decimals

    t0_long = back.out0(d0) - front.in0(d0)
    t1_long = back.out1(d1) - front.in1(d1)

    t0_short = front.out0(d0) - back.in0(d0)
    t1_short = front.out1(d1) - back.in1(d1)

    return (t0_long + t0_short, t1_long + t1_short)


def gas_cost_eth(gas: Optional[TransactionGas]) -> float:
    """
    Gas spent by one transaction in native units.

    Missing gas price or gas used counts as zero cost rather than failing
    the whole report.
    """
    if gas is None or gas.gas_price is None or gas.gas_used is None:
        return 0.0
    return to_decimal(gas.gas_price * gas.gas_used, NATIVE_DECIMALS)


def build_report(
    sandwich: Sandwich,
    token0: Token,
    token1: Token,
    frontrun_gas: Optional[TransactionGas] = None,
    backrun_gas: Optional[TransactionGas] = None,
) -> SandwichReport:
    """Combine profit and gas data into a SandwichReport."""
    profit0, profit1 = revenue(sandwich, token0, token1)
    gas = GasCost(
        frontrun=gas_cost_eth(frontrun_gas), backrun=gas_cost_eth(backrun_gas)
    )
    return SandwichReport(sandwich=sandwich, profit0=profit0, profit1=profit1, gas=gas)


class RevenueEngine:
    """
    Gas-adjusted revenue reports for matched sandwiches.

    Only the frontrun and backrun transactions are fetched; the victim's gas
    does not affect attacker profit.
    """

    def __init__(
        self,
        tx_source: TransactionSource,
        concurrency: int = DEFAULT_GAS_CONCURRENCY,
    ):
        """
        Args:
            tx_source: Transaction source used for gas lookups
            concurrency: Maximum number of gas lookups in flight
        """
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1: {concurrency}")
        self.tx_source = tx_source
        self.concurrency = concurrency
        self._semaphore: Optional[asyncio.Semaphore] = None

    def _get_semaphore(self) -> asyncio.Semaphore:
        # Created lazily so it binds to the running event loop
        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self.concurrency)
        return self._semaphore

    async def _fetch_gas(self, tx_hash: str) -> TransactionGas:
        async with self._get_semaphore():
            return await self.tx_source.fetch_gas(tx_hash)

    async def report(
        self, sandwich: Sandwich, token0: Token, token1: Token
    ) -> SandwichReport:
        """Build the report for one sandwich, fetching both legs concurrently."""
        frontrun_gas, backrun_gas = await asyncio.gather(
            self._fetch_gas(sandwich.frontrun.tx_hash),
            self._fetch_gas(sandwich.backrun.tx_hash),
        )

        report = build_report(sandwich, token0, token1, frontrun_gas, backrun_gas)
        logger.debug(
            f"Block {sandwich.block_number}: profit0={report.profit0} "
            f"profit1={report.profit1} gas={report.gas.total}"
        )
        return report

    async def report_many(
        self, sandwiches: Sequence[Sandwich], token0: Token, token1: Token
    ) -> List[SandwichReport]:
        """Build reports for several sandwiches, preserving their order."""
        if not sandwiches:
            return []
        return list(
            await asyncio.gather(
                *(self.report(s, token0, token1) for s in sandwiches)
            )
        )
