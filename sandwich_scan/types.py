"""
Core data types for sandwich scanning.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .utils import to_decimal


@dataclass(frozen=True)
class Token:
    """
    ERC-20 token metadata resolved once per session.

    Attributes:
        address: Checksum address of the token contract
        name: Token name (e.g., "Wrapped Ether")
        symbol: Token symbol (e.g., "WETH")
        decimals: Fixed-point scaling exponent (0..255)
    """

    address: str
    name: str
    symbol: str
    decimals: int

    def __str__(self) -> str:
        return (
            f"<Token :: {self.name} ({self.symbol}) @ {self.address} "
            f"({self.decimals} decimals)>"
        )


@dataclass(frozen=True)
class Pair:
    """
    Uniswap V2 style pair whose Swap events are analyzed.

    base and quote follow the contract's token0/token1 ordering, which is
    the ordering of every amount field on a Swap.
    """

    address: str
    base: Token
    quote: Token

    @property
    def ticker(self) -> str:
        return f"{self.base.symbol}-{self.quote.symbol}"

    @property
    def token0(self) -> Token:
        return self.base

    @property
    def token1(self) -> Token:
        return self.quote

    def __str__(self) -> str:
        return f"<Pair {self.ticker} @ {self.address}>"


@dataclass(frozen=True)
class Swap:
    """
    One Swap event plus its position on chain.

    Amounts are raw uint256 integers relative to the pair's token0/token1.
    """

    block_number: int
    tx_hash: str
    tx_index: int
    amount0_in: int
    amount1_in: int
    amount0_out: int
    amount1_out: int

    def in0(self, decimals: int) -> float:
        return to_decimal(self.amount0_in, decimals)

    def in1(self, decimals: int) -> float:
        return to_decimal(self.amount1_in, decimals)

    def out0(self, decimals: int) -> float:
        return to_decimal(self.amount0_out, decimals)

    def out1(self, decimals: int) -> float:
        return to_decimal(self.amount1_out, decimals)

    @property
    def is_well_formed(self) -> bool:
        """True if the swap converts exactly one token into the other."""
        ins = (self.amount0_in > 0, self.amount1_in > 0)
        outs = (self.amount0_out > 0, self.amount1_out > 0)
        if sum(ins) != 1 or sum(outs) != 1:
            return False
        return ins != outs


@dataclass(frozen=True)
class Sandwich:
    """
    Frontrun, lunchmeat (victim) and backrun swaps from a single block.

    Holds references to the Swap objects of the block group that produced
    it; nothing is copied.
    """

    frontrun: Swap
    lunchmeat: Swap
    backrun: Swap

    @property
    def block_number(self) -> int:
        return self.frontrun.block_number

    @property
    def legs(self) -> Tuple[Swap, Swap, Swap]:
        return (self.frontrun, self.lunchmeat, self.backrun)


@dataclass(frozen=True)
class TransactionGas:
    """Gas data for one transaction; either field is None when unavailable."""

    tx_hash: str
    gas_price: Optional[int] = None
    gas_used: Optional[int] = None


@dataclass(frozen=True)
class GasCost:
    """Attacker gas spend in native units (ETH)."""

    frontrun: float = 0.0
    backrun: float = 0.0

    @property
    def total(self) -> float:
        return self.frontrun + self.backrun


@dataclass(frozen=True)
class SandwichReport:
    """Profit per token and gas cost for one sandwich."""

    sandwich: Sandwich
    profit0: float
    profit1: float
    gas: GasCost = field(default_factory=GasCost)

    @property
    def net_result(self) -> Tuple[float, float, float]:
        """(profit0, profit1, -gas); gas is always a cost in native units."""
        return (self.profit0, self.profit1, -self.gas.total)


@dataclass
class WindowResult:
    """
    Outcome of one crawler window.

    Attributes:
        from_block: First block of the inclusive range queried
        to_block: Last block of the inclusive range queried
        chunk_size: Chunk size used for this window
        total_swaps: Number of Swap events retrieved
        qualifying_blocks: Number of blocks with at least three swaps
        reports: Sandwich reports in non-decreasing block order
        next_chunk_size: Chunk size chosen for the following window
    """

    from_block: int
    to_block: int
    chunk_size: int
    total_swaps: int
    qualifying_blocks: int
    reports: List[SandwichReport] = field(default_factory=list)
    next_chunk_size: int = 0

    @property
    def blocks_scanned(self) -> int:
        return self.to_block - self.from_block + 1

    @property
    def sandwich_count(self) -> int:
        return len(self.reports)

    @property
    def found_sandwiches(self) -> bool:
        return bool(self.reports)
