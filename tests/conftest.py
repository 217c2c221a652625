"""
Shared fixtures: synthetic tokens, pairs and swaps plus in-memory fakes for
the chain collaborators.
"""

import asyncio
from typing import Dict, List, Optional

import pytest

from sandwich_scan.config import ScanConfig
from sandwich_scan.exceptions import ResolutionError, RetrievalError
from sandwich_scan.types import Pair, Swap, Token, TransactionGas

WETH = Token(
    address="0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2",
    name="Wrapped Ether",
    symbol="WETH",
    decimals=18,
)
USDC = Token(
    address="0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
    name="USD Coin",
    symbol="USDC",
    decimals=6,
)
PAIR_ADDRESS = "0xB4e16d0168e52d35CaCD2c6185b44281Ec28C9Dc"


def build_swap(
    tx_index: int,
    block: int = 100,
    in0: int = 0,
    in1: int = 0,
    out0: int = 0,
    out1: int = 0,
    tx_hash: Optional[str] = None,
) -> Swap:
    return Swap(
        block_number=block,
        tx_hash=tx_hash or f"0x{block:08x}{tx_index:056x}",
        tx_index=tx_index,
        amount0_in=in0,
        amount1_in=in1,
        amount0_out=out0,
        amount1_out=out1,
    )


class FakeEventSource:
    """Serves swaps from memory; can fail a number of times first."""

    def __init__(self, swaps: List[Swap], failures: int = 0):
        self.swaps = swaps
        self.failures = failures
        self.calls: List[tuple] = []

    async def fetch_swaps(self, pair: Pair, from_block: int, to_block: int):
        self.calls.append((from_block, to_block))
        if self.failures > 0:
            self.failures -= 1
            raise RetrievalError(
                "eth_getLogs failed",
                call="eth_getLogs",
                from_block=from_block,
                to_block=to_block,
                attempts=3,
            )
        return [s for s in self.swaps if from_block <= s.block_number <= to_block]


class FakeTransactionSource:
    """Returns preset gas data and tracks concurrency."""

    def __init__(self, gas: Optional[Dict[str, TransactionGas]] = None, delay=0.0):
        self.gas = gas or {}
        self.delay = delay
        self.fetched: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch_gas(self, tx_hash: str) -> TransactionGas:
        self.fetched.append(tx_hash)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            return self.gas.get(tx_hash, TransactionGas(tx_hash=tx_hash))
        finally:
            self.in_flight -= 1


class FakeResolver:
    def __init__(self, pairs: Dict[str, Pair]):
        self.pairs = pairs

    async def resolve_pair(self, address: str) -> Pair:
        if address not in self.pairs:
            raise ResolutionError(f"Unable to resolve pair {address}", address=address)
        return self.pairs[address]


class FakeBlockOracle:
    def __init__(self, head: int):
        self.head = head
        self.calls = 0

    async def latest_block(self) -> int:
        self.calls += 1
        return self.head


@pytest.fixture
def weth():
    return WETH


@pytest.fixture
def usdc():
    return USDC


@pytest.fixture
def pair():
    """WETH is token0 (18 decimals), USDC token1 (6 decimals)."""
    return Pair(address=PAIR_ADDRESS, base=WETH, quote=USDC)


@pytest.fixture
def make_swap():
    return build_swap


@pytest.fixture
def sandwich_swaps():
    """
    One textbook sandwich in block 100 at tx indices 10, 11, 12.

    The attacker buys USDC with 10 WETH, the victim buys too, and the
    attacker sells the USDC back for 10.05 WETH.
    """
    return [
        build_swap(10, in0=10 * 10**18, out1=20_000 * 10**6),
        build_swap(11, in0=5 * 10**18, out1=9_900 * 10**6),
        build_swap(12, in1=20_000 * 10**6, out0=1005 * 10**16),
    ]


@pytest.fixture
def scan_config():
    return ScanConfig(pairs=[PAIR_ADDRESS])


@pytest.fixture
def fake_event_source():
    return FakeEventSource


@pytest.fixture
def fake_tx_source():
    return FakeTransactionSource


@pytest.fixture
def fake_resolver():
    return FakeResolver


@pytest.fixture
def fake_block_oracle():
    return FakeBlockOracle
