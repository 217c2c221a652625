"""
Collaborator interfaces consumed by the crawler and revenue engine.

The core never talks to a node directly; it receives objects satisfying
these protocols, so matching and revenue logic can be tested with fakes.
"""

from typing import List, Protocol, runtime_checkable

from .types import Pair, Swap, TransactionGas


@runtime_checkable
class ChainMetadataResolver(Protocol):
    """Resolves a pair address into a Pair with both tokens' metadata."""

    async def resolve_pair(self, address: str) -> Pair:
        """Resolve token0/token1 and their name, symbol and decimals."""
        ...


@runtime_checkable
class EventSource(Protocol):
    """Returns the Swap events of a pair for an inclusive block range."""

    async def fetch_swaps(
        self, pair: Pair, from_block: int, to_block: int
    ) -> List[Swap]:
        """Fetch swaps in [from_block, to_block] with their chain position."""
        ...


@runtime_checkable
class TransactionSource(Protocol):
    """Returns gas data for a transaction hash."""

    async def fetch_gas(self, tx_hash: str) -> TransactionGas:
        """Fetch gas price and gas used for one transaction."""
        ...


@runtime_checkable
class LatestBlockOracle(Protocol):
    """Returns the current chain head."""

    async def latest_block(self) -> int:
        """Get the latest block number."""
        ...
