"""
Uniswap V2 style adapter backed by web3.

Implements every collaborator the scanner needs (metadata resolution, Swap
event retrieval, gas lookups, chain head) on top of a synchronous Web3
instance. Calls run in the default thread pool so they do not block the
event loop, each with a timeout and bounded exponential-backoff retries.
"""

import asyncio
import functools
from typing import Any, Callable, List, Mapping, Optional, Tuple

from eth_abi.exceptions import DecodingError
from web3 import Web3
from web3.exceptions import (
    BadFunctionCallOutput,
    ContractLogicError,
    TransactionNotFound,
)

from ..abi import (
    ERC20_BYTES32_METADATA_ABI,
    ERC20_METADATA_ABI,
    SWAP_EVENT_TOPIC,
    UNISWAP_V2_PAIR_ABI,
)
from ..exceptions import ConfigurationError, ResolutionError, RetrievalError
from ..types import Pair, Swap, Token, TransactionGas
from ..utils import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_SEC = 1.0
DEFAULT_TIMEOUT_SEC = 30.0

# Map chain IDs to readable names
CHAIN_NAMES = {
    1: "Ethereum Mainnet",
    10: "Optimism",
    56: "BSC",
    137: "Polygon",
    8453: "Base",
    42161: "Arbitrum",
}


def create_web3(rpc_url: str, timeout_sec: float = DEFAULT_TIMEOUT_SEC) -> Web3:
    """
    Connect to an HTTP(S) RPC endpoint and verify it answers.

    Args:
        rpc_url: Provider URL
        timeout_sec: HTTP request timeout

    Returns:
        Connected Web3 instance

    Raises:
        ConfigurationError: If the URL is malformed or the node cannot be queried
    """
    rpc_url = (rpc_url or "").strip()
    if not rpc_url.startswith(("http://", "https://")):
        raise ConfigurationError(f"Invalid RPC URL format: {rpc_url!r}")

    web3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": timeout_sec}))

    # Query the chain directly; is_connected() is unreliable on some providers
    try:
        chain_id = web3.eth.chain_id
        block = web3.eth.block_number
    except Exception as e:
        raise ConfigurationError(
            f"Failed to connect to RPC endpoint {rpc_url}: {e}",
            details={"rpc_url": rpc_url},
        ) from e

    chain_name = CHAIN_NAMES.get(chain_id, f"Chain {chain_id}")
    logger.info(f"✓ Connected to {chain_name} (block #{block:,})")
    return web3


def normalize_tx_hash(tx_hash: Any) -> str:
    """Return a 0x-prefixed lowercase hex string for a transaction hash."""
    if isinstance(tx_hash, str):
        value = tx_hash.lower()
        return value if value.startswith("0x") else f"0x{value}"
    return Web3.to_hex(tx_hash)


def swap_from_event(event: Mapping[str, Any]) -> Swap:
    """
    Build a Swap record from a decoded Swap event.

    Args:
        event: Decoded log with 'args', 'blockNumber', 'transactionHash'
            and 'transactionIndex'

    Returns:
        Immutable Swap
    """
    args = event["args"]
    return Swap(
        block_number=int(event["blockNumber"]),
        tx_hash=normalize_tx_hash(event["transactionHash"]),
        tx_index=int(event["transactionIndex"]),
        amount0_in=int(args["amount0In"]),
        amount1_in=int(args["amount1In"]),
        amount0_out=int(args["amount0Out"]),
        amount1_out=int(args["amount1Out"]),
    )


def _decode_bytes32(value: bytes) -> str:
    return value.rstrip(b"\x00").decode("utf-8", errors="replace")


class Web3PairClient:
    """
    web3-backed chain client for Uniswap V2 pairs.

    Satisfies ChainMetadataResolver, EventSource, TransactionSource and
    LatestBlockOracle.
    """

    def __init__(
        self,
        web3: Web3,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_sec: float = DEFAULT_BACKOFF_SEC,
        timeout_sec: float = DEFAULT_TIMEOUT_SEC,
    ):
        """
        Args:
            web3: Connected Web3 instance
            max_retries: Attempts per remote call before giving up
            backoff_sec: Base delay; attempt n waits backoff_sec * 2**n
            timeout_sec: Per-attempt timeout
        """
        if max_retries < 1:
            raise ValueError(f"max_retries must be at least 1: {max_retries}")
        self.web3 = web3
        self.max_retries = max_retries
        self.backoff_sec = backoff_sec
        self.timeout_sec = timeout_sec

    async def _call(
        self,
        call: str,
        fn: Callable[..., Any],
        *args: Any,
        from_block: Optional[int] = None,
        to_block: Optional[int] = None,
    ) -> Any:
        """
        Run a blocking web3 call in the thread pool with timeout and retries.

        Raises:
            RetrievalError: If every attempt failed or timed out
        """
        loop = asyncio.get_running_loop()
        last_error: Optional[BaseException] = None

        for attempt in range(self.max_retries):
            try:
                return await asyncio.wait_for(
                    loop.run_in_executor(None, functools.partial(fn, *args)),
                    timeout=self.timeout_sec,
                )
            except Exception as e:
                last_error = e
                if attempt < self.max_retries - 1:
                    wait_time = self.backoff_sec * (2**attempt)
                    logger.warning(
                        f"{call} failed (attempt {attempt + 1}/{self.max_retries}): "
                        f"{e!r}; retrying in {wait_time:.1f}s"
                    )
                    await asyncio.sleep(wait_time)

        block_range = (
            f" for blocks {from_block}-{to_block}" if from_block is not None else ""
        )
        raise RetrievalError(
            f"{call} failed{block_range} after {self.max_retries} attempts: "
            f"{last_error!r}",
            call=call,
            from_block=from_block,
            to_block=to_block,
            attempts=self.max_retries,
        ) from last_error

    # Metadata resolution
    def _read_text(self, address: str, field: str) -> str:
        contract = self.web3.eth.contract(address=address, abi=ERC20_METADATA_ABI)
        try:
            return getattr(contract.functions, field)().call()
        except (BadFunctionCallOutput, ContractLogicError, DecodingError):
            legacy = self.web3.eth.contract(
                address=address, abi=ERC20_BYTES32_METADATA_ABI
            )
            return _decode_bytes32(getattr(legacy.functions, field)().call())

    def _read_decimals(self, address: str) -> int:
        contract = self.web3.eth.contract(address=address, abi=ERC20_METADATA_ABI)
        return int(contract.functions.decimals().call())

    async def resolve_token(self, address: str) -> Token:
        """
        Fetch name, symbol and decimals of an ERC-20 token concurrently.

        Raises:
            ResolutionError: If the metadata cannot be fetched
        """
        address = Web3.to_checksum_address(address)
        try:
            name, symbol, decimals = await asyncio.gather(
                self._call("name", self._read_text, address, "name"),
                self._call("symbol", self._read_text, address, "symbol"),
                self._call("decimals", self._read_decimals, address),
            )
        except RetrievalError as e:
            raise ResolutionError(
                f"Unable to resolve token {address}: {e}", address=address
            ) from e

        return Token(address=address, name=name, symbol=symbol, decimals=decimals)

    async def resolve_pair(self, address: str) -> Pair:
        """
        Resolve a pair's token0/token1 and both tokens' metadata.

        Raises:
            ResolutionError: If the address is invalid or any call fails
        """
        try:
            pair_addr = Web3.to_checksum_address(address)
        except ValueError as e:
            raise ResolutionError(
                f"Invalid pair address: {address}", address=address
            ) from e

        contract = self.web3.eth.contract(address=pair_addr, abi=UNISWAP_V2_PAIR_ABI)
        try:
            token0_addr, token1_addr = await asyncio.gather(
                self._call("token0", contract.functions.token0().call),
                self._call("token1", contract.functions.token1().call),
            )
        except RetrievalError as e:
            raise ResolutionError(
                f"Unable to resolve pair {pair_addr}: {e}", address=pair_addr
            ) from e

        base, quote = await asyncio.gather(
            self.resolve_token(token0_addr), self.resolve_token(token1_addr)
        )
        return Pair(address=pair_addr, base=base, quote=quote)

    # Event source
    def _get_swap_logs(self, pair_addr: str, from_block: int, to_block: int) -> List:
        contract = self.web3.eth.contract(address=pair_addr, abi=UNISWAP_V2_PAIR_ABI)
        logs = self.web3.eth.get_logs(
            {
                "address": pair_addr,
                "fromBlock": from_block,
                "toBlock": to_block,
                "topics": [SWAP_EVENT_TOPIC],
            }
        )
        event = contract.events.Swap()
        return [event.process_log(log) for log in logs]

    async def fetch_swaps(
        self, pair: Pair, from_block: int, to_block: int
    ) -> List[Swap]:
        """
        Fetch every Swap event of a pair in the inclusive block range.

        Returns:
            Swaps in chain order

        Raises:
            RetrievalError: If the log query fails after all retries
        """
        events = await self._call(
            "eth_getLogs",
            self._get_swap_logs,
            pair.address,
            from_block,
            to_block,
            from_block=from_block,
            to_block=to_block,
        )
        return [swap_from_event(event) for event in events]

    # Transaction source
    def _get_tx_and_receipt(self, tx_hash: str) -> Tuple[Any, Any]:
        try:
            tx = self.web3.eth.get_transaction(tx_hash)
            receipt = self.web3.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound:
            return None, None
        return tx, receipt

    async def fetch_gas(self, tx_hash: str) -> TransactionGas:
        """
        Fetch gas price and gas used for a transaction.

        The legacy gasPrice field is preferred; the receipt's
        effectiveGasPrice is used when it is absent. A transaction the node
        does not know yields empty gas data.

        Raises:
            RetrievalError: If the node cannot be queried after all retries
        """
        tx, receipt = await self._call(
            "eth_getTransaction", self._get_tx_and_receipt, tx_hash
        )
        if tx is None or receipt is None:
            logger.warning(f"Gas data unavailable for {tx_hash}; counting as zero")
            return TransactionGas(tx_hash=tx_hash)

        gas_price = tx.get("gasPrice")
        if gas_price is None:
            gas_price = receipt.get("effectiveGasPrice")
        gas_used = receipt.get("gasUsed")

        return TransactionGas(
            tx_hash=tx_hash,
            gas_price=int(gas_price) if gas_price is not None else None,
            gas_used=int(gas_used) if gas_used is not None else None,
        )

    # Latest-block oracle
    def _get_block_number(self) -> int:
        return int(self.web3.eth.block_number)

    async def latest_block(self) -> int:
        """Get the current chain head block number."""
        return await self._call("eth_blockNumber", self._get_block_number)
