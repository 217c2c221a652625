"""
Chain adapters for different AMM types.
"""

from .v2 import Web3PairClient, create_web3, swap_from_event

__all__ = ["Web3PairClient", "create_web3", "swap_from_event"]
