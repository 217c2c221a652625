"""
Exception hierarchy for the sandwich scanner.

Separates startup problems (configuration, metadata resolution) from
per-window retrieval failures and from conversion defects, so callers can
decide what is fatal for the session, for one pair, or for one window.
"""

from typing import Any, Dict, Optional


class SandwichScanError(Exception):
    """Base exception for all sandwich scanner errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(SandwichScanError):
    """Raised when configuration or the provider URL is missing or invalid."""

    pass


class ResolutionError(SandwichScanError):
    """Raised when pair or token metadata cannot be resolved."""

    def __init__(
        self,
        message: str,
        address: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.address = address


class RetrievalError(SandwichScanError):
    """Raised when a remote call still fails after all retries."""

    def __init__(
        self,
        message: str,
        call: Optional[str] = None,
        from_block: Optional[int] = None,
        to_block: Optional[int] = None,
        attempts: int = 0,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.call = call
        self.from_block = from_block
        self.to_block = to_block
        self.attempts = attempts

    @property
    def block_range(self) -> Optional[str]:
        if self.from_block is None or self.to_block is None:
            return None
        return f"{self.from_block}-{self.to_block}"


class ConversionError(SandwichScanError):
    """Raised when a raw token amount cannot be converted to a decimal value."""

    def __init__(
        self,
        message: str,
        raw: Any = None,
        decimals: Any = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.raw = raw
        self.decimals = decimals


class CrawlerExhaustedError(SandwichScanError):
    """Raised when a window is requested after block 0 has been scanned."""

    pass
