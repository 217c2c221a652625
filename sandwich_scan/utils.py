"""
Common utilities for the sandwich scanner.

Provides the amount converter used everywhere token amounts are compared or
reported, plus logging and small formatting helpers.
"""

import logging
from decimal import Decimal, InvalidOperation, localcontext
from typing import Any, Dict, Optional, Union

from .exceptions import ConversionError

MAX_DECIMALS = 255
MAX_UINT256 = 2**256 - 1

# Enough significant digits for any uint256 (78 digits) without rounding
_CONVERSION_PRECISION = 100


# Amount utilities
def to_decimal(raw: int, decimals: int) -> float:
    """
    Convert a raw fixed-point token amount to a float.

    The division by 10**decimals happens on a decimal string, so the integer
    part is never biased by binary floating point before the final parse.

    Args:
        raw: Unsigned 256-bit integer amount as emitted on chain
        decimals: Token decimal precision (0..255)

    Returns:
        raw / 10**decimals as a float

    Raises:
        ConversionError: If either input is out of range or not an integer
    """
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ConversionError(
            f"Raw amount must be an integer, got {type(raw).__name__}",
            raw=raw,
            decimals=decimals,
        )
    if isinstance(decimals, bool) or not isinstance(decimals, int):
        raise ConversionError(
            f"Decimals must be an integer, got {type(decimals).__name__}",
            raw=raw,
            decimals=decimals,
        )
    if not 0 <= decimals <= MAX_DECIMALS:
        raise ConversionError(
            f"Unsupported decimals {decimals} (must be 0..{MAX_DECIMALS})",
            raw=raw,
            decimals=decimals,
        )
    if not 0 <= raw <= MAX_UINT256:
        raise ConversionError(
            f"Raw amount {raw} is outside the uint256 range",
            raw=raw,
            decimals=decimals,
        )

    with localcontext() as ctx:
        ctx.prec = _CONVERSION_PRECISION
        formatted = str(Decimal(raw).scaleb(-decimals))

    try:
        return float(formatted)
    except (ValueError, InvalidOperation) as e:
        raise ConversionError(
            f"Unable to parse formatted amount '{formatted}'",
            raw=raw,
            decimals=decimals,
        ) from e


def format_signed(value: float) -> str:
    """Format a value with an explicit '+' prefix for non-negative numbers."""
    if value >= 0:
        return f"+{value}"
    return f"{value}"


# Math utilities
def clamp(value: int, min_val: int, max_val: int) -> int:
    """Clamp value between min and max bounds."""
    return max(min_val, min(value, max_val))


def format_duration(seconds: float) -> str:
    """Format duration in seconds to human-readable string."""
    if seconds < 60:
        return f"{seconds:.2f}s"
    elif seconds < 3600:
        minutes = seconds / 60
        return f"{minutes:.1f}m"
    else:
        hours = seconds / 3600
        return f"{hours:.1f}h"


# Logging utilities
def get_logger(
    name: str,
    level: Union[str, int] = logging.INFO,
    extra: Optional[Dict[str, Any]] = None,
) -> logging.Logger:
    """
    Get a structured logger with consistent formatting and extra context.

    Args:
        name: Logger name (typically __name__)
        level: Logging level
        extra: Additional context fields to include in all log messages

    Returns:
        Configured logger with structured output
    """
    logger = logging.getLogger(name)

    if logger.level == logging.NOTSET:
        logger.setLevel(level)

    # Loggers below the package root propagate to it instead of printing twice
    if not logger.handlers and "." not in name:
        handler = logging.StreamHandler()
        format_str = (
            "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | " "%(message)s"
        )

        if extra:
            extra_fields = " | ".join([f"{k}=%(extra_{k})s" for k in extra.keys()])
            format_str = format_str.replace(
                " | %(message)s", f" | {extra_fields} | %(message)s"
            )

        formatter = logging.Formatter(format_str, datefmt="%H:%M:%S")
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    if extra:
        return logging.LoggerAdapter(
            logger, {"extra_" + k: v for k, v in extra.items()}
        )

    return logger
