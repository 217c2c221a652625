"""
Configuration loading and validation for the sandwich scanner.

Settings live in a YAML file validated with Pydantic; the provider URL may
also come from the environment (or a .env file), since it usually embeds an
API key.
"""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from .crawler import (
    DEFAULT_INITIAL_CHUNK_SIZE,
    DEFAULT_MAX_CHUNK_SIZE,
    DEFAULT_TARGET_SWAPS_PER_CHUNK,
)
from .exceptions import ConfigurationError
from .matcher import DEFAULT_TOLERANCE

DEFAULT_CONFIG_PATH = "configs/sandwich_scan.yaml"

# Checked in order after the config file's rpc_url
RPC_URL_ENV_VARS = ("MAINNET_URL", "RPC_URL")


class CrawlerSettings(BaseModel):
    """Block-window sizing"""

    initial_chunk_size: int = Field(default=DEFAULT_INITIAL_CHUNK_SIZE, ge=1)
    target_swaps_per_chunk: int = Field(default=DEFAULT_TARGET_SWAPS_PER_CHUNK, ge=1)
    max_chunk_size: int = Field(default=DEFAULT_MAX_CHUNK_SIZE, ge=1)
    start_block: Optional[int] = Field(
        default=None, ge=0, description="Scan backward from here instead of the head"
    )
    max_windows: Optional[int] = Field(
        default=None, ge=1, description="Stop after this many windows"
    )


class MatcherSettings(BaseModel):
    """Triad matching"""

    tolerance: float = Field(default=DEFAULT_TOLERANCE, gt=1.0, le=2.0)


class RpcSettings(BaseModel):
    """Remote call policy"""

    max_retries: int = Field(default=3, ge=1, le=20)
    backoff_sec: float = Field(default=1.0, ge=0)
    timeout_sec: float = Field(default=30.0, gt=0)
    gas_concurrency: int = Field(default=8, ge=1, le=64)


class SessionSettings(BaseModel):
    """Session driver behaviour"""

    auto_continue: bool = False
    max_failed_windows: int = Field(default=3, ge=1)


class ScanConfig(BaseModel):
    """Top-level scanner configuration"""

    rpc_url: Optional[str] = None
    pairs: List[str] = Field(min_length=1)
    crawler: CrawlerSettings = Field(default_factory=CrawlerSettings)
    matcher: MatcherSettings = Field(default_factory=MatcherSettings)
    rpc: RpcSettings = Field(default_factory=RpcSettings)
    session: SessionSettings = Field(default_factory=SessionSettings)

    @field_validator("pairs")
    @classmethod
    def validate_pairs(cls, v):
        for address in v:
            if not isinstance(address, str) or not address.startswith("0x"):
                raise ValueError(f"Invalid pair address: {address}")
            if len(address) != 42:
                raise ValueError(f"Pair address must be 20 bytes: {address}")
        return v

    @field_validator("crawler")
    @classmethod
    def validate_crawler(cls, v):
        if v.initial_chunk_size > v.max_chunk_size:
            raise ValueError(
                f"initial_chunk_size ({v.initial_chunk_size}) exceeds "
                f"max_chunk_size ({v.max_chunk_size})"
            )
        return v


def parse_config(config_dict: Dict[str, Any]) -> ScanConfig:
    """
    Validate a config dictionary.

    Raises:
        ConfigurationError: If any field is missing or invalid
    """
    try:
        return ScanConfig(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration: {e}", details={"errors": e.errors()}
        ) from e


def load_config(config_path: Union[str, Path]) -> ScanConfig:
    """
    Load and validate config from a YAML file.

    Args:
        config_path: Path to config YAML file

    Returns:
        Validated ScanConfig

    Raises:
        ConfigurationError: If the file is missing, unparsable or invalid
    """
    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {config_path}")

    try:
        with open(path, "r") as f:
            config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse YAML: {e}") from e

    if not isinstance(config_dict, dict):
        raise ConfigurationError("Config file must contain a YAML dictionary")

    return parse_config(config_dict)


def resolve_rpc_url(config: ScanConfig, override: Optional[str] = None) -> str:
    """
    Pick the provider URL: CLI override, config file, then environment.

    Loads a .env file from the working directory first, if present.

    Raises:
        ConfigurationError: If no provider URL is available
    """
    if override:
        return override.strip()
    if config.rpc_url:
        return config.rpc_url.strip()

    env_file = Path.cwd() / ".env"
    if env_file.exists():
        load_dotenv(env_file)

    for var in RPC_URL_ENV_VARS:
        value = os.getenv(var)
        if value and value.strip():
            return value.strip()

    raise ConfigurationError(
        "No RPC URL configured. Set rpc_url in the config file, pass --rpc-url, "
        f"or set one of {', '.join(RPC_URL_ENV_VARS)} in the environment or .env"
    )
