"""Configuration loader: reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ChainConfig:
    rpc_endpoints: tuple[str, ...] = ()
    rpc_timeout: int = 30


@dataclass(frozen=True)
class StorageConfig:
    batch_size: int = 50
    refresh_retries: int = 0
    retry_delay_seconds: float = 1.0


@dataclass(frozen=True)
class PaginationConfig:
    page_limit: int = 50
    order: str = "descending"


@dataclass(frozen=True)
class AppConfig:
    default_chain: str = "mainnet"
    chains: dict[str, ChainConfig] = field(default_factory=dict)
    storage: StorageConfig = field(default_factory=StorageConfig)
    pagination: PaginationConfig = field(default_factory=PaginationConfig)


DEFAULT_ENDPOINTS: dict[str, tuple[str, ...]] = {
    "mainnet": ("https://fullnode.mainnet.sui.io:443",),
    "testnet": ("https://fullnode.testnet.sui.io:443",),
    "devnet": ("https://fullnode.devnet.sui.io:443",),
    "localnet": ("http://127.0.0.1:9000",),
}


def default_config() -> AppConfig:
    """Config pointing at the public full nodes, no file needed."""
    return AppConfig(
        chains={
            name: ChainConfig(rpc_endpoints=endpoints)
            for name, endpoints in DEFAULT_ENDPOINTS.items()
        }
    )


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_chains(raw: dict[str, Any]) -> dict[str, ChainConfig]:
    chains: dict[str, ChainConfig] = {}
    for name, cfg in raw.items():
        cfg = cfg or {}
        chains[name] = ChainConfig(
            # unset ${VAR} endpoints interpolate to ""
            rpc_endpoints=tuple(url for url in cfg.get("rpc_endpoints", []) if url),
            rpc_timeout=int(cfg.get("rpc_timeout", 30)),
        )
    return chains


def _build_storage(raw: dict[str, Any]) -> StorageConfig:
    return StorageConfig(
        batch_size=int(raw.get("batch_size", 50)),
        refresh_retries=int(raw.get("refresh_retries", 0)),
        retry_delay_seconds=float(raw.get("retry_delay_seconds", 1.0)),
    )


def _build_pagination(raw: dict[str, Any]) -> PaginationConfig:
    return PaginationConfig(
        page_limit=int(raw.get("page_limit", 50)),
        order=str(raw.get("order", "descending")),
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from this package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        default_chain=str(raw.get("default_chain", "mainnet")),
        chains=_build_chains(raw.get("chains", {})),
        storage=_build_storage(raw.get("storage", {})),
        pagination=_build_pagination(raw.get("pagination", {})),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if cfg.default_chain not in cfg.chains:
        raise ValueError(f"Default chain '{cfg.default_chain}' is not configured")

    for name, chain in cfg.chains.items():
        if not chain.rpc_endpoints:
            raise ValueError(f"Chain '{name}' has no rpc_endpoints")

    if cfg.storage.batch_size < 1:
        raise ValueError("storage.batch_size must be at least 1")
    if cfg.storage.refresh_retries < 0:
        raise ValueError("storage.refresh_retries must not be negative")
    if cfg.pagination.page_limit < 1:
        raise ValueError("pagination.page_limit must be at least 1")
    if cfg.pagination.order not in ("ascending", "descending"):
        raise ValueError(
            f"pagination.order must be 'ascending' or 'descending', "
            f"got '{cfg.pagination.order}'"
        )
