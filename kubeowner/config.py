"""Configuration loading from environment variables."""

from __future__ import annotations

import os

from kubeowner.models.config import CacheConfig, DiscoveryConfig, KubeOwnerConfig, LogConfig
from kubeowner.models.kinds import parse_kinds


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"KUBEOWNER_{key}", default)


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    val = int(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def load_config() -> KubeOwnerConfig:
    """Load configuration from KUBEOWNER_* environment variables."""
    return KubeOwnerConfig(
        cache=CacheConfig(
            sync_timeout_seconds=_env_int("CACHE_SYNC_TIMEOUT", 60, min_val=1, max_val=600),
            watch_timeout_seconds=_env_int("WATCH_TIMEOUT", 300, min_val=30, max_val=3600),
            watch_backoff_max_seconds=_env_int("WATCH_BACKOFF_MAX", 30, min_val=1, max_val=300),
            well_known_kinds=parse_kinds(_env("WELL_KNOWN_KINDS", "")),
        ),
        discovery=DiscoveryConfig(
            reset_period_seconds=_env_int("DISCOVERY_RESET_PERIOD", 300, min_val=30, max_val=3600),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
        ),
    )
