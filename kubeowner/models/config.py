"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field

from kubeowner.models.kinds import WellKnownKind


@dataclass
class CacheConfig:
    """Informer-backed object cache configuration."""

    sync_timeout_seconds: int = 60
    watch_timeout_seconds: int = 300
    watch_backoff_max_seconds: int = 30
    well_known_kinds: tuple[WellKnownKind, ...] = tuple(WellKnownKind)


@dataclass
class DiscoveryConfig:
    """API discovery / resource mapper configuration."""

    reset_period_seconds: int = 300


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"


@dataclass
class KubeOwnerConfig:
    """Top-level kubeowner configuration."""

    cache: CacheConfig = field(default_factory=CacheConfig)
    discovery: DiscoveryConfig = field(default_factory=DiscoveryConfig)
    log: LogConfig = field(default_factory=LogConfig)
