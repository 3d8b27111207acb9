"""Application bootstrap for kubeowner.

Wires the resolution core to a live cluster in dependency order:
config -> logging -> K8s client -> object cache + informers -> discovery mapper
       -> scale client -> ownership walker

Shutdown stops components in reverse order. Each stop is guarded on its own
so a failing informer does not prevent the API client from closing.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from kubeowner.cache import Informer, ObjectCache
from kubeowner.config import load_config
from kubeowner.discovery import DiscoveryRESTMapper, MapperResetLoop, ScaleClient
from kubeowner.fetcher import GenericResolver, OwnershipWalker, WellKnownResolver
from kubeowner.models.config import KubeOwnerConfig
from kubeowner.models.kinds import WellKnownKinds
from kubeowner.observability.logging import get_logger, setup_logging

if TYPE_CHECKING:
    import structlog

_SHUTDOWN_GRACE_SECONDS = 15


class _ComponentError(Exception):
    """Raised when a mandatory component fails to start."""

    def __init__(self, component: str, cause: Exception) -> None:
        super().__init__(f"Component '{component}' failed to start: {cause}")
        self.component = component
        self.cause = cause


class KubeOwnerApp:
    """Owns the cluster-facing collaborators and the walker built on them.

    ``stop()`` is safe to call on an app that never started or already
    stopped.
    """

    def __init__(self, config: KubeOwnerConfig | None = None, console_logs: bool = False) -> None:
        self.config = config
        self._console_logs = console_logs

        self._api_client: Any = None
        self._cache: ObjectCache | None = None
        self._informers: list[Informer] = []
        self._mapper: DiscoveryRESTMapper | None = None
        self._mapper_reset: MapperResetLoop | None = None
        self._fetcher: OwnershipWalker | None = None

        self._running = False
        self._log: structlog.stdlib.BoundLogger | None = None

    @property
    def fetcher(self) -> OwnershipWalker:
        if self._fetcher is None:
            raise RuntimeError("KubeOwnerApp.start() has not completed")
        return self._fetcher

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start all components in dependency order.

        Raises _ComponentError if a mandatory component cannot start.
        """
        if self.config is None:
            self.config = load_config()

        setup_logging(self.config.log.level, console=self._console_logs)
        self._log = get_logger("app")
        self._log.info("kubeowner starting", version=_kubeowner_version())

        await self._start_k8s_client()
        await self._start_cache()
        self._start_discovery()
        self._build_fetcher()

        self._running = True
        self._log.info("kubeowner started", well_known_kinds=[str(k) for k in self.config.cache.well_known_kinds])

    async def _start_k8s_client(self) -> None:
        """Load in-cluster config, falling back to kubeconfig, and open an ApiClient."""
        assert self._log is not None
        self._log.debug("starting k8s client")
        try:
            import kubernetes_asyncio.config as k8s_config  # type: ignore[import-untyped]
            from kubernetes_asyncio import client as k8s_client  # type: ignore[import-untyped]

            try:
                k8s_config.load_incluster_config()
                self._log.info("k8s client configured from in-cluster service account")
            except k8s_config.ConfigException:
                await k8s_config.load_kube_config()
                self._log.info("k8s client configured from kubeconfig")

            self._api_client = k8s_client.ApiClient()
        except Exception as exc:
            raise _ComponentError("k8s_client", exc) from exc

    async def _start_cache(self) -> None:
        """Start one informer per well-known kind and wait for initial sync.

        A kind that does not sync in time is logged and left running; its
        lookups may report objects missing until it catches up.
        """
        assert self._log is not None
        assert self.config is not None
        self._log.debug("starting object cache")
        try:
            from kubernetes_asyncio import client as k8s_client  # type: ignore[import-untyped]

            kinds = WellKnownKinds(self.config.cache.well_known_kinds)
            cache = ObjectCache(kinds)
            for kind, spec in kinds.items():
                api = getattr(k8s_client, spec.api_class)(self._api_client)
                informer = Informer(
                    kind=str(kind),
                    list_fn=getattr(api, spec.list_method),
                    cache=cache,
                    serialize=self._api_client.sanitize_for_serialization,
                    watch_timeout=self.config.cache.watch_timeout_seconds,
                    backoff_max=self.config.cache.watch_backoff_max_seconds,
                )
                informer.start()
                self._informers.append(informer)
            self._cache = cache
        except Exception as exc:
            raise _ComponentError("cache", exc) from exc

        await cache.wait_for_sync([i.kind for i in self._informers], self.config.cache.sync_timeout_seconds)
        for informer in self._informers:
            if informer.has_synced():
                self._log.info("initial sync completed", kind=informer.kind, objects=cache.size(informer.kind))
            else:
                self._log.warning("could not sync cache", kind=informer.kind)

    def _start_discovery(self) -> None:
        assert self._log is not None
        assert self.config is not None
        self._mapper = DiscoveryRESTMapper(self._api_client)
        self._mapper_reset = MapperResetLoop(self._mapper, self.config.discovery.reset_period_seconds)
        self._mapper_reset.start()
        self._log.info("discovery mapper started", reset_period=self.config.discovery.reset_period_seconds)

    def _build_fetcher(self) -> None:
        assert self.config is not None
        assert self._cache is not None
        assert self._mapper is not None
        self._fetcher = OwnershipWalker(
            well_known=WellKnownResolver(self._cache, WellKnownKinds(self.config.cache.well_known_kinds)),
            generic=GenericResolver(self._mapper, ScaleClient(self._api_client)),
        )

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def stop(self) -> None:
        """Stop background tasks, then close the API client."""
        if not self._running and self._log is None:
            return

        log = self._log or get_logger("app")
        log.info("kubeowner shutting down")
        self._running = False
        self._fetcher = None

        await self._stop_component("discovery_reset", self._mapper_reset)
        self._mapper_reset = None
        for informer in reversed(self._informers):
            await self._stop_component(f"informer.{informer.kind}", informer)
        self._informers.clear()
        await self._stop_k8s_client()

        log.info("kubeowner stopped")

    async def _stop_component(self, name: str, component: object | None) -> None:
        """Call stop() on a component if it has that method, catching all errors."""
        if component is None:
            return
        log = self._log or get_logger("app")
        stop_fn = getattr(component, "stop", None)
        if stop_fn is None:
            return
        try:
            result = stop_fn()
            if asyncio.iscoroutine(result):
                await asyncio.wait_for(result, timeout=_SHUTDOWN_GRACE_SECONDS)
        except TimeoutError:
            log.warning("component stop timed out", component=name, timeout=_SHUTDOWN_GRACE_SECONDS)
        except Exception as exc:
            log.error("component stop raised an error", component=name, error=str(exc))

    async def _stop_k8s_client(self) -> None:
        if self._api_client is None:
            return
        log = self._log or get_logger("app")
        try:
            await self._api_client.close()
        except Exception as exc:
            log.debug("k8s client close raised (non-fatal)", error=str(exc))
        self._api_client = None


def _kubeowner_version() -> str:
    from kubeowner import __version__

    return __version__
