"""List+watch loop keeping one ObjectCache store in step with the cluster.

Each Informer owns a single background task:

    relist -> mark synced -> watch from resourceVersion -> (watch ends) -> watch again
                 ^                                            |
                 +----------- 410 Gone / failure -------------+

The watch client surfaces server ERROR events as ApiException. A 410 Gone
(resourceVersion too old) relists straight away; any other failure backs off
exponentially up to ``backoff_max`` seconds before the next relist. The task
is stopped by cancellation.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from kubernetes_asyncio import watch  # type: ignore[import-untyped]
from kubernetes_asyncio.client.exceptions import ApiException  # type: ignore[import-untyped]

from kubeowner.cache.object_cache import ObjectCache
from kubeowner.observability.logging import get_logger
from kubeowner.observability.metrics import informer_relists_total

_logger = get_logger("cache.informer")

_GONE = 410

ListFn = Callable[..., Awaitable[Any]]
Serializer = Callable[[Any], Any]


class Informer:
    """Mirrors every object of one kind into an ObjectCache store.

    Args:
        kind:          Kind name the store is keyed under.
        list_fn:       Cluster-wide list coroutine (e.g. ``AppsV1Api.list_deployment_for_all_namespaces``).
        cache:         Destination cache.
        serialize:     Turns API models into camelCase dicts (``ApiClient.sanitize_for_serialization``).
        watch_timeout: Server-side timeout of one watch request, in seconds.
        backoff_max:   Upper bound of the retry delay, in seconds.
    """

    def __init__(
        self,
        kind: str,
        list_fn: ListFn,
        cache: ObjectCache,
        serialize: Serializer,
        watch_timeout: int = 300,
        backoff_max: float = 30.0,
        watch_factory: Callable[[], Any] = watch.Watch,
    ) -> None:
        self.kind = kind
        self._list_fn = list_fn
        self._cache = cache
        self._serialize = serialize
        self._watch_timeout = watch_timeout
        self._backoff_max = backoff_max
        self._watch_factory = watch_factory
        self._task: asyncio.Task[None] | None = None

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._run(), name=f"informer-{self.kind}")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        await asyncio.gather(self._task, return_exceptions=True)
        self._task = None

    def has_synced(self) -> bool:
        return self._cache.has_synced(self.kind)

    async def _run(self) -> None:
        backoff = 1.0
        resource_version: str | None = None
        while True:
            try:
                if resource_version is None:
                    resource_version = await self._relist()
                resource_version = await self._watch(resource_version)
                backoff = 1.0
            except asyncio.CancelledError:
                raise
            except ApiException as exc:
                resource_version = None
                if exc.status == _GONE:
                    _logger.info("watch_expired_relisting", kind=self.kind)
                    continue
                _logger.warning("informer_api_error", kind=self.kind, status=exc.status, reason=exc.reason)
                await asyncio.sleep(backoff)
                backoff = min(backoff * 2, self._backoff_max)
            except Exception as exc:
                resource_version = None
                _logger.warning("informer_error", kind=self.kind, error=str(exc), retry_in=backoff)
                await asyncio.sleep(backoff)
                backoff = min(backoff * 2, self._backoff_max)

    async def _relist(self) -> str:
        """List everything, replace the store, and return the list resourceVersion."""
        response = self._serialize(await self._list_fn())
        items = response.get("items") or []
        count = self._cache.replace(self.kind, items)
        informer_relists_total.labels(kind=self.kind).inc()
        first_sync = not self._cache.has_synced(self.kind)
        self._cache.mark_synced(self.kind)
        if first_sync:
            _logger.info("initial_sync_completed", kind=self.kind, objects=count)
        return str((response.get("metadata") or {}).get("resourceVersion") or "")

    async def _watch(self, resource_version: str) -> str:
        """Apply watch events until the stream ends; return the last resourceVersion."""
        w = self._watch_factory()
        async with w.stream(
            self._list_fn,
            resource_version=resource_version,
            timeout_seconds=self._watch_timeout,
            allow_watch_bookmarks=True,
        ) as stream:
            async for event in stream:
                event_type = event.get("type")
                raw = event.get("raw_object") or {}
                meta = raw.get("metadata") or {}
                resource_version = str(meta.get("resourceVersion") or resource_version)
                if event_type == "BOOKMARK":
                    continue
                self.apply(str(event_type), raw)
        return resource_version

    def apply(self, event_type: str, raw: dict[str, Any]) -> None:
        """Apply a single ADDED / MODIFIED / DELETED event to the store."""
        meta = raw.get("metadata") or {}
        namespace = str(meta.get("namespace") or "")
        name = str(meta.get("name") or "")
        if event_type == "DELETED":
            self._cache.remove(self.kind, namespace, name)
        elif event_type in ("ADDED", "MODIFIED"):
            self._cache.update(self.kind, namespace, name, raw)
        else:
            _logger.debug("watch_event_ignored", kind=self.kind, type=event_type)
