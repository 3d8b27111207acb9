"""In-memory mirror of well-known controller objects.

One store per kind, keyed by ``namespace/name``. Stores are written only by
informer tasks and read by the well-known resolver; a store must report
``has_synced`` before lookups against it can be trusted, otherwise present
objects may spuriously look absent.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from typing import Any

from kubeowner.models.keys import CachedObject, OwnerReference
from kubeowner.observability.logging import get_logger

_logger = get_logger("cache.object_cache")


def _to_cached(kind: str, namespace: str, name: str, raw: dict[str, Any]) -> CachedObject:
    meta = raw.get("metadata") or {}
    refs = meta.get("ownerReferences") or meta.get("owner_references") or []
    return CachedObject(
        # A raw object that names its own kind keeps it, so a mis-routed
        # object is detectable by the reader.
        kind=str(raw.get("kind") or kind),
        namespace=namespace,
        name=name,
        resource_version=str(meta.get("resourceVersion") or meta.get("resource_version") or ""),
        owner_references=tuple(OwnerReference.from_dict(r) for r in refs),
    )


class ObjectCache:
    """Per-kind ``namespace/name`` keyed object stores with sync tracking."""

    def __init__(self, kinds: Iterable[str] = ()) -> None:
        self._stores: dict[str, dict[str, CachedObject]] = {str(k): {} for k in kinds}
        self._synced: dict[str, asyncio.Event] = {}

    # ------------------------------------------------------------------
    # Writes (informers only)
    # ------------------------------------------------------------------

    def update(self, kind: str, namespace: str, name: str, raw: dict[str, Any]) -> None:
        """Insert or replace one object."""
        store = self._stores.setdefault(kind, {})
        obj = _to_cached(kind, namespace, name, raw)
        store[obj.key] = obj

    def remove(self, kind: str, namespace: str, name: str) -> None:
        self._stores.get(kind, {}).pop(f"{namespace}/{name}", None)

    def replace(self, kind: str, items: Iterable[dict[str, Any]]) -> int:
        """Swap the whole store for *kind* with the result of a relist."""
        fresh: dict[str, CachedObject] = {}
        for raw in items:
            meta = raw.get("metadata") or {}
            obj = _to_cached(kind, str(meta.get("namespace") or ""), str(meta.get("name") or ""), raw)
            fresh[obj.key] = obj
        self._stores[kind] = fresh
        _logger.debug("store_replaced", kind=kind, objects=len(fresh))
        return len(fresh)

    def mark_synced(self, kind: str) -> None:
        self._sync_event(kind).set()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_by_key(self, kind: str, key: str) -> tuple[CachedObject | None, bool]:
        """Return ``(object, found)`` for a ``namespace/name`` key."""
        obj = self._stores.get(kind, {}).get(key)
        return obj, obj is not None

    def get(self, kind: str, namespace: str, name: str) -> CachedObject | None:
        obj, _ = self.get_by_key(kind, f"{namespace}/{name}")
        return obj

    def has_synced(self, kind: str) -> bool:
        event = self._synced.get(kind)
        return event is not None and event.is_set()

    async def wait_for_sync(self, kinds: Iterable[str], timeout: float) -> bool:
        """Wait until every kind in *kinds* has synced, or *timeout* elapses.

        Returns False on timeout; kinds that did synchronise stay usable.
        """
        waiters = [self._sync_event(k).wait() for k in kinds]
        try:
            await asyncio.wait_for(asyncio.gather(*waiters), timeout=timeout)
        except TimeoutError:
            return False
        return True

    def kinds(self) -> list[str]:
        return sorted(self._stores)

    def size(self, kind: str) -> int:
        return len(self._stores.get(kind, {}))

    def _sync_event(self, kind: str) -> asyncio.Event:
        event = self._synced.get(kind)
        if event is None:
            event = asyncio.Event()
            self._synced[kind] = event
        return event
