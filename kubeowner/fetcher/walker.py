"""Ownership walk: follow controlling owners up to the root.

State machine with one working state ("resolving current key") and three
terminal states: root found, cycle detected, lookup failed.

Every key is recorded as visited the moment it becomes current, before its
parent is looked up. A parent already in the set therefore closes a cycle of
any length, including self-references and A <-> B pairs, and the walk takes
at most (distinct keys) + 1 steps even on malformed ownership data.
"""

from __future__ import annotations

from kubeowner.errors import CycleDetectedError, KubeOwnerError
from kubeowner.fetcher.base import ControllerFetcher
from kubeowner.fetcher.generic import GenericResolver
from kubeowner.fetcher.well_known import WellKnownResolver
from kubeowner.models.keys import ControllerKeyWithAPIVersion
from kubeowner.observability.logging import bind_resolution, clear_resolution, get_logger
from kubeowner.observability.metrics import top_level_resolutions_total

_logger = get_logger("fetcher.walker")


class OwnershipWalker(ControllerFetcher):
    """ControllerFetcher backed by the well-known and generic resolvers."""

    def __init__(self, well_known: WellKnownResolver, generic: GenericResolver) -> None:
        self._well_known = well_known
        self._generic = generic

    async def get_parent(self, key: ControllerKeyWithAPIVersion) -> ControllerKeyWithAPIVersion | None:
        """Resolve one step, picking the fast path when the kind allows it."""
        if self._well_known.handles(key.kind):
            return self._well_known.get_parent(key)
        return await self._generic.get_parent(key)

    async def find_top_level(self, key: ControllerKeyWithAPIVersion | None) -> ControllerKeyWithAPIVersion | None:
        if key is None:
            return None

        bind_resolution(key.namespace, key.kind, key.name)
        try:
            root = await self._walk(key)
        except CycleDetectedError as exc:
            top_level_resolutions_total.labels(outcome="cycle").inc()
            _logger.warning("ownership_cycle", at=str(exc.key))
            raise
        except KubeOwnerError as exc:
            top_level_resolutions_total.labels(outcome="error").inc()
            _logger.debug("top_level_lookup_failed", error=str(exc))
            raise
        finally:
            clear_resolution()

        top_level_resolutions_total.labels(outcome="success").inc()
        return root

    async def _walk(self, key: ControllerKeyWithAPIVersion) -> ControllerKeyWithAPIVersion:
        visited: set[ControllerKeyWithAPIVersion] = set()
        current = key
        while True:
            visited.add(current)
            parent = await self.get_parent(current)
            if parent is None:
                _logger.debug("top_level_found", root=str(current), depth=len(visited) - 1)
                return current
            if parent in visited:
                raise CycleDetectedError(parent)
            current = parent
