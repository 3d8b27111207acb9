"""Shared fakes and fixtures for kubeowner tests.

The three cluster-facing capabilities (object cache, resource mapper, scale
getter) are replaced by in-memory fakes so the resolvers and the walker can
be exercised without a Kubernetes cluster.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from kubeowner.cache.object_cache import ObjectCache
from kubeowner.errors import NoKindMatchError
from kubeowner.fetcher.generic import GenericResolver
from kubeowner.fetcher.walker import OwnershipWalker
from kubeowner.fetcher.well_known import WellKnownResolver
from kubeowner.models.keys import ControllerKeyWithAPIVersion, ResourceMapping
from kubeowner.models.kinds import WellKnownKinds

# ---------------------------------------------------------------------------
# Object helpers
# ---------------------------------------------------------------------------


def owner_ref(kind: str, name: str, api_version: str = "apps/v1", controller: bool | None = True) -> dict[str, Any]:
    """Build a raw metadata.ownerReferences entry."""
    ref: dict[str, Any] = {"apiVersion": api_version, "kind": kind, "name": name, "uid": f"uid-{name}"}
    if controller is not None:
        ref["controller"] = controller
    return ref


def raw_object(
    name: str,
    namespace: str = "default",
    owners: list[dict[str, Any]] | None = None,
    kind: str | None = None,
    rv: str = "1",
) -> dict[str, Any]:
    """Build a minimal raw API object as an informer would store it."""
    obj: dict[str, Any] = {
        "metadata": {
            "name": name,
            "namespace": namespace,
            "resourceVersion": rv,
            "ownerReferences": owners or [],
        },
        "spec": {},
    }
    if kind is not None:
        obj["kind"] = kind
    return obj


def key(kind: str, name: str, api_version: str = "apps/v1", namespace: str = "default") -> ControllerKeyWithAPIVersion:
    return ControllerKeyWithAPIVersion(namespace=namespace, kind=kind, name=name, api_version=api_version)


# ---------------------------------------------------------------------------
# Fakes for the consumed capabilities
# ---------------------------------------------------------------------------


class FakeMapper:
    """ResourceMappingResolver over a fixed (group, kind) table."""

    def __init__(self) -> None:
        self.mappings: dict[tuple[str, str], list[ResourceMapping]] = {}
        self.calls: list[tuple[str, str]] = []

    def add(self, group: str, kind: str, resource: str, version: str = "v1") -> ResourceMapping:
        mapping = ResourceMapping(group=group, version=version, resource=resource, kind=kind)
        self.mappings.setdefault((group, kind), []).append(mapping)
        return mapping

    async def resource_mappings(self, group: str, kind: str) -> list[ResourceMapping]:
        self.calls.append((group, kind))
        if (group, kind) not in self.mappings:
            raise NoKindMatchError(group, kind)
        return list(self.mappings[(group, kind)])


class FakeScales:
    """ScaleGetter answering from a table, or raising the stored exception."""

    def __init__(self) -> None:
        self.results: dict[tuple[str, str, str, str], list[dict[str, Any]] | Exception] = {}
        self.calls: list[tuple[str, str, str, str]] = []

    def set(
        self,
        mapping: ResourceMapping,
        name: str,
        result: list[dict[str, Any]] | Exception,
        namespace: str = "default",
    ) -> None:
        self.results[(mapping.version, mapping.resource, namespace, name)] = result

    async def get_owner_references(self, mapping: ResourceMapping, namespace: str, name: str) -> list[dict[str, Any]]:
        k = (mapping.version, mapping.resource, namespace, name)
        self.calls.append(k)
        result = self.results.get(k, LookupError(f"the server could not find {mapping.resource}/{name}/scale"))
        if isinstance(result, Exception):
            raise result
        return result


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def kinds() -> WellKnownKinds:
    return WellKnownKinds()


@pytest.fixture
def cache(kinds: WellKnownKinds) -> ObjectCache:
    return ObjectCache(kinds)


@pytest.fixture
def mapper() -> FakeMapper:
    return FakeMapper()


@pytest.fixture
def scales() -> FakeScales:
    return FakeScales()


@pytest.fixture
def well_known(cache: ObjectCache, kinds: WellKnownKinds) -> WellKnownResolver:
    return WellKnownResolver(cache, kinds)


@pytest.fixture
def generic(mapper: FakeMapper, scales: FakeScales) -> GenericResolver:
    return GenericResolver(mapper, scales)


@pytest.fixture
def walker(well_known: WellKnownResolver, generic: GenericResolver) -> OwnershipWalker:
    return OwnershipWalker(well_known, generic)


@pytest.fixture
def put(cache: ObjectCache) -> Callable[..., None]:
    """Insert a raw object into the cache: ``put("ReplicaSet", "web-1", owners=[...])``."""

    def _put(kind: str, name: str, namespace: str = "default", owners: list[dict[str, Any]] | None = None) -> None:
        cache.update(kind, namespace, name, raw_object(name, namespace, owners))

    return _put
