"""Fetcher contract, consumed capabilities, and the shared owner extraction."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any, Protocol

from kubeowner.models.keys import CachedObject, ControllerKeyWithAPIVersion, OwnerReference, ResourceMapping


class ControllerFetcher(ABC):
    """Finds the top-level controller of an object."""

    @abstractmethod
    async def find_top_level(self, key: ControllerKeyWithAPIVersion | None) -> ControllerKeyWithAPIVersion | None:
        """Return the root of *key*'s ownership chain.

        ``None`` in gives ``None`` out. Raises a KubeOwnerError subclass when
        the root cannot be determined.
        """


class ObjectStore(Protocol):
    def get_by_key(self, kind: str, key: str) -> tuple[CachedObject | None, bool]: ...


class ResourceMappingResolver(Protocol):
    async def resource_mappings(self, group: str, kind: str) -> list[ResourceMapping]: ...


class ScaleGetter(Protocol):
    async def get_owner_references(
        self, mapping: ResourceMapping, namespace: str, name: str
    ) -> list[dict[str, Any]]: ...


def get_owner_controller(
    owners: Iterable[OwnerReference | dict[str, Any]], namespace: str
) -> ControllerKeyWithAPIVersion | None:
    """Return the first owner flagged ``controller: true``, keyed in *namespace*.

    The platform allows at most one controlling owner; if the data carries
    several, the first wins.
    """
    for owner in owners:
        ref = owner if isinstance(owner, OwnerReference) else OwnerReference.from_dict(owner)
        if ref.controller is True:
            return ControllerKeyWithAPIVersion(
                namespace=namespace,
                kind=ref.kind,
                name=ref.name,
                api_version=ref.api_version,
            )
    return None
