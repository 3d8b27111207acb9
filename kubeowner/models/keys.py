"""Value types identifying controllers and the resources that back them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from kubeowner.errors import ParseError


@dataclass(frozen=True)
class ControllerKey:
    """Identifies a namespaced object by kind and name."""

    namespace: str
    kind: str
    name: str


@dataclass(frozen=True)
class ControllerKeyWithAPIVersion(ControllerKey):
    """A ControllerKey plus the API version the kind is served under.

    The API version is only needed to resolve kinds outside the well-known
    set; well-known kinds are matched by ``kind`` alone.
    """

    api_version: str = ""

    def __str__(self) -> str:
        return f"{self.api_version}/{self.kind} {self.namespace}/{self.name}"

    def to_dict(self) -> dict[str, str]:
        return {
            "namespace": self.namespace,
            "kind": self.kind,
            "name": self.name,
            "apiVersion": self.api_version,
        }


@dataclass(frozen=True)
class OwnerReference:
    """The subset of metadata.ownerReferences[] this package reads."""

    api_version: str
    kind: str
    name: str
    controller: bool | None = None
    uid: str = ""

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> OwnerReference:
        """Build from the camelCase API form (or the snake_case model form)."""
        return cls(
            api_version=str(raw.get("apiVersion") or raw.get("api_version") or ""),
            kind=str(raw.get("kind") or ""),
            name=str(raw.get("name") or ""),
            controller=raw.get("controller"),
            uid=str(raw.get("uid") or ""),
        )


@dataclass(frozen=True)
class GroupVersion:
    """An API group and version, e.g. ``apps`` / ``v1``."""

    group: str
    version: str

    @classmethod
    def parse(cls, api_version: str) -> GroupVersion:
        """Split an apiVersion string.

        ``""`` and ``"/"`` are the empty GroupVersion and ``"v1"`` belongs to the
        core group. A single ``/`` splits as-is, so ``"apps/"`` has an empty
        version. More than one ``/`` is rejected.
        """
        if not api_version or api_version == "/":
            return cls(group="", version="")
        slashes = api_version.count("/")
        if slashes == 0:
            return cls(group="", version=api_version)
        if slashes > 1:
            raise ParseError(f"unexpected GroupVersion string: {api_version!r}")
        group, _, version = api_version.partition("/")
        return cls(group=group, version=version)

    def __str__(self) -> str:
        return f"{self.group}/{self.version}" if self.group else self.version


@dataclass(frozen=True)
class ResourceMapping:
    """One concrete REST resource serving a group+kind."""

    group: str
    version: str
    resource: str  # plural, e.g. "deployments"
    kind: str
    namespaced: bool = True

    @property
    def group_version(self) -> GroupVersion:
        return GroupVersion(group=self.group, version=self.version)


@dataclass(frozen=True)
class CachedObject:
    """Immutable view of a mirrored object, reduced to what ownership needs."""

    kind: str
    namespace: str
    name: str
    resource_version: str = ""
    owner_references: tuple[OwnerReference, ...] = ()

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"
