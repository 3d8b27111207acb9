"""Core data structures for kubeowner."""

from kubeowner.models.config import KubeOwnerConfig
from kubeowner.models.keys import (
    CachedObject,
    ControllerKey,
    ControllerKeyWithAPIVersion,
    GroupVersion,
    OwnerReference,
    ResourceMapping,
)
from kubeowner.models.kinds import WellKnownKind, WellKnownKinds, WellKnownKindSpec

__all__ = [
    "CachedObject",
    "ControllerKey",
    "ControllerKeyWithAPIVersion",
    "GroupVersion",
    "KubeOwnerConfig",
    "OwnerReference",
    "ResourceMapping",
    "WellKnownKind",
    "WellKnownKindSpec",
    "WellKnownKinds",
]
