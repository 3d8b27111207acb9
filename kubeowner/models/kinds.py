"""The closed set of well-known controller kinds.

Each kind is served by a dedicated informer-backed store, so its owner can be
read locally instead of through the generic scale sub-resource.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType


class WellKnownKind(StrEnum):
    """Controller kinds with a local object cache."""

    DAEMON_SET = "DaemonSet"
    DEPLOYMENT = "Deployment"
    REPLICA_SET = "ReplicaSet"
    STATEFUL_SET = "StatefulSet"
    REPLICATION_CONTROLLER = "ReplicationController"
    JOB = "Job"


@dataclass(frozen=True)
class WellKnownKindSpec:
    """Where a well-known kind is listed and watched from."""

    kind: WellKnownKind
    api_version: str
    api_class: str  # kubernetes_asyncio.client attribute, e.g. "AppsV1Api"
    list_method: str  # cluster-wide list call usable with watch.Watch().stream


_SPECS: dict[WellKnownKind, WellKnownKindSpec] = {
    WellKnownKind.DAEMON_SET: WellKnownKindSpec(
        WellKnownKind.DAEMON_SET, "apps/v1", "AppsV1Api", "list_daemon_set_for_all_namespaces"
    ),
    WellKnownKind.DEPLOYMENT: WellKnownKindSpec(
        WellKnownKind.DEPLOYMENT, "apps/v1", "AppsV1Api", "list_deployment_for_all_namespaces"
    ),
    WellKnownKind.REPLICA_SET: WellKnownKindSpec(
        WellKnownKind.REPLICA_SET, "apps/v1", "AppsV1Api", "list_replica_set_for_all_namespaces"
    ),
    WellKnownKind.STATEFUL_SET: WellKnownKindSpec(
        WellKnownKind.STATEFUL_SET, "apps/v1", "AppsV1Api", "list_stateful_set_for_all_namespaces"
    ),
    WellKnownKind.REPLICATION_CONTROLLER: WellKnownKindSpec(
        WellKnownKind.REPLICATION_CONTROLLER,
        "v1",
        "CoreV1Api",
        "list_replication_controller_for_all_namespaces",
    ),
    WellKnownKind.JOB: WellKnownKindSpec(WellKnownKind.JOB, "batch/v1", "BatchV1Api", "list_job_for_all_namespaces"),
}


class WellKnownKinds(Mapping[WellKnownKind, WellKnownKindSpec]):
    """Immutable selection of well-known kinds, built once at startup.

    Lookups take the plain kind string found in owner references, so
    ``"Deployment" in kinds`` works without converting to the enum first.
    """

    def __init__(self, kinds: Iterable[WellKnownKind] = tuple(WellKnownKind)) -> None:
        self._specs = MappingProxyType({WellKnownKind(k): _SPECS[WellKnownKind(k)] for k in kinds})

    def __getitem__(self, kind: object) -> WellKnownKindSpec:
        try:
            return self._specs[WellKnownKind(kind)]  # type: ignore[arg-type]
        except ValueError:
            raise KeyError(kind) from None

    def __contains__(self, kind: object) -> bool:
        try:
            return WellKnownKind(kind) in self._specs  # type: ignore[arg-type]
        except ValueError:
            return False

    def __iter__(self) -> Iterator[WellKnownKind]:
        return iter(self._specs)

    def __len__(self) -> int:
        return len(self._specs)

    def __repr__(self) -> str:
        return f"WellKnownKinds({[str(k) for k in self._specs]})"


def parse_kinds(value: str) -> tuple[WellKnownKind, ...]:
    """Parse a comma-separated kind list; an empty string selects every kind."""
    names = [part.strip() for part in value.split(",") if part.strip()]
    if not names:
        return tuple(WellKnownKind)
    valid = {k.value for k in WellKnownKind}
    unknown = [n for n in names if n not in valid]
    if unknown:
        raise ValueError(f"Unknown well-known kinds: {unknown}. Must be drawn from {sorted(valid)}")
    return tuple(dict.fromkeys(WellKnownKind(n) for n in names))
