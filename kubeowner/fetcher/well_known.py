"""Single-step owner lookup for well-known kinds via the local object cache."""

from __future__ import annotations

from kubeowner.errors import NotFoundError, UnsupportedKindError
from kubeowner.fetcher.base import ObjectStore, get_owner_controller
from kubeowner.models.keys import ControllerKeyWithAPIVersion
from kubeowner.models.kinds import WellKnownKinds
from kubeowner.observability.metrics import parent_lookups_total


class WellKnownResolver:
    """Reads controlling owners of well-known kinds from cached objects."""

    def __init__(self, store: ObjectStore, kinds: WellKnownKinds) -> None:
        self._store = store
        self._kinds = kinds

    def handles(self, kind: str) -> bool:
        return kind in self._kinds

    def get_parent(self, key: ControllerKeyWithAPIVersion) -> ControllerKeyWithAPIVersion | None:
        """Return the controlling owner of *key*, or None if it has none.

        Raises:
            NotFoundError:        the object is not in its kind's store.
            UnsupportedKindError: the stored object is of another kind.
        """
        expected = str(self._kinds[key.kind].kind)
        obj, found = self._store.get_by_key(expected, f"{key.namespace}/{key.name}")
        if not found or obj is None:
            parent_lookups_total.labels(path="well_known", outcome="error").inc()
            raise NotFoundError(f"{key.kind} {key.namespace}/{key.name} does not exist")
        if obj.kind != expected:
            parent_lookups_total.labels(path="well_known", outcome="error").inc()
            raise UnsupportedKindError(
                f"failed to parse {key.kind} {key.namespace}/{key.name}: cached object is a {obj.kind}"
            )

        owner = get_owner_controller(obj.owner_references, key.namespace)
        parent_lookups_total.labels(path="well_known", outcome="root" if owner is None else "found").inc()
        return owner
