"""Single-step owner lookup for arbitrary kinds via the scale sub-resource.

Many custom controllers implement ``scale`` only to expose owner metadata
in a kind-agnostic shape, which is what this resolver relies on. Discovery
can report several resources for one group+kind (one per served version),
so every candidate is tried in order and the first readable scale wins.
"""

from __future__ import annotations

from kubeowner.errors import ScaleUnavailableError
from kubeowner.fetcher.base import ResourceMappingResolver, ScaleGetter, get_owner_controller
from kubeowner.models.keys import ControllerKeyWithAPIVersion, GroupVersion
from kubeowner.observability.logging import get_logger
from kubeowner.observability.metrics import parent_lookups_total

_logger = get_logger("fetcher.generic")


class GenericResolver:
    def __init__(self, mapper: ResourceMappingResolver, scales: ScaleGetter) -> None:
        self._mapper = mapper
        self._scales = scales

    async def get_parent(self, key: ControllerKeyWithAPIVersion) -> ControllerKeyWithAPIVersion | None:
        """Return the controlling owner of *key*, or None if it has none.

        Raises:
            ParseError:            ``key.api_version`` is malformed.
            ScaleUnavailableError: no candidate mapping yielded a scale view.
        """
        group_version = GroupVersion.parse(key.api_version)

        try:
            mappings = await self._mapper.resource_mappings(group_version.group, key.kind)
        except Exception as exc:
            # NoKindMatchError as well as discovery transport/API failures.
            parent_lookups_total.labels(path="generic", outcome="error").inc()
            raise ScaleUnavailableError(key, exc) from exc

        last_error: Exception | None = None
        for mapping in mappings:
            try:
                owners = await self._scales.get_owner_references(mapping, key.namespace, key.name)
            except Exception as exc:
                # Covers both "no scale support" and RBAC denials; try the next mapping.
                _logger.debug(
                    "scale_candidate_failed",
                    group=mapping.group,
                    version=mapping.version,
                    resource=mapping.resource,
                    namespace=key.namespace,
                    name=key.name,
                    error=str(exc),
                )
                last_error = exc
                continue
            owner = get_owner_controller(owners, key.namespace)
            parent_lookups_total.labels(path="generic", outcome="root" if owner is None else "found").inc()
            return owner

        parent_lookups_total.labels(path="generic", outcome="error").inc()
        raise ScaleUnavailableError(key, last_error) from last_error
