"""Discovery-backed group+kind -> resource mapping.

DiscoveryRESTMapper reads the cluster's API surface once, keeps the resulting
index as an immutable snapshot, and answers lookups from it. A lookup miss on
a stale snapshot triggers one reload so newly registered custom resources are
found without waiting for the next periodic reset.

MapperResetLoop drops the snapshot on a fixed period so removed or re-versioned
resources eventually disappear as well.
"""

from __future__ import annotations

import asyncio
from typing import Any

from kubernetes_asyncio import client as k8s_client  # type: ignore[import-untyped]
from kubernetes_asyncio.client.exceptions import ApiException  # type: ignore[import-untyped]

from kubeowner.errors import NoKindMatchError
from kubeowner.models.keys import ResourceMapping
from kubeowner.observability.logging import get_logger

_logger = get_logger("discovery.mapper")

_Index = dict[tuple[str, str], tuple[ResourceMapping, ...]]


def build_index(group_resources: list[tuple[str, str, list[Any]]]) -> _Index:
    """Index discovered resources by (group, kind).

    *group_resources* is an ordered list of ``(group, version, resources)``;
    per group, the preferred version must come first so its mapping leads.
    Subresources (``deployments/scale``) are skipped.
    """
    index: dict[tuple[str, str], list[ResourceMapping]] = {}
    for group, version, resources in group_resources:
        for res in resources:
            name = _field(res, "name")
            if not name or "/" in name:
                continue
            kind = _field(res, "kind")
            mapping = ResourceMapping(
                group=group,
                version=version,
                resource=name,
                kind=kind,
                namespaced=bool(_field(res, "namespaced", True)),
            )
            index.setdefault((group, kind), []).append(mapping)
    return {key: tuple(mappings) for key, mappings in index.items()}


def _field(res: Any, name: str, default: Any = "") -> Any:
    if isinstance(res, dict):
        return res.get(name, default)
    return getattr(res, name, default)


class DiscoveryRESTMapper:
    """Resolves (group, kind) to every resource mapping discovery reports."""

    def __init__(self, api_client: Any) -> None:
        self._api_client = api_client
        self._index: _Index | None = None
        self._lock = asyncio.Lock()

    async def resource_mappings(self, group: str, kind: str) -> list[ResourceMapping]:
        """Return the mappings for *group* / *kind*, preferred version first.

        Raises NoKindMatchError when discovery has no such kind, even after
        a reload.
        """
        index, fresh = await self._snapshot()
        mappings = index.get((group, kind))
        if not mappings and not fresh:
            _logger.debug("mapper_miss_reloading", group=group, kind=kind)
            self.reset()
            index, _ = await self._snapshot()
            mappings = index.get((group, kind))
        if not mappings:
            raise NoKindMatchError(group, kind)
        return list(mappings)

    def reset(self) -> None:
        """Drop the current snapshot; the next lookup rediscovers."""
        self._index = None

    async def _snapshot(self) -> tuple[_Index, bool]:
        """Return the index and whether it was loaded during this call.

        An index another lookup loaded while this one waited on the lock
        counts as fresh.
        """
        index = self._index
        if index is not None:
            return index, False
        async with self._lock:
            if self._index is not None:
                return self._index, True
            self._index = build_index(await self._discover())
            _logger.info("discovery_refreshed", kinds=len(self._index))
            return self._index, True

    async def _discover(self) -> list[tuple[str, str, list[Any]]]:
        found: list[tuple[str, str, list[Any]]] = []

        core = await k8s_client.CoreV1Api(self._api_client).get_api_resources()
        found.append(("", "v1", list(core.resources or [])))

        custom = k8s_client.CustomObjectsApi(self._api_client)
        group_list = await k8s_client.ApisApi(self._api_client).get_api_versions()
        for group in group_list.groups or []:
            preferred = group.preferred_version.version if group.preferred_version else None
            versions = [v.version for v in group.versions or []]
            if preferred in versions:
                versions.remove(preferred)
                versions.insert(0, preferred)
            for version in versions:
                try:
                    resource_list = await custom.get_api_resources(group.name, version)
                except ApiException as exc:
                    # An unavailable aggregated API must not hide every other group.
                    _logger.warning(
                        "discovery_group_failed",
                        group_version=f"{group.name}/{version}",
                        status=exc.status,
                    )
                    continue
                found.append((group.name, version, list(resource_list.resources or [])))
        return found


class MapperResetLoop:
    """Background task resetting a mapper every *period* seconds."""

    def __init__(self, mapper: DiscoveryRESTMapper, period: float) -> None:
        self._mapper = mapper
        self._period = period
        self._task: asyncio.Task[None] | None = None

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._run(), name="discovery-reset")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        await asyncio.gather(self._task, return_exceptions=True)
        self._task = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._period)
            self._mapper.reset()
            _logger.debug("discovery_reset", period=self._period)
