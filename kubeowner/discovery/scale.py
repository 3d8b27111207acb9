"""Generic reads of the ``scale`` sub-resource."""

from __future__ import annotations

from typing import Any

from kubernetes_asyncio import client as k8s_client  # type: ignore[import-untyped]

from kubeowner.errors import UnsupportedKindError
from kubeowner.models.keys import ResourceMapping


class ScaleClient:
    """Fetches the owner references reported by a resource's scale view.

    Any HTTP failure surfaces as ``ApiException`` from kubernetes-asyncio,
    with the API client's own timeout policy.
    """

    def __init__(self, api_client: Any) -> None:
        self._api_client = api_client

    async def get_owner_references(self, mapping: ResourceMapping, namespace: str, name: str) -> list[dict[str, Any]]:
        if mapping.group:
            scale = await k8s_client.CustomObjectsApi(self._api_client).get_namespaced_custom_object_scale(
                mapping.group, mapping.version, namespace, mapping.resource, name
            )
        elif mapping.resource == "replicationcontrollers":
            scale = await k8s_client.CoreV1Api(self._api_client).read_namespaced_replication_controller_scale(
                name, namespace
            )
        else:
            raise UnsupportedKindError(f"core resource {mapping.resource!r} does not serve a scale sub-resource")

        raw = self._api_client.sanitize_for_serialization(scale)
        return list((raw.get("metadata") or {}).get("ownerReferences") or [])
