"""API discovery and scale sub-resource access."""

from kubeowner.discovery.mapper import DiscoveryRESTMapper, MapperResetLoop
from kubeowner.discovery.scale import ScaleClient

__all__ = ["DiscoveryRESTMapper", "MapperResetLoop", "ScaleClient"]
