"""Top-level controller resolution.

ControllerFetcher      -- the contract: ``find_top_level(key)``.
OwnershipWalker        -- cluster-backed fetcher walking controlling owners.
WellKnownResolver      -- fast single-step path over the local object cache.
GenericResolver        -- single-step path over discovery + scale sub-resource.
Identity/Const/Mock    -- fixed-result fetchers.
"""

from kubeowner.fetcher.base import ControllerFetcher, get_owner_controller
from kubeowner.fetcher.fixed import ConstControllerFetcher, IdentityControllerFetcher, MockControllerFetcher
from kubeowner.fetcher.generic import GenericResolver
from kubeowner.fetcher.walker import OwnershipWalker
from kubeowner.fetcher.well_known import WellKnownResolver

__all__ = [
    "ConstControllerFetcher",
    "ControllerFetcher",
    "GenericResolver",
    "IdentityControllerFetcher",
    "MockControllerFetcher",
    "OwnershipWalker",
    "WellKnownResolver",
    "get_owner_controller",
]
