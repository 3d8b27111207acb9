"""Cache layer for kubeowner.

Provides the in-memory mirror of well-known controller objects that backs the
fast resolution path.

Submodules:
    object_cache -- Per-kind ``namespace/name`` keyed stores with sync tracking.
    informer     -- Background list+watch task feeding one store.
"""

from kubeowner.cache.informer import Informer
from kubeowner.cache.object_cache import ObjectCache

__all__ = ["Informer", "ObjectCache"]
