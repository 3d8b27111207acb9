"""kubeowner: resolve the top-level controller owning a Kubernetes object."""

__version__ = "0.1.0"
