"""kubeowner command-line interface.

Exposes:
    cli -- Click group entry point (registered as ``kubeowner`` script).
"""

from kubeowner.cli.main import cli

__all__ = ["cli"]
