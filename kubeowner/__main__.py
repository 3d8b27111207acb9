"""Entry point for `python -m kubeowner`.

Usage:
    python -m kubeowner resolve -n default -k ReplicaSet --name web-7b4f8c6d
"""

from __future__ import annotations

from kubeowner.cli import cli

cli()
