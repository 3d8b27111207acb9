"""``kubeowner`` command line.

    kubeowner resolve -n default -k ReplicaSet --name web-7b4f8c6d
    kubeowner resolve -n ml -k TFJob --name train --api-version kubeflow.org/v1
"""

from __future__ import annotations

import asyncio
import json

import click

from kubeowner.app import KubeOwnerApp, _ComponentError
from kubeowner.config import load_config
from kubeowner.errors import KubeOwnerError
from kubeowner.models.keys import ControllerKeyWithAPIVersion


@click.group()
@click.version_option(package_name="kubeowner")
def cli() -> None:
    """Find the top-level controller owning a Kubernetes object."""


@cli.command()
@click.option("-n", "--namespace", required=True, help="Namespace of the object.")
@click.option("-k", "--kind", required=True, help="Kind of the object, e.g. ReplicaSet.")
@click.option("--name", required=True, help="Name of the object.")
@click.option("--api-version", default="", help="apiVersion of the object; needed for non-well-known kinds.")
@click.option("--log-level", type=click.Choice(["debug", "info", "warning", "error"]), default=None)
def resolve(namespace: str, kind: str, name: str, api_version: str, log_level: str | None) -> None:
    """Print the root of the object's controlling-owner chain as JSON."""
    key = ControllerKeyWithAPIVersion(namespace=namespace, kind=kind, name=name, api_version=api_version)
    try:
        root = asyncio.run(_resolve(key, log_level))
    except _ComponentError as exc:
        raise click.ClickException(f"startup failed ({exc.component}): {exc.cause}") from exc
    except KubeOwnerError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(json.dumps(root.to_dict() if root is not None else None))


async def _resolve(key: ControllerKeyWithAPIVersion, log_level: str | None) -> ControllerKeyWithAPIVersion | None:
    config = load_config()
    if log_level:
        config.log.level = log_level
    app = KubeOwnerApp(config, console_logs=True)
    try:
        await app.start()
        return await app.fetcher.find_top_level(key)
    finally:
        await app.stop()
