"""
kubedev command line.

    kubedev down [-f kubedev.yml]
"""

import asyncio
from pathlib import Path

import click

from .config import get_settings
from .errors import KubeDevError
from .kubernetes.client import get_k8s_client
from .logging import configure_logging
from .model import read_dev
from .services import Syncthing, deactivate


async def _down(manifest: Path) -> None:
    dev = read_dev(manifest)
    client = get_k8s_client()
    await deactivate(client, dev)
    Syncthing(dev.name, dev.resolved_namespace()).stop()


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
def main(verbose: bool):
    """kubedev - interactive development mode for Kubernetes workloads."""
    configure_logging(verbose)


@main.command()
@click.option(
    "--file", "-f", "manifest",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to the dev manifest (default: kubedev.yml)",
)
def down(manifest: Path):
    """Deactivate dev mode and stop the file synchronization daemon."""
    if manifest is None:
        manifest = Path(get_settings().dev_manifest)

    click.echo("Deactivating dev mode...")
    try:
        asyncio.run(_down(manifest))
    except (KubeDevError, RuntimeError) as e:
        raise click.ClickException(str(e)) from e
    click.echo("✅ Dev mode deactivated")


if __name__ == "__main__":
    main()
