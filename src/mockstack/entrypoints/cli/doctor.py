"""``mockstack doctor``: check that the container runtime is usable."""

from __future__ import annotations

import logging

import click
from docker.errors import DockerException

from .helpers import success, warn
from .run import open_pool

logger = logging.getLogger(__name__)


@click.command()
@click.pass_context
def doctor(ctx: click.Context) -> None:
    """Ping the Docker Engine and report its version."""
    pool = open_pool(ctx)
    try:
        version = pool.client.version()
    except DockerException as e:
        logger.debug("version() failed", exc_info=True)
        warn(f"Docker answered ping but not version: {e}")
        return
    success(
        f"Docker {version.get('Version', '?')} "
        f"(API {version.get('ApiVersion', '?')}) reachable; "
        f"published ports on {pool.host}."
    )
