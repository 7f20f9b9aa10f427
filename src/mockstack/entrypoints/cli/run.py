"""``mockstack run``: execute a scenario against throwaway containers.

Each command connects to the Docker Engine, runs one scenario end to end and
tears every container and network it created down again, whether the
scenario passed or not. The report goes to **stdout**; status lines go to
**stderr**.

Failure modes
- Docker unreachable, image pull/build failure, readiness timeout or a
  failed operation: ``ClickException`` with the error message, exit code 1.
- An observed value differing from the seeded fixture: same, with the
  expected and actual values.
"""

from __future__ import annotations

from pathlib import Path

import click
import click_extra as clickx

from mockstack import config
from mockstack.adapters.docker_pool import DockerContainerPool
from mockstack.domain.errors import HarnessError
from mockstack.service_layer.readiness import RetryPolicy
from mockstack.services import run_documents_scenario, run_storage_scenario

from .helpers import error, info, success


def open_pool(ctx: click.Context) -> DockerContainerPool:
    """Connect to docker; the client is closed when the command returns."""
    try:
        pool = DockerContainerPool.from_env(config.get_docker_url())
    except HarnessError as e:
        raise click.ClickException(str(e)) from e
    ctx.call_on_close(pool.close)
    return pool


def readiness_policy() -> RetryPolicy:
    try:
        return RetryPolicy(max_elapsed=config.get_ready_timeout())
    except HarnessError as e:
        raise click.ClickException(str(e)) from e


@click.group(cls=clickx.ExtraGroup)
def run() -> None:
    """Run an integration scenario against mocked services."""


@run.command()
@click.option(
    "--data-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help=(
        "Seed data for the fake GCS server, one sub-directory per bucket. "
        "Defaults to the packaged sample-bucket."
    ),
)
@click.pass_context
def storage(ctx: click.Context, data_dir: Path | None) -> None:
    """Exercise the object API of a fake GCS server."""
    policy = readiness_policy()
    pool = open_pool(ctx)
    info("Starting fake-gcs-server")
    try:
        report = run_storage_scenario(pool, data_dir=data_dir, policy=policy)
    except (HarnessError, AssertionError) as e:
        error("Storage scenario failed.")
        raise click.ClickException(str(e)) from e

    click.echo(f"endpoint: {report.endpoint}")
    click.echo(f"objects: {', '.join(report.objects)}")
    click.echo(f"bytes written: {report.bytes_written}")
    click.echo(f"deleted: {report.deleted}")
    success("Storage scenario passed.")


@run.command()
@click.option(
    "--seeder-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help=(
        "Build context of the seeder image (must contain a Dockerfile). "
        "Defaults to the packaged restaurants seeder."
    ),
)
@click.pass_context
def documents(ctx: click.Context, seeder_dir: Path | None) -> None:
    """Seed a MongoDB instance and query the fixture restaurant."""
    policy = readiness_policy()
    pool = open_pool(ctx)
    info("Starting MongoDB and seeder")
    try:
        report = run_documents_scenario(pool, seeder_dir=seeder_dir, policy=policy)
    except (HarnessError, AssertionError) as e:
        error("Documents scenario failed.")
        raise click.ClickException(str(e)) from e

    restaurant = report.restaurant
    click.echo(f"uri: {report.uri}")
    click.echo(f"restaurant: {restaurant.restaurant_id} {restaurant.name}")
    click.echo(f"borough: {restaurant.borough}")
    click.echo(f"cuisine: {restaurant.cuisine}")
    success("Documents scenario passed.")
