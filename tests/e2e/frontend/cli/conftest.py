"""Fixtures for end-to-end tests of the ``mockstack`` command group.

A test-only ``log-demo`` subcommand replays the log trail of a short scenario
(one line per level on a project logger, a few lines on a pymongo logger) so
console verbosity, per-logger overrides and the flight recorder can be checked
without starting containers.
"""

import logging

import click
import pytest
from click.testing import CliRunner

from mockstack.entrypoints.cli.main import mockstack

# pylint: disable=redefined-outer-name

DEMO_LOGGER = "mockstack.demo"
THIRD_PARTY_LOGGER = "pymongo.topology"

MESSAGES = {
    "debug": "demo: probing mongodb-demo (attempt 1)",
    "info": "demo: container mongodb-demo started",
    "warning": "demo: mongodb-demo not ready yet",
    "error": "demo: could not purge mongoseeder-demo",
    "critical": "demo: network mongo_network-demo left behind",
    "final": "demo: teardown finished",
    "lib_debug": "topology: heartbeat sent",
    "lib_info": "topology: server selected",
    "lib_warning": "topology: server selection slow",
}


@click.command()
def log_demo():
    """Replay a scenario's log trail on project and pymongo loggers."""
    logger = logging.getLogger(DEMO_LOGGER)
    lib = logging.getLogger(THIRD_PARTY_LOGGER)
    logger.debug(MESSAGES["debug"])
    logger.info(MESSAGES["info"])
    logger.warning(MESSAGES["warning"])
    logger.error(MESSAGES["error"])
    logger.critical(MESSAGES["critical"])
    lib.debug(MESSAGES["lib_debug"])
    lib.info(MESSAGES["lib_info"])
    lib.warning(MESSAGES["lib_warning"])
    logger.debug(MESSAGES["final"])


def _unregister(group: click.Group, name: str) -> None:
    # click-extra keeps its own per-section registries next to ``commands``
    group.commands.pop(name, None)
    if hasattr(group, "_default_section"):
        group._default_section.commands.pop(name, None)  # pylint: disable=protected-access
    for section in getattr(group, "_sections", []):
        getattr(section, "commands", {}).pop(name, None)


@pytest.fixture
def registered_log_demo():
    """Attach ``log-demo`` to the ``mockstack`` group for one test."""
    mockstack.add_command(log_demo, name="log-demo")
    try:
        yield
    finally:
        _unregister(mockstack, "log-demo")


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def fs(runner):
    """Run the test inside a throwaway working directory."""
    with runner.isolated_filesystem():
        yield
