"""Logging helpers used by the mockstack CLI.

This module provides utilities for configuring console logging with Rich
and an in-memory "flight recorder" that buffers log records and writes them
to disk on flush. Container runs are chatty and failures usually happen late
(a readiness timeout, a teardown that could not remove a network), so the
recorder keeps the debug trail that led there without flooding the console.

It also provides a filter that tags records from the docker SDK, pymongo,
urllib3 and the Google client libraries with a short prefix, so the console
shows which layer a line came from.
"""

from __future__ import annotations

import logging
import os
import platform
import sys
from logging.handlers import MemoryHandler
from pathlib import Path
from typing import TYPE_CHECKING, Literal, TypeAlias

import docker
import pymongo
from google.cloud import storage
from rich.console import Console
from rich.logging import RichHandler

from mockstack import config

if TYPE_CHECKING:
    from logging import Logger

# pylint: disable=too-few-public-methods

PROJECT_PREFIX = "mockstack"

CONSOLE_FORMAT = "%(prefix)s %(message)s"
DEBUG_CONSOLE_FORMAT = "%(asctime)s %(name)s: %(message)s"
RECORDER_FORMAT = (
    "[%(asctime)s] [%(process)d:%(threadName)s] "
    "%(levelname)s %(name)s:%(lineno)d: %(message)s"
)


class ThirdPartyPrefixFilter(logging.Filter):
    """Annotate third-party log records with a short prefix.

    Records from loggers outside the project get ``record.prefix`` set to the
    bracketed top-level package name, e.g. "[pymongo]" for
    ``pymongo.topology``. Project records get an empty prefix. Nothing is
    filtered out.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """Attach a prefix to the record and let it through.

        Args:
            record: The LogRecord being processed.

        Returns:
            bool: Always True (the record is never dropped).
        """
        if record.name.startswith(PROJECT_PREFIX):
            record.prefix = ""
        else:
            # "docker.utils.config" -> "[docker]"
            record.prefix = f"[{record.name.partition('.')[0]}]"
        return True


def config_console_handler(
    level: int = logging.INFO, debug_mode: bool = False, color: bool = True
) -> RichHandler:
    """Configure and return a RichHandler writing to stderr.

    Stdout is left alone: ``mockstack run`` prints its scenario report there.
    In debug mode the handler logs everything at DEBUG and shows source paths
    and timestamps; otherwise third-party records get a short prefix.

    Args:
        level: Minimum level for console output (DEBUG in debug mode).
        debug_mode: Enable debug formatting (source paths, timestamps).
        color: Enable color output, following click-extra's ``--color`` /
            ``--no-color``.

    Returns:
        RichHandler: Handler to attach to the root logger.
    """
    ColorSystem: TypeAlias = Literal["auto", "standard", "256", "truecolor", "windows"]
    color_system: ColorSystem | None = "auto" if color else None
    console = Console(color_system=color_system, stderr=True)

    handler = RichHandler(
        level=logging.DEBUG if debug_mode else level,
        console=console,
        rich_tracebacks=True,
        show_time=False,
        show_path=debug_mode,
        enable_link_path=debug_mode,
    )
    handler.setFormatter(
        logging.Formatter(fmt=DEBUG_CONSOLE_FORMAT if debug_mode else CONSOLE_FORMAT)
    )
    if not debug_mode:
        handler.addFilter(ThirdPartyPrefixFilter())
    return handler


def config_flight_recorder(
    path: Path,
    capacity: int = 2000,
    flush_level: int = logging.WARNING,
    flush_on_close: bool = False,
) -> MemoryHandler:
    """Configure an in-memory flight recorder backed by ``path``.

    Up to ``capacity`` records are buffered and written out when a record at
    ``flush_level`` or higher is emitted, or on close if ``flush_on_close``.
    The file is truncated when the recorder is created, so it only ever holds
    the trail of the latest run.

    Args:
        path: Destination file for flushed records.
        capacity: Number of records kept in memory.
        flush_level: Level at or above which the buffer is written out.
        flush_on_close: Also write the buffer when the handler is closed.

    Returns:
        MemoryHandler: A memory handler with a FileHandler target.
    """
    file_handler = logging.FileHandler(path, mode="w", encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(RECORDER_FORMAT))

    return MemoryHandler(
        capacity=capacity,
        flushLevel=flush_level,
        target=file_handler,
        flushOnClose=flush_on_close,
    )


def log_startup(  # pylint: disable=too-many-arguments
    logger: Logger,
    *,
    app_version: str,
    level: int,
    handlers: list[logging.Handler],
    log_path: Path | None,
    flight_recorder: bool,
    flight_capacity: int | None,
    force_flush_fr: bool,
    logger_levels: dict[str, int],
) -> None:
    """Log a one-line startup summary and DEBUG diagnostics.

    The INFO line names the version, the console level and whether the
    flight recorder is on. DEBUG diagnostics cover the Python and platform
    versions, process id, working directory, the versions of the docker SDK
    and of the service client libraries, the Docker URL and readiness budget
    settings as given in the environment, the active handlers,
    flight-recorder settings and per-logger overrides.

    Args:
        logger: Logger used to emit the messages.
        app_version: mockstack version string.
        level: Effective console level (numeric).
        handlers: Handlers attached to the root logger.
        log_path: Flight-recorder output file, or None.
        flight_recorder: Whether the flight recorder is enabled.
        flight_capacity: Flight-recorder buffer size, or None.
        force_flush_fr: Whether the recorder flushes on close.
        logger_levels: Logger name to numeric level overrides.
    """
    logger.info(
        "MOCKSTACK %s: console=%s, flight-recorder=%s",
        app_version,
        logging.getLevelName(level),
        "ON" if flight_recorder else "OFF",
    )

    logger.debug("Python: %s", sys.version.split()[0])
    logger.debug("Platform: %s %s", platform.system(), platform.release())
    logger.debug("PID: %s", os.getpid())
    logger.debug("CWD: %s", Path.cwd())
    logger.debug("docker SDK: %s", docker.__version__)
    logger.debug("pymongo: %s", pymongo.__version__)
    logger.debug("google-cloud-storage: %s", storage.__version__)
    # raw values; they are validated when a command uses them
    logger.debug(
        "Docker URL: %s", os.environ.get(config.DOCKER_URL_ENV) or "<environment>"
    )
    logger.debug(
        "Readiness budget: %s",
        os.environ.get(config.READY_TIMEOUT_ENV) or config.DEFAULT_READY_TIMEOUT,
    )
    logger.debug("Handlers: %s", [type(h).__name__ for h in handlers])
    if flight_recorder:
        logger.debug(
            "Flight recorder: path=%s, capacity=%s, flush_on_close=%s",
            str(log_path) if log_path else "<none>",
            flight_capacity,
            force_flush_fr,
        )
    if logger_levels:
        logger.debug(
            "Per-logger overrides: %s",
            {name: logging.getLevelName(lvl) for name, lvl in logger_levels.items()},
        )
    else:
        logger.debug("Per-logger overrides: <none>")  # pragma: no cover.
