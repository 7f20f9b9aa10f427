"""mockstack CLI entry point.

Defines the top-level ``mockstack`` command (via Click-Extra), configures
logging for every subcommand and registers:

- ``mockstack doctor``: check the Docker Engine is reachable.
- ``mockstack run storage``: fake GCS server scenario.
- ``mockstack run documents``: MongoDB + seeder scenario.

Examples
    $ mockstack doctor
    $ mockstack -v run documents
    $ mockstack -L urllib3=DEBUG run storage --data-dir ./buckets
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import click
import click_extra as clickx
from platformdirs import user_log_dir

from mockstack import __version__
from mockstack.logging import (
    config_console_handler,
    config_flight_recorder,
    log_startup,
)

from .doctor import doctor
from .helpers import parse_log_level
from .run import run

if TYPE_CHECKING:
    from logging import Handler

logger = logging.getLogger(__name__)


HELP = """mockstack command-line interface.

    mockstack starts throwaway containers (a fake GCS server, MongoDB and its
    seeder), waits until they answer, runs client scenarios against them and
    removes every container and network again in reverse order.
    """


@clickx.extra_group(
    version=__version__,
    help=HELP,
    params=[
        clickx.ColorOption(show_envvar=True),
        clickx.TimerOption(show_envvar=True),
        clickx.ExtraVersionOption(),
    ],
)
@click.option(
    "--verbose",
    "-v",
    "verbose_count",
    count=True,
    help=(
        "Increase the default WARNING verbosity by one level "
        "for each additional repetition of the option."
    ),
    default=0,
)
@click.option(
    "--quiet",
    "-q",
    "quiet_count",
    count=True,
    help=(
        "Decrease the default WARNING verbosity by one level "
        "for each additional repetition of the option."
    ),
    default=0,
)
@click.option(
    "--debug/--no-debug",
    is_flag=True,
    help="Enable debug mode (source paths and timestamps on the console).",
    default=False,
)
@click.option(
    "--log-path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to log file (overrides default flight recorder path).",
    default=Path(user_log_dir("mockstack", appauthor=False, ensure_exists=True))
    / "latest.log",
    envvar="MOCKSTACK_LOG_PATH",
    show_default=True,
    show_envvar=True,
)
@click.option(
    "--flight-recorder-capacity",
    type=int,
    default=2000,
    hidden=True,
    envvar="MOCKSTACK_FLIGHT_RECORDER_CAPACITY",
    show_envvar=True,
    help="Capacity of the flight recorder (in number of log records).",
)
@click.option(
    "--flight-recorder/--no-flight-recorder",
    "flight_recorder",
    is_flag=True,
    help=(
        "Keep the last N log records (MOCKSTACK_FLIGHT_RECORDER_CAPACITY) at "
        "DEBUG granularity and write them to --log-path when a WARNING/ERROR "
        "occurs, or on exit if --force-flush is set. Console verbosity is "
        "unchanged."
    ),
    default=True,
    show_envvar=True,
)
@click.option(
    "--force-flush/--no-force-flush",
    "force_flush_flight_recorder",
    is_flag=True,
    help=(
        "Write the flight recorder buffer to --log-path on exit even when "
        "nothing went wrong."
    ),
    default=False,
    show_default=True,
    show_envvar=True,
)
@click.option(
    "-L",
    "--logger-level",
    "logger_levels",
    multiple=True,
    callback=parse_log_level,
    help=(
        "Set MINIMUM LEVEL for specific LOGGERS (NAME=LEVEL). Applies to both "
        "console and flight recorder. Repeatable (e.g. -L docker=INFO "
        "-L pymongo=DEBUG) or via MOCKSTACK_LOGGER_LEVELS (comma/space list)."
    ),
    default=("docker=WARNING", "urllib3=WARNING", "pymongo=WARNING"),
    envvar="MOCKSTACK_LOGGER_LEVELS",
    show_default=True,
    show_envvar=True,
)
@clickx.pass_context
def mockstack(  # pylint: disable=too-many-arguments, too-many-positional-arguments
    ctx: click.Context,
    verbose_count: int,
    quiet_count: int,
    debug: bool,
    log_path: Path,
    flight_recorder_capacity: int,
    flight_recorder: bool,
    force_flush_flight_recorder: bool,
    logger_levels: dict[str, int],
) -> None:
    """mockstack command-line interface."""

    # 0) effective verbosity
    level = logging.WARNING - (10 * verbose_count) + (10 * quiet_count)
    level = max(logging.DEBUG, min(logging.CRITICAL, level))

    handlers: list[Handler] = []

    # 1) console
    use_color = ctx.color is not False  # None or True => allow color
    handlers.append(
        config_console_handler(level=level, debug_mode=debug, color=use_color)
    )

    # 2) flight recorder
    if flight_recorder:
        handlers.append(
            config_flight_recorder(
                path=log_path,
                capacity=flight_recorder_capacity,
                flush_on_close=force_flush_flight_recorder,
            )
        )

    # 3) root logger; handlers filter
    logging.basicConfig(level=logging.DEBUG, handlers=handlers, force=True)

    # 4) third-party logger levels
    for name, lvl in logger_levels.items():
        logging.getLogger(name).setLevel(lvl)

    log_startup(
        logger,
        app_version=__version__,
        level=level,
        handlers=handlers,
        log_path=log_path,
        flight_recorder=flight_recorder,
        flight_capacity=flight_recorder_capacity if flight_recorder else None,
        force_flush_fr=force_flush_flight_recorder,
        logger_levels=logger_levels,
    )

    ctx.call_on_close(logging.shutdown)


mockstack.add_command(doctor)
mockstack.add_command(run)
