"""Parsing of ``-L NAME=LEVEL`` logger overrides.

Values may be repeated options or a single comma/space separated list (as
read from ``MOCKSTACK_LOGGER_LEVELS``). The docker SDK, urllib3 and pymongo
are quiet by default; any of them can be turned back up from the command
line, e.g. ``-L urllib3=DEBUG``.
"""

import logging
import re

import click

DEFAULT_LIB_LEVELS = {
    "docker": logging.WARNING,
    "urllib3": logging.WARNING,
    "pymongo": logging.WARNING,
}

_SEPARATORS = re.compile(r"[,\s]+")


def _normalize_items(value: str | list[str] | tuple[str, ...]) -> list[str]:
    """Flatten repeated and comma/space separated values, dropping blanks."""
    values = [value] if isinstance(value, str) else list(value)
    return [item for v in values for item in _SEPARATORS.split(v) if item]


def _parse_item(item: str) -> tuple[str, int]:
    name, sep, level_name = item.partition("=")
    if not sep or not name.strip():
        raise click.BadParameter(f"Expected NAME=LEVEL, got {item!r}")
    level = logging.getLevelName(level_name.strip().upper())
    if not isinstance(level, int):
        raise click.BadParameter(f"Invalid log level: {level_name}")
    return name.strip(), level


def parse_log_level(
    ctx: click.Context,  # pylint: disable=unused-argument
    param: click.Parameter | None,  # pylint: disable=unused-argument
    value: str | list[str] | tuple[str, ...],
) -> dict[str, int]:
    """Click callback returning logger name -> numeric level.

    Starts from `DEFAULT_LIB_LEVELS`; later items override earlier ones.

    Raises:
        click.BadParameter: If an item is not NAME=LEVEL or LEVEL is unknown.
    """
    levels = dict(DEFAULT_LIB_LEVELS)
    levels.update(_parse_item(item) for item in _normalize_items(value))
    return levels
