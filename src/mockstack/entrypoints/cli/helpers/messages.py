"""Terminal message helpers for the mockstack CLI.

Status lines go to stderr so stdout stays free for scenario reports. Each
line starts with an emoji glyph, or an ASCII stand-in when stderr cannot
encode it.
"""

import click

CAUTION = ("⚠️", "[!]")  # pragma: no mutate
SUCCESS = ("✅", "[OK]")  # pragma: no mutate
FAILURE = ("❌", "[X]")  # pragma: no mutate
NOTICE = ("🐳", "[-]")  # pragma: no mutate


def _supports_character(character: str) -> bool:
    """Return True if *character* can be encoded on stderr."""
    stream = click.get_text_stream("stderr")  # pragma: no mutate
    encoding = getattr(stream, "encoding", None) or "ascii"
    try:
        character.encode(encoding)
    except UnicodeEncodeError:
        return False
    return True


def glyph(pair: tuple[str, str]) -> str:
    """Pick the emoji of an ``(emoji, fallback)`` pair when stderr allows it.

    Example:
        >>> glyph(SUCCESS)  # on a UTF-8 terminal
        '✅'
    """
    emoji, fallback = pair
    return emoji if _supports_character(emoji) else fallback


def _emit(pair: tuple[str, str], msg: str, **style) -> None:
    click.secho(f"{glyph(pair)}  {msg}", err=True, **style)


def warn(msg: str) -> None:
    """Yellow, bold warning line, e.g. ``⚠️  Network still has endpoints.``"""
    _emit(CAUTION, msg, fg="yellow", bold=True)


def success(msg: str) -> None:
    """Green, bold success line, e.g. ``✅  Storage scenario passed.``"""
    _emit(SUCCESS, msg, fg="green", bold=True)


def error(msg: str) -> None:
    """Red, bold error line, e.g. ``❌  Cannot connect to docker.``"""
    _emit(FAILURE, msg, fg="red", bold=True)


def info(msg: str) -> None:
    """Plain progress line."""
    _emit(NOTICE, msg)
