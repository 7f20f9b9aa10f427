"""CLI helpers for mockstack.

Message emitters that write to stderr with emoji/ASCII fallbacks, and the
parser for per-logger level overrides.
"""

from .log_level_parser import parse_log_level
from .messages import error, info, success, warn

__all__ = ["error", "info", "parse_log_level", "success", "warn"]
