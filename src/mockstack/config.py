"""Configuration utilities for mockstack.

This module centralizes small helpers and constants related to environment
configuration and the locations of packaged container assets.
"""

from __future__ import annotations

import math
import os
from importlib.resources import files
from pathlib import Path

from mockstack.domain.errors import InvalidConfigError

DOCKER_URL_ENV = "MOCKSTACK_DOCKER_URL"  # pragma: no mutate
READY_TIMEOUT_ENV = "MOCKSTACK_READY_TIMEOUT"  # pragma: no mutate
CREDENTIALS_ENV = "GOOGLE_APPLICATION_CREDENTIALS"  # pragma: no mutate

# The emulator performs no authentication; the storage client library only
# needs the variable to be present.
PLACEHOLDER_CREDENTIALS = "path/to/your/credentials"  # pragma: no mutate

DEFAULT_READY_TIMEOUT = 60.0


def get_docker_url() -> str | None:
    """Return the Docker Engine URL override, if any.

    Returns:
        The value of `MOCKSTACK_DOCKER_URL`, or None to let the docker SDK
        read `DOCKER_HOST` and friends.
    """
    return os.environ.get(DOCKER_URL_ENV) or None


def get_ready_timeout() -> float:
    """Return the readiness budget in seconds.

    Reads `MOCKSTACK_READY_TIMEOUT`, falling back to `DEFAULT_READY_TIMEOUT`.

    Raises:
        InvalidConfigError: If the value is not a positive number.
    """
    if not (raw := os.environ.get(READY_TIMEOUT_ENV)):
        return DEFAULT_READY_TIMEOUT
    try:
        value = float(raw)
    except ValueError as e:
        raise InvalidConfigError(READY_TIMEOUT_ENV, raw, "not a number") from e
    if not math.isfinite(value):
        raise InvalidConfigError(READY_TIMEOUT_ENV, raw, "must be finite")
    if value <= 0:
        raise InvalidConfigError(READY_TIMEOUT_ENV, raw, "must be positive")
    return value


def ensure_placeholder_credentials() -> str:
    """Make sure `GOOGLE_APPLICATION_CREDENTIALS` is set.

    An existing value is left untouched. This is a client-library workaround,
    not an authentication mechanism: clients talking to the emulator are built
    with anonymous credentials.

    Returns:
        The effective value of the variable.
    """
    return os.environ.setdefault(CREDENTIALS_ENV, PLACEHOLDER_CREDENTIALS)


def assets_dir() -> Path:
    """Directory of the container assets shipped with the package."""
    return Path(str(files("mockstack.services") / "assets"))


def seeder_dir() -> Path:
    """Build context of the MongoDB seeder image."""
    return assets_dir() / "seeder"


def gcs_data_dir() -> Path:
    """Seed data mounted into the fake GCS server (one directory per bucket)."""
    return assets_dir() / "gcs-data"
