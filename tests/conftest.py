"""Global pytest fixtures for mockstack."""

pytest_plugins = [
    "tests.fixtures.pools",
    "tests.fixtures.containers",
]
