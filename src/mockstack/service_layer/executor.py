"""Scenario executor: run domain operations in order and check their results."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

from mockstack.domain.errors import HarnessError, OperationError, ScenarioAssertionError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ScenarioExecutor:
    """Runs named operations against a ready service and compares results.

    Failures are never swallowed. Harness errors and assertion failures pass
    through unchanged; any other exception is wrapped in `OperationError`
    naming the step that failed.

    Attributes:
        steps: Names of the operations that completed, in order.
    """

    def __init__(self, scenario: str) -> None:
        self.scenario = scenario
        self.steps: list[str] = []

    def step(self, name: str, operation: Callable[..., T], *args, **kwargs) -> T:
        """Run one operation and record it."""
        logger.debug("[%s] %s", self.scenario, name)
        try:
            result = operation(*args, **kwargs)
        except (HarnessError, AssertionError):
            logger.error("[%s] step %s failed", self.scenario, name)
            raise
        except Exception as e:
            logger.error("[%s] step %s failed: %s", self.scenario, name, e)
            raise OperationError(name, str(e)) from e
        self.steps.append(name)
        return result

    def expect(self, what: str, actual: object, expected: object) -> None:
        """Compare an observed value with its expected fixture value.

        Raises:
            ScenarioAssertionError: If they differ.
        """
        if actual != expected:
            logger.error(
                "[%s] %s: expected %r, got %r", self.scenario, what, expected, actual
            )
            raise ScenarioAssertionError(what, actual, expected)
        logger.debug("[%s] %s == %r", self.scenario, what, expected)
