"""Readiness gate: bounded exponential retry around a service probe.

A container that has started is not necessarily a service that answers: a
database may still be initialising, a listener may not be bound yet. The gate
decouples "process started" from "service ready" by retrying a cheap probe
until it succeeds or a time budget runs out.

The retry loop is a combinator returning a `ReadinessResult`; it does not use
exceptions for control flow. Probe exceptions count as failed attempts and
the last one is kept for diagnostics. Only `ReadinessGate.ensure()` raises,
and only once the budget is exhausted.

Example:
    gate = ReadinessGate(RetryPolicy(max_elapsed=30.0))
    gate.ensure(lambda: client.admin.command("ping"), "mongodb")
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable
from dataclasses import dataclass

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_result,
    stop_after_delay,
    wait_exponential,
)

from mockstack.domain.errors import ReadinessTimeoutError

logger = logging.getLogger(__name__)

__all__ = [
    "Probe",
    "ReadinessGate",
    "ReadinessResult",
    "RetryPolicy",
    "retry",
]

Probe = Callable[[], object]


@dataclass(frozen=True)
class RetryPolicy:
    """Backoff policy for readiness probes.

    Attributes:
        max_elapsed: Total time budget in seconds.
        initial_interval: Delay after the first failed attempt.
        multiplier: Growth factor applied to the delay after each failure.
        max_interval: Ceiling for a single delay.
    """

    max_elapsed: float = 60.0
    initial_interval: float = 0.5
    multiplier: float = 1.5
    max_interval: float = 5.0

    def __post_init__(self) -> None:
        if not math.isfinite(self.max_elapsed) or self.max_elapsed <= 0:
            raise ValueError("max_elapsed must be a finite number > 0")
        if not all(
            math.isfinite(v)
            for v in (self.initial_interval, self.multiplier, self.max_interval)
        ):
            raise ValueError("intervals and multiplier must be finite")
        if self.initial_interval < 0 or self.max_interval < self.initial_interval:
            raise ValueError("need 0 <= initial_interval <= max_interval")
        if self.multiplier < 1:
            raise ValueError("multiplier must be >= 1")


@dataclass(frozen=True)
class ReadinessResult:
    """Outcome of a readiness wait."""

    ready: bool
    attempts: int
    elapsed: float
    last_error: BaseException | None = None

    def __bool__(self) -> bool:
        return self.ready


def retry(
    probe: Probe,
    policy: RetryPolicy | None = None,
    *,
    description: str = "service",
    sleep: Callable[[float], None] = time.sleep,
) -> ReadinessResult:
    """Retry ``probe`` with exponential backoff until it succeeds or time runs out.

    A probe succeeds when it returns a truthy value. Returning a falsy value or
    raising an exception is a failed attempt.

    Args:
        probe: Zero-argument health check.
        policy: Backoff policy. Defaults to `RetryPolicy()`.
        description: What is being waited for, used in log lines.
        sleep: Sleep function, replaceable in tests.

    Returns:
        ReadinessResult: ``ready`` is True only if the probe succeeded.
    """
    policy = policy or RetryPolicy()
    attempts = 0
    last_error: BaseException | None = None

    def attempt() -> bool:
        nonlocal attempts, last_error
        attempts += 1
        try:
            ok = bool(probe())
        except Exception as e:  # pylint: disable=broad-except
            last_error = e
            return False
        last_error = None
        return ok

    backoff = wait_exponential(
        multiplier=policy.initial_interval,
        exp_base=policy.multiplier,
        min=policy.initial_interval,
        max=policy.max_interval,
    )

    def wait(retry_state: RetryCallState) -> float:
        # never sleep past the budget
        remaining = policy.max_elapsed - (retry_state.seconds_since_start or 0.0)
        return max(0.0, min(backoff(retry_state), remaining))

    def log_retry(retry_state: RetryCallState) -> None:
        next_wait = retry_state.next_action.sleep if retry_state.next_action else 0
        logger.debug(
            "Waiting for %s: attempt %d failed (%s), retrying in %.2fs",
            description,
            retry_state.attempt_number,
            last_error or "not ready",
            next_wait,
        )

    started = time.monotonic()
    retrying = Retrying(
        stop=stop_after_delay(policy.max_elapsed),
        wait=wait,
        retry=retry_if_result(lambda ok: not ok),
        retry_error_callback=lambda _state: False,
        before_sleep=log_retry,
        sleep=sleep,
    )
    ready = retrying(attempt)
    return ReadinessResult(
        ready=ready,
        attempts=attempts,
        elapsed=time.monotonic() - started,
        last_error=None if ready else last_error,
    )


class ReadinessGate:
    """Applies one `RetryPolicy` to every probe of a scenario."""

    def __init__(
        self,
        policy: RetryPolicy | None = None,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.policy = policy or RetryPolicy()
        self._sleep = sleep

    def wait(self, probe: Probe, description: str = "service") -> ReadinessResult:
        """Retry ``probe`` under the gate's policy and return the outcome."""
        result = retry(probe, self.policy, description=description, sleep=self._sleep)
        if result:
            logger.info(
                "%s ready after %d attempt(s) in %.1fs",
                description,
                result.attempts,
                result.elapsed,
            )
        else:
            logger.error(
                "%s not ready after %d attempt(s) in %.1fs: %s",
                description,
                result.attempts,
                result.elapsed,
                result.last_error or "probe never succeeded",
            )
        return result

    def ensure(self, probe: Probe, description: str = "service") -> ReadinessResult:
        """Like `wait()`, but a failed wait is fatal.

        Raises:
            ReadinessTimeoutError: If the probe never succeeded within budget.
        """
        result = self.wait(probe, description)
        if not result:
            raise ReadinessTimeoutError(
                description, result.elapsed, result.attempts, result.last_error
            )
        return result
