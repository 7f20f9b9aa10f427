"""Ordered release of scenario resources.

`TeardownStack` is a LIFO of release closures pushed at acquisition time and
unwound in reverse during teardown, so resources are always released in
strict reverse acquisition order even when acquisition stopped half way.

Release failures are best-effort: each one is logged and recorded, and the
unwind goes on with the next step. Steps pushed with ``fatal=True`` (service
client disconnects) are escalated: once every step has run, the first fatal
failure is raised as `ClientDisconnectError`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from mockstack.domain.errors import ClientDisconnectError

logger = logging.getLogger(__name__)

__all__ = ["ReleaseFailure", "TeardownStack"]


@dataclass(frozen=True)
class _Release:
    name: str
    action: Callable[[], None]
    fatal: bool


@dataclass(frozen=True)
class ReleaseFailure:
    """A release step that raised during unwind."""

    name: str
    error: BaseException
    fatal: bool


class TeardownStack:
    """LIFO stack of release actions, unwound exactly once."""

    def __init__(self) -> None:
        self._releases: list[_Release] = []
        self._unwound = False
        self.released: list[str] = []
        self.failures: list[ReleaseFailure] = []

    def __len__(self) -> int:
        return len(self._releases)

    @property
    def unwound(self) -> bool:
        """True once `unwind()` has run."""
        return self._unwound

    @property
    def pending(self) -> list[str]:
        """Names of the releases that will run, in unwind order."""
        return [release.name for release in reversed(self._releases)]

    def push(
        self, name: str, action: Callable[[], None], *, fatal: bool = False
    ) -> None:
        """Register ``action`` to run at teardown.

        Args:
            name: Label used in logs and in `released`.
            action: Zero-argument release function.
            fatal: Escalate a failure of this step after the unwind.

        Raises:
            RuntimeError: If the stack was already unwound.
        """
        if self._unwound:
            raise RuntimeError(f"Cannot push {name!r}: teardown already ran")
        self._releases.append(_Release(name, action, fatal))

    def unwind(self) -> list[ReleaseFailure]:
        """Run every release in reverse push order.

        A second call is a no-op.

        Returns:
            list[ReleaseFailure]: Non-fatal failures that were logged.

        Raises:
            ClientDisconnectError: If a fatal release failed. Raised only after
                all remaining releases have run.
        """
        if self._unwound:
            return []
        self._unwound = True

        while self._releases:
            release = self._releases.pop()
            try:
                release.action()
            except Exception as e:  # pylint: disable=broad-except
                self.failures.append(ReleaseFailure(release.name, e, release.fatal))
                if release.fatal:
                    logger.critical("Could not release %s: %s", release.name, e)
                else:
                    logger.warning("Could not release %s: %s", release.name, e)
                continue
            self.released.append(release.name)
            logger.debug("Released %s", release.name)

        if fatal := next((f for f in self.failures if f.fatal), None):
            raise ClientDisconnectError(fatal.name, str(fatal.error)) from fatal.error
        return list(self.failures)
