"""Scenario orchestrator.

A `Scenario` owns everything one integration scenario acquires: networks,
containers and service clients. Each acquisition pushes its release onto a
`TeardownStack`, so leaving the scenario's ``with`` block releases them in
reverse order whether the block succeeded or failed.

Typical usage
-------------
    with Scenario(pool, "mongo") as scenario:
        net = scenario.create_network("mongo_network")
        db = scenario.provision(mongo_spec(net))
        scenario.await_ready(lambda: ping(db), "mongodb")
        seeder = scenario.build_and_provision(dockerfile, seeder_spec(net))
        client = scenario.connect(lambda: connect(uri), disconnect, name="mongo")
        doc = scenario.execute("find restaurant", find_one_by, client, ...)
        scenario.expect("restaurant name", doc["name"], "Regina Caterers")
    # disconnect mongo -> purge seeder -> purge db -> remove network

The pool is injected; a scenario never creates or shares one.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

from mockstack.domain.errors import InvalidTransitionError
from mockstack.domain.lifecycle import ScenarioState, can_transition
from mockstack.domain.models import ContainerHandle, ContainerSpec, NetworkHandle
from mockstack.interfaces.container_pool import ContainerPool

from .executor import ScenarioExecutor
from .readiness import Probe, ReadinessGate, ReadinessResult, RetryPolicy
from .teardown import TeardownStack

logger = logging.getLogger(__name__)

T = TypeVar("T")
C = TypeVar("C")

__all__ = ["Scenario"]


class Scenario:  # pylint: disable=too-many-instance-attributes
    """Lifecycle of one integration scenario.

    Args:
        pool: Container pool owned by the current test run.
        name: Scenario name used in logs.
        gate: Readiness gate. Built from ``policy`` when omitted.
        policy: Retry policy for the default gate.

    Attributes:
        state: Current `ScenarioState`.
        history: Every state visited, in order.
        error: First exception that failed the scenario, if any.
    """

    def __init__(
        self,
        pool: ContainerPool,
        name: str,
        *,
        gate: ReadinessGate | None = None,
        policy: RetryPolicy | None = None,
    ) -> None:
        self.pool = pool
        self.name = name
        self.gate = gate or ReadinessGate(policy)
        self.executor = ScenarioExecutor(name)
        self.releases = TeardownStack()
        self.state = ScenarioState.INIT
        self.history: list[ScenarioState] = [ScenarioState.INIT]
        self.error: BaseException | None = None

    def __enter__(self) -> Scenario:
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc is not None and self.error is None:
            self.fail(exc)
        self.teardown()
        return False

    @property
    def succeeded(self) -> bool:
        """True when the scenario reached DONE without failing."""
        return self.state is ScenarioState.DONE and self.error is None

    # ---- provisioning ----

    def create_network(self, name: str) -> NetworkHandle:
        """Create a network; it is removed after every container on it."""
        self._move(ScenarioState.PROVISIONING)
        network = self._guarded(self.pool.create_network, name)
        self.releases.push(
            f"network {name}", lambda: self.pool.remove_network(network)
        )
        return network

    def provision(self, spec: ContainerSpec) -> ContainerHandle:
        """Start a container from a published image."""
        self._move(ScenarioState.PROVISIONING)
        handle = self._guarded(self.pool.run, spec)
        self.releases.push(
            f"container {handle.name}", lambda: self.pool.purge(handle)
        )
        return handle

    def build_and_provision(
        self, dockerfile: Path, spec: ContainerSpec
    ) -> ContainerHandle:
        """Build an image from ``dockerfile`` and start a container from it."""
        self._move(ScenarioState.PROVISIONING)
        handle = self._guarded(self.pool.build_and_run, dockerfile, spec)
        self.releases.push(
            f"container {handle.name}", lambda: self.pool.purge(handle)
        )
        return handle

    # ---- readiness ----

    def await_ready(self, probe: Probe, description: str) -> ReadinessResult:
        """Block until ``probe`` succeeds.

        Raises:
            ReadinessTimeoutError: If the gate's budget runs out first.
        """
        self._move(ScenarioState.AWAITING_READY)
        return self._guarded(self.gate.ensure, probe, description)

    # ---- execution ----

    def connect(
        self,
        factory: Callable[[], C],
        close: Callable[[C], None],
        *,
        name: str = "client",
    ) -> C:
        """Open a service client and register its disconnect.

        Clients may only be opened once a service was reported ready. Their
        disconnect is a fatal release step.
        """
        if self.state not in (
            ScenarioState.AWAITING_READY,
            ScenarioState.EXECUTING,
        ):
            raise InvalidTransitionError(
                self.name, self.state.name, f"connect {name}"
            )
        client = self._guarded(factory)
        self.releases.push(
            f"disconnect {name}", lambda: close(client), fatal=True
        )
        logger.debug("[%s] connected %s", self.name, name)
        return client

    def execute(self, name: str, operation: Callable[..., T], *args, **kwargs) -> T:
        """Run one domain operation through the executor."""
        self._move(ScenarioState.EXECUTING)
        return self._guarded(self.executor.step, name, operation, *args, **kwargs)

    def expect(self, what: str, actual: object, expected: object) -> None:
        """Assert an observed value against its fixture value."""
        self._move(ScenarioState.EXECUTING)
        self._guarded(self.executor.expect, what, actual, expected)

    # ---- failure & teardown ----

    def fail(self, error: BaseException) -> None:
        """Mark the scenario failed. Teardown still has to run."""
        if self.error is None:
            self.error = error
        logger.error(
            "[%s] scenario failed in %s: %s", self.name, self.state.name, error
        )
        if can_transition(self.state, ScenarioState.FAILED):
            self._move(ScenarioState.FAILED)

    def teardown(self) -> None:
        """Release everything in reverse acquisition order. Runs once."""
        if self.state in (ScenarioState.TEARING_DOWN, ScenarioState.DONE):
            return
        self._move(ScenarioState.TEARING_DOWN)
        logger.info(
            "[%s] tearing down: %s", self.name, ", ".join(self.releases.pending)
        )
        try:
            self.releases.unwind()
        finally:
            self._move(ScenarioState.DONE)

    # ---- internals ----

    def _move(self, target: ScenarioState) -> None:
        if not can_transition(self.state, target):
            raise InvalidTransitionError(self.name, self.state.name, target.name)
        if target is self.state:
            return
        logger.debug("[%s] %s -> %s", self.name, self.state.name, target.name)
        self.state = target
        self.history.append(target)

    def _guarded(self, fn: Callable[..., T], *args, **kwargs) -> T:
        try:
            return fn(*args, **kwargs)
        except Exception as e:
            self.fail(e)
            raise
