"""Scenario lifecycle states and their allowed transitions.

    INIT -> PROVISIONING -> AWAITING_READY -> EXECUTING -> TEARING_DOWN -> DONE

FAILED is reachable from PROVISIONING, AWAITING_READY and EXECUTING and is
absorbing except for teardown: a failed scenario still moves through
TEARING_DOWN to DONE. A dependent container (e.g. a data seeder) may be
provisioned once its primary is ready, so AWAITING_READY may return to
PROVISIONING.
"""

from __future__ import annotations

from enum import Enum


class ScenarioState(Enum):
    """States of a single scenario run."""

    INIT = "init"
    PROVISIONING = "provisioning"
    AWAITING_READY = "awaiting_ready"
    EXECUTING = "executing"
    FAILED = "failed"
    TEARING_DOWN = "tearing_down"
    DONE = "done"


TRANSITIONS: dict[ScenarioState, frozenset[ScenarioState]] = {
    ScenarioState.INIT: frozenset(
        {ScenarioState.PROVISIONING, ScenarioState.TEARING_DOWN}
    ),
    ScenarioState.PROVISIONING: frozenset(
        {
            ScenarioState.PROVISIONING,
            ScenarioState.AWAITING_READY,
            ScenarioState.FAILED,
            ScenarioState.TEARING_DOWN,
        }
    ),
    ScenarioState.AWAITING_READY: frozenset(
        {
            ScenarioState.AWAITING_READY,
            ScenarioState.PROVISIONING,
            ScenarioState.EXECUTING,
            ScenarioState.FAILED,
            ScenarioState.TEARING_DOWN,
        }
    ),
    ScenarioState.EXECUTING: frozenset(
        {
            ScenarioState.EXECUTING,
            ScenarioState.FAILED,
            ScenarioState.TEARING_DOWN,
        }
    ),
    ScenarioState.FAILED: frozenset({ScenarioState.TEARING_DOWN}),
    ScenarioState.TEARING_DOWN: frozenset({ScenarioState.DONE}),
    ScenarioState.DONE: frozenset(),
}


def can_transition(current: ScenarioState, target: ScenarioState) -> bool:
    """Return True if ``current -> target`` is an allowed transition."""
    return target in TRANSITIONS[current]
