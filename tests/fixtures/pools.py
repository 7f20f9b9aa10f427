"""In-memory pool and fast readiness policies for unit tests."""

from __future__ import annotations

import pytest

from mockstack.adapters.memory_pool import InMemoryContainerPool
from mockstack.service_layer.readiness import ReadinessGate, RetryPolicy


@pytest.fixture
def memory_pool() -> InMemoryContainerPool:
    """A fresh in-memory container pool."""
    return InMemoryContainerPool()


@pytest.fixture
def fast_policy() -> RetryPolicy:
    """Short budget without backoff delays."""
    return RetryPolicy(
        max_elapsed=0.5, initial_interval=0.0, multiplier=1.0, max_interval=0.0
    )


@pytest.fixture
def instant_gate(fast_policy: RetryPolicy) -> ReadinessGate:
    """Readiness gate that never actually sleeps."""
    return ReadinessGate(fast_policy, sleep=lambda _: None)
