"""Service layer for mockstack.

Implements the orchestration use-cases: readiness gating, ordered teardown,
scenario execution and the scenario lifecycle itself.

Dependency rule: may import `mockstack.domain` and `mockstack.interfaces`,
but not `mockstack.adapters` or `mockstack.entrypoints`. Pools are injected.
"""
