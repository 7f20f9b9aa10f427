"""Domain layer for mockstack.

Contains the value types of the orchestrator: declarative container specs,
runtime handles, fixture records, the scenario state machine and the error
taxonomy. This package is deliberately technology-agnostic.

Dependency rule: do not import from `mockstack.adapters`, `mockstack.clients`
or `mockstack.entrypoints`.
"""
