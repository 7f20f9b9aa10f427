"""Entrypoints (driving adapters) for mockstack.

Contains inbound interfaces that *drive* the application (currently the CLI).
Parses input and delegates to the service layer and services.

Dependency rule: may import `mockstack.service_layer`, `mockstack.services`
and `mockstack.adapters`.
"""
