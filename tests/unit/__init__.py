"""Unit tests.

Nothing here talks to a Docker Engine, a storage emulator or a database:
orchestration runs on ``InMemoryContainerPool`` and SDK clients are replaced
with mocks or small fakes. Readiness tests use sub-second budgets.
"""
