"""Adapters (infrastructure) for mockstack.

Concrete container pools: one backed by the Docker Engine and one kept
entirely in memory for unit tests.

Dependency rule: may import `mockstack.domain` and `mockstack.interfaces`;
neither may import this package.
"""

from .docker_pool import DockerContainerPool
from .memory_pool import InMemoryContainerPool

__all__ = ["DockerContainerPool", "InMemoryContainerPool"]
