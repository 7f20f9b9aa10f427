"""Interfaces (application boundary) for mockstack.

Defines the contracts the service layer depends on, most importantly the
container pool. Concrete runtimes live in `mockstack.adapters`.

Dependency rule: may import `mockstack.domain` only.
"""

from .container_pool import ContainerPool

__all__ = ["ContainerPool"]
