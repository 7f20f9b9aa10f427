"""Container pool interface.

A pool starts containers from declarative specs and hands back resolved
handles, manages the virtual networks that join them, and removes both at
teardown. One pool is owned by one test run and injected into each scenario;
there is no process-wide pool.
"""

from __future__ import annotations

import abc
from pathlib import Path

from mockstack.domain.models import ContainerHandle, ContainerSpec, NetworkHandle


class ContainerPool(abc.ABC):
    """Abstract base class for container runtimes."""

    # --- Containers ---

    @abc.abstractmethod
    def run(self, spec: ContainerSpec) -> ContainerHandle:
        """Pull the image if needed, then create and start a container.

        Every call creates a new container; existing containers are never
        reused.

        Args:
            spec: Declarative container description.

        Returns:
            ContainerHandle: Handle with the resolved host port mapping.

        Raises:
            ImagePullError: If the image cannot be obtained.
            ProvisioningError: If the container cannot be created or started.
        """

    @abc.abstractmethod
    def build_and_run(self, dockerfile: Path, spec: ContainerSpec) -> ContainerHandle:
        """Build an image from a Dockerfile, then run it.

        The Dockerfile's parent directory is the build context. The built
        image is tagged ``spec.repository:spec.tag``.

        Raises:
            ImageBuildError: If the image cannot be built.
            ProvisioningError: If the container cannot be created or started.
        """

    @abc.abstractmethod
    def purge(self, handle: ContainerHandle) -> None:
        """Force-remove a container and its anonymous volumes.

        A container that is already gone counts as purged.

        Raises:
            PurgeError: If the runtime refuses to remove the container.
        """

    # --- Networks ---

    @abc.abstractmethod
    def create_network(self, name: str) -> NetworkHandle:
        """Create an isolated network.

        Raises:
            NetworkError: If the network cannot be created.
        """

    @abc.abstractmethod
    def remove_network(self, handle: NetworkHandle) -> None:
        """Remove a network.

        Raises:
            NetworkInUseError: If containers created by this pool are still
                attached to the network.
            NetworkError: If the runtime refuses to remove the network.
        """

    @abc.abstractmethod
    def attached(self, handle: NetworkHandle) -> list[str]:
        """Return the names of live containers attached to ``handle``."""
