"""In-memory container pool.

This module provides a dependency-free `ContainerPool` meant for **tests**:
no container is ever started. Handles are fabricated with sequential ids and
host ports, every pool call is appended to an event journal, and failures can
be injected per container name, image or Dockerfile.

Key behaviors
-------------
- **Network ordering**: `remove_network()` raises `NetworkInUseError` while a
  live container created by this pool is attached, just like the real
  runtime refuses to remove a network with active endpoints.
- **Purge idempotency**: purging an unknown or already purged container is a
  no-op.
- **Journal**: `events` records `(action, name)` pairs in call order so tests
  can assert acquisition and release ordering.

Typical usage
-------------
    pool = InMemoryContainerPool()
    net = pool.create_network("mongo_network")
    db = pool.run(ContainerSpec("mongo", "mongodb", network=net,
                                exposed_ports=("27017/tcp",)))
    db.get_port("27017/tcp")  # 49152
    pool.purge(db)
    pool.remove_network(net)
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from pathlib import Path

from mockstack.domain.errors import (
    ImageBuildError,
    ImagePullError,
    NetworkError,
    NetworkInUseError,
    ProvisioningError,
    PurgeError,
)
from mockstack.domain.models import ContainerHandle, ContainerSpec, NetworkHandle
from mockstack.interfaces.container_pool import ContainerPool

__all__ = ["InMemoryContainerPool"]

FIRST_HOST_PORT = 49152


@dataclass
class _Record:
    handle: ContainerHandle
    spec: ContainerSpec


class InMemoryContainerPool(ContainerPool):  # pylint: disable=too-many-instance-attributes
    """Fake container pool that keeps all state in memory.

    Args:
        unavailable_images: Image references whose pull fails.
        failing_builds: Dockerfile paths whose build fails.
        failing_starts: Container names whose start fails.
        failing_purges: Container names whose purge fails.
        failing_networks: Network names whose creation fails.
    """

    def __init__(  # pylint: disable=too-many-arguments
        self,
        *,
        unavailable_images: set[str] | None = None,
        failing_builds: set[str] | None = None,
        failing_starts: set[str] | None = None,
        failing_purges: set[str] | None = None,
        failing_networks: set[str] | None = None,
    ) -> None:
        self.unavailable_images = set(unavailable_images or ())
        self.failing_builds = set(failing_builds or ())
        self.failing_starts = set(failing_starts or ())
        self.failing_purges = set(failing_purges or ())
        self.failing_networks = set(failing_networks or ())
        self.events: list[tuple[str, str]] = []
        self.built_images: list[str] = []
        self._containers: dict[str, _Record] = {}
        self._networks: dict[str, NetworkHandle] = {}
        self._ids = itertools.count(1)
        self._ports = itertools.count(FIRST_HOST_PORT)

    # ---- ContainerPool ----

    def run(self, spec: ContainerSpec) -> ContainerHandle:
        if spec.image in self.unavailable_images:
            raise ImagePullError(spec.image, "manifest unknown")
        return self._start(spec)

    def build_and_run(self, dockerfile: Path, spec: ContainerSpec) -> ContainerHandle:
        if str(dockerfile) in self.failing_builds:
            raise ImageBuildError(str(dockerfile), "build step returned non-zero")
        self.events.append(("build", spec.image))
        self.built_images.append(spec.image)
        return self._start(spec)

    def purge(self, handle: ContainerHandle) -> None:
        if handle.name in self.failing_purges:
            raise PurgeError(handle.name, "removal refused")
        if self._containers.pop(handle.id, None) is None:
            return
        self.events.append(("purge", handle.name))

    def create_network(self, name: str) -> NetworkHandle:
        if name in self.failing_networks:
            raise NetworkError(name, "could not create network")
        if any(net.name == name for net in self._networks.values()):
            raise NetworkError(name, "network with name already exists")
        handle = NetworkHandle(id=f"net-{next(self._ids)}", name=name)
        self._networks[handle.id] = handle
        self.events.append(("create_network", name))
        return handle

    def remove_network(self, handle: NetworkHandle) -> None:
        if handle.id not in self._networks:
            raise NetworkError(handle.name, "no such network")
        if attached := self.attached(handle):
            raise NetworkInUseError(handle.name, attached)
        del self._networks[handle.id]
        self.events.append(("remove_network", handle.name))

    def attached(self, handle: NetworkHandle) -> list[str]:
        return [
            record.handle.name
            for record in self._containers.values()
            if handle.name in record.handle.networks
        ]

    # ---- inspection helpers ----

    @property
    def running(self) -> list[str]:
        """Names of containers that have not been purged, in start order."""
        return [record.handle.name for record in self._containers.values()]

    @property
    def networks(self) -> list[str]:
        """Names of networks that have not been removed."""
        return [net.name for net in self._networks.values()]

    def spec_of(self, handle: ContainerHandle) -> ContainerSpec:
        """Return the spec a live container was started from."""
        return self._containers[handle.id].spec

    # ---- internals ----

    def _start(self, spec: ContainerSpec) -> ContainerHandle:
        if spec.name in self.failing_starts:
            raise ProvisioningError(spec.name, "container exited immediately")
        if any(r.handle.name == spec.name for r in self._containers.values()):
            raise ProvisioningError(spec.name, "container name already in use")
        networks: tuple[str, ...] = ()
        if spec.network is not None:
            if spec.network.id not in self._networks:
                raise ProvisioningError(
                    spec.name, f"network {spec.network.name} not found"
                )
            networks = (spec.network.name,)
        ports = {
            port: spec.port_bindings.get(port) or next(self._ports)
            for port in spec.exposed_ports
        }
        handle = ContainerHandle(
            id=f"ctr-{next(self._ids)}",
            name=spec.name,
            ports=ports,
            networks=networks,
        )
        self._containers[handle.id] = _Record(handle=handle, spec=spec)
        self.events.append(("run", spec.name))
        return handle
