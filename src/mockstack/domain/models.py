"""Value objects shared by the orchestrator, the pools and the services."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

RESTART_POLICY_NAMES = frozenset({"no", "on-failure", "always", "unless-stopped"})


@dataclass(frozen=True)
class RestartPolicy:
    """Restart policy applied by the container runtime.

    Attributes:
        name: One of ``no``, ``on-failure``, ``always``, ``unless-stopped``.
        maximum_retry_count: Retry ceiling; only meaningful for ``on-failure``.
    """

    name: str = "no"
    maximum_retry_count: int = 0

    def __post_init__(self) -> None:
        if self.name not in RESTART_POLICY_NAMES:
            raise ValueError(f"Unknown restart policy: {self.name!r}")
        if self.maximum_retry_count < 0:
            raise ValueError("maximum_retry_count must be >= 0")
        if self.maximum_retry_count and self.name != "on-failure":
            raise ValueError("maximum_retry_count only applies to 'on-failure'")

    @classmethod
    def never(cls) -> RestartPolicy:
        """Never restart the container."""
        return cls("no")

    @classmethod
    def on_failure(cls, maximum_retry_count: int) -> RestartPolicy:
        """Restart on non-zero exit, at most ``maximum_retry_count`` times."""
        return cls("on-failure", maximum_retry_count)

    def as_docker(self) -> dict[str, Any]:
        """Render as the mapping accepted by the Docker Engine API."""
        return {"Name": self.name, "MaximumRetryCount": self.maximum_retry_count}


@dataclass(frozen=True)
class Mount:
    """A host path mounted into a container."""

    source: Path
    target: str
    type: str = "bind"
    read_only: bool = False


@dataclass(frozen=True)
class NetworkHandle:
    """An isolated virtual network joining containers of one scenario."""

    id: str
    name: str


@dataclass(frozen=True)
class ContainerSpec:  # pylint: disable=too-many-instance-attributes
    """Declarative description of a container to provision.

    Attributes:
        repository: Image repository (e.g. ``"mongo"``). For built images this
            becomes the tag repository of the build result.
        name: Container name; also its hostname on a shared network.
        tag: Image tag.
        exposed_ports: Container ports to publish, as ``"<port>/<proto>"``.
        port_bindings: Optional fixed host ports; ports not listed here are
            published on a random free host port.
        env: Environment variables.
        cmd: Command override.
        mounts: Host mounts.
        restart_policy: Runtime restart policy.
        auto_remove: Let the runtime delete the container when it stops.
        network: Network to attach the container to.
        labels: Extra container labels.
    """

    repository: str
    name: str
    tag: str = "latest"
    exposed_ports: tuple[str, ...] = ()
    port_bindings: Mapping[str, int] = field(default_factory=dict)
    env: Mapping[str, str] = field(default_factory=dict)
    cmd: tuple[str, ...] = ()
    mounts: tuple[Mount, ...] = ()
    restart_policy: RestartPolicy = field(default_factory=RestartPolicy.never)
    auto_remove: bool = False
    network: NetworkHandle | None = None
    labels: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("A container spec needs a name")
        if self.auto_remove and self.restart_policy.name != "no":
            raise ValueError(
                f"Container {self.name} cannot auto-remove with restart policy "
                f"'{self.restart_policy.name}'"
            )
        for port in self.port_bindings:
            if port not in self.exposed_ports:
                raise ValueError(f"Port binding {port} is not an exposed port")

    @property
    def image(self) -> str:
        """Full image reference, ``repository:tag``."""
        return f"{self.repository}:{self.tag}"


@dataclass(frozen=True)
class ContainerHandle:
    """A running container, as resolved by the pool.

    Attributes:
        id: Runtime identifier.
        name: Container name.
        ports: Container port (``"4443/tcp"``) to published host port.
        host: Host on which published ports are reachable.
        networks: Names of the networks the container is attached to.
    """

    id: str
    name: str
    ports: Mapping[str, int] = field(default_factory=dict)
    host: str = "localhost"
    networks: tuple[str, ...] = ()

    def get_port(self, port: str) -> int:
        """Return the host port published for ``port``.

        Raises:
            KeyError: If the port was not exposed.
        """
        try:
            return self.ports[port]
        except KeyError as e:
            raise KeyError(f"Container {self.name} does not expose {port}") from e

    def address(self, port: str) -> str:
        """Return ``host:port`` for reaching ``port`` from the test process."""
        return f"{self.host}:{self.get_port(port)}"


@dataclass(frozen=True)
class FixtureRecord:
    """Expected seeded data used for assertions.

    Example:
        FixtureRecord("restaurants", "restaurant_id", "40356649",
                      "name", "Regina Caterers")
    """

    collection: str
    key_field: str
    key: object
    field: str
    expected: object
