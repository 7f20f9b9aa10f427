"""Docker Engine backed container pool.

Wraps the `docker` SDK behind the `ContainerPool` contract:

- `run()` pulls the image when it is not present locally, creates and starts
  the container and resolves the host ports it was published on. A container
  whose start fails is removed again before the error is raised.
- `build_and_run()` builds from a Dockerfile (its directory is the build
  context) and runs the result.
- `purge()` force-removes the container together with its anonymous volumes.
- Networks are plain bridge networks. The pool remembers which of its own
  containers joined each network and refuses to remove a network before they
  are purged.

All containers and networks carry a ``mockstack.session`` label whose value is
unique to the pool, so leftovers from an interrupted run can be found with
``docker ps -a --filter label=mockstack.session``.

Runtime failures are mapped to the infrastructure errors of
`mockstack.domain.errors`; none of them is retried here.
"""

from __future__ import annotations

import logging
import uuid
from pathlib import Path
from typing import TYPE_CHECKING, Any
from urllib.parse import urlparse

import docker
from docker.errors import APIError, BuildError, DockerException, ImageNotFound, NotFound
from docker.types import Mount as DockerMount

from mockstack.domain.errors import (
    DockerUnavailableError,
    ImageBuildError,
    ImagePullError,
    NetworkError,
    NetworkInUseError,
    ProvisioningError,
    PurgeError,
)
from mockstack.domain.models import ContainerHandle, ContainerSpec, NetworkHandle
from mockstack.interfaces.container_pool import ContainerPool

if TYPE_CHECKING:
    from docker import DockerClient
    from docker.models.containers import Container

logger = logging.getLogger(__name__)

__all__ = ["DockerContainerPool", "SESSION_LABEL"]

SESSION_LABEL = "mockstack.session"


def published_host(base_url: str | None) -> str:
    """Return the host on which published container ports are reachable.

    Local sockets (unix/npipe) publish on localhost; a remote ``tcp://``
    engine publishes on its own address.
    """
    if not base_url:
        return "localhost"
    parsed = urlparse(base_url)
    if parsed.scheme in {"tcp", "http", "https"} and parsed.hostname:
        return parsed.hostname
    return "localhost"


class DockerContainerPool(ContainerPool):
    """Container pool backed by a Docker Engine.

    Args:
        client: A connected ``docker.DockerClient``.
        host: Host on which published ports are reachable.
        session: Label value identifying this pool's resources. Generated when
            omitted.
    """

    def __init__(
        self,
        client: DockerClient,
        *,
        host: str = "localhost",
        session: str | None = None,
    ) -> None:
        self.client = client
        self.host = host
        self.session = session or uuid.uuid4().hex[:12]
        self._attachments: dict[str, set[str]] = {}

    @classmethod
    def from_env(cls, base_url: str | None = None) -> DockerContainerPool:
        """Connect to the Docker Engine and verify it answers.

        Args:
            base_url: Engine URL (e.g. ``unix:///var/run/docker.sock``). When
                omitted, ``DOCKER_HOST`` and friends are honoured.

        Raises:
            DockerUnavailableError: If the engine cannot be reached.
        """
        try:
            client = (
                docker.DockerClient(base_url=base_url)
                if base_url
                else docker.from_env()
            )
            client.ping()
        except DockerException as e:
            raise DockerUnavailableError(base_url, str(e)) from e
        host = published_host(base_url or client.api.base_url)
        pool = cls(client, host=host)
        logger.debug("Connected to docker at %s (session %s)", host, pool.session)
        return pool

    def close(self) -> None:
        """Close the underlying SDK client."""
        self.client.close()

    # ---- containers ----

    def run(self, spec: ContainerSpec) -> ContainerHandle:
        self._ensure_image(spec)
        return self._start(spec)

    def build_and_run(self, dockerfile: Path, spec: ContainerSpec) -> ContainerHandle:
        dockerfile = Path(dockerfile)
        if not dockerfile.is_file():
            raise ImageBuildError(str(dockerfile), "Dockerfile not found")
        logger.info("Building image %s from %s", spec.image, dockerfile)
        try:
            self.client.images.build(
                path=str(dockerfile.parent),
                dockerfile=dockerfile.name,
                tag=spec.image,
                rm=True,
                forcerm=True,
                labels={SESSION_LABEL: self.session},
            )
        except BuildError as e:
            raise ImageBuildError(str(dockerfile), e.msg) from e
        except APIError as e:
            raise ImageBuildError(str(dockerfile), _explain(e)) from e
        return self._start(spec)

    def purge(self, handle: ContainerHandle) -> None:
        try:
            container = self.client.containers.get(handle.id)
            container.remove(force=True, v=True)
        except NotFound:
            logger.debug("Container %s already gone", handle.name)
        except APIError as e:
            if "already in progress" not in _explain(e):
                raise PurgeError(handle.name, _explain(e)) from e
            logger.debug("Container %s is already being removed", handle.name)
        for members in self._attachments.values():
            members.discard(handle.id)
        logger.info("Purged container %s", handle.name)

    # ---- networks ----

    def create_network(self, name: str) -> NetworkHandle:
        try:
            network = self.client.networks.create(
                name, driver="bridge", labels={SESSION_LABEL: self.session}
            )
        except APIError as e:
            raise NetworkError(name, _explain(e)) from e
        self._attachments[network.id] = set()
        logger.info("Created network %s", name)
        return NetworkHandle(id=network.id, name=name)

    def remove_network(self, handle: NetworkHandle) -> None:
        if attached := self.attached(handle):
            raise NetworkInUseError(handle.name, attached)
        try:
            self.client.networks.get(handle.id).remove()
        except NotFound:
            logger.debug("Network %s already gone", handle.name)
        except APIError as e:
            raise NetworkError(handle.name, _explain(e)) from e
        self._attachments.pop(handle.id, None)
        logger.info("Removed network %s", handle.name)

    def attached(self, handle: NetworkHandle) -> list[str]:
        members = self._attachments.get(handle.id, set())
        names: list[str] = []
        for container_id in sorted(members):
            try:
                names.append(self.client.containers.get(container_id).name)
            except NotFound:
                continue
        return names

    # ---- internals ----

    def _ensure_image(self, spec: ContainerSpec) -> None:
        try:
            self.client.images.get(spec.image)
            return
        except ImageNotFound:
            pass
        except APIError as e:
            raise ImagePullError(spec.image, _explain(e)) from e
        logger.info("Pulling image %s", spec.image)
        try:
            self.client.images.pull(spec.repository, tag=spec.tag)
        except APIError as e:
            raise ImagePullError(spec.image, _explain(e)) from e

    def _start(self, spec: ContainerSpec) -> ContainerHandle:
        kwargs = self._create_kwargs(spec)
        try:
            container: Container = self.client.containers.create(spec.image, **kwargs)
        except ImageNotFound as e:
            raise ImagePullError(spec.image, _explain(e)) from e
        except APIError as e:
            raise ProvisioningError(spec.name, _explain(e)) from e
        try:
            container.start()
        except APIError as e:
            # a created container survives a failed start
            self._discard(container)
            raise ProvisioningError(spec.name, _explain(e)) from e
        try:
            container.reload()
        except NotFound as e:
            # auto-removed containers vanish as soon as they exit
            raise ProvisioningError(spec.name, "container exited during startup") from e
        except APIError as e:
            self._discard(container)
            raise ProvisioningError(spec.name, _explain(e)) from e

        handle = ContainerHandle(
            id=container.id,
            name=spec.name,
            ports=_resolve_ports(container.ports, spec.exposed_ports),
            host=self.host,
            networks=(spec.network.name,) if spec.network else (),
        )
        if spec.network is not None:
            self._attachments.setdefault(spec.network.id, set()).add(container.id)
        missing = [port for port in spec.exposed_ports if port not in handle.ports]
        if missing:
            logger.warning(
                "Container %s did not publish %s", spec.name, ", ".join(missing)
            )
        logger.info(
            "Started container %s (%s) ports=%s",
            spec.name,
            spec.image,
            dict(handle.ports),
        )
        return handle

    def _discard(self, container: Container) -> None:
        try:
            container.remove(force=True, v=True)
        except APIError as e:
            logger.error(
                "Could not remove half-started container %s: %s",
                container.name,
                _explain(e),
            )

    def _create_kwargs(self, spec: ContainerSpec) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "name": spec.name,
            "environment": dict(spec.env),
            "ports": {
                port: spec.port_bindings.get(port) for port in spec.exposed_ports
            },
            "mounts": [
                DockerMount(
                    target=m.target,
                    source=str(m.source),
                    type=m.type,
                    read_only=m.read_only,
                )
                for m in spec.mounts
            ],
            "restart_policy": spec.restart_policy.as_docker(),
            "auto_remove": spec.auto_remove,
            "labels": {**spec.labels, SESSION_LABEL: self.session},
        }
        if spec.cmd:
            kwargs["command"] = list(spec.cmd)
        if spec.network is not None:
            kwargs["network"] = spec.network.name
        return kwargs


def _resolve_ports(
    published: dict[str, list[dict[str, str]] | None] | None,
    exposed: tuple[str, ...],
) -> dict[str, int]:
    """Pick the first host binding of each exposed port."""
    ports: dict[str, int] = {}
    for port in exposed:
        bindings = (published or {}).get(port) or []
        for binding in bindings:
            if host_port := binding.get("HostPort"):
                ports[port] = int(host_port)
                break
    return ports


def _explain(error: APIError) -> str:
    return str(getattr(error, "explanation", None) or error)
