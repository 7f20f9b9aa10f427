"""Fake Google Cloud Storage server and the storage scenario.

The server is ``fsouza/fake-gcs-server`` running an in-memory backend. At
startup it loads ``/data/<bucket>/<object>`` from the bind-mounted seed
directory, so the packaged ``gcs-data`` tree provides ``sample-bucket`` with
``some_file.txt``.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from mockstack import config
from mockstack.clients.storage import (
    DEFAULT_VIRTUAL_HOST,
    close_client,
    delete_object,
    emulator_ready,
    list_objects,
    make_storage_client,
    object_exists,
    read_object,
    write_object,
)
from mockstack.domain.errors import ObjectNotFoundError
from mockstack.domain.models import ContainerSpec, Mount, RestartPolicy
from mockstack.interfaces.container_pool import ContainerPool
from mockstack.service_layer.readiness import RetryPolicy
from mockstack.service_layer.scenario import Scenario

logger = logging.getLogger(__name__)

IMAGE = "fsouza/fake-gcs-server"
PORT = "4443/tcp"
DATA_MOUNT = "/data"

BUCKET = "sample-bucket"
SEED_OBJECT = "some_file.txt"
NEW_OBJECT = "new_file.txt"
NEW_OBJECT_CONTENT_TYPE = "text/plain"
NEW_OBJECT_METADATA: Mapping[str, str] = {
    "x-goog-meta-foo": "foo",
    "x-goog-meta-bar": "bar",
}
NEW_OBJECT_CHUNKS = (b"abcde\n", b"f" * 4096 + b"\n")


def fake_gcs_spec(
    data_dir: Path,
    *,
    name: str = "gcs",
    virtual_host: str = DEFAULT_VIRTUAL_HOST,
    tag: str = "latest",
) -> ContainerSpec:
    """Container spec of the emulator serving ``data_dir`` as initial data."""
    return ContainerSpec(
        repository=IMAGE,
        name=name,
        tag=tag,
        exposed_ports=(PORT,),
        cmd=(
            "-backend",
            "memory",
            "-scheme",
            "http",
            "-port",
            PORT.split("/", 1)[0],
            "-public-host",
            virtual_host,
            "-external-url",
            f"http://{virtual_host}",
        ),
        mounts=(Mount(source=data_dir.resolve(), target=DATA_MOUNT, read_only=True),),
        restart_policy=RestartPolicy.never(),
        auto_remove=True,
    )


@dataclass(frozen=True)
class StorageReport:
    """What the storage scenario observed."""

    endpoint: str
    objects: list[str]
    seed_content: bytes
    bytes_written: int
    read_back: bytes
    deleted: bool


def _missing(client, bucket: str, name: str) -> bool:
    try:
        read_object(client, bucket, name)
    except ObjectNotFoundError:
        return True
    return False


def run_storage_scenario(
    pool: ContainerPool,
    *,
    data_dir: Path | None = None,
    policy: RetryPolicy | None = None,
) -> StorageReport:
    """Start the emulator, exercise the object API against it, tear down.

    Args:
        pool: Container pool to provision from.
        data_dir: Seed data directory; defaults to the packaged one.
        policy: Readiness retry policy.

    Raises:
        HarnessError: On provisioning, readiness or operation failure.
        ScenarioAssertionError: If an observed result differs from the
            expected one.
    """
    config.ensure_placeholder_credentials()
    data_dir = data_dir or config.gcs_data_dir()
    expected = b"".join(NEW_OBJECT_CHUNKS)

    with Scenario(pool, "storage", policy=policy) as scenario:
        server = scenario.provision(
            fake_gcs_spec(data_dir, name=f"gcs-{uuid.uuid4().hex[:8]}")
        )
        endpoint = f"http://{server.address(PORT)}"
        scenario.await_ready(lambda: emulator_ready(endpoint), "fake-gcs-server")
        client = scenario.connect(
            lambda: make_storage_client(endpoint), close_client, name="storage"
        )

        objects = scenario.execute("list objects", list_objects, client, BUCKET)
        scenario.expect(f"{SEED_OBJECT} listed", SEED_OBJECT in objects, True)
        seed_content = scenario.execute(
            "read seed object", read_object, client, BUCKET, SEED_OBJECT
        )

        written = scenario.execute(
            "write object",
            write_object,
            client,
            BUCKET,
            NEW_OBJECT,
            NEW_OBJECT_CHUNKS,
            content_type=NEW_OBJECT_CONTENT_TYPE,
            metadata=NEW_OBJECT_METADATA,
        )
        scenario.expect("bytes written", written, len(expected))
        read_back = scenario.execute(
            "read written object", read_object, client, BUCKET, NEW_OBJECT
        )
        scenario.expect("read back content", read_back, expected)

        scenario.execute("delete object", delete_object, client, BUCKET, NEW_OBJECT)
        scenario.expect(
            f"{NEW_OBJECT} exists after delete",
            scenario.execute(
                "check deletion", object_exists, client, BUCKET, NEW_OBJECT
            ),
            False,
        )
        deleted = scenario.execute(
            "read deleted object", _missing, client, BUCKET, NEW_OBJECT
        )
        scenario.expect("read after delete is not-found", deleted, True)

    logger.info("Storage scenario passed against %s", endpoint)
    return StorageReport(
        endpoint=endpoint,
        objects=objects,
        seed_content=seed_content,
        bytes_written=written,
        read_back=read_back,
        deleted=deleted,
    )
