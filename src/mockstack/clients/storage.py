"""Cloud Storage client wiring for the fake GCS server.

The emulator advertises itself under a virtual host (``gcs:4443``) that only
resolves inside the container network. Requests sent from the test process go
to the published local port instead, through `HostRewriteAdapter`:

- every outgoing request carries ``Host: gcs:4443`` so the emulator routes it
  as if it had been addressed by its public name;
- every ``Location`` response header (resumable upload sessions, redirects)
  is rewritten from the virtual host back to the local address before the
  client library or `requests` follows it.

The client is built with anonymous credentials; the emulator performs no
authentication.

Storage operations raise `ObjectNotFoundError` for missing objects and
`OperationError` for other API failures.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from urllib.parse import urlparse

import requests
from google.api_core.client_options import ClientOptions
from google.api_core.exceptions import GoogleAPICallError, NotFound
from google.auth.credentials import AnonymousCredentials
from google.cloud import storage
from requests.adapters import HTTPAdapter

from mockstack.domain.errors import ObjectNotFoundError, OperationError

logger = logging.getLogger(__name__)

DEFAULT_PROJECT = "test"
DEFAULT_VIRTUAL_HOST = "gcs:4443"


class HostRewriteAdapter(HTTPAdapter):
    """Transport adapter mapping the emulator's virtual host to a local one.

    Args:
        virtual_host: ``host:port`` the emulator believes it is served on.
        local_host: ``host:port`` reachable from the test process.
    """

    def __init__(self, virtual_host: str, local_host: str, **kwargs) -> None:
        super().__init__(**kwargs)
        self.virtual_host = virtual_host
        self.local_host = local_host

    def send(self, request, **kwargs):  # pylint: disable=arguments-differ
        request.headers["Host"] = self.virtual_host
        response = super().send(request, **kwargs)
        if location := response.headers.get("Location"):
            response.headers["Location"] = self.rewrite(location)
        return response

    def rewrite(self, url: str) -> str:
        """Replace the first occurrence of the virtual host in ``url``."""
        return url.replace(self.virtual_host, self.local_host, 1)


def emulator_session(
    endpoint: str, virtual_host: str = DEFAULT_VIRTUAL_HOST
) -> requests.Session:
    """Return a `requests` session that talks to the emulator at ``endpoint``."""
    adapter = HostRewriteAdapter(virtual_host, urlparse(endpoint).netloc)
    session = requests.Session()
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


def emulator_ready(
    endpoint: str, virtual_host: str = DEFAULT_VIRTUAL_HOST, timeout: float = 2.0
) -> bool:
    """Readiness probe: True once the emulator's JSON API answers."""
    with emulator_session(endpoint, virtual_host) as session:
        response = session.get(f"{endpoint}/storage/v1/b", timeout=timeout)
    return response.ok


def make_storage_client(
    endpoint: str,
    *,
    project: str = DEFAULT_PROJECT,
    virtual_host: str = DEFAULT_VIRTUAL_HOST,
) -> storage.Client:
    """Build a storage client bound to the emulator at ``endpoint``.

    Args:
        endpoint: Base URL of the published emulator port, e.g.
            ``http://localhost:49153``.
        project: Project id reported to the client library.
        virtual_host: Public host the emulator was started with.
    """
    logger.debug("Storage client endpoint: %s", endpoint)
    return storage.Client(
        project=project,
        credentials=AnonymousCredentials(),
        client_options=ClientOptions(api_endpoint=endpoint),
        _http=emulator_session(endpoint, virtual_host),
    )


def close_client(client: storage.Client) -> None:
    """Close the client's HTTP session."""
    client.close()


# --- Operations ---


def list_objects(client: storage.Client, bucket: str) -> list[str]:
    """Return the names of all objects in ``bucket``."""
    try:
        return [blob.name for blob in client.list_blobs(bucket)]
    except NotFound as e:
        raise OperationError("list", f"bucket {bucket} not found") from e
    except GoogleAPICallError as e:
        raise OperationError("list", str(e)) from e


def read_object(client: storage.Client, bucket: str, name: str) -> bytes:
    """Read an object through a read stream.

    Raises:
        ObjectNotFoundError: If the object does not exist.
    """
    blob = client.bucket(bucket).blob(name)
    try:
        with blob.open("rb") as reader:
            return reader.read()
    except NotFound as e:
        raise ObjectNotFoundError(bucket, name) from e
    except GoogleAPICallError as e:
        raise OperationError("read", str(e)) from e


def write_object(  # pylint: disable=too-many-arguments
    client: storage.Client,
    bucket: str,
    name: str,
    data: bytes | Iterable[bytes],
    *,
    content_type: str = "application/octet-stream",
    metadata: Mapping[str, str] | None = None,
) -> int:
    """Write an object through a write stream.

    Args:
        client: Storage client.
        bucket: Bucket name.
        name: Object name.
        data: Object content, whole or as successive chunks.
        content_type: MIME type stored with the object.
        metadata: Custom metadata stored with the object.

    Returns:
        int: Number of bytes written.
    """
    blob = client.bucket(bucket).blob(name)
    if metadata:
        blob.metadata = dict(metadata)
    chunks = [data] if isinstance(data, bytes) else data
    written = 0
    try:
        with blob.open("wb", content_type=content_type) as writer:
            for chunk in chunks:
                written += writer.write(chunk)
    except GoogleAPICallError as e:
        raise OperationError("write", f"{bucket}/{name}: {e}") from e
    logger.debug("Wrote %d bytes to %s/%s", written, bucket, name)
    return written


def delete_object(client: storage.Client, bucket: str, name: str) -> None:
    """Delete an object.

    Raises:
        ObjectNotFoundError: If the object does not exist.
    """
    try:
        client.bucket(bucket).blob(name).delete()
    except NotFound as e:
        raise ObjectNotFoundError(bucket, name, "delete") from e
    except GoogleAPICallError as e:
        raise OperationError("delete", str(e)) from e


def object_exists(client: storage.Client, bucket: str, name: str) -> bool:
    """Return True if the object exists."""
    try:
        return client.bucket(bucket).blob(name).exists()
    except GoogleAPICallError as e:
        raise OperationError("exists", str(e)) from e
