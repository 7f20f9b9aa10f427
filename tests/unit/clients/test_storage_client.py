"""Unit tests for mockstack.clients.storage.

The transport adapter is tested against a stubbed ``HTTPAdapter.send``; the
object operations against a mocked ``storage.Client``.
"""

from types import SimpleNamespace
from unittest import mock

import pytest
import requests
from google.api_core.exceptions import InternalServerError, NotFound
from requests.adapters import HTTPAdapter

from mockstack.clients import storage as storage_client
from mockstack.clients.storage import (
    HostRewriteAdapter,
    delete_object,
    emulator_ready,
    emulator_session,
    list_objects,
    make_storage_client,
    object_exists,
    read_object,
    write_object,
)
from mockstack.domain.errors import ObjectNotFoundError, OperationError

# pylint: disable=redefined-outer-name

ENDPOINT = "http://localhost:49153"


def make_response(status: int = 200, location: str | None = None):
    response = requests.Response()
    response.status_code = status
    response._content = b"{}"  # pylint: disable=protected-access
    if location is not None:
        response.headers["Location"] = location
    return response


@pytest.fixture
def base_send(monkeypatch):
    send = mock.MagicMock(return_value=make_response())
    monkeypatch.setattr(HTTPAdapter, "send", send)
    return send


class TestHostRewriteAdapter:
    def test_sets_virtual_host_header(self, base_send):
        adapter = HostRewriteAdapter("gcs:4443", "localhost:49153")
        request = requests.Request("GET", f"{ENDPOINT}/storage/v1/b").prepare()
        adapter.send(request, timeout=1)
        sent = base_send.call_args.args[0]
        assert sent.headers["Host"] == "gcs:4443"
        assert sent.url == f"{ENDPOINT}/storage/v1/b"

    def test_rewrites_location(self, base_send):
        base_send.return_value = make_response(
            200,
            "http://gcs:4443/upload/storage/v1/b/sample-bucket/o"
            "?uploadType=resumable&upload_id=42",
        )
        adapter = HostRewriteAdapter("gcs:4443", "localhost:49153")
        request = requests.Request("POST", f"{ENDPOINT}/upload").prepare()
        response = adapter.send(request)
        assert response.headers["Location"] == (
            "http://localhost:49153/upload/storage/v1/b/sample-bucket/o"
            "?uploadType=resumable&upload_id=42"
        )

    def test_leaves_foreign_locations_alone(self, base_send):
        base_send.return_value = make_response(302, "http://example.org/x")
        adapter = HostRewriteAdapter("gcs:4443", "localhost:49153")
        response = adapter.send(requests.Request("GET", ENDPOINT).prepare())
        assert response.headers["Location"] == "http://example.org/x"

    def test_no_location(self, base_send):
        adapter = HostRewriteAdapter("gcs:4443", "localhost:49153")
        response = adapter.send(requests.Request("GET", ENDPOINT).prepare())
        assert "Location" not in response.headers


def test_emulator_session_mounts_adapter():
    session = emulator_session(ENDPOINT)
    adapter = session.get_adapter(f"{ENDPOINT}/storage/v1/b")
    assert isinstance(adapter, HostRewriteAdapter)
    assert adapter.virtual_host == "gcs:4443"
    assert adapter.local_host == "localhost:49153"


@pytest.mark.parametrize("status, expected", [(200, True), (503, False)])
def test_emulator_ready(base_send, status, expected):
    base_send.return_value = make_response(status)
    assert emulator_ready(ENDPOINT) is expected


def test_emulator_ready_propagates_connection_errors(base_send):
    base_send.side_effect = requests.ConnectionError("refused")
    with pytest.raises(requests.ConnectionError):
        emulator_ready(ENDPOINT)


def test_make_storage_client():
    client = make_storage_client(ENDPOINT)
    try:
        assert client.project == "test"
        connection = client._connection  # pylint: disable=protected-access
        assert connection.API_BASE_URL == ENDPOINT
        assert isinstance(
            client._http.get_adapter(ENDPOINT),  # pylint: disable=protected-access
            HostRewriteAdapter,
        )
    finally:
        storage_client.close_client(client)


@pytest.fixture
def client():
    return mock.MagicMock(name="storage.Client")


def blob_of(client):
    return client.bucket.return_value.blob.return_value


class TestOperations:
    def test_list_objects(self, client):
        client.list_blobs.return_value = [
            SimpleNamespace(name="some_file.txt"),
            SimpleNamespace(name="other.txt"),
        ]
        assert list_objects(client, "sample-bucket") == ["some_file.txt", "other.txt"]
        client.list_blobs.assert_called_once_with("sample-bucket")

    def test_list_missing_bucket(self, client):
        client.list_blobs.side_effect = NotFound("no bucket")
        with pytest.raises(OperationError, match="bucket nope not found"):
            list_objects(client, "nope")

    def test_read_object(self, client):
        reader = blob_of(client).open.return_value.__enter__.return_value
        reader.read.return_value = b"hello\n"
        assert read_object(client, "sample-bucket", "some_file.txt") == b"hello\n"
        client.bucket.assert_called_once_with("sample-bucket")
        client.bucket.return_value.blob.assert_called_once_with("some_file.txt")
        blob_of(client).open.assert_called_once_with("rb")

    def test_read_missing_object(self, client):
        blob_of(client).open.side_effect = NotFound("No such object")
        with pytest.raises(ObjectNotFoundError) as excinfo:
            read_object(client, "sample-bucket", "new_file.txt")
        assert excinfo.value.bucket == "sample-bucket"
        assert excinfo.value.name == "new_file.txt"

    def test_read_server_error(self, client):
        blob_of(client).open.side_effect = InternalServerError("boom")
        with pytest.raises(OperationError):
            read_object(client, "sample-bucket", "some_file.txt")

    def test_write_object_in_chunks(self, client):
        writer = blob_of(client).open.return_value.__enter__.return_value
        writer.write.side_effect = len
        chunks = (b"abcde\n", b"f" * 4096 + b"\n")

        written = write_object(
            client,
            "sample-bucket",
            "new_file.txt",
            chunks,
            content_type="text/plain",
            metadata={"x-goog-meta-foo": "foo", "x-goog-meta-bar": "bar"},
        )

        assert written == 6 + 4097
        assert [c.args[0] for c in writer.write.call_args_list] == list(chunks)
        blob_of(client).open.assert_called_once_with("wb", content_type="text/plain")
        assert blob_of(client).metadata == {
            "x-goog-meta-foo": "foo",
            "x-goog-meta-bar": "bar",
        }

    def test_write_bytes(self, client):
        writer = blob_of(client).open.return_value.__enter__.return_value
        writer.write.side_effect = len
        assert write_object(client, "b", "o", b"payload") == 7
        writer.write.assert_called_once_with(b"payload")

    def test_write_failure(self, client):
        blob_of(client).open.side_effect = InternalServerError("boom")
        with pytest.raises(OperationError, match="b/o"):
            write_object(client, "b", "o", b"x")

    def test_delete_object(self, client):
        delete_object(client, "sample-bucket", "new_file.txt")
        blob_of(client).delete.assert_called_once_with()

    def test_delete_missing_object(self, client):
        blob_of(client).delete.side_effect = NotFound("No such object")
        with pytest.raises(ObjectNotFoundError) as excinfo:
            delete_object(client, "sample-bucket", "new_file.txt")
        assert excinfo.value.operation == "delete"

    @pytest.mark.parametrize("exists", [True, False])
    def test_object_exists(self, client, exists):
        blob_of(client).exists.return_value = exists
        assert object_exists(client, "sample-bucket", "new_file.txt") is exists
