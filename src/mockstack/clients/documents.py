"""MongoDB client helpers and the restaurant fixture model."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from urllib.parse import quote_plus, urlencode

from pymongo import MongoClient

from mockstack.domain.errors import DocumentNotFoundError, ScenarioAssertionError
from mockstack.domain.models import FixtureRecord

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 2000

URI_OPTIONS = {
    "authSource": "admin",
    "readPreference": "primary",
    "directConnection": "true",
    "ssl": "false",
}

_CREDENTIALS_RE = re.compile(r"(mongodb(?:\+srv)?://[^:/@]+):[^@]*@")


def build_mongo_uri(  # pylint: disable=too-many-arguments
    username: str,
    password: str,
    host: str,
    port: int,
    database: str,
    *,
    options: dict[str, str] | None = None,
) -> str:
    """Build a connection string for a single, directly addressed server.

    Credentials are percent-escaped. Authentication happens against the
    ``admin`` database unless ``options`` says otherwise.
    """
    query = urlencode({**URI_OPTIONS, **(options or {})})
    return (
        f"mongodb://{quote_plus(username)}:{quote_plus(password)}"
        f"@{host}:{port}/{database}?{query}"
    )


def redact_uri(uri: str) -> str:
    """Return ``uri`` with its password masked, for logging."""
    return _CREDENTIALS_RE.sub(r"\1:***@", uri)


def connect(uri: str, *, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> MongoClient:
    """Create a client. No I/O happens until the first command."""
    logger.debug("Connecting to %s", redact_uri(uri))
    return MongoClient(
        uri,
        serverSelectionTimeoutMS=timeout_ms,
        connectTimeoutMS=timeout_ms,
        tz_aware=True,
    )


def ping(client: MongoClient) -> bool:
    """Round-trip a ``ping`` command. Raises on any connection failure."""
    reply = client.admin.command("ping")
    return bool(reply.get("ok"))


def disconnect(client: MongoClient) -> None:
    client.close()


def is_reachable(uri: str, *, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> bool:
    """Readiness probe: connect, ping and close a throwaway client."""
    client = connect(uri, timeout_ms=timeout_ms)
    try:
        return ping(client)
    finally:
        client.close()


def find_one_by(
    client: MongoClient, database: str, collection: str, key: str, value: Any
) -> dict[str, Any]:
    """Return the first document whose ``key`` equals ``value``.

    Raises:
        DocumentNotFoundError: If nothing matches.
    """
    document = client[database][collection].find_one({key: value})
    if document is None:
        raise DocumentNotFoundError(collection, key, value)
    return document


def verify_fixture(
    client: MongoClient, database: str, record: FixtureRecord
) -> dict[str, Any]:
    """Look up a seeded document and check one of its fields.

    Raises:
        DocumentNotFoundError: If the document was not seeded.
        ScenarioAssertionError: If the field holds another value.
    """
    document = find_one_by(
        client, database, record.collection, record.key_field, record.key
    )
    actual = document.get(record.field)
    if actual != record.expected:
        raise ScenarioAssertionError(
            f"{record.collection}.{record.field} where "
            f"{record.key_field}={record.key!r}",
            actual,
            record.expected,
        )
    return document


def fixture_present(
    uri: str,
    database: str,
    record: FixtureRecord,
    *,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
) -> bool:
    """Readiness probe for seeding: True once ``record``'s document exists."""
    client = connect(uri, timeout_ms=timeout_ms)
    try:
        find_one_by(client, database, record.collection, record.key_field, record.key)
    finally:
        client.close()
    return True


# --- Restaurant fixture model ---


@dataclass(frozen=True)
class Address:
    building: str = ""
    coord: tuple[float, ...] = ()
    street: str = ""
    zipcode: str = ""


@dataclass(frozen=True)
class Grade:
    date: datetime | None
    grade: str
    score: int | None


@dataclass(frozen=True)
class Restaurant:
    """A document of the seeded ``restaurants`` collection."""

    id: Any
    name: str
    restaurant_id: str
    borough: str = ""
    cuisine: str = ""
    address: Address = field(default_factory=Address)
    grades: tuple[Grade, ...] = ()

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> Restaurant:
        address = document.get("address") or {}
        return cls(
            id=document.get("_id"),
            name=document.get("name", ""),
            restaurant_id=document.get("restaurant_id", ""),
            borough=document.get("borough", ""),
            cuisine=document.get("cuisine", ""),
            address=Address(
                building=address.get("building", ""),
                coord=tuple(address.get("coord") or ()),
                street=address.get("street", ""),
                zipcode=address.get("zipcode", ""),
            ),
            grades=tuple(
                Grade(
                    date=grade.get("date"),
                    grade=grade.get("grade", ""),
                    score=grade.get("score"),
                )
                for grade in document.get("grades") or ()
            ),
        )


def get_restaurant_by_restaurant_id(
    client: MongoClient,
    restaurant_id: str,
    *,
    database: str = "test_db",
    collection: str = "restaurants",
) -> Restaurant:
    """Fetch a restaurant by its ``restaurant_id`` field."""
    document = find_one_by(client, database, collection, "restaurant_id", restaurant_id)
    return Restaurant.from_document(document)
