"""MongoDB with a seeder container, and the documents scenario.

The database and the seeder share a private network; the seeder reaches the
database by container name (``MONGO_HOST``) and imports the packaged
``restaurants.json`` into ``test_db.restaurants``. It is restarted on failure
so an import attempted before authentication is fully set up is retried by
the runtime.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from pathlib import Path

from mockstack import config
from mockstack.clients.documents import (
    Restaurant,
    build_mongo_uri,
    connect,
    disconnect,
    fixture_present,
    get_restaurant_by_restaurant_id,
    is_reachable,
    ping,
    redact_uri,
)
from mockstack.domain.models import (
    ContainerSpec,
    FixtureRecord,
    NetworkHandle,
    RestartPolicy,
)
from mockstack.interfaces.container_pool import ContainerPool
from mockstack.service_layer.readiness import RetryPolicy
from mockstack.service_layer.scenario import Scenario

logger = logging.getLogger(__name__)

IMAGE = "mongo"
PORT = "27017/tcp"
SEEDER_IMAGE = "mockstack-mongoseeder"
SEEDER_RETRIES = 5
NETWORK_PREFIX = "mongo_network"

RESTAURANT_FIXTURE = FixtureRecord(
    collection="restaurants",
    key_field="restaurant_id",
    key="40356649",
    field="name",
    expected="Regina Caterers",
)


@dataclass(frozen=True)
class MongoSettings:
    """Root credentials and database created at container initialisation."""

    username: str = "mongoadmin"
    password: str = "secret"  # pragma: no mutate
    database: str = "test_db"

    def uri(self, host: str, port: int) -> str:
        return build_mongo_uri(
            self.username, self.password, host, port, self.database
        )


def mongo_spec(
    network: NetworkHandle,
    *,
    name: str = "mongodb",
    settings: MongoSettings | None = None,
    tag: str = "latest",
) -> ContainerSpec:
    """Container spec of the database, attached to ``network``."""
    settings = settings or MongoSettings()
    return ContainerSpec(
        repository=IMAGE,
        name=name,
        tag=tag,
        exposed_ports=(PORT,),
        env={
            "MONGO_INITDB_ROOT_USERNAME": settings.username,
            "MONGO_INITDB_ROOT_PASSWORD": settings.password,
            "MONGO_INITDB_DATABASE": settings.database,
        },
        restart_policy=RestartPolicy.never(),
        auto_remove=True,
        network=network,
    )


def seeder_spec(
    network: NetworkHandle,
    db_host: str,
    *,
    name: str = "mongoseeder",
    settings: MongoSettings | None = None,
) -> ContainerSpec:
    """Container spec of the seeder importing fixtures into ``db_host``."""
    settings = settings or MongoSettings()
    return ContainerSpec(
        repository=SEEDER_IMAGE,
        name=name,
        env={
            "MONGO_HOST": db_host,
            "MONGO_USERNAME": settings.username,
            "MONGO_PASSWORD": settings.password,
            "MONGO_DATABASE": settings.database,
        },
        restart_policy=RestartPolicy.on_failure(SEEDER_RETRIES),
        network=network,
    )


@dataclass(frozen=True)
class DocumentsReport:
    """What the documents scenario observed."""

    uri: str
    restaurant: Restaurant


def run_documents_scenario(
    pool: ContainerPool,
    *,
    seeder_dir: Path | None = None,
    settings: MongoSettings | None = None,
    policy: RetryPolicy | None = None,
    fixture: FixtureRecord = RESTAURANT_FIXTURE,
) -> DocumentsReport:
    """Start MongoDB, seed it, query the fixture restaurant, tear down.

    Teardown runs in reverse: client disconnect, seeder, database, network.

    Raises:
        HarnessError: On provisioning, readiness or operation failure.
        ScenarioAssertionError: If the fixture restaurant has another name.
    """
    settings = settings or MongoSettings()
    seeder_dir = seeder_dir or config.seeder_dir()
    suffix = uuid.uuid4().hex[:8]

    with Scenario(pool, "documents", policy=policy) as scenario:
        network = scenario.create_network(f"{NETWORK_PREFIX}-{suffix}")
        db = scenario.provision(
            mongo_spec(network, name=f"mongodb-{suffix}", settings=settings)
        )
        uri = settings.uri(db.host, db.get_port(PORT))
        scenario.await_ready(lambda: is_reachable(uri), "mongodb")

        scenario.build_and_provision(
            seeder_dir / "Dockerfile",
            seeder_spec(
                network, db.name, name=f"mongoseeder-{suffix}", settings=settings
            ),
        )
        scenario.await_ready(
            lambda: fixture_present(uri, settings.database, fixture),
            f"{fixture.collection} seeding",
        )

        client = scenario.connect(lambda: connect(uri), disconnect, name="mongodb")
        scenario.execute("ping", ping, client)
        restaurant = scenario.execute(
            "find restaurant",
            get_restaurant_by_restaurant_id,
            client,
            fixture.key,
            database=settings.database,
            collection=fixture.collection,
        )
        scenario.expect("restaurant name", restaurant.name, fixture.expected)

    logger.info("Documents scenario passed against %s", redact_uri(uri))
    return DocumentsReport(uri=redact_uri(uri), restaurant=restaurant)
