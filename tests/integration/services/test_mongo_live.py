"""Documents scenario against real MongoDB and seeder containers."""

import pytest

from mockstack.service_layer.readiness import RetryPolicy
from mockstack.services import run_documents_scenario

pytestmark = pytest.mark.slow


def test_documents_scenario_finds_seeded_restaurant(docker_pool, docker_client):
    report = run_documents_scenario(
        docker_pool, policy=RetryPolicy(max_elapsed=120.0, initial_interval=0.5)
    )

    restaurant = report.restaurant
    assert restaurant.restaurant_id == "40356649"
    assert restaurant.name == "Regina Caterers"
    assert restaurant.borough == "Brooklyn"
    assert "secret" not in report.uri

    label = f"mockstack.session={docker_pool.session}"
    assert docker_client.networks.list(filters={"label": label}) == []
