"""Unit tests for the mockstack error hierarchy."""

import pytest

from mockstack.domain.errors import (
    ClientDisconnectError,
    DocumentNotFoundError,
    DockerUnavailableError,
    HarnessError,
    ImageBuildError,
    ImagePullError,
    InfrastructureError,
    InvalidConfigError,
    InvalidTransitionError,
    NetworkError,
    NetworkInUseError,
    ObjectNotFoundError,
    OperationError,
    ProvisioningError,
    PurgeError,
    ReadinessTimeoutError,
    ScenarioAssertionError,
    TeardownError,
)


@pytest.mark.parametrize(
    "error",
    [
        DockerUnavailableError(None, "socket missing"),
        ImagePullError("mongo:latest", "manifest unknown"),
        ImageBuildError("seeder/Dockerfile", "step failed"),
        ProvisioningError("mongodb", "port taken"),
        NetworkError("mongo_network", "exists"),
        NetworkInUseError("mongo_network", ["mongodb"]),
        PurgeError("mongodb", "refused"),
    ],
)
def test_infrastructure_errors(error):
    assert isinstance(error, InfrastructureError)
    assert isinstance(error, HarnessError)


def test_docker_unavailable_names_default_target():
    assert "<environment default>" in str(DockerUnavailableError(None, "x"))
    err = DockerUnavailableError("tcp://10.0.0.5:2375", "refused")
    assert "tcp://10.0.0.5:2375" in str(err)
    assert err.reason == "refused"


def test_network_in_use_lists_attached_containers():
    err = NetworkInUseError("mongo_network", ["seeder", "mongodb"])
    assert str(err) == (
        "Network mongo_network: still attached to container(s) mongodb, seeder"
    )
    assert err.attached == ["seeder", "mongodb"]


def test_readiness_timeout_is_a_timeout():
    cause = ConnectionRefusedError("refused")
    err = ReadinessTimeoutError("mongodb", 60.04, 17, cause)
    assert isinstance(err, TimeoutError)
    assert isinstance(err, HarnessError)
    assert str(err) == (
        "Timeout waiting for mongodb after 60.0s (17 attempt(s)) "
        "(last error: refused)"
    )
    assert err.last_error is cause


def test_readiness_timeout_without_error():
    assert "last error" not in str(ReadinessTimeoutError("gcs", 1.0, 2))


def test_not_found_errors_are_operation_errors():
    obj = ObjectNotFoundError("sample-bucket", "new_file.txt")
    doc = DocumentNotFoundError("restaurants", "restaurant_id", "1")
    assert isinstance(obj, OperationError)
    assert isinstance(doc, OperationError)
    assert obj.operation == "read"
    assert str(obj) == (
        "Operation 'read' failed: object sample-bucket/new_file.txt not found"
    )
    assert str(doc) == (
        "Operation 'find_one' failed: no document in restaurants with "
        "restaurant_id='1'"
    )


def test_object_not_found_keeps_operation():
    assert ObjectNotFoundError("b", "o", "delete").operation == "delete"


def test_scenario_assertion_is_an_assertion_error():
    err = ScenarioAssertionError("restaurant name", "Other", "Regina Caterers")
    assert isinstance(err, AssertionError)
    assert not isinstance(err, HarnessError)
    assert str(err) == "restaurant name: expected 'Regina Caterers', got 'Other'"


def test_client_disconnect_is_a_teardown_error():
    err = ClientDisconnectError("disconnect mongodb", "socket closed")
    assert isinstance(err, TeardownError)
    assert err.step == "disconnect mongodb"


def test_config_and_transition_errors():
    assert str(InvalidConfigError("X", "abc", "not a number")) == (
        "Invalid value 'abc' for X: not a number"
    )
    err = InvalidTransitionError("mongo", "DONE", "EXECUTING")
    assert "cannot move from DONE to EXECUTING" in str(err)
