"""Error taxonomy for the test environment orchestrator.

Errors fall in four families, each with its own handling rule:

- **Infrastructure** (runtime unreachable, image pull/build failure, network
  creation failure): fatal, never retried.
- **Readiness** (service never answered its probe): raised only after the
  readiness budget is exhausted.
- **Operation** (client call against the service failed, fixture mismatch):
  surfaced as a test failure; teardown still runs.
- **Teardown** (release step failed): logged and recorded; only client
  disconnect failures are escalated.
"""

# ============================================================================
#                               Base error
# ============================================================================


class HarnessError(Exception):
    """Base class for all mockstack errors."""


class InvalidConfigError(HarnessError):
    """Raised when an environment setting cannot be parsed."""

    def __init__(self, name: str, value: str, reason: str) -> None:
        super().__init__(f"Invalid value {value!r} for {name}: {reason}")
        self.name = name
        self.value = value
        self.reason = reason


class InvalidTransitionError(HarnessError):
    """Raised when a scenario is asked to move to a state it cannot reach."""

    def __init__(self, scenario: str, current: str, target: str) -> None:
        super().__init__(
            f"Scenario '{scenario}' cannot move from {current} to {target}."
        )
        self.scenario = scenario
        self.current = current
        self.target = target


# ============================================================================
#                           Infrastructure errors
# ============================================================================


class InfrastructureError(HarnessError):
    """Base class for container runtime failures. These are never retried."""


class DockerUnavailableError(InfrastructureError):
    """Raised when the container runtime cannot be reached."""

    def __init__(self, base_url: str | None, reason: str) -> None:
        target = base_url or "<environment default>"
        super().__init__(f"Could not connect to docker at {target}: {reason}")
        self.base_url = base_url
        self.reason = reason


class ImagePullError(InfrastructureError):
    """Raised when an image cannot be obtained from its registry."""

    def __init__(self, image: str, reason: str) -> None:
        super().__init__(f"Could not pull image {image}: {reason}")
        self.image = image
        self.reason = reason


class ImageBuildError(InfrastructureError):
    """Raised when an image cannot be built from a local context."""

    def __init__(self, dockerfile: str, reason: str) -> None:
        super().__init__(f"Could not build image from {dockerfile}: {reason}")
        self.dockerfile = dockerfile
        self.reason = reason


class ProvisioningError(InfrastructureError):
    """Raised when a container cannot be created or started."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"Could not start resource {name}: {reason}")
        self.name = name
        self.reason = reason


class NetworkError(InfrastructureError):
    """Raised when a network cannot be created or removed."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"Network {name}: {reason}")
        self.name = name
        self.reason = reason


class NetworkInUseError(NetworkError):
    """Raised when removing a network that still has containers attached."""

    def __init__(self, name: str, attached: list[str]) -> None:
        super().__init__(
            name, f"still attached to container(s) {', '.join(sorted(attached))}"
        )
        self.attached = attached


class PurgeError(InfrastructureError):
    """Raised when a container cannot be removed."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"Could not purge resource {name}: {reason}")
        self.name = name
        self.reason = reason


# ============================================================================
#                              Readiness errors
# ============================================================================


class ReadinessTimeoutError(HarnessError, TimeoutError):
    """Raised when a service does not become ready within its budget."""

    def __init__(
        self,
        description: str,
        elapsed: float,
        attempts: int,
        last_error: BaseException | None = None,
    ) -> None:
        message = (
            f"Timeout waiting for {description} after {elapsed:.1f}s "
            f"({attempts} attempt(s))"
        )
        if last_error is not None:
            message += f" (last error: {last_error})"
        super().__init__(message)
        self.description = description
        self.elapsed = elapsed
        self.attempts = attempts
        self.last_error = last_error


# ============================================================================
#                              Operation errors
# ============================================================================


class OperationError(HarnessError):
    """Raised when a client operation against a service fails."""

    def __init__(self, operation: str, reason: str) -> None:
        super().__init__(f"Operation '{operation}' failed: {reason}")
        self.operation = operation
        self.reason = reason


class ObjectNotFoundError(OperationError):
    """Raised when a storage object does not exist."""

    def __init__(self, bucket: str, name: str, operation: str = "read") -> None:
        super().__init__(operation, f"object {bucket}/{name} not found")
        self.bucket = bucket
        self.name = name


class DocumentNotFoundError(OperationError):
    """Raised when no document matches a point query."""

    def __init__(self, collection: str, field: str, value: object) -> None:
        super().__init__(
            "find_one", f"no document in {collection} with {field}={value!r}"
        )
        self.collection = collection
        self.field = field
        self.value = value


class ScenarioAssertionError(AssertionError):
    """Raised when an observed result does not match its expected value.

    Subclasses ``AssertionError`` so test runners report it as a failed
    assertion rather than an error.
    """

    def __init__(self, what: str, actual: object, expected: object) -> None:
        super().__init__(f"{what}: expected {expected!r}, got {actual!r}")
        self.what = what
        self.actual = actual
        self.expected = expected


# ============================================================================
#                              Teardown errors
# ============================================================================


class TeardownError(HarnessError):
    """Raised when a release step fails during teardown."""

    def __init__(self, step: str, reason: str) -> None:
        super().__init__(f"Teardown step '{step}' failed: {reason}")
        self.step = step
        self.reason = reason


class ClientDisconnectError(TeardownError):
    """Raised when a service client fails to disconnect.

    Escalated because a lingering connection can corrupt subsequent runs.
    """
