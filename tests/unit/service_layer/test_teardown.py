"""Unit tests for TeardownStack."""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from mockstack.domain.errors import ClientDisconnectError
from mockstack.service_layer.teardown import TeardownStack


def recorder(calls: list[str], name: str, error: Exception | None = None):
    def release() -> None:
        calls.append(name)
        if error is not None:
            raise error

    return release


def test_unwinds_in_reverse_order():
    calls: list[str] = []
    stack = TeardownStack()
    for name in ("network", "db", "seeder", "client"):
        stack.push(name, recorder(calls, name))
    assert stack.pending == ["client", "seeder", "db", "network"]

    assert stack.unwind() == []
    assert calls == ["client", "seeder", "db", "network"]
    assert stack.released == calls
    assert len(stack) == 0


def test_unwind_runs_once():
    calls: list[str] = []
    stack = TeardownStack()
    stack.push("db", recorder(calls, "db"))
    stack.unwind()
    assert stack.unwind() == []
    assert calls == ["db"]
    assert stack.unwound


def test_push_after_unwind_is_refused():
    stack = TeardownStack()
    stack.unwind()
    with pytest.raises(RuntimeError, match="teardown already ran"):
        stack.push("late", lambda: None)


def test_failures_do_not_stop_the_unwind(caplog):
    calls: list[str] = []
    stack = TeardownStack()
    stack.push("network", recorder(calls, "network"))
    stack.push("db", recorder(calls, "db", RuntimeError("busy")))
    stack.push("seeder", recorder(calls, "seeder"))

    failures = stack.unwind()

    assert calls == ["seeder", "db", "network"]
    assert stack.released == ["seeder", "network"]
    assert [(f.name, str(f.error), f.fatal) for f in failures] == [
        ("db", "busy", False)
    ]
    assert "Could not release db: busy" in caplog.text


def test_fatal_failure_is_raised_after_full_unwind():
    calls: list[str] = []
    stack = TeardownStack()
    stack.push("network", recorder(calls, "network"))
    stack.push("db", recorder(calls, "db"))
    stack.push(
        "disconnect mongodb",
        recorder(calls, "disconnect mongodb", OSError("socket closed")),
        fatal=True,
    )

    with pytest.raises(ClientDisconnectError) as excinfo:
        stack.unwind()

    assert calls == ["disconnect mongodb", "db", "network"]
    assert excinfo.value.step == "disconnect mongodb"
    assert isinstance(excinfo.value.__cause__, OSError)
    assert stack.failures[0].fatal


@pytest.mark.property
@settings(max_examples=50, deadline=None)
@given(failing=st.lists(st.booleans(), min_size=0, max_size=12))
def test_every_release_runs_once_in_reverse_order(failing):
    calls: list[str] = []
    stack = TeardownStack()
    names = [f"r{i}" for i in range(len(failing))]
    for name, fails in zip(names, failing):
        stack.push(name, recorder(calls, name, RuntimeError(name) if fails else None))

    failures = stack.unwind()
    stack.unwind()

    assert calls == list(reversed(names))
    assert len(failures) == sum(failing)
    assert len(stack.released) + len(failures) == len(names)
