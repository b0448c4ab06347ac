"""Tests for the bounded history buffer."""

from __future__ import annotations

import pytest

from airgraph.core.models import BoundedHistory


def test_push_below_capacity_appends() -> None:
    """Pushes before reaching capacity keep every value."""
    history = BoundedHistory(3)
    history.push(-40)
    history.push(-41)

    assert history.snapshot() == [-40, -41]
    assert len(history) == 2


def test_push_beyond_capacity_evicts_oldest() -> None:
    """A full buffer drops its oldest sample first."""
    history = BoundedHistory(3)
    for value in range(7):
        history.push(value)

    assert len(history) == 3
    assert history.snapshot() == [4, 5, 6]


@pytest.mark.parametrize("capacity", [1, 2, 5, 10])
@pytest.mark.parametrize("pushes", [0, 1, 4, 12])
def test_contents_are_last_pushed_values(capacity: int, pushes: int) -> None:
    """Contents always equal the last min(pushes, capacity) values."""
    history = BoundedHistory(capacity)
    values = [f"ts-{i}" for i in range(pushes)]
    for value in values:
        history.push(value)

    expected = values[-capacity:] if values else []
    assert history.snapshot() == expected
    assert len(history) == min(pushes, capacity)


def test_latest_and_empty() -> None:
    """``latest`` is None on an empty buffer and the newest value otherwise."""
    history = BoundedHistory(2)
    assert history.latest is None

    history.push("a")
    history.push("b")
    history.push("c")
    assert history.latest == "c"


def test_snapshot_is_detached() -> None:
    """Mutating a snapshot leaves the buffer untouched."""
    history = BoundedHistory(2)
    history.push(1)
    snap = history.snapshot()
    snap.append(99)

    assert history.snapshot() == [1]


def test_invalid_capacity() -> None:
    """Capacities below one are rejected."""
    with pytest.raises(ValueError):
        BoundedHistory(0)


def test_equality() -> None:
    """Buffers compare by capacity and contents."""
    a = BoundedHistory(2)
    b = BoundedHistory(2)
    a.push(1)
    b.push(1)
    assert a == b

    c = BoundedHistory(3)
    c.push(1)
    assert a != c
