# tests/test_store.py

from __future__ import annotations

import asyncio

import pytest

from overdue_triage.core.models import Failure, FailureKind, Success
from overdue_triage.workqueue.store import WorkqueueStore

from .fakes import FakeGateway, make_row


@pytest.mark.asyncio
async def test_reload_replaces_snapshot_wholesale(gateway: FakeGateway, rows) -> None:
    store = WorkqueueStore(gateway)
    result = await store.reload()
    assert isinstance(result, Success)
    assert list(store.submissions) == rows

    gateway.snapshot = [rows[1]]
    await store.reload()
    assert list(store.submissions) == [rows[1]]
    assert store.ids() == {2}
    assert store.get(1) is None
    assert store.get(2) == rows[1]


@pytest.mark.asyncio
async def test_failed_reload_keeps_stale_snapshot(gateway: FakeGateway, rows) -> None:
    store = WorkqueueStore(gateway)
    await store.reload()

    gateway.load_failure = Failure(FailureKind.TRANSPORT, "Failed to load pending task submissions")
    result = await store.reload()

    assert isinstance(result, Failure)
    assert list(store.submissions) == rows
    assert store.loading is False


@pytest.mark.asyncio
async def test_loading_flag_is_set_while_in_flight(gateway: FakeGateway) -> None:
    store = WorkqueueStore(gateway)
    gateway.hold()
    runner = asyncio.create_task(store.reload())
    await asyncio.sleep(0)
    assert store.loading is True

    gateway.release()
    await runner
    assert store.loading is False


@pytest.mark.asyncio
async def test_loading_cleared_when_gateway_raises() -> None:
    class Exploding(FakeGateway):
        async def load_overdue_submissions(self):
            raise RuntimeError("boom")

    store = WorkqueueStore(Exploding())
    result = await store.reload()
    assert isinstance(result, Failure)
    assert result.kind == FailureKind.UNKNOWN
    assert store.loading is False


@pytest.mark.asyncio
async def test_older_reload_never_overwrites_newer(rows) -> None:
    old_rows = [make_row(1, 9, 5)]
    new_rows = [make_row(2, 10, 6)]

    class Ordered(FakeGateway):
        """First call waits on its own gate; second returns at once."""

        def __init__(self) -> None:
            super().__init__()
            self.first_gate = asyncio.Event()

        async def load_overdue_submissions(self):
            self.load_calls += 1
            if self.load_calls == 1:
                await self.first_gate.wait()
                return Success(value=tuple(old_rows))
            return Success(value=tuple(new_rows))

    gw = Ordered()
    store = WorkqueueStore(gw)
    first = asyncio.create_task(store.reload())
    await asyncio.sleep(0)
    await store.reload()
    assert store.loading is True
    assert list(store.submissions) == new_rows

    gw.first_gate.set()
    await first
    assert list(store.submissions) == new_rows
    assert store.loading is False


@pytest.mark.asyncio
async def test_listeners_run_after_replacement_and_failures_are_contained(gateway: FakeGateway) -> None:
    store = WorkqueueStore(gateway)
    seen: list[int] = []

    def bad(_store) -> None:
        raise ValueError("listener bug")

    store.subscribe(bad)
    store.subscribe(lambda s: seen.append(len(s.submissions)))

    await store.reload()
    assert seen == [3]

    gateway.load_failure = Failure(FailureKind.UNKNOWN, "x")
    await store.reload()
    assert seen == [3]
