# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from overdue_triage.core.state import AppState
from overdue_triage.workqueue.queue import OverdueWorkqueue

from .fakes import FakeGateway, FakeNotifier, make_row


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the gateway.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="overdue-triage-test",
        log_level="DEBUG",
        data_dir=tmp_path / "data",
        api_base_url="http://lms.test/api",
        api_token="t0ken",
        request_timeout_seconds=5.0,
        connect_timeout_seconds=2.0,
        action_timeout_seconds=0.0,
    )


@pytest.fixture()
def rows() -> list:
    """Two rows from the reference scenario plus one sharing student 9."""
    return [
        make_row(1, 9, 5, name="Maria Lopez", email="maria@school.test", title="Essay on Rivers"),
        make_row(2, 10, 6, name="John Smith", email="jsmith@school.test", title="Lab Report"),
        make_row(3, 9, 7, name="Maria Lopez", email="maria@school.test", title="Quiz Corrections"),
    ]


@pytest.fixture()
def gateway(rows) -> FakeGateway:
    return FakeGateway(rows)


@pytest.fixture()
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture()
def workqueue(gateway: FakeGateway, notifier: FakeNotifier) -> OverdueWorkqueue:
    return OverdueWorkqueue(gateway, notifier)


@pytest.fixture()
def state(settings: SimpleNamespace, gateway: FakeGateway, workqueue: OverdueWorkqueue) -> AppState:
    return AppState(settings=settings, gateway=gateway, workqueue=workqueue)
