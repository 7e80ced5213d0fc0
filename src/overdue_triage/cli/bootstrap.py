# src/overdue_triage/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures the local (gitignored) data directory exists,
- wires the HTTP gateway, the operator notifier and the workqueue into AppState.
"""

from __future__ import annotations

import contextlib
import logging

from ..config import get_settings
from ..core.ports import OperatorNotifier, OverdueGateway
from ..core.state import AppState
from ..gateway.client import HttpOverdueGateway
from ..workqueue.queue import OverdueWorkqueue

logger = logging.getLogger(__name__)


def create_initial_state(
        notifier: OperatorNotifier,
        *,
        settings=None,
        gateway: OverdueGateway | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings and gateway injectable makes the app easier to test.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    settings.data_dir.mkdir(parents=True, exist_ok=True)

    if gateway is None:
        gateway = HttpOverdueGateway(settings)
        logger.info("Backend API: %s (token=%s)", settings.api_base_url, "set" if settings.api_token else "none")

    workqueue = OverdueWorkqueue(
        gateway,
        notifier,
        action_timeout_seconds=float(getattr(settings, "action_timeout_seconds", 0.0)),
    )
    return AppState(settings=settings, gateway=gateway, workqueue=workqueue)


async def shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        await state.drain()
    except Exception:
        logger.exception("Failed to settle background actions.")

    aclose = getattr(state.gateway, "aclose", None)
    if aclose is not None:
        with contextlib.suppress(Exception):
            await aclose()
