# src/overdue_triage/core/state.py

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from dataclasses import dataclass, field
from typing import Any

from ..workqueue.queue import OverdueWorkqueue
from .ports import OverdueGateway

logger = logging.getLogger(__name__)


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules.
    settings: Any

    gateway: OverdueGateway
    workqueue: OverdueWorkqueue

    # Fire-and-forget row actions started from the console.
    background: set[asyncio.Task[Any]] = field(default_factory=set)

    def spawn(self, coro: Coroutine[Any, Any, Any], *, name: str | None = None) -> asyncio.Task[Any]:
        """Run `coro` on the current loop and keep a reference until it finishes."""
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self.background.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self.background.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Background action %s crashed", task.get_name(), exc_info=exc)

    async def drain(self) -> None:
        """Cancel pending background actions and wait for them to settle."""
        pending = list(self.background)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
