# src/overdue_triage/workqueue/store.py

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from ..core.models import Failure, FailureKind, OverdueSubmission, SubmissionId, Success
from ..core.ports import OverdueGateway

logger = logging.getLogger(__name__)

SnapshotListener = Callable[["WorkqueueStore"], None]


class WorkqueueStore:
    """
    Holds the authoritative snapshot of overdue submissions.

    Every successful reload replaces the snapshot wholesale; nothing is merged.
    A failed reload keeps the previous snapshot (stale beats empty).

    Overlapping reloads:
    - `loading` stays True while any reload is pending
    - a result from a reload started before the last applied one is dropped
    """

    def __init__(self, gateway: OverdueGateway) -> None:
        self._gateway = gateway
        self._submissions: tuple[OverdueSubmission, ...] = ()
        self._pending = 0
        self._started = 0
        self._applied = 0
        self._listeners: list[SnapshotListener] = []

    @property
    def submissions(self) -> tuple[OverdueSubmission, ...]:
        return self._submissions

    @property
    def loading(self) -> bool:
        return self._pending > 0

    def subscribe(self, listener: SnapshotListener) -> None:
        """Call `listener(store)` after each snapshot replacement."""
        self._listeners.append(listener)

    def get(self, submission_id: SubmissionId) -> OverdueSubmission | None:
        for item in self._submissions:
            if item.id == submission_id:
                return item
        return None

    def ids(self) -> set[Any]:
        return {item.id for item in self._submissions}

    async def reload(self) -> Success | Failure:
        self._started += 1
        generation = self._started
        self._pending += 1
        try:
            result = await self._gateway.load_overdue_submissions()
        except Exception:
            logger.exception("Overdue list reload crashed")
            result = Failure(FailureKind.UNKNOWN, "Failed to load pending task submissions")
        finally:
            self._pending -= 1

        if isinstance(result, Failure):
            logger.info("Reload #%s failed (%s): %s", generation, result.kind.value, result.message)
            return result

        if generation < self._applied:
            logger.debug("Reload #%s finished after #%s; dropping its result", generation, self._applied)
            return result

        self._applied = generation
        self._submissions = tuple(result.value or ())
        logger.info("Reload #%s: %d overdue rows", generation, len(self._submissions))
        self._emit()
        return result

    def _emit(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Snapshot listener failed")
