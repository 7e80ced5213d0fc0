# src/overdue_triage/workqueue/queue.py

from __future__ import annotations

import logging
from typing import Any

from ..core.models import Failure, OverdueSubmission, StagedFile, SubmissionId, Success
from ..core.ports import OperatorNotifier, OverdueGateway
from .actions import RowActionController
from .filters import visible
from .store import WorkqueueStore

logger = logging.getLogger(__name__)


class OverdueWorkqueue:
    """
    What the front-end sees of the overdue-submissions page.

    Read side: submissions (filtered), loading, per-row flags and staged files.
    Triggers: search, stage_file, notify, submit_on_behalf, reload.
    The filtered list is recomputed on every search change and every new snapshot.
    """

    def __init__(
            self,
            gateway: OverdueGateway,
            notifier: OperatorNotifier,
            *,
            action_timeout_seconds: float = 0.0,
    ) -> None:
        self._notifier = notifier
        self.store = WorkqueueStore(gateway)
        self.actions = RowActionController(
            self.store,
            gateway,
            notifier,
            action_timeout_seconds=action_timeout_seconds,
        )
        self._search_term = ""
        self._visible: tuple[OverdueSubmission, ...] = ()
        self.store.subscribe(lambda _store: self._refresh())

    # ---- read side ----

    @property
    def submissions(self) -> tuple[OverdueSubmission, ...]:
        return self._visible

    @property
    def all_submissions(self) -> tuple[OverdueSubmission, ...]:
        return self.store.submissions

    @property
    def loading(self) -> bool:
        return self.store.loading

    @property
    def search_term(self) -> str:
        return self._search_term

    def get(self, submission_id: SubmissionId) -> OverdueSubmission | None:
        return self.store.get(submission_id)

    def is_uploading(self, submission_id: SubmissionId) -> bool:
        return self.actions.is_uploading(submission_id)

    def is_notifying(self, student_id: Any) -> bool:
        return self.actions.is_notifying(student_id)

    def staged_file(self, submission_id: SubmissionId) -> StagedFile | None:
        return self.actions.staged_file(submission_id)

    # ---- triggers ----

    def search(self, term: str | None) -> None:
        self._search_term = term or ""
        self._refresh()

    def stage_file(self, submission_id: SubmissionId, file: StagedFile) -> bool:
        return self.actions.stage_file(submission_id, file)

    def unstage_file(self, submission_id: SubmissionId) -> None:
        self.actions.unstage_file(submission_id)

    async def notify(self, student_id: Any, task_id: Any) -> Success | Failure | None:
        return await self.actions.notify(student_id, task_id)

    async def submit_on_behalf(self, submission_id: SubmissionId) -> Success | Failure | None:
        return await self.actions.submit_on_behalf(submission_id)

    async def reload(self) -> Success | Failure:
        result = await self.store.reload()
        if isinstance(result, Failure):
            self._notifier.error(result.message)
        return result

    def _refresh(self) -> None:
        self._visible = tuple(visible(self.store.submissions, self._search_term))
