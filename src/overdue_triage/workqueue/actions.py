# src/overdue_triage/workqueue/actions.py

from __future__ import annotations

"""
Row actions for the overdue workqueue.

Two independently guarded actions per row:
- notify: guard keyed by student (the backend notifies a student, not a row)
- submit-on-behalf: guard keyed by submission id, needs a staged file

Everything runs on one event loop. Each guard is checked and set before the first
await, so a second start can never slip in between check and set.
"""

import asyncio
import logging
from collections.abc import Awaitable
from typing import Any

from ..core.models import Failure, FailureKind, StagedFile, SubmissionId, Success
from ..core.ports import OperatorNotifier, OverdueGateway
from .store import WorkqueueStore

logger = logging.getLogger(__name__)

NO_FILE_MESSAGE = "Please select a file to upload"
NOTIFY_OK = "Notification sent successfully to student"


class RowActionController:
    """
    Owns the ephemeral per-row state: staged files and in-flight guards.

    It never edits rows of the snapshot. A successful upload is reconciled by a full
    store reload. Staged files of rows that vanish from a new snapshot are dropped and
    their in-flight flags stop being reported, but a running request keeps blocking a
    second start for its key until it finishes.
    """

    def __init__(
            self,
            store: WorkqueueStore,
            gateway: OverdueGateway,
            notifier: OperatorNotifier,
            *,
            action_timeout_seconds: float = 0.0,
    ) -> None:
        self._store = store
        self._gateway = gateway
        self._notifier = notifier
        self._timeout = float(action_timeout_seconds or 0.0)

        self._staged: dict[SubmissionId, StagedFile] = {}

        # Requests still running, key -> token of the action that owns the slot.
        # Only the owning action releases its slot; reloads never touch these.
        self._notifying: dict[Any, object] = {}
        self._uploading: dict[SubmissionId, object] = {}

        # In-flight keys whose row is missing from the current snapshot (not reported).
        self._notify_hidden: set[Any] = set()
        self._upload_hidden: set[SubmissionId] = set()

        store.subscribe(self._on_snapshot)

    # ---- queries ----

    def is_notifying(self, student_id: Any) -> bool:
        return student_id in self._notifying and student_id not in self._notify_hidden

    def is_uploading(self, submission_id: SubmissionId) -> bool:
        return submission_id in self._uploading and submission_id not in self._upload_hidden

    def staged_file(self, submission_id: SubmissionId) -> StagedFile | None:
        return self._staged.get(submission_id)

    # ---- staging ----

    def stage_file(self, submission_id: SubmissionId, file: StagedFile) -> bool:
        if submission_id not in self._store.ids():
            logger.warning("Cannot stage a file for unknown submission id=%s", submission_id)
            return False
        self._staged[submission_id] = file
        logger.debug("Staged %s (%d bytes) for id=%s", file.name, file.size, submission_id)
        return True

    def unstage_file(self, submission_id: SubmissionId) -> None:
        self._staged.pop(submission_id, None)

    # ---- actions ----

    async def notify(self, student_id: Any, task_id: Any) -> Success | Failure | None:
        """
        Ask the backend to remind a student about an overdue task.

        Returns None (and sends nothing) while a notify for the same student is in flight.
        """
        if student_id in self._notifying:
            logger.debug("Notify for student=%s already in flight; ignoring", student_id)
            return None

        token = object()
        self._notifying[student_id] = token
        try:
            result = await self._with_deadline(
                self._gateway.notify(student_id, task_id),
                f"Notification to student {student_id}",
            )
        finally:
            self._release(self._notifying, self._notify_hidden, student_id, token)

        if isinstance(result, Failure):
            logger.info("Notify student=%s task=%s failed (%s)", student_id, task_id, result.kind.value)
            self._notifier.error(result.message)
        else:
            logger.info("Notified student=%s about task=%s (%s)", student_id, task_id, result.message or "ok")
            self._notifier.success(NOTIFY_OK)
        return result

    async def submit_on_behalf(self, submission_id: SubmissionId) -> Success | Failure | None:
        """
        Upload the staged file for a row, then reload the whole list.

        Returns None when the row is unknown or an upload for it is already in flight.
        A missing staged file is a validation failure; no request is sent.
        """
        if submission_id in self._uploading:
            logger.debug("Upload for id=%s already in flight; ignoring", submission_id)
            return None

        row = self._store.get(submission_id)
        if row is None:
            logger.warning("Submit for unknown submission id=%s ignored", submission_id)
            return None

        file = self._staged.get(submission_id)
        if file is None:
            self._notifier.error(NO_FILE_MESSAGE)
            return Failure(FailureKind.VALIDATION, NO_FILE_MESSAGE)

        token = object()
        self._uploading[submission_id] = token
        try:
            result = await self._with_deadline(
                self._gateway.upload_on_behalf(row.student_id, row.task_id, file),
                f"Upload for {row.student_name or row.student_id}",
            )

            if isinstance(result, Failure):
                logger.info("Upload for id=%s failed (%s); keeping staged file", submission_id, result.kind.value)
                self._notifier.error(result.message)
                return result

            # Only drop the file that was sent; a re-pick during the upload survives.
            if self._staged.get(submission_id) is file:
                del self._staged[submission_id]
            logger.info("Uploaded %s for student=%s task=%s", file.name, row.student_id, row.task_id)
            self._notifier.success(
                f"Task submission uploaded successfully for {row.student_name or row.student_id}"
            )

            reloaded = await self._store.reload()
            if isinstance(reloaded, Failure):
                self._notifier.error(reloaded.message)
            return result
        finally:
            self._release(self._uploading, self._upload_hidden, submission_id, token)

    # ---- internals ----

    @staticmethod
    def _release(inflight: dict[Any, object], hidden: set[Any], key: Any, token: object) -> None:
        if inflight.get(key) is token:
            del inflight[key]
            hidden.discard(key)

    async def _with_deadline(self, call: Awaitable[Success | Failure], what: str) -> Success | Failure:
        try:
            if self._timeout > 0:
                return await asyncio.wait_for(call, timeout=self._timeout)
            return await call
        except asyncio.TimeoutError:
            logger.warning("%s timed out after %.0fs", what, self._timeout)
            return Failure(FailureKind.TIMED_OUT, f"{what} timed out after {self._timeout:g}s")
        except Exception:
            logger.exception("%s crashed", what)
            return Failure(FailureKind.UNKNOWN, f"{what} failed unexpectedly")

    def _on_snapshot(self, store: WorkqueueStore) -> None:
        ids = store.ids()
        students = {item.student_id for item in store.submissions}

        gone_files = [k for k in self._staged if k not in ids]
        for k in gone_files:
            del self._staged[k]
        # Recomputed per snapshot: a row that comes back shows its running request again.
        self._upload_hidden = {k for k in self._uploading if k not in ids}
        self._notify_hidden = {k for k in self._notifying if k not in students}

        if gone_files:
            logger.debug("Dropped staged files of vanished rows: %s", gone_files)
