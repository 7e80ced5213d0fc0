# src/overdue_triage/gateway/client.py

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..core.models import Failure, FailureKind, OverdueSubmission, StagedFile, Success

logger = logging.getLogger(__name__)

PENDING_SUBMISSIONS_PATH = "/dashboard/pending-task-submissions"
NOTIFY_OVERDUE_PATH = "/dashboard/notify-student-overdue"
UPLOAD_SUBMISSION_PATH = "/tasks/{task_id}/upload-student-submission"

LOAD_FALLBACK = "Failed to load pending task submissions"
NOTIFY_FALLBACK = "Failed to send notification to student"
UPLOAD_FALLBACK = "Failed to upload task submission"

NOTIFY_OK = "Notification sent successfully to student"


def _make_timeout(settings: Any) -> httpx.Timeout:
    connect_s = float(getattr(settings, "connect_timeout_seconds", 5.0))
    read_s = float(getattr(settings, "request_timeout_seconds", 10.0))
    return httpx.Timeout(connect=connect_s, read=read_s, write=read_s, pool=connect_s)


def _first_field_error(error: Any) -> str | None:
    # Validation errors arrive as {"field": ["msg", ...], ...}.
    if not isinstance(error, dict):
        return None
    for msgs in error.values():
        if isinstance(msgs, list) and msgs:
            return str(msgs[0])
        if isinstance(msgs, str) and msgs:
            return msgs
    return None


def _error_message(body: Any, fallback: str) -> str:
    if not isinstance(body, dict):
        return fallback
    msg = str(body.get("message") or "").strip()
    if not msg:
        return fallback
    detail = _first_field_error(body.get("error"))
    if detail and detail not in msg:
        return f"{msg}: {detail}"
    return msg


def _classify_status(status: int) -> FailureKind:
    if status in (401, 403):
        return FailureKind.UNKNOWN
    if 400 <= status < 500:
        return FailureKind.VALIDATION
    return FailureKind.UNKNOWN


def parse_snapshot(data: Any) -> tuple[OverdueSubmission, ...]:
    """
    Turn the envelope's `data` into a snapshot.

    Broken rows are skipped; a repeated id keeps its first occurrence.
    """
    if data is None:
        return ()
    if not isinstance(data, list):
        raise ValueError(f"expected a list of submissions, got {type(data).__name__}")

    out: list[OverdueSubmission] = []
    seen: set[Any] = set()
    for raw in data:
        try:
            item = OverdueSubmission.from_api(raw)
        except ValueError as e:
            logger.warning("Skipping malformed overdue row: %s (%r)", e, raw)
            continue
        if item.id in seen:
            logger.warning("Duplicate overdue row id=%s; keeping the first one", item.id)
            continue
        seen.add(item.id)
        out.append(item)
    return tuple(out)


class HttpOverdueGateway:
    """
    OverdueGateway over the admin REST API.

    Envelope: {"message": str, "data": any, "error": any}.
    Transport errors, non-2xx responses and broken bodies become Failure; nothing raises.
    """

    def __init__(self, settings: Any, *, client: httpx.AsyncClient | None = None) -> None:
        self._owns_client = client is None
        if client is None:
            headers = {"Accept": "application/json"}
            token = getattr(settings, "api_token", None)
            if token:
                headers["Authorization"] = f"Bearer {token}"
            client = httpx.AsyncClient(
                base_url=str(getattr(settings, "api_base_url", "")),
                headers=headers,
                timeout=_make_timeout(settings),
            )
        self._client = client

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HttpOverdueGateway:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # ---- low-level ----

    async def _request(self, method: str, url: str, fallback: str, **kwargs: Any) -> Success | Failure:
        try:
            resp = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.info("%s %s: transport error (%s)", method, url, e.__class__.__name__)
            return Failure(FailureKind.TRANSPORT, f"{fallback} (network error)")

        try:
            body = resp.json()
        except ValueError:
            body = None

        if resp.is_success:
            if not isinstance(body, dict):
                logger.warning("%s %s: unexpected response body (status=%s)", method, url, resp.status_code)
                return Failure(FailureKind.UNKNOWN, fallback)
            return Success(value=body.get("data"), message=str(body.get("message") or ""))

        if resp.status_code in (401, 403):
            logger.warning("%s %s: rejected with %s; check TRIAGE_API_TOKEN", method, url, resp.status_code)
        else:
            logger.info("%s %s: failed with status=%s", method, url, resp.status_code)
        return Failure(_classify_status(resp.status_code), _error_message(body, fallback))

    # ---- OverdueGateway ----

    async def load_overdue_submissions(self) -> Success | Failure:
        result = await self._request("GET", PENDING_SUBMISSIONS_PATH, LOAD_FALLBACK)
        if isinstance(result, Failure):
            return result
        try:
            snapshot = parse_snapshot(result.value)
        except ValueError:
            logger.warning("Overdue list has an unexpected shape", exc_info=True)
            return Failure(FailureKind.UNKNOWN, LOAD_FALLBACK)
        logger.debug("Loaded %d overdue rows", len(snapshot))
        return Success(value=snapshot, message=result.message)

    async def notify(self, student_id: Any, task_id: Any) -> Success | Failure:
        result = await self._request(
            "POST",
            NOTIFY_OVERDUE_PATH,
            NOTIFY_FALLBACK,
            json={"student_id": student_id, "task_id": task_id},
        )
        if isinstance(result, Success) and not result.message:
            return Success(value=result.value, message=NOTIFY_OK)
        return result

    async def upload_on_behalf(self, student_id: Any, task_id: Any, file: StagedFile) -> Success | Failure:
        url = UPLOAD_SUBMISSION_PATH.format(task_id=task_id)
        content_type = file.content_type or "application/octet-stream"
        return await self._request(
            "POST",
            url,
            UPLOAD_FALLBACK,
            data={"student_id": str(student_id)},
            files={"file": (file.name, file.content, content_type)},
        )
