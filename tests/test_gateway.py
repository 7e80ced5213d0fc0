# tests/test_gateway.py

from __future__ import annotations

import json
from datetime import date

import httpx
import pytest

from overdue_triage.core.models import Failure, FailureKind, StagedFile, Success
from overdue_triage.gateway.client import HttpOverdueGateway, parse_snapshot


def _gateway(handler) -> HttpOverdueGateway:
    client = httpx.AsyncClient(
        base_url="http://lms.test/api",
        transport=httpx.MockTransport(handler),
    )
    return HttpOverdueGateway(settings=None, client=client)


def _envelope(data=None, message="ok", error=None, status=200) -> httpx.Response:
    return httpx.Response(status, json={"message": message, "data": data, "error": error})


@pytest.mark.asyncio
async def test_load_parses_rows_and_keeps_server_order() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _envelope(
            [
                {
                    "id": "5_9",
                    "student_id": 9,
                    "student_name": "Maria Lopez",
                    "student_email": "maria@school.test",
                    "task_id": 5,
                    "task_title": "Essay",
                    "task_expiry_date": "2026-01-26",
                    "is_overdue": True,
                },
                {
                    "id": "6_10",
                    "student_id": 10,
                    "student_name": None,
                    "student_email": "j@school.test",
                    "task_id": 6,
                    "task_title": "Lab",
                    "task_expiry_date": None,
                },
            ]
        )

    async with _gateway(handler) as gw:
        result = await gw.load_overdue_submissions()

    assert seen[0].method == "GET"
    assert seen[0].url.path == "/api/dashboard/pending-task-submissions"
    assert isinstance(result, Success)
    first, second = result.value
    assert first.id == "5_9"
    assert first.task_expiry_date == date(2026, 1, 26)
    assert second.student_name is None
    assert second.task_expiry_date is None


@pytest.mark.asyncio
async def test_load_with_null_data_is_an_empty_snapshot() -> None:
    async with _gateway(lambda r: _envelope(None)) as gw:
        result = await gw.load_overdue_submissions()
    assert isinstance(result, Success)
    assert result.value == ()


@pytest.mark.asyncio
async def test_load_server_error_uses_server_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return _envelope(message="Failed to retrieve pending task submissions", error="SQL error", status=500)

    async with _gateway(handler) as gw:
        result = await gw.load_overdue_submissions()

    assert isinstance(result, Failure)
    assert result.kind == FailureKind.UNKNOWN
    assert result.message == "Failed to retrieve pending task submissions"


@pytest.mark.asyncio
async def test_transport_error_becomes_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _gateway(handler) as gw:
        result = await gw.notify(9, 5)

    assert isinstance(result, Failure)
    assert result.kind == FailureKind.TRANSPORT
    assert result.message == "Failed to send notification to student (network error)"


@pytest.mark.asyncio
async def test_notify_posts_json_body() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _envelope(None, message="Notification sent successfully to student")

    async with _gateway(handler) as gw:
        result = await gw.notify(9, 5)

    assert isinstance(result, Success)
    assert result.message == "Notification sent successfully to student"
    assert seen[0].url.path == "/api/dashboard/notify-student-overdue"
    assert json.loads(seen[0].content) == {"student_id": 9, "task_id": 5}


@pytest.mark.asyncio
async def test_upload_sends_multipart_with_student_and_file() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _envelope({"id": 1}, message="Submission uploaded")

    file = StagedFile(name="essay.pdf", content=b"PDFDATA", content_type="application/pdf")
    async with _gateway(handler) as gw:
        result = await gw.upload_on_behalf(10, 6, file)

    assert isinstance(result, Success)
    req = seen[0]
    assert req.method == "POST"
    assert req.url.path == "/api/tasks/6/upload-student-submission"
    assert req.headers["content-type"].startswith("multipart/form-data")
    body = req.content
    assert b'name="student_id"' in body and b"10" in body
    assert b'filename="essay.pdf"' in body and b"PDFDATA" in body


@pytest.mark.asyncio
async def test_upload_validation_error_carries_first_field_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return _envelope(
            message="Validation failed",
            error={"file": ["The file may not be greater than 10240 kilobytes."]},
            status=422,
        )

    async with _gateway(handler) as gw:
        result = await gw.upload_on_behalf(10, 6, StagedFile(name="big.zip", content=b"x"))

    assert isinstance(result, Failure)
    assert result.kind == FailureKind.VALIDATION
    assert result.message == "Validation failed: The file may not be greater than 10240 kilobytes."


@pytest.mark.asyncio
async def test_non_json_error_falls_back_to_generic_message() -> None:
    async with _gateway(lambda r: httpx.Response(502, text="<html>Bad Gateway</html>")) as gw:
        result = await gw.upload_on_behalf(10, 6, StagedFile(name="a.txt", content=b"x"))

    assert isinstance(result, Failure)
    assert result.message == "Failed to upload task submission"


def test_parse_snapshot_skips_broken_rows_and_duplicate_ids() -> None:
    rows = parse_snapshot(
        [
            {"id": 1, "student_id": 9, "task_id": 5, "task_expiry_date": "not-a-date"},
            {"id": 1, "student_id": 99, "task_id": 55},
            {"student_id": 9, "task_id": 5},
            "garbage",
            {"id": 2, "student_id": 10, "task_id": 6, "task_expiry_date": "2026-02-01T00:00:00.000000Z"},
        ]
    )
    assert [r.id for r in rows] == [1, 2]
    assert rows[0].student_id == 9
    assert rows[0].task_expiry_date is None
    assert rows[1].task_expiry_date == date(2026, 2, 1)


def test_default_client_sends_bearer_token(settings) -> None:
    gw = HttpOverdueGateway(settings)
    assert gw._client.headers["Authorization"] == "Bearer t0ken"
    assert str(gw._client.base_url).startswith("http://lms.test/api")
