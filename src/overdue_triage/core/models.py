# src/overdue_triage/core/models.py

from __future__ import annotations

import logging
import mimetypes
from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

# Opaque row id as sent by the server ("<task_id>_<student_id>" on the reference backend).
SubmissionId = str | int


class FailureKind(StrEnum):
    """
    Why an action failed.

    All kinds are reported to the operator the same way; the kind only feeds logs/tests.
    """

    TRANSPORT = "transport"
    VALIDATION = "validation"
    UNKNOWN = "unknown"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True, slots=True)
class Success:
    value: Any = None
    message: str = ""


@dataclass(frozen=True, slots=True)
class Failure:
    kind: FailureKind
    message: str


Result = Success | Failure


def _parse_date(raw: Any) -> date | None:
    if raw is None:
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    s = str(raw).strip()
    if not s:
        return None
    try:
        return date.fromisoformat(s[:10])
    except ValueError:
        logger.debug("Unparseable task_expiry_date=%r", raw)
        return None


def _opt_str(raw: Any) -> str | None:
    return None if raw is None else str(raw)


@dataclass(frozen=True, slots=True)
class OverdueSubmission:
    """One (student, task) pair the server reports as overdue."""

    id: SubmissionId
    student_id: Any
    student_name: str | None
    student_email: str | None
    task_id: Any
    task_title: str | None
    task_expiry_date: date | None = None

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> OverdueSubmission:
        if not isinstance(raw, dict):
            raise ValueError(f"expected an object, got {type(raw).__name__}")
        for key in ("id", "student_id", "task_id"):
            if raw.get(key) is None:
                raise ValueError(f"missing {key}")
        return cls(
            id=raw["id"],
            student_id=raw["student_id"],
            student_name=_opt_str(raw.get("student_name")),
            student_email=_opt_str(raw.get("student_email")),
            task_id=raw["task_id"],
            task_title=_opt_str(raw.get("task_title")),
            task_expiry_date=_parse_date(raw.get("task_expiry_date")),
        )


@dataclass(frozen=True, slots=True)
class StagedFile:
    """A file picked by the operator for upload, held in memory until submitted."""

    name: str
    content: bytes
    content_type: str | None = None

    @classmethod
    def from_path(cls, path: str | Path) -> StagedFile:
        p = Path(path).expanduser()
        content_type, _ = mimetypes.guess_type(p.name)
        return cls(name=p.name, content=p.read_bytes(), content_type=content_type)

    @property
    def size(self) -> int:
        return len(self.content)
