# src/overdue_triage/workqueue/filters.py

from __future__ import annotations

from collections.abc import Iterable

from ..core.models import OverdueSubmission


def matches(item: OverdueSubmission, needle: str) -> bool:
    """`needle` must already be lower-cased."""
    return (
        needle in (item.student_name or "").lower()
        or needle in (item.student_email or "").lower()
        or needle in (item.task_title or "").lower()
    )


def visible(submissions: Iterable[OverdueSubmission], search_term: str | None) -> list[OverdueSubmission]:
    """
    Rows to show for a search term.

    Empty term -> everything. Otherwise a case-insensitive substring match on
    student name, email or task title. Source order is kept.
    """
    term = (search_term or "").lower()
    if not term:
        return list(submissions)
    return [item for item in submissions if matches(item, term)]
