# src/overdue_triage/connectors/render.py

from __future__ import annotations

from datetime import date

from ..core.models import OverdueSubmission
from ..workqueue.queue import OverdueWorkqueue

EMPTY_TEXT = "No overdue task submissions found"
LOADING_TEXT = "Loading..."


def format_due(d: date) -> str:
    # "January 5, 2026"
    return f"{d.strftime('%B')} {d.day}, {d.year}"


def render_row(wq: OverdueWorkqueue, item: OverdueSubmission) -> str:
    flags: list[str] = []
    if wq.is_notifying(item.student_id):
        flags.append("notifying...")
    if wq.is_uploading(item.id):
        flags.append("uploading...")
    flag_str = f"  [{', '.join(flags)}]" if flags else ""

    lines = [
        f"[{item.id}] {item.student_name or '(no name)'}  OVERDUE{flag_str}",
        f"    {item.student_email or '-'}",
        f"    Task: {item.task_title or '-'}",
    ]
    if item.task_expiry_date is not None:
        lines.append(f"    Due: {format_due(item.task_expiry_date)}")
    staged = wq.staged_file(item.id)
    if staged is not None:
        lines.append(f"    Selected: {staged.name}")
    return "\n".join(lines)


def render_list(wq: OverdueWorkqueue) -> str:
    rows = wq.submissions
    header = f"Overdue Submissions ({len(rows)})"
    if wq.search_term:
        header += f"  search: {wq.search_term!r}"

    if not rows:
        body = LOADING_TEXT if wq.loading else EMPTY_TEXT
        return f"{header}\n  {body}"
    return "\n".join([header, *(render_row(wq, item) for item in rows)])
