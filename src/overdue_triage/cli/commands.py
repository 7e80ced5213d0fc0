# src/overdue_triage/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from ..connectors.render import render_list
from ..core.models import OverdueSubmission, StagedFile
from ..core.state import AppState

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console (/help, /notify, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        return handler(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _find_row(state: AppState, raw_id: str) -> OverdueSubmission | None:
    # Console input is text; row ids may be ints or strings on the wire.
    for item in state.workqueue.all_submissions:
        if str(item.id) == raw_id:
            return item
    return None


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_list(state: AppState, args: list[str]) -> str:
    return render_list(state.workqueue)


def cmd_search(state: AppState, args: list[str]) -> str:
    """
    /search          -> clear the search
    /search maria    -> show rows whose name, email or task title contain "maria"
    """
    state.workqueue.search(" ".join(args))
    return render_list(state.workqueue)


def cmd_reload(state: AppState, args: list[str]) -> str:
    state.spawn(state.workqueue.reload(), name="reload")
    return "Reloading overdue submissions..."


def cmd_stage(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        return "Usage: /stage <id> <path>"
    row = _find_row(state, args[0])
    if row is None:
        return f"No overdue submission with id {args[0]}."

    path = Path(" ".join(args[1:])).expanduser()
    try:
        file = StagedFile.from_path(path)
    except OSError as e:
        logger.info("Cannot read %s: %s", path, e)
        return f"Cannot read {path}: {e.strerror or e}"

    if not state.workqueue.stage_file(row.id, file):
        return f"No overdue submission with id {args[0]}."
    return f"Selected: {file.name} ({file.size} bytes) for {row.student_name or row.student_id}"


def cmd_unstage(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /unstage <id>"
    row = _find_row(state, args[0])
    if row is None:
        return f"No overdue submission with id {args[0]}."
    state.workqueue.unstage_file(row.id)
    return f"Cleared selected file for {row.student_name or row.student_id}."


def cmd_notify(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /notify <id>"
    row = _find_row(state, args[0])
    if row is None:
        return f"No overdue submission with id {args[0]}."

    wq = state.workqueue
    if wq.is_notifying(row.student_id):
        return f"A notification to {row.student_name or row.student_id} is already being sent."
    state.spawn(wq.notify(row.student_id, row.task_id), name=f"notify:{row.student_id}")
    return f"Notifying {row.student_name or row.student_id} about '{row.task_title or row.task_id}'..."


def cmd_submit(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /submit <id>"
    row = _find_row(state, args[0])
    if row is None:
        return f"No overdue submission with id {args[0]}."

    wq = state.workqueue
    if wq.is_uploading(row.id):
        return f"An upload for {row.student_name or row.student_id} is already in progress."
    staged = wq.staged_file(row.id)
    if staged is None:
        return f"Please select a file to upload (/stage {row.id} <path>)."
    state.spawn(wq.submit_on_behalf(row.id), name=f"upload:{row.id}")
    return f"Uploading {staged.name} for {row.student_name or row.student_id}..."


def cmd_status(state: AppState, args: list[str]) -> str:
    wq = state.workqueue
    rows = wq.all_submissions
    notifying = sorted({str(r.student_id) for r in rows if wq.is_notifying(r.student_id)})
    uploading = [str(r.id) for r in rows if wq.is_uploading(r.id)]
    staged = [str(r.id) for r in rows if wq.staged_file(r.id) is not None]
    return (
        "Status:\n"
        f"  API: {getattr(state.settings, 'api_base_url', '?')}\n"
        f"  Loading: {'yes' if wq.loading else 'no'}\n"
        f"  Overdue rows: {len(rows)} (visible: {len(wq.submissions)})\n"
        f"  Search: {wq.search_term!r}\n"
        f"  Notifying students: {', '.join(notifying) or '-'}\n"
        f"  Uploading rows: {', '.join(uploading) or '-'}\n"
        f"  Staged files: {', '.join(staged) or '-'}"
    )


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="Show overdue submissions (filtered).", aliases=["ls"])
registry.register("search", cmd_search, help_text="Filter by name/email/task: /search <term> (empty clears).")
registry.register("reload", cmd_reload, help_text="Reload the overdue list from the server.")
registry.register("stage", cmd_stage, help_text="Select a file for a row: /stage <id> <path>.")
registry.register("unstage", cmd_unstage, help_text="Drop the selected file: /unstage <id>.")
registry.register("notify", cmd_notify, help_text="Remind the student of a row: /notify <id>.")
registry.register("submit", cmd_submit, help_text="Upload the selected file on behalf of the student: /submit <id>.")
registry.register("status", cmd_status, help_text="Show loading state and in-flight actions.")
