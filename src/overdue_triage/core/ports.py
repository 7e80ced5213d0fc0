# src/overdue_triage/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the workqueue core.

The core depends on Protocols instead of concrete implementations.
This keeps the HTTP backend and the operator front-end swappable and makes testing easier.
"""

from typing import Any, Protocol

from .models import Failure, StagedFile, Success


class OverdueGateway(Protocol):
    """
    Backend API port.

    None of the methods raise for expected failures (network, validation);
    those come back as Failure.
    """

    async def load_overdue_submissions(self) -> Success | Failure: ...

    async def notify(self, student_id: Any, task_id: Any) -> Success | Failure: ...

    async def upload_on_behalf(
            self,
            student_id: Any,
            task_id: Any,
            file: StagedFile,
    ) -> Success | Failure: ...


class OperatorNotifier(Protocol):
    """Front-end port: short success/error signals shown to the operator (toasts)."""

    def success(self, message: str) -> None: ...
    def error(self, message: str) -> None: ...
