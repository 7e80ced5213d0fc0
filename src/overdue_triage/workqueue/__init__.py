"""
Overdue-submission workqueue.

Components:
- store.py: authoritative snapshot + loading flag, full-replace reloads
- filters.py: pure search filter over name/email/task title
- actions.py: notify / submit-on-behalf with per-student and per-row guards
- queue.py: the facade the front-end talks to
"""

from .actions import RowActionController
from .filters import visible
from .queue import OverdueWorkqueue
from .store import WorkqueueStore

__all__ = ["OverdueWorkqueue", "RowActionController", "WorkqueueStore", "visible"]
