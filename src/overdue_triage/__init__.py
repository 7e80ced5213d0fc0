"""Admin console workqueue for overdue task submissions."""

__version__ = "0.1.0"
