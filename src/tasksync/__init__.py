"""tasksync - offline-first task manager with queued reconciliation."""

__version__ = "0.1.0"
