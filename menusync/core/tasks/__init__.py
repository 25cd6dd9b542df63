"""
Core tasks module - background execution with UI-thread delivery.
"""
from menusync.core.tasks.runner import BackgroundTaskRunner, TaskHandle, TaskOutcome

__all__ = ["BackgroundTaskRunner", "TaskHandle", "TaskOutcome"]
