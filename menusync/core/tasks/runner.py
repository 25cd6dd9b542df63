"""
BackgroundTaskRunner - QThreadPool work with UI-thread result delivery.

Work runs on pool threads and must not touch widgets. When it finishes, the
outcome crosses back to the runner's own thread (the UI thread) over a queued
Qt signal, and the caller's callback runs there exactly once, unless the
handle was cancelled first.

Usage:
    runner = BackgroundTaskRunner(max_threads=4)
    handle = runner.run(check_login, on_login_checked, name="aws-session")
    ...
    handle.cancel()  # on_login_checked will not be called
"""
import itertools
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from loguru import logger
from PySide6.QtCore import QObject, QThreadPool, Qt, Signal


@dataclass(frozen=True)
class TaskOutcome:
    """Result of one background run: a value or the raised error."""
    task_id: int
    name: str
    value: Any = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class TaskHandle:
    """
    Caller-side view of a submitted task.

    cancel() is cooperative: the work may keep running, but once cancelled
    before delivery no completion callback is made for this handle.
    """

    def __init__(self, task_id: int, name: str = ""):
        self.task_id = task_id
        self.name = name
        self._cancelled = False
        self._done = False

    def cancel(self) -> None:
        if self._done:
            return
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def done(self) -> bool:
        """True once the completion callback has been delivered."""
        return self._done

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else "done" if self._done else "pending"
        return f"TaskHandle(#{self.task_id} {self.name!r} {state})"


class BackgroundTaskRunner(QObject):
    """
    Runs callables off the UI thread.

    Must be created on the UI thread: deliveries are queued to the thread the
    runner lives in.

    Signals:
        task_finished: internal hand-off (task_id, value, error) from a pool
            thread to the runner's thread
    """

    task_finished = Signal(object, object, object)

    def __init__(self, max_threads: int = 4, parent: QObject = None):
        super().__init__(parent)
        self._pool = QThreadPool(self)
        self._pool.setMaxThreadCount(max(1, max_threads))
        self._ids = itertools.count(1)
        # task_id -> (handle, callback); touched only on the runner's thread
        self._pending: Dict[int, Tuple[TaskHandle, Callable[[TaskOutcome], None]]] = {}
        self.task_finished.connect(self._deliver, Qt.ConnectionType.QueuedConnection)

    def run(self, work: Callable[[], Any], on_complete: Callable[[TaskOutcome], None],
            name: str = "") -> TaskHandle:
        """
        Submit work for background execution. Non-blocking.

        Args:
            work: Zero-argument callable executed on a pool thread
            on_complete: Called on the UI thread with the TaskOutcome
            name: Label used in logs

        Returns:
            TaskHandle for cancellation
        """
        task_id = next(self._ids)
        handle = TaskHandle(task_id, name)
        self._pending[task_id] = (handle, on_complete)

        def _job():
            try:
                value, error = work(), None
            except Exception as e:
                value, error = None, e
            self.task_finished.emit(task_id, value, error)

        self._pool.start(_job)
        logger.debug(f"BackgroundTaskRunner: queued #{task_id} ({name or 'unnamed'})")
        return handle

    def _deliver(self, task_id: int, value: Any, error: Optional[BaseException]) -> None:
        entry = self._pending.pop(task_id, None)
        if entry is None:
            return
        handle, on_complete = entry

        if handle.cancelled:
            logger.debug(f"BackgroundTaskRunner: dropped result of cancelled #{task_id} ({handle.name})")
            return

        handle._done = True
        if error is not None:
            logger.debug(f"BackgroundTaskRunner: #{task_id} ({handle.name}) failed: {error!r}")

        try:
            on_complete(TaskOutcome(task_id, handle.name, value, error))
        except Exception:
            logger.exception(f"BackgroundTaskRunner: completion callback for #{task_id} ({handle.name}) raised")

    def pending_count(self) -> int:
        """Tasks submitted but not yet delivered (cancelled ones included until their work ends)."""
        return len(self._pending)

    def shutdown(self, wait_ms: int = 5000) -> bool:
        """
        Cancel every outstanding handle and wait for running work.

        Returns:
            True if the pool drained within wait_ms
        """
        for handle, _ in self._pending.values():
            handle.cancel()
        self._pool.clear()
        drained = self._pool.waitForDone(wait_ms)
        self._pending.clear()
        if not drained:
            logger.warning(f"BackgroundTaskRunner: work still running after {wait_ms}ms")
        logger.info("BackgroundTaskRunner: shut down")
        return drained
