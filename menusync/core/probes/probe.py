"""
AsyncProbe - a versioned, cancellable wrapper around one recurring remote check.

Every start() bumps the probe version and cancels the previous background
run. Completions are tagged with the version captured at submission; only a
completion whose version is still current updates probe.result. The single
listener is told about every delivery and must ignore the ones for which
probe.is_current(result) is False.

State machine:
    IDLE -> RUNNING -> RESOLVED | CANCELLED, and back to RUNNING on start().

Usage:
    probe = AsyncProbe("aws-session", auth.is_logged_in, runner, timeout_s=10)
    probe.set_listener(on_probe_result)
    probe.start()
"""
import time
from enum import Enum
from functools import partial
from typing import Any, Callable, Generic, Optional, TypeVar

from loguru import logger
from PySide6.QtCore import QTimer

from menusync.core.errors import ProbeTimeoutError
from menusync.core.tasks.runner import BackgroundTaskRunner, TaskHandle, TaskOutcome

from .policy import ProbeRefreshPolicy
from .result import NOT_RUN, Failure, Pending, ProbeResult, Success

T = TypeVar("T")

ProbeListener = Callable[["AsyncProbe", ProbeResult], None]


class ProbeState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    RESOLVED = "resolved"
    CANCELLED = "cancelled"


class AsyncProbe(Generic[T]):
    """
    Args:
        name: Identifier used by bindings to look the result up
        check: Blocking zero-argument callable, run on a pool thread
        runner: BackgroundTaskRunner that owns delivery to the UI thread
        policy: When about-to-show triggers should re-run the check
        timeout_s: Resolve Failure(ProbeTimeoutError) if the check takes longer
        clock: Monotonic time source, seconds
    """

    def __init__(self, name: str, check: Callable[[], T], runner: BackgroundTaskRunner,
                 policy: Optional[ProbeRefreshPolicy] = None,
                 timeout_s: Optional[float] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.name = name
        self.policy = policy or ProbeRefreshPolicy.always()
        self.timeout_s = timeout_s
        self._check = check
        self._runner = runner
        self._clock = clock

        self._version = 0
        self._state = ProbeState.IDLE
        self._result: ProbeResult = NOT_RUN
        self._resolved_at: Optional[float] = None
        self._stale = False
        self._handle: Optional[TaskHandle] = None
        self._timer: Optional[QTimer] = None
        self._listener: Optional[ProbeListener] = None

    # --- Introspection ---

    @property
    def current_version(self) -> int:
        return self._version

    @property
    def state(self) -> ProbeState:
        return self._state

    @property
    def result(self) -> ProbeResult:
        """Latest current result (Pending while running or never run)."""
        return self._result

    @property
    def resolved_at(self) -> Optional[float]:
        return self._resolved_at

    @property
    def is_running(self) -> bool:
        return self._state is ProbeState.RUNNING

    def is_current(self, result: ProbeResult) -> bool:
        return result.version == self._version

    def needs_refresh(self, now: Optional[float] = None) -> bool:
        if self.is_running:
            return False
        now = self._clock() if now is None else now
        return self.policy.needs_refresh(self._result, self._resolved_at, self._stale, now)

    # --- Control ---

    def set_listener(self, listener: Optional[ProbeListener]) -> None:
        if self._listener is not None and listener is not None and listener is not self._listener:
            logger.debug(f"Probe '{self.name}': replacing listener")
        self._listener = listener

    def start(self) -> int:
        """
        Launch a fresh check, invalidating any in-flight one.

        Returns:
            The new current version
        """
        self._cancel_outstanding()
        self._version += 1
        version = self._version
        self._state = ProbeState.RUNNING
        self._result = Pending(version)
        self._handle = self._runner.run(
            self._check,
            partial(self._on_complete, version),
            name=f"probe:{self.name}#{version}",
        )
        if self.timeout_s:
            self._arm_timeout(version)
        logger.debug(f"Probe '{self.name}' started (v{version})")
        return version

    def cancel(self) -> None:
        """Stop waiting for the in-flight check. No terminal result is produced."""
        self._cancel_outstanding()
        if self._state is ProbeState.RUNNING:
            self._state = ProbeState.CANCELLED
            logger.debug(f"Probe '{self.name}' cancelled (v{self._version})")

    def invalidate(self) -> None:
        """Mark the last result stale so the next trigger re-runs the check."""
        self._stale = True

    # --- Delivery (UI thread) ---

    def _on_complete(self, version: int, outcome: TaskOutcome) -> None:
        if version == self._version and self._state is ProbeState.CANCELLED:
            logger.debug(f"Probe '{self.name}': completion after cancel dropped (v{version})")
            return
        if outcome.ok:
            result: ProbeResult = Success(version, outcome.value)
        else:
            result = Failure(version, outcome.error)
        self._settle(result)

    def _on_timeout(self, version: int) -> None:
        if version != self._version or self._state is not ProbeState.RUNNING:
            return
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        logger.warning(f"Probe '{self.name}' timed out after {self.timeout_s:g}s (v{version})")
        self._settle(Failure(version, ProbeTimeoutError(self.name, self.timeout_s)))

    def _settle(self, result: ProbeResult) -> None:
        if self.is_current(result):
            self._handle = None
            self._stop_timer()
            self._result = result
            self._state = ProbeState.RESOLVED
            self._resolved_at = self._clock()
            self._stale = False
            if result.is_failure:
                logger.info(f"Probe '{self.name}' failed (v{result.version}): {result.cause!r}")
            else:
                logger.debug(f"Probe '{self.name}' resolved (v{result.version})")
        else:
            logger.debug(f"Probe '{self.name}': late result v{result.version}, current is v{self._version}")

        if self._listener is None:
            return
        try:
            self._listener(self, result)
        except Exception:
            logger.exception(f"Probe '{self.name}' listener raised")

    # --- Internals ---

    def _arm_timeout(self, version: int) -> None:
        timer = QTimer()
        timer.setSingleShot(True)
        timer.timeout.connect(partial(self._on_timeout, version))
        timer.start(int(self.timeout_s * 1000))
        self._timer = timer

    def _stop_timer(self) -> None:
        if self._timer is not None:
            self._timer.stop()
            self._timer = None

    def _cancel_outstanding(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._stop_timer()

    def __repr__(self) -> str:
        return f"AsyncProbe({self.name!r}, v{self._version}, {self._state.value})"
