"""
menusync Core - engine infrastructure.

Provides:
- EventBus: typed pub/sub for document/session/resource changes
- BackgroundTaskRunner: pool execution with UI-thread delivery
- AsyncProbe: versioned, cancellable remote status checks
- ConfigManager: pydantic configuration with persistence
- setup_logging: loguru configuration

Usage:
    from menusync.core import EventBus, BackgroundTaskRunner, AsyncProbe

    bus = EventBus()
    runner = BackgroundTaskRunner(max_threads=4)
    probe = AsyncProbe("aws-session", auth.is_logged_in, runner)
"""
from .config import (
    AppConfig,
    ConfigManager,
    GeneralSettings,
    MenuSettings,
    ProbeSettings,
    RunnerSettings,
)
from .errors import (
    ControllerClosedError,
    DuplicateBindingError,
    InvariantViolation,
    MenuSyncError,
    ProbeTimeoutError,
    TransientProbeFailure,
)
from .events import (
    DocumentState,
    Event,
    EventBus,
    EventKind,
    ResourceAvailability,
    Resources,
    SessionStatus,
    Signal,
)
from .logging import setup_logging
from .probes import (
    AsyncProbe,
    Failure,
    Pending,
    ProbeRefreshPolicy,
    ProbeResult,
    ProbeState,
    RefreshMode,
    Success,
)
from .providers import AuthProvider, ControlHandle, DocumentStateProvider, ResourceChecker
from .tasks import BackgroundTaskRunner, TaskHandle, TaskOutcome

__all__ = [
    # Configuration
    "AppConfig",
    "ConfigManager",
    "GeneralSettings",
    "MenuSettings",
    "ProbeSettings",
    "RunnerSettings",
    "setup_logging",

    # Errors
    "MenuSyncError",
    "TransientProbeFailure",
    "ProbeTimeoutError",
    "InvariantViolation",
    "DuplicateBindingError",
    "ControllerClosedError",

    # Events
    "EventBus",
    "Event",
    "EventKind",
    "Resources",
    "DocumentState",
    "SessionStatus",
    "ResourceAvailability",
    "Signal",

    # Background work
    "BackgroundTaskRunner",
    "TaskHandle",
    "TaskOutcome",

    # Probes
    "AsyncProbe",
    "ProbeState",
    "ProbeRefreshPolicy",
    "RefreshMode",
    "ProbeResult",
    "Pending",
    "Success",
    "Failure",

    # Collaborators
    "AuthProvider",
    "ControlHandle",
    "DocumentStateProvider",
    "ResourceChecker",
]
