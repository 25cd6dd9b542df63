"""
menusync - reactive menu affordance synchronization for PySide6 desktop apps.

Keeps menu items consistent with the active document, remote session status
and remote resource availability, without blocking the UI thread and without
letting stale background results overwrite newer state.
"""
from menusync.core import (
    AppConfig,
    AsyncProbe,
    BackgroundTaskRunner,
    ConfigManager,
    Event,
    EventBus,
    EventKind,
    setup_logging,
)
from menusync.ui.menus import (
    ActionRegistry,
    AffordanceBinding,
    AffordanceState,
    KnownState,
    MenuBarSync,
    MenuStateController,
)

__version__ = "0.1.0"

__all__ = [
    "AppConfig",
    "ConfigManager",
    "setup_logging",
    "EventBus",
    "Event",
    "EventKind",
    "BackgroundTaskRunner",
    "AsyncProbe",
    "ActionRegistry",
    "AffordanceBinding",
    "AffordanceState",
    "KnownState",
    "MenuStateController",
    "MenuBarSync",
]
