"""
Menu affordance synchronization.

Provides:
- MenuStateController: keeps one menu's controls in sync with bus events and probes
- AffordanceBinding / AffordanceState / KnownState: pure binding rules
- ActionRegistry / ActionControl: named QActions exposed as control handles
- MenuBarSync: the standard genome-browser menu bar rules wired together
"""
from .action_registry import ActionRegistry
from .bindings import (
    DISABLED,
    HIDDEN,
    AffordanceBinding,
    AffordanceState,
    KnownState,
    ProbeResults,
    evaluate_binding,
)
from .controller import MenuStateController
from .controls import ActionControl
from .menu_bar import MenuBarSync
from .standard import Controls, Probes

__all__ = [
    "ActionRegistry",
    "ActionControl",
    "AffordanceBinding",
    "AffordanceState",
    "KnownState",
    "ProbeResults",
    "evaluate_binding",
    "DISABLED",
    "HIDDEN",
    "MenuStateController",
    "MenuBarSync",
    "Controls",
    "Probes",
]
