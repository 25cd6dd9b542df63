"""
Control handles.

Adapters exposing the three (plus tooltip) operations the engine uses on a
widget. Handles only touch the widget when the value actually changes.
"""
from typing import Union

from PySide6.QtGui import QAction
from PySide6.QtWidgets import QMenu


class ActionControl:
    """ControlHandle over a QAction, or over a QMenu through its menuAction()."""

    def __init__(self, target: Union[QAction, QMenu]):
        self.action: QAction = target.menuAction() if isinstance(target, QMenu) else target

    def set_enabled(self, enabled: bool) -> None:
        if self.action.isEnabled() != enabled:
            self.action.setEnabled(enabled)

    def set_visible(self, visible: bool) -> None:
        if self.action.isVisible() != visible:
            self.action.setVisible(visible)

    def set_label(self, label: str) -> None:
        if self.action.text() != label:
            self.action.setText(label)

    def set_tooltip(self, tooltip: str) -> None:
        if self.action.toolTip() != tooltip:
            self.action.setToolTip(tooltip)

    def __repr__(self) -> str:
        return f"ActionControl({self.action.text()!r})"
