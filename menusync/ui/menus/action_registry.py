"""
Action registry: named QActions and menus, handed out as control handles.
"""
from typing import Callable, Dict, Optional, Union

from loguru import logger
from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import QMenu, QWidget

from .controls import ActionControl


class ActionRegistry:
    """
    Maps control ids (e.g. "tracks.load_hosted") to QActions and QMenus so
    bindings can address menu items by name.
    """
    def __init__(self, parent: Optional[QWidget] = None):
        self.parent = parent
        self._actions: Dict[str, QAction] = {}
        self._menus: Dict[str, QMenu] = {}

    def register_action(self,
                        name: str,
                        text: str,
                        callback: Optional[Callable] = None,
                        shortcut: Optional[str] = None,
                        tooltip: Optional[str] = None) -> QAction:
        """
        Create and register an action.

        Args:
            name: Control id (e.g. "aws.login")
            text: Initial display text
            callback: Called when triggered
            shortcut: Keyboard shortcut (e.g. "Ctrl+O")
            tooltip: Initial tooltip

        Returns:
            QAction instance (the existing one if name is taken)
        """
        if name in self._actions:
            logger.warning(f"Action already registered: {name}")
            return self._actions[name]

        action = QAction(text, self.parent)
        if callback is not None:
            action.triggered.connect(callback)
        if shortcut:
            action.setShortcut(QKeySequence(shortcut))
        if tooltip:
            action.setToolTip(tooltip)

        self._actions[name] = action
        logger.debug(f"Action registered: {name}")
        return action

    def register_menu(self, name: str, menu: QMenu) -> QMenu:
        """Register a menu so its visibility can be bound like an action."""
        self._menus[name] = menu
        return menu

    def get_action(self, name: str) -> Optional[QAction]:
        return self._actions.get(name)

    def get_menu(self, name: str) -> Optional[QMenu]:
        return self._menus.get(name)

    def control(self, name: str) -> ActionControl:
        """
        Control handle for a registered action or menu.

        Raises:
            KeyError: nothing registered under name
        """
        target: Union[QAction, QMenu, None] = self._actions.get(name) or self._menus.get(name)
        if target is None:
            raise KeyError(f"No action or menu registered as '{name}'")
        return ActionControl(target)

    def __contains__(self, name: str) -> bool:
        return name in self._actions or name in self._menus
