"""
Collaborator interfaces.

The engine only talks to these shapes; the application supplies the real
genome manager, OAuth providers and catalog lookups.
"""
from typing import Optional, Protocol, runtime_checkable

from menusync.core.events.models import DocumentState


@runtime_checkable
class DocumentStateProvider(Protocol):
    def get_current(self) -> Optional[DocumentState]:
        ...


@runtime_checkable
class AuthProvider(Protocol):
    """Opaque authentication status source. is_logged_in() may block on the network."""

    def is_logged_in(self) -> bool:
        ...

    def current_principal_name(self) -> Optional[str]:
        ...

    def login(self) -> None:
        ...

    def logout(self) -> None:
        ...


@runtime_checkable
class ResourceChecker(Protocol):
    """Predicate over a resource id, e.g. 'does this bucket exist'. May block."""

    def __call__(self, resource_id: str) -> bool:
        ...


@runtime_checkable
class ControlHandle(Protocol):
    """The only operations the engine performs on a UI element."""

    def set_enabled(self, enabled: bool) -> None:
        ...

    def set_visible(self, visible: bool) -> None:
        ...

    def set_label(self, label: str) -> None:
        ...
