"""
Immutable event records and their typed payloads.
"""
from dataclasses import dataclass
from typing import Any, Optional

from .constants import EventKind


@dataclass(frozen=True)
class DocumentState:
    """Snapshot of the active document (genome) as the menus need it."""
    id: str
    display_name: Optional[str] = None
    has_hub: bool = False
    hosted_tracks: bool = False
    encode_supported: bool = False


@dataclass(frozen=True)
class SessionStatus:
    """Authentication status for one provider ("aws", "google", ...)."""
    provider: str
    logged_in: bool
    principal: Optional[str] = None


@dataclass(frozen=True)
class ResourceAvailability:
    resource_id: str
    available: bool


@dataclass(frozen=True)
class Event:
    """
    A state change of interest.

    Created by the owner of the changed state, delivered by EventBus and
    never mutated afterwards.
    """
    kind: EventKind
    payload: Any = None
    source: str = ""

    @classmethod
    def document_changed(cls, document: Optional[DocumentState], source: str = "") -> "Event":
        return cls(EventKind.DOCUMENT_CHANGED, document, source)

    @classmethod
    def session_changed(cls, status: SessionStatus, source: str = "") -> "Event":
        return cls(EventKind.SESSION_STATUS_CHANGED, status, source)

    @classmethod
    def resource_changed(cls, resource_id: str, available: bool, source: str = "") -> "Event":
        return cls(
            EventKind.RESOURCE_AVAILABILITY_CHANGED,
            ResourceAvailability(resource_id, available),
            source,
        )
