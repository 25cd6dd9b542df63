"""
Event Kind Constants.

State changes the menu engine listens for. Use these with EventBus instead
of string literals.

Usage:
    from menusync.core.events import EventKind, EventBus

    token = bus.subscribe(EventKind.DOCUMENT_CHANGED, on_document_changed)
"""
from enum import Enum


class EventKind(Enum):
    """Kinds of externally owned state changes."""

    # Active document/genome switched (payload: DocumentState or None)
    DOCUMENT_CHANGED = "document.changed"

    # Authentication session status known to have changed (payload: SessionStatus)
    SESSION_STATUS_CHANGED = "session.status_changed"

    # Remote resource or feature flag availability changed (payload: ResourceAvailability)
    RESOURCE_AVAILABILITY_CHANGED = "resource.availability_changed"


ALL_KINDS = frozenset(EventKind)


# Well-known resource ids published with RESOURCE_AVAILABILITY_CHANGED
class Resources:
    AWS_PROVIDER = "aws.provider"
    AWS_COGNITO = "aws.cognito"
    GOOGLE_MENU = "google.menu"
    GENOME_SERVER = "genome_server"
    SESSION_RELOADABLE = "session.reloadable"
    EXTRAS_MENU = "extras.menu"
