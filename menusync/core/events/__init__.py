"""
Event System - typed pub/sub for menu state changes.

Provides:
- EventBus: per-kind publish/subscribe with subscriber isolation
- Event / EventKind: immutable change records and their kinds
- DocumentState, SessionStatus, ResourceAvailability: typed payloads
- Signal: plain synchronous observer for non-Qt objects

Usage:
    from menusync.core.events import EventBus, Event, EventKind

    token = bus.subscribe(EventKind.DOCUMENT_CHANGED, on_document_changed)
    bus.publish(Event.document_changed(doc))
"""
from .bus import EventBus, SubscriptionToken
from .constants import ALL_KINDS, EventKind, Resources
from .models import DocumentState, Event, ResourceAvailability, SessionStatus
from .observer import Signal

__all__ = [
    "EventBus",
    "SubscriptionToken",
    "Event",
    "EventKind",
    "ALL_KINDS",
    "Resources",
    "DocumentState",
    "SessionStatus",
    "ResourceAvailability",
    "Signal",
]
