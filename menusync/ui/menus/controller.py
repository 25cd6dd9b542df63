"""
MenuStateController - keeps one menu's controls in sync with external state.

Flow:
    EventBus event  -> update KnownState -> re-evaluate bindings for that kind
    about_to_show() -> start probes whose results need refreshing (non-blocking)
    probe delivery  -> drop if not current, else re-evaluate bindings reading it

Everything here runs on the UI thread: bus delivery is synchronous on the
publisher's (UI) thread and probe results arrive through
BackgroundTaskRunner's queued delivery.
"""
import threading
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional

from loguru import logger
from PySide6.QtWidgets import QMenu

from menusync.core.errors import ControllerClosedError, DuplicateBindingError, InvariantViolation
from menusync.core.events.bus import EventBus
from menusync.core.events.constants import EventKind
from menusync.core.events.models import DocumentState, Event, ResourceAvailability, SessionStatus
from menusync.core.probes.probe import AsyncProbe
from menusync.core.probes.result import ProbeResult
from menusync.core.providers import ControlHandle, DocumentStateProvider

from .bindings import AffordanceBinding, AffordanceState, KnownState, ProbeResults, evaluate_binding


@dataclass
class _BoundControl:
    control: ControlHandle
    binding: AffordanceBinding
    applied: Optional[AffordanceState] = None


EventFilter = Callable[[Event], bool]


@dataclass
class _OwnedProbe:
    probe: AsyncProbe
    invalidate_on: FrozenSet[EventKind]
    invalidate_when: Optional[EventFilter] = None

    def invalidated_by(self, event: Event) -> bool:
        if event.kind not in self.invalidate_on:
            return False
        return self.invalidate_when is None or bool(self.invalidate_when(event))


class MenuStateController:
    """
    Owns the bindings and probes of one menu.

    Args:
        bus: EventBus to subscribe to (all three event kinds)
        name: Menu name, used in logs
        document_provider: Seeds KnownState.document at construction
        known: Initial KnownState (resources, sessions) if already known
        check_thread: Raise InvariantViolation when a control would be
            mutated off the thread that created the controller

    Usage:
        controller = MenuStateController(bus, name="Tracks")
        controller.bind("tracks.load_hosted", registry.control("tracks.load_hosted"), binding)
        controller.attach_menu(tracks_menu)
        ...
        controller.close()
    """

    def __init__(self, bus: EventBus, name: str = "menu",
                 document_provider: Optional[DocumentStateProvider] = None,
                 known: Optional[KnownState] = None,
                 check_thread: bool = True):
        self.name = name
        self._bus = bus
        self._check_thread = check_thread
        self._owner_thread = threading.get_ident()

        self._known = known or KnownState()
        if document_provider is not None:
            self._known = self._known.with_document(document_provider.get_current())

        self._bindings: Dict[str, _BoundControl] = {}
        self._probes: Dict[str, _OwnedProbe] = {}
        # Latest current terminal result per probe; kept while a re-check runs
        self._results: Dict[str, ProbeResult] = {}
        self._menus: List[QMenu] = []
        self._closed = False

        self._tokens = [bus.subscribe(kind, self._on_event) for kind in EventKind]
        logger.debug(f"MenuStateController '{name}' created")

    # --- Introspection ---

    @property
    def known(self) -> KnownState:
        return self._known

    @property
    def closed(self) -> bool:
        return self._closed

    def state_of(self, control_id: str) -> Optional[AffordanceState]:
        """Last state applied to a control, None if unbound or never applied."""
        bound = self._bindings.get(control_id)
        return bound.applied if bound else None

    def probe(self, name: str) -> AsyncProbe:
        return self._probes[name].probe

    def probe_result(self, name: str) -> ProbeResult:
        """Result the bindings currently see for a probe."""
        return ProbeResults(self._results).get(name)

    # --- Registration ---

    def bind(self, control_id: str, control: ControlHandle, binding: AffordanceBinding) -> AffordanceState:
        """
        Attach a binding to a control and apply it immediately.

        Raises:
            DuplicateBindingError: control_id already has a binding
            ControllerClosedError: called after close()
        """
        self._ensure_open("bind controls")
        if control_id in self._bindings:
            raise DuplicateBindingError(control_id)
        self._bindings[control_id] = _BoundControl(control, binding)
        return self._apply(control_id)

    def add_probe(self, probe: AsyncProbe, invalidate_on: Iterable[EventKind] = (),
                  invalidate_when: Optional[EventFilter] = None) -> AsyncProbe:
        """
        Take ownership of a probe: it is started by about_to_show() and
        cancelled by close().

        Args:
            probe: Probe, addressed by bindings through probe.name
            invalidate_on: Event kinds that make the current result stale
            invalidate_when: Narrows invalidate_on to the events this probe
                is about (e.g. one provider's SessionStatus); None matches all
        """
        self._ensure_open("add probes")
        if probe.name in self._probes:
            raise InvariantViolation(f"Probe already registered on '{self.name}': {probe.name}")
        probe.set_listener(self._on_probe_result)
        self._probes[probe.name] = _OwnedProbe(probe, frozenset(invalidate_on), invalidate_when)
        if not probe.result.is_pending:
            self._results[probe.name] = probe.result
        return probe

    def attach_menu(self, menu: QMenu) -> None:
        """Use the menu's aboutToShow as this controller's probe trigger."""
        self._ensure_open("attach menus")
        menu.aboutToShow.connect(self.about_to_show)
        self._menus.append(menu)

    # --- Triggers ---

    def about_to_show(self) -> List[str]:
        """
        Start every owned probe whose result needs refreshing. Returns at once.

        Returns:
            Names of the probes that were started
        """
        if self._closed:
            logger.debug(f"MenuStateController '{self.name}': trigger after close ignored")
            return []
        started = []
        for name, owned in self._probes.items():
            if owned.probe.needs_refresh():
                owned.probe.start()
                started.append(name)
        if started:
            logger.debug(f"MenuStateController '{self.name}': started probes {started}")
        return started

    def refresh(self) -> None:
        """Re-evaluate and apply every binding."""
        self._ensure_open("refresh")
        for control_id in list(self._bindings):
            self._apply(control_id)

    # --- Teardown ---

    def close(self) -> None:
        """Unsubscribe, cancel owned probes and detach menus. Safe to repeat."""
        if self._closed:
            return
        self._closed = True

        for token in self._tokens:
            self._bus.unsubscribe(token)
        self._tokens = []

        for owned in self._probes.values():
            owned.probe.cancel()
            owned.probe.set_listener(None)

        for menu in self._menus:
            try:
                menu.aboutToShow.disconnect(self.about_to_show)
            except (RuntimeError, TypeError) as e:
                # Menu already destroyed by Qt
                logger.debug(f"MenuStateController '{self.name}': menu detach skipped: {e}")
        self._menus = []
        logger.debug(f"MenuStateController '{self.name}' closed")

    # --- Handlers (UI thread) ---

    def _on_event(self, event: Event) -> None:
        if self._closed:
            return
        self._ensure_ui_thread(f"event {event.kind.value}")
        stale = [name for name, owned in self._probes.items() if owned.invalidated_by(event)]
        self._known = self._updated_known(event)

        # An invalidated result is older than the event; bindings fall back to KnownState
        invalidated = set()
        for name in stale:
            self._probes[name].probe.invalidate()
            if self._results.pop(name, None) is not None:
                invalidated.add(name)

        for control_id, bound in list(self._bindings.items()):
            binding = bound.binding
            if binding.reacts_to(event.kind) or any(binding.reads_probe(name) for name in invalidated):
                self._apply(control_id)

    def _on_probe_result(self, probe: AsyncProbe, result: ProbeResult) -> None:
        if self._closed:
            logger.debug(f"MenuStateController '{self.name}': result for '{probe.name}' after close dropped")
            return
        self._ensure_ui_thread(f"result for '{probe.name}'")
        if not probe.is_current(result):
            logger.debug(
                f"MenuStateController '{self.name}': stale '{probe.name}' v{result.version} "
                f"(current v{probe.current_version}) discarded"
            )
            return

        self._results[probe.name] = result
        for control_id, bound in list(self._bindings.items()):
            if bound.binding.reads_probe(probe.name):
                self._apply(control_id)

    def _updated_known(self, event: Event) -> KnownState:
        payload = event.payload
        if event.kind is EventKind.DOCUMENT_CHANGED:
            if payload is None or isinstance(payload, DocumentState):
                return self._known.with_document(payload)
        elif event.kind is EventKind.SESSION_STATUS_CHANGED:
            if isinstance(payload, SessionStatus):
                return self._known.with_session(payload)
        elif event.kind is EventKind.RESOURCE_AVAILABILITY_CHANGED:
            if isinstance(payload, ResourceAvailability):
                return self._known.with_resource(payload.resource_id, payload.available)
        logger.warning(f"MenuStateController '{self.name}': unexpected payload for {event.kind.value}: {payload!r}")
        return self._known

    # --- Application ---

    def _apply(self, control_id: str) -> AffordanceState:
        self._ensure_open("apply affordance state")
        self._ensure_ui_thread(f"control '{control_id}'")

        bound = self._bindings[control_id]
        state = evaluate_binding(control_id, bound.binding, self._known, ProbeResults(self._results))
        previous = bound.applied
        if state == previous:
            return state

        control = bound.control
        if previous is None or previous.visible != state.visible:
            control.set_visible(state.visible)
        if previous is None or previous.enabled != state.enabled:
            control.set_enabled(state.enabled)
        if state.label is not None and (previous is None or previous.label != state.label):
            control.set_label(state.label)
        if state.tooltip is not None and (previous is None or previous.tooltip != state.tooltip):
            set_tooltip = getattr(control, "set_tooltip", None)
            if set_tooltip is not None:
                set_tooltip(state.tooltip)

        bound.applied = state
        return state

    def _ensure_open(self, operation: str) -> None:
        if self._closed:
            raise ControllerClosedError(operation)

    def _ensure_ui_thread(self, what: str) -> None:
        if self._check_thread and threading.get_ident() != self._owner_thread:
            raise InvariantViolation(
                f"MenuStateController '{self.name}': {what} handled off the UI thread "
                f"({threading.current_thread().name})"
            )
