"""
Affordance bindings.

A binding maps one control to a pure function of what is already known
(KnownState) and the latest current result of each probe it declares. It
never performs I/O or mutates anything; the controller applies its output.
"""
from dataclasses import dataclass, field, replace
from typing import Callable, FrozenSet, Mapping, Optional, Tuple

from loguru import logger
from types import MappingProxyType

from menusync.core.events.constants import ALL_KINDS, EventKind
from menusync.core.events.models import DocumentState, SessionStatus
from menusync.core.probes.result import NOT_RUN, ProbeResult


@dataclass(frozen=True)
class AffordanceState:
    """
    Desired state of one control.

    label/tooltip of None mean "leave whatever the control shows".
    """
    enabled: bool = True
    visible: bool = True
    label: Optional[str] = None
    tooltip: Optional[str] = None


DISABLED = AffordanceState(enabled=False)
HIDDEN = AffordanceState(enabled=False, visible=False)

_EMPTY: Mapping = MappingProxyType({})


@dataclass(frozen=True)
class KnownState:
    """Synchronously known state, rebuilt (never mutated) on every event."""
    document: Optional[DocumentState] = None
    sessions: Mapping[str, SessionStatus] = field(default_factory=lambda: _EMPTY)
    resources: Mapping[str, bool] = field(default_factory=lambda: _EMPTY)

    def resource(self, resource_id: str, default: bool = False) -> bool:
        return self.resources.get(resource_id, default)

    def session(self, provider: str) -> Optional[SessionStatus]:
        return self.sessions.get(provider)

    def with_document(self, document: Optional[DocumentState]) -> "KnownState":
        return replace(self, document=document)

    def with_session(self, status: SessionStatus) -> "KnownState":
        sessions = dict(self.sessions)
        sessions[status.provider] = status
        return replace(self, sessions=MappingProxyType(sessions))

    def with_resource(self, resource_id: str, available: bool) -> "KnownState":
        resources = dict(self.resources)
        resources[resource_id] = available
        return replace(self, resources=MappingProxyType(resources))


class ProbeResults:
    """Read-only view of the latest current result per probe name."""

    def __init__(self, results: Mapping[str, ProbeResult]):
        self._results = results

    def get(self, name: str) -> ProbeResult:
        """Result for a probe, Pending(0) if unknown or never run."""
        return self._results.get(name, NOT_RUN)

    __getitem__ = get

    def __contains__(self, name: str) -> bool:
        return name in self._results


Evaluator = Callable[[KnownState, ProbeResults], AffordanceState]


@dataclass(frozen=True)
class AffordanceBinding:
    """
    Args:
        evaluate: Pure function (known, probe results) -> AffordanceState
        depends_on: Event kinds that trigger re-evaluation
        probes: Names of probes whose results this binding reads
    """
    evaluate: Evaluator
    depends_on: FrozenSet[EventKind] = ALL_KINDS
    probes: Tuple[str, ...] = ()
    name: str = ""

    def __post_init__(self):
        # Accept any iterable from callers, store immutably
        object.__setattr__(self, "depends_on", frozenset(self.depends_on))
        object.__setattr__(self, "probes", tuple(self.probes))

    def reacts_to(self, kind: EventKind) -> bool:
        return kind in self.depends_on

    def reads_probe(self, probe_name: str) -> bool:
        return probe_name in self.probes


def evaluate_binding(control_id: str, binding: AffordanceBinding, known: KnownState,
                     results: ProbeResults) -> AffordanceState:
    """
    Evaluate a binding; a raising evaluator yields a disabled control.

    The failure is logged with its traceback so the defect is visible, but the
    control is never left enabled on top of state we could not compute.
    """
    try:
        state = binding.evaluate(known, results)
    except Exception:
        logger.exception(f"Binding for '{control_id}' raised; disabling control")
        return DISABLED
    if not isinstance(state, AffordanceState):
        logger.error(f"Binding for '{control_id}' returned {type(state).__name__}, expected AffordanceState")
        return DISABLED
    return state
