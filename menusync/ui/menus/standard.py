"""
Standard menu bar bindings.

Affordance rules for the genome browser's menus, written as bindings over
KnownState and probe results, plus factories for the probes they read.

Control ids live in Controls, probe names in Probes. Rules:
- Tracks: "Load Hosted Tracks" / "Load from ENCODE" visible only when the
  active genome offers them.
- Genomes: "Select GenArk Tracks" enabled when the genome has a hub; "Select
  Hosted Genome" enabled while the genome server is reachable.
- File: "Reload Session" enabled once a session has been loaded.
- Amazon / Google: login, logout and load items follow the session probe.
  A failed session check degrades to a disabled "Login ..." item.
"""
from typing import Callable, Optional

from menusync.core.events.constants import EventKind, Resources
from menusync.core.events.models import Event, ResourceAvailability, SessionStatus
from menusync.core.probes.policy import ProbeRefreshPolicy
from menusync.core.probes.probe import AsyncProbe
from menusync.core.providers import AuthProvider, ResourceChecker
from menusync.core.tasks.runner import BackgroundTaskRunner

from .bindings import HIDDEN, AffordanceBinding, AffordanceState, KnownState, ProbeResults

LOGIN_LABEL = "Login ..."
GENOME_SERVER_TOOLTIP = "Choose a genome hosted on the genome server"
GENOME_SERVER_DOWN_TOOLTIP = "The genome server cannot be reached"


class Controls:
    FILE_MENU = "file.menu"
    GENOMES_MENU = "genomes.menu"
    TRACKS_MENU = "tracks.menu"

    FILE_RELOAD_SESSION = "file.reload_session"

    GENOMES_LOAD_HOSTED = "genomes.load_hosted"
    GENOMES_SELECT_ANNOTATIONS = "genomes.select_annotations"

    TRACKS_LOAD_HOSTED = "tracks.load_hosted"
    TRACKS_ENCODE = "tracks.encode"

    EXTRAS_MENU = "extras.menu"

    AWS_MENU = "aws.menu"
    AWS_LOGIN = "aws.login"
    AWS_LOGOUT = "aws.logout"
    AWS_LOAD_S3 = "aws.load_s3"

    GOOGLE_MENU = "google.menu"
    GOOGLE_LOGIN = "google.login"
    GOOGLE_LOGOUT = "google.logout"


class Probes:
    AWS_SESSION = "aws.session"
    GOOGLE_SESSION = "google.session"
    GENOME_SERVER = "genome_server"


DOCUMENT = frozenset({EventKind.DOCUMENT_CHANGED})
SESSION = frozenset({EventKind.SESSION_STATUS_CHANGED, EventKind.RESOURCE_AVAILABILITY_CHANGED})
RESOURCE = frozenset({EventKind.RESOURCE_AVAILABILITY_CHANGED})


# --- Invalidation filters ---

def session_of(provider: str) -> Callable[[Event], bool]:
    """Matches SessionStatus events for one provider only."""
    def matches(event: Event) -> bool:
        payload = event.payload
        return isinstance(payload, SessionStatus) and payload.provider == provider
    return matches


def resource_named(resource_id: str) -> Callable[[Event], bool]:
    """Matches availability events for one resource only."""
    def matches(event: Event) -> bool:
        payload = event.payload
        return isinstance(payload, ResourceAvailability) and payload.resource_id == resource_id
    return matches


# --- Session resolution ---

def resolve_session(provider: str, probe_name: str, known: KnownState,
                    results: ProbeResults) -> tuple:
    """
    Best current view of a provider's session.

    A resolved probe wins; while it is pending the last SessionStatus seen on
    the bus is used.

    Returns:
        (SessionStatus or None if unknown, True if the last check failed)
    """
    result = results.get(probe_name)
    if result.is_failure:
        return None, True
    if result.is_success and isinstance(result.value, SessionStatus):
        return result.value, False
    return known.session(provider), False


def _login_state(status: Optional[SessionStatus], failed: bool) -> AffordanceState:
    if failed:
        return AffordanceState(enabled=False, label=LOGIN_LABEL)
    if status is None:
        return AffordanceState(enabled=True, label=LOGIN_LABEL)
    if status.logged_in:
        return AffordanceState(enabled=False, label=status.principal or LOGIN_LABEL)
    return AffordanceState(enabled=True, label=LOGIN_LABEL)


def _logout_state(status: Optional[SessionStatus], failed: bool) -> AffordanceState:
    logged_in = bool(status and status.logged_in and not failed)
    return AffordanceState(enabled=logged_in)


# --- Document-driven rules ---

def hosted_tracks_binding() -> AffordanceBinding:
    def evaluate(known: KnownState, results: ProbeResults) -> AffordanceState:
        doc = known.document
        return AffordanceState(visible=doc is not None and doc.hosted_tracks)
    return AffordanceBinding(evaluate, depends_on=DOCUMENT, name="hosted tracks")


def encode_binding() -> AffordanceBinding:
    def evaluate(known, results):
        doc = known.document
        return AffordanceState(visible=doc is not None and doc.encode_supported)
    return AffordanceBinding(evaluate, depends_on=DOCUMENT, name="encode")


def genome_annotations_binding() -> AffordanceBinding:
    def evaluate(known, results):
        doc = known.document
        return AffordanceState(enabled=doc is not None and doc.has_hub)
    return AffordanceBinding(evaluate, depends_on=DOCUMENT, name="genome annotations")


# --- Resource-driven rules ---

def genome_server_binding() -> AffordanceBinding:
    """Reachability from the probe when resolved, else the last published availability."""
    def evaluate(known, results):
        result = results.get(Probes.GENOME_SERVER)
        if result.is_success:
            reachable = bool(result.value)
        elif result.is_failure:
            reachable = False
        else:
            reachable = known.resource(Resources.GENOME_SERVER, default=True)
        tooltip = GENOME_SERVER_TOOLTIP if reachable else GENOME_SERVER_DOWN_TOOLTIP
        return AffordanceState(enabled=reachable, tooltip=tooltip)
    return AffordanceBinding(evaluate, depends_on=RESOURCE, probes=(Probes.GENOME_SERVER,),
                             name="genome server")


def resource_flag_binding(resource_id: str, visible_when_set: bool = True) -> AffordanceBinding:
    """
    Enable (or show, with visible_when_set) a control while a resource flag is set.
    """
    def evaluate(known, results):
        flag = known.resource(resource_id)
        if visible_when_set:
            return AffordanceState(enabled=flag, visible=flag)
        return AffordanceState(enabled=flag)
    return AffordanceBinding(evaluate, depends_on=RESOURCE, name=resource_id)


# --- Amazon ---

def aws_login_binding() -> AffordanceBinding:
    def evaluate(known, results):
        if not known.resource(Resources.AWS_COGNITO):
            return HIDDEN
        return _login_state(*resolve_session("aws", Probes.AWS_SESSION, known, results))
    return AffordanceBinding(evaluate, depends_on=SESSION, probes=(Probes.AWS_SESSION,), name="aws login")


def aws_logout_binding() -> AffordanceBinding:
    def evaluate(known, results):
        if not known.resource(Resources.AWS_COGNITO):
            return HIDDEN
        return _logout_state(*resolve_session("aws", Probes.AWS_SESSION, known, results))
    return AffordanceBinding(evaluate, depends_on=SESSION, probes=(Probes.AWS_SESSION,), name="aws logout")


def aws_load_s3_binding() -> AffordanceBinding:
    def evaluate(known, results):
        # Without Cognito, credentials come from the environment
        if not known.resource(Resources.AWS_COGNITO):
            return AffordanceState(enabled=True)
        status, failed = resolve_session("aws", Probes.AWS_SESSION, known, results)
        return AffordanceState(enabled=bool(status and status.logged_in and not failed))
    return AffordanceBinding(evaluate, depends_on=SESSION, probes=(Probes.AWS_SESSION,), name="aws load s3")


# --- Google ---

def google_login_binding() -> AffordanceBinding:
    def evaluate(known, results):
        return _login_state(*resolve_session("google", Probes.GOOGLE_SESSION, known, results))
    return AffordanceBinding(evaluate, depends_on=SESSION, probes=(Probes.GOOGLE_SESSION,), name="google login")


def google_logout_binding() -> AffordanceBinding:
    def evaluate(known, results):
        return _logout_state(*resolve_session("google", Probes.GOOGLE_SESSION, known, results))
    return AffordanceBinding(evaluate, depends_on=SESSION, probes=(Probes.GOOGLE_SESSION,), name="google logout")


# --- Probe factories ---

def session_probe(provider: str, name: str, auth: AuthProvider, runner: BackgroundTaskRunner,
                  policy: Optional[ProbeRefreshPolicy] = None,
                  timeout_s: Optional[float] = None) -> AsyncProbe:
    """Probe resolving to a SessionStatus; both provider calls run on the pool."""
    def check() -> SessionStatus:
        logged_in = bool(auth.is_logged_in())
        principal = auth.current_principal_name() if logged_in else None
        return SessionStatus(provider, logged_in, principal)
    return AsyncProbe(name, check, runner, policy=policy, timeout_s=timeout_s)


def resource_probe(resource_id: str, checker: ResourceChecker, runner: BackgroundTaskRunner,
                   name: Optional[str] = None,
                   policy: Optional[ProbeRefreshPolicy] = None,
                   timeout_s: Optional[float] = None) -> AsyncProbe:
    """Probe resolving to checker(resource_id) as a bool."""
    check: Callable[[], bool] = lambda: bool(checker(resource_id))
    return AsyncProbe(name or resource_id, check, runner, policy=policy, timeout_s=timeout_s)
