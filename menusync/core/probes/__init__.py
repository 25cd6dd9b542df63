"""
Asynchronous status probes (login state, bucket existence, server reachability).
"""
from .policy import ProbeRefreshPolicy, RefreshMode
from .probe import AsyncProbe, ProbeListener, ProbeState
from .result import NOT_RUN, Failure, Pending, ProbeResult, Success

__all__ = [
    "AsyncProbe",
    "ProbeListener",
    "ProbeState",
    "ProbeRefreshPolicy",
    "RefreshMode",
    "ProbeResult",
    "Pending",
    "Success",
    "Failure",
    "NOT_RUN",
]
