"""
Probe refresh policies.

Decides whether a probe should be re-run when its menu is about to show.
ALWAYS re-checks on every open, ONCE keeps the first good answer, TTL keeps a
good answer for ttl_s seconds. Failed, cancelled, invalidated or never-run
probes are always re-run.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .result import ProbeResult


class RefreshMode(str, Enum):
    ALWAYS = "always"
    ONCE = "once"
    TTL = "ttl"


@dataclass(frozen=True)
class ProbeRefreshPolicy:
    mode: RefreshMode = RefreshMode.ALWAYS
    ttl_s: float = 30.0

    @classmethod
    def always(cls) -> "ProbeRefreshPolicy":
        return cls(RefreshMode.ALWAYS)

    @classmethod
    def once(cls) -> "ProbeRefreshPolicy":
        return cls(RefreshMode.ONCE)

    @classmethod
    def ttl(cls, seconds: float) -> "ProbeRefreshPolicy":
        if seconds <= 0:
            raise ValueError(f"TTL must be positive, got {seconds}")
        return cls(RefreshMode.TTL, seconds)

    def needs_refresh(self, result: ProbeResult, resolved_at: Optional[float],
                      stale: bool, now: float) -> bool:
        if stale or resolved_at is None or not result.is_success:
            return True
        if self.mode is RefreshMode.ALWAYS:
            return True
        if self.mode is RefreshMode.ONCE:
            return False
        return now - resolved_at >= self.ttl_s
