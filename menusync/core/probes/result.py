"""
Probe results.

A result is Pending while a check is in flight, then becomes Success or
Failure exactly once. Every result carries the probe version it belongs to,
so a consumer can tell whether it is still current.
"""
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class ProbeResult:
    version: int

    @property
    def is_pending(self) -> bool:
        return False

    @property
    def is_success(self) -> bool:
        return False

    @property
    def is_failure(self) -> bool:
        return False

    def value_or(self, default: Any = None) -> Any:
        return default


@dataclass(frozen=True)
class Pending(ProbeResult):
    @property
    def is_pending(self) -> bool:
        return True


@dataclass(frozen=True)
class Success(ProbeResult, Generic[T]):
    value: Optional[T] = None

    @property
    def is_success(self) -> bool:
        return True

    def value_or(self, default: Any = None) -> Any:
        return self.value


@dataclass(frozen=True)
class Failure(ProbeResult):
    cause: Optional[BaseException] = None

    @property
    def is_failure(self) -> bool:
        return True


NOT_RUN = Pending(0)
