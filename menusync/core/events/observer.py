from typing import Callable, List

from loguru import logger


class Signal:
    """
    Minimal synchronous observer, for plain-Python objects that cannot be
    QObjects (e.g. ConfigManager).

    Subscribers are called in connection order. A subscriber that raises is
    logged and skipped; the remaining subscribers still run.
    """
    def __init__(self, name: str = "Signal"):
        self.name = name
        self._subscribers: List[Callable] = []

    def connect(self, callback: Callable) -> None:
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def disconnect(self, callback: Callable) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def emit(self, *args, **kwargs) -> int:
        """Call every subscriber. Returns how many completed without error."""
        delivered = 0
        for sub in list(self._subscribers):
            try:
                sub(*args, **kwargs)
                delivered += 1
            except Exception:
                logger.exception(f"Signal '{self.name}' subscriber {sub!r} failed")
        return delivered

    def __len__(self) -> int:
        return len(self._subscribers)
