import os

# Headless Qt for CI; must be set before any Qt module creates the app
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import threading

import pytest
from loguru import logger

from menusync.core.events import EventBus
from menusync.core.tasks import BackgroundTaskRunner, TaskHandle, TaskOutcome


@pytest.fixture
def caplog(caplog):
    """Route loguru records into pytest's caplog."""
    handler_id = logger.add(
        caplog.handler,
        format="{message}",
        level=0,
        filter=lambda record: record["level"].no >= caplog.handler.level,
    )
    yield caplog
    logger.remove(handler_id)


class FakeControl:
    """ControlHandle that records every call and the thread it came from."""

    def __init__(self, name: str = ""):
        self.name = name
        self.enabled = True
        self.visible = True
        self.label = None
        self.tooltip = None
        self.calls = []

    def _record(self, method, value):
        self.calls.append((method, value, threading.get_ident()))

    def set_enabled(self, enabled):
        self._record("set_enabled", enabled)
        self.enabled = enabled

    def set_visible(self, visible):
        self._record("set_visible", visible)
        self.visible = visible

    def set_label(self, label):
        self._record("set_label", label)
        self.label = label

    def set_tooltip(self, tooltip):
        self._record("set_tooltip", tooltip)
        self.tooltip = tooltip


class ManualRunner:
    """
    Runner stand-in whose completions the test delivers by hand, in any order.

    Unlike BackgroundTaskRunner it does not honour cancellation unless asked
    to, which lets tests push late results through the version guard.
    """

    def __init__(self):
        self.submitted = []

    def run(self, work, on_complete, name=""):
        handle = TaskHandle(len(self.submitted) + 1, name)
        self.submitted.append((handle, work, on_complete))
        return handle

    def handle(self, index):
        return self.submitted[index][0]

    def complete(self, index, value=None, error=None, honor_cancel=False):
        handle, _, on_complete = self.submitted[index]
        if honor_cancel and handle.cancelled:
            return False
        on_complete(TaskOutcome(handle.task_id, handle.name, value, error))
        return True

    def execute(self, index):
        """Run the submitted work inline and deliver its outcome."""
        _, work, _ = self.submitted[index]
        try:
            value = work()
        except Exception as e:
            return self.complete(index, error=e)
        return self.complete(index, value=value)


@pytest.fixture
def fake_control():
    return FakeControl


@pytest.fixture
def manual_runner():
    return ManualRunner()


@pytest.fixture
def bus(qapp):
    event_bus = EventBus()
    yield event_bus
    event_bus.clear()


@pytest.fixture
def runner(qapp):
    task_runner = BackgroundTaskRunner(max_threads=2)
    yield task_runner
    task_runner.shutdown(wait_ms=2000)
