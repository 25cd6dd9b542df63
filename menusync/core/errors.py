"""
Error taxonomy for menu state synchronization.

Two families:
- TransientProbeFailure: remote check problems. Never raised to callers,
  carried inside Failure(cause) results instead.
- InvariantViolation: programming defects (conflicting bindings, use after
  teardown). Raised immediately.
"""


class MenuSyncError(Exception):
    """Base class for all menusync errors."""


class TransientProbeFailure(MenuSyncError):
    """A background status check failed (network, auth, timeout)."""


class ProbeTimeoutError(TransientProbeFailure):
    """A probe did not complete within its timeout."""

    def __init__(self, probe_name: str, timeout_s: float):
        super().__init__(f"Probe '{probe_name}' timed out after {timeout_s:g}s")
        self.probe_name = probe_name
        self.timeout_s = timeout_s


class InvariantViolation(MenuSyncError):
    """Defect in how the engine is being used."""


class DuplicateBindingError(InvariantViolation):
    def __init__(self, control_id: str):
        super().__init__(f"Control already has a binding: {control_id}")
        self.control_id = control_id


class ControllerClosedError(InvariantViolation):
    def __init__(self, operation: str):
        super().__init__(f"MenuStateController is closed, cannot {operation}")
        self.operation = operation
