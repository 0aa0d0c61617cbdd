"""Error taxonomy for hook registration and dispatch."""

from __future__ import annotations

from typing import Any


class HookerError(Exception):
    """Base class for every error raised or reported by a registry."""


class RegistrationError(HookerError):
    """A hook could not be registered; no record was added."""


class HookerStateError(HookerError):
    """The registry's internal store is not in a usable shape."""


class UnregisteredEventError(HookerError):
    def __init__(self, event: Any) -> None:
        super().__init__(f"No hooks registered for event: {event}")
        self.event = event


class HookTimeoutError(HookerError):
    def __init__(self, event: str, label: str = "") -> None:
        super().__init__(f"Timeout waiting for event: {event}")
        self.event = event
        self.label = label


class HookReportedError(HookerError):
    """A hook signalled failure, either through ``done(error)`` or by raising."""

    def __init__(self, event: str, label: str, error: Any) -> None:
        name = f" ({label})" if label else ""
        super().__init__(f"Hook for event {event}{name} failed: {error}")
        self.event = event
        self.label = label
        self.error = error


class GlobalTimeoutError(HookerError):
    def __init__(self, message: str = "global timeout occurred") -> None:
        super().__init__(message)
