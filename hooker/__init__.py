"""Completion-tracking hook registry."""

from hooker.config import HookerConfig, HookOptions, load_config
from hooker.errors import (
    GlobalTimeoutError,
    HookerError,
    HookerStateError,
    HookReportedError,
    HookTimeoutError,
    RegistrationError,
    UnregisteredEventError,
)
from hooker.models import CompletionMode, HookView
from hooker.registry import Hooker
from hooker.timers import AsyncioTimerService, ManualTimerService, TimerService

__all__ = [
    "AsyncioTimerService",
    "CompletionMode",
    "GlobalTimeoutError",
    "HookOptions",
    "HookReportedError",
    "HookTimeoutError",
    "HookView",
    "Hooker",
    "HookerConfig",
    "HookerError",
    "HookerStateError",
    "ManualTimerService",
    "RegistrationError",
    "TimerService",
    "UnregisteredEventError",
    "load_config",
]
