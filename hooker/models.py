"""Hook records and their read-only views."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

HookCallback = Callable[..., Any]


class CompletionMode(str, Enum):
    IMMEDIATE = "immediate"
    TRACKED = "tracked"
    TIMED_TRACKED = "timed_tracked"


class HookView(BaseModel):
    """Snapshot of a hook handed to walk visitors."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    event: str
    priority: int
    label: str = ""
    mode: CompletionMode
    wait_ms: float | None = None
    is_done: bool = False
    sequence: int = 0


@dataclass
class HookRecord:
    event: str
    priority: int
    callback: HookCallback
    mode: CompletionMode
    label: str = ""
    wait_ms: float | None = None
    sequence: int = 0
    is_done: bool = False
    timer: Any | None = field(default=None, repr=False)

    def mark_done(self) -> bool:
        """Flip ``is_done`` once; returns False if it was already set."""
        if self.is_done:
            return False
        self.is_done = True
        return True

    def describe(self) -> str:
        if self.label:
            return f"{self.event}[{self.label}]"
        return f"{self.event}#{self.sequence}"

    def view(self) -> HookView:
        return HookView(
            event=self.event,
            priority=self.priority,
            label=self.label,
            mode=self.mode,
            wait_ms=self.wait_ms,
            is_done=self.is_done,
            sequence=self.sequence,
        )
