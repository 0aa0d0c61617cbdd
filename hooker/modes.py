"""Completion modes: how a hook is started and how it reports being finished."""

from __future__ import annotations

import logging
from collections.abc import Callable
from functools import partial
from typing import Any, Protocol

from hooker.config import HookOptions
from hooker.errors import HookerError, HookTimeoutError
from hooker.models import CompletionMode, HookRecord
from hooker.timers import TimerService

logger = logging.getLogger(__name__)

DoneSignal = Callable[..., None]


class Dispatcher(Protocol):
    timers: TimerService

    def complete_hook(self, record: HookRecord, error: Any = None) -> None: ...

    def fail(self, error: HookerError | str) -> None: ...


def resolve_mode(options: HookOptions) -> tuple[CompletionMode, float | None]:
    """A positive timeout wins over ``track``."""
    if options.timeout_ms > 0:
        return CompletionMode.TIMED_TRACKED, options.timeout_ms
    if options.track:
        return CompletionMode.TRACKED, None
    return CompletionMode.IMMEDIATE, None


class Mode:
    """Hook lifecycle for one completion mode.

    ``arm`` runs before the callback, ``call`` runs the callback itself and
    ``settle`` runs only when the callback returned normally. The registry
    guards ``call`` alone; exceptions from ``arm`` and ``settle`` propagate
    to the caller of ``invoke``.
    """

    def arm(self, dispatcher: Dispatcher, record: HookRecord) -> None:
        return None

    def call(self, dispatcher: Dispatcher, record: HookRecord, args: tuple, kwargs: dict) -> None:
        raise NotImplementedError

    def settle(self, dispatcher: Dispatcher, record: HookRecord) -> None:
        return None

    def teardown(self, dispatcher: Dispatcher, record: HookRecord) -> None:
        return None


class ImmediateMode(Mode):
    def call(self, dispatcher: Dispatcher, record: HookRecord, args: tuple, kwargs: dict) -> None:
        record.callback(*args, **kwargs)

    def settle(self, dispatcher: Dispatcher, record: HookRecord) -> None:
        dispatcher.complete_hook(record)


class TrackedMode(Mode):
    def call(self, dispatcher: Dispatcher, record: HookRecord, args: tuple, kwargs: dict) -> None:
        record.callback(*args, self.done_signal(dispatcher, record), **kwargs)

    def done_signal(self, dispatcher: Dispatcher, record: HookRecord) -> DoneSignal:
        def done(error: Any = None) -> None:
            self.teardown(dispatcher, record)
            dispatcher.complete_hook(record, error)

        return done


class TimedTrackedMode(TrackedMode):
    def arm(self, dispatcher: Dispatcher, record: HookRecord) -> None:
        self.teardown(dispatcher, record)
        logger.debug("arming %sms deadline for %s", record.wait_ms, record.describe())
        record.timer = dispatcher.timers.schedule(record.wait_ms, partial(self._expire, dispatcher, record))

    def teardown(self, dispatcher: Dispatcher, record: HookRecord) -> None:
        if record.timer is None:
            return
        logger.debug("clearing deadline for %s", record.describe())
        dispatcher.timers.cancel(record.timer)
        record.timer = None

    def _expire(self, dispatcher: Dispatcher, record: HookRecord) -> None:
        record.timer = None
        if record.is_done:
            return
        logger.debug("deadline exceeded for %s", record.describe())
        dispatcher.fail(HookTimeoutError(record.event, record.label))


MODES: dict[CompletionMode, Mode] = {
    CompletionMode.IMMEDIATE: ImmediateMode(),
    CompletionMode.TRACKED: TrackedMode(),
    CompletionMode.TIMED_TRACKED: TimedTrackedMode(),
}


def mode_for(record: HookRecord) -> Mode:
    return MODES[record.mode]
