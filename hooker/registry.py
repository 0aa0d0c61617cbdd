"""Hook registry with priority dispatch and completion tracking."""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable, Mapping
from operator import attrgetter
from typing import Any

from pydantic import ValidationError

from hooker.config import HookerConfig, HookOptions
from hooker.errors import GlobalTimeoutError, HookerError, HookerStateError, HookReportedError, RegistrationError
from hooker.models import HookCallback, HookRecord, HookView
from hooker.modes import mode_for, resolve_mode
from hooker.timers import AsyncioTimerService, TimerService
from hooker.traversal import EventFilter, Visitor, traverse

logger = logging.getLogger(__name__)

FinishCallback = Callable[[HookerError | None], Any]


class Hooker:
    """Registry of prioritized hooks that reports once every hook has finished.

    Hooks are registered against event names until the registry is sealed.
    Sealing orders each event's hooks by priority (stable, so equal
    priorities keep registration order) and arms the global deadline. The
    first ``invoke``, ``walk`` or ``is_complete`` call seals implicitly.

    ``on_finish`` is called exactly once: with ``None`` when every hook of
    every event is done, or with the first error reported during dispatch.
    """

    def __init__(
        self,
        config: HookerConfig | Mapping[str, Any] | None = None,
        on_finish: FinishCallback | None = None,
        *,
        timers: TimerService | None = None,
    ) -> None:
        if config is None:
            config = HookerConfig()
        elif not isinstance(config, HookerConfig):
            config = HookerConfig.model_validate(dict(config))
        self.config = config
        self.timers = timers or AsyncioTimerService()
        self._store: dict[str, list[HookRecord]] = {}
        self._sequence = itertools.count()
        self._sealed = False
        self._on_finish = on_finish
        self._finished = False
        self._global_timer: Any | None = None
        self._finish_error: Exception | None = None

    def __repr__(self) -> str:
        return (
            f"Hooker(events={len(self._store)}, hooks={self.hook_count()}, "
            f"sealed={self._sealed}, finished={self._finished})"
        )

    @property
    def sealed(self) -> bool:
        return self._sealed

    @property
    def finished(self) -> bool:
        """True once the finish callback has been consumed, successfully or not."""
        return self._finished

    @property
    def events(self) -> tuple[str, ...]:
        return tuple(self._store)

    def hook_count(self, event: str | None = None) -> int:
        if event is None:
            return sum(len(records) for records in self._store.values())
        return len(self._store.get(event, ()))

    # registration

    def register(
        self,
        event: str,
        callback: HookCallback,
        options: HookOptions | Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> HookView:
        """Add a hook for ``event``; raises ``RegistrationError`` without adding anything on bad input."""
        if self._sealed:
            raise RegistrationError("Listeners sealed")
        if not isinstance(event, str) or not event:
            raise RegistrationError(f"Invalid event name: {event!r}")
        if not callable(callback):
            raise RegistrationError("Expected callback to be callable")

        opts = self._resolve_options(options, overrides)
        if not 0 <= opts.priority <= self.config.max_priority:
            raise RegistrationError(
                f"Priority {opts.priority} outside allowed range 0..{self.config.max_priority}"
            )

        mode, wait_ms = resolve_mode(opts)
        record = HookRecord(
            event=event,
            priority=opts.priority,
            callback=callback,
            mode=mode,
            label=opts.label,
            wait_ms=wait_ms,
            sequence=next(self._sequence),
        )
        if event not in self._store:
            logger.debug("creating new event: %s", event)
            self._store[event] = []
        self._store[event].append(record)
        logger.debug("stored %s hook %s (priority %d)", mode.value, record.describe(), record.priority)
        return record.view()

    def on(self, event: str, **options: Any) -> Callable[[HookCallback], HookCallback]:
        """Decorator form of ``register``."""

        def decorator(callback: HookCallback) -> HookCallback:
            self.register(event, callback, **options)
            return callback

        return decorator

    @staticmethod
    def _resolve_options(options: HookOptions | Mapping[str, Any] | None, overrides: dict[str, Any]) -> HookOptions:
        if options is None:
            data: dict[str, Any] = {}
        elif isinstance(options, HookOptions):
            data = options.model_dump()
        elif isinstance(options, Mapping):
            data = dict(options)
        else:
            raise RegistrationError(f"Hook options must be a mapping, got {type(options).__name__}")
        data.update(overrides)
        try:
            return HookOptions.model_validate(data)
        except ValidationError as exc:
            raise RegistrationError(f"Invalid hook options: {exc}") from exc

    # sealing

    def seal(self) -> None:
        if not isinstance(self._store, dict) or not all(isinstance(records, list) for records in self._store.values()):
            raise HookerStateError("Invalid state")
        if self._sealed:
            return

        for event, records in self._store.items():
            records.sort(key=attrgetter("priority"))
            logger.debug("sealed %d hook(s) for event: %s", len(records), event)

        if self.config.global_deadline_enabled and self._global_timer is None:
            logger.debug("arming global deadline of %sms", self.config.global_timeout_ms)
            self._global_timer = self.timers.schedule(self.config.global_timeout_ms, self._on_global_timeout)
        self._sealed = True

    def _ensure_sealed(self) -> None:
        if not self._sealed:
            logger.warning("implicit seal applied")
            self.seal()

    # dispatch

    def invoke(self, event: str, *args: Any, **kwargs: Any) -> int:
        """Run the pending hooks of ``event`` in priority order.

        Tracked hooks receive a ``done(error=None)`` callable after the
        positional arguments. Returns the number of hooks started; zero
        means nothing was registered or everything was already done.
        """
        self._ensure_sealed()
        if not isinstance(event, str) or not event:
            logger.debug("ignoring invoke of invalid event: %r", event)
            return 0

        started = 0

        def visit(error: HookerError | None, record: HookRecord | None, name: str, index: int, count: int) -> bool:
            nonlocal started
            if error is not None:
                if self.config.allow_unregistered_events:
                    logger.debug("no hooks registered for event: %s", name)
                else:
                    self.fail(error)
                return False
            if record.is_done:
                return True
            logger.debug("invoking %s (%d/%d)", record.describe(), index + 1, count)
            self._run_hook(record, args, kwargs)
            started += 1
            return True

        traverse(self._store, event, visit)
        return started

    def _run_hook(self, record: HookRecord, args: tuple, kwargs: dict) -> None:
        mode = mode_for(record)
        mode.arm(self, record)
        try:
            mode.call(self, record, args, kwargs)
        except Exception as exc:
            if exc is self._finish_error:
                # on_finish raised from a synchronous done()
                raise
            logger.warning("Hook %s raised: %s", record.describe(), exc)
            mode.teardown(self, record)
            if record.is_done:
                self.fail(self._reported(record, exc))
            else:
                self.complete_hook(record, exc)
            return
        mode.settle(self, record)

    # completion

    def complete_hook(self, record: HookRecord, error: Any = None) -> None:
        if not record.mark_done():
            logger.debug("ignoring repeated completion of %s", record.describe())
            return
        logger.debug("completed %s", record.describe())
        if error:
            self.fail(self._reported(record, error))
            return
        self._check_and_maybe_finish()

    def is_complete(self) -> bool:
        self._ensure_sealed()
        return self._all_done()

    def pending(self) -> list[HookView]:
        """Views of the hooks that have not finished yet."""
        waiting: list[HookView] = []

        def visit(error: HookerError | None, view: HookView | None, *_: Any) -> bool:
            if view is not None and not view.is_done:
                waiting.append(view)
            return True

        self.walk(None, visit)
        return waiting

    def fail(self, error: HookerError | str) -> None:
        """Report ``error`` through the finish callback unless it was already consumed."""
        if not isinstance(error, HookerError):
            error = HookerError(str(error))
        self._cancel_global_timer()
        if self._finished:
            logger.warning("dropping error after finish: %s", error)
            return
        logger.warning("dispatch failed: %s", error)
        self._deliver(error)

    def _all_done(self) -> bool:
        return traverse(self._store, None, lambda error, record, *_: record is None or record.is_done)

    def _check_and_maybe_finish(self) -> None:
        if self._finished or not self._all_done():
            return
        logger.debug("all hooks complete")
        self._deliver(None)

    def _consume(self) -> FinishCallback | None:
        callback, self._on_finish = self._on_finish, None
        self._finished = True
        self._cancel_global_timer()
        return callback

    def _deliver(self, error: HookerError | None) -> None:
        callback = self._consume()
        if callback is None:
            return
        try:
            callback(error)
        except Exception as exc:
            self._finish_error = exc
            raise

    @staticmethod
    def _reported(record: HookRecord, error: Any) -> HookReportedError:
        reported = HookReportedError(record.event, record.label, error)
        if isinstance(error, BaseException):
            reported.__cause__ = error
        return reported

    # global deadline

    def _on_global_timeout(self) -> None:
        self._global_timer = None
        self.fail(GlobalTimeoutError())

    def _cancel_global_timer(self) -> None:
        if self._global_timer is None:
            return
        logger.debug("clearing global deadline")
        self.timers.cancel(self._global_timer)
        self._global_timer = None

    # inspection

    def walk(self, events: EventFilter, visit: Visitor) -> bool:
        """Read-only traversal; ``visit`` receives ``HookView`` snapshots.

        Seals the registry if it is not sealed yet. Returns ``False`` when
        ``visit`` stopped the traversal early.
        """
        self._ensure_sealed()

        def relay(error: HookerError | None, record: HookRecord | None, event: str, index: int, count: int) -> Any:
            return visit(error, None if record is None else record.view(), event, index, count)

        return traverse(self._store, events, relay)
