"""Cancellable traversal over the hook store."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from hooker.errors import UnregisteredEventError
from hooker.models import HookRecord

EventFilter = str | Iterable[str] | None
Visitor = Callable[[UnregisteredEventError | None, Any, Any, int, int], Any]


def resolve_events(store: Mapping[str, Sequence[HookRecord]], events: EventFilter) -> list[Any]:
    if events is None:
        return list(store)
    if isinstance(events, str):
        return [events]
    return list(events)


def traverse(store: Mapping[str, Sequence[HookRecord]], events: EventFilter, visit: Visitor) -> bool:
    """Visit records event by event, in stored order.

    ``visit(error, record, event, index, count)`` is called once per record. A
    name missing from ``store`` gets a single call carrying an
    ``UnregisteredEventError`` and no record. Returning ``False`` from
    ``visit`` stops the whole traversal; the function then returns ``False``.
    """
    for event in resolve_events(store, events):
        records = store.get(event) if isinstance(event, str) else None
        if not records:
            if visit(UnregisteredEventError(event), None, event, 0, 0) is False:
                return False
            continue
        records = tuple(records)
        count = len(records)
        for index, record in enumerate(records):
            if visit(None, record, event, index, count) is False:
                return False
    return True
