"""
Binding status state machine.

Classifies the draft/snapshot relationship after every event. The machine is
total: every (status, event) pair yields a next status and nothing here
raises.

Divergence is tracked on the name only. Edits to position, phone or email of
a bound record keep the bound status.
"""

from __future__ import annotations

from collections.abc import Collection
from enum import Enum

import structlog

from .types import BindingStatus, Draft, Snapshot

logger = structlog.get_logger()


class BindingEvent(str, Enum):
    INITIALIZE = "initialize"
    TEXT_INPUT = "text_input"
    FOCUS = "focus"
    BLUR = "blur"
    SELECT = "select"
    ADD_AS_NEW = "add_as_new"
    CLEAR = "clear"
    REVERT = "revert"
    FIELD_EDIT = "field_edit"
    SCOPE_CHANGED = "scope_changed"


_BOUND_SCOPES = {BindingStatus.BOUND_CURRENT_SCOPE, BindingStatus.BOUND_OTHER_SCOPE}

ALLOWED_TRANSITIONS: dict[BindingStatus, set[BindingStatus]] = {
    BindingStatus.UNBOUND: {BindingStatus.NEW_ENTRY, *_BOUND_SCOPES},
    BindingStatus.NEW_ENTRY: {BindingStatus.UNBOUND, *_BOUND_SCOPES},
    BindingStatus.BOUND_CURRENT_SCOPE: {
        BindingStatus.UNBOUND,
        BindingStatus.NEW_ENTRY,
        BindingStatus.BOUND_OTHER_SCOPE,
        BindingStatus.DIVERGENT_EDIT,
    },
    BindingStatus.BOUND_OTHER_SCOPE: {
        BindingStatus.UNBOUND,
        BindingStatus.NEW_ENTRY,
        BindingStatus.BOUND_CURRENT_SCOPE,
        BindingStatus.DIVERGENT_EDIT,
    },
    BindingStatus.DIVERGENT_EDIT: {
        BindingStatus.UNBOUND,
        BindingStatus.NEW_ENTRY,
        *_BOUND_SCOPES,
    },
}


def can_transition(current: BindingStatus, target: BindingStatus) -> bool:
    """Return True if the transition is allowed."""
    if current == target:
        return True
    return target in ALLOWED_TRANSITIONS.get(current, set())


def scope_status(record_id: int, scope_ids: Collection[int | None]) -> BindingStatus:
    """Bound status for a record id given the current-scope candidate ids."""
    if record_id in scope_ids:
        return BindingStatus.BOUND_CURRENT_SCOPE
    return BindingStatus.BOUND_OTHER_SCOPE


def classify(
    draft: Draft,
    snapshot: Snapshot | None,
    scope_ids: Collection[int | None],
) -> BindingStatus:
    """Derive the status purely from the draft, snapshot and scope."""
    if draft.id is None:
        return BindingStatus.NEW_ENTRY if draft.name else BindingStatus.UNBOUND
    if snapshot is not None and draft.name != snapshot.name:
        return BindingStatus.DIVERGENT_EDIT
    return scope_status(draft.id, scope_ids)


def next_status(
    current: BindingStatus,
    event: BindingEvent,
    *,
    draft: Draft,
    snapshot: Snapshot | None,
    scope_ids: Collection[int | None],
    touched: bool = True,
) -> BindingStatus:
    """
    Compute the status after `event` has been applied to the draft.

    `draft` and `snapshot` are the values *after* the event's mutation.
    """
    if event is BindingEvent.CLEAR:
        target = BindingStatus.UNBOUND
    elif event in (BindingEvent.FOCUS, BindingEvent.FIELD_EDIT):
        target = current
    elif event is BindingEvent.BLUR:
        if draft.id is None and (not draft.name or not touched):
            target = BindingStatus.UNBOUND
        else:
            target = classify(draft, snapshot, scope_ids)
    elif event is BindingEvent.SCOPE_CHANGED:
        if draft.id is None or current is BindingStatus.DIVERGENT_EDIT:
            target = current
        else:
            target = classify(draft, snapshot, scope_ids)
    elif event is BindingEvent.REVERT and snapshot is None:
        target = current
    else:
        target = classify(draft, snapshot, scope_ids)

    if target != current:
        logger.debug(
            "Binding status transition",
            binding_event=event.value,
            from_status=current.value,
            to_status=target.value,
            record_id=draft.id,
        )
    return target
