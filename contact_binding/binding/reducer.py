"""
Binding state reducer.

All authoritative binding state lives in one immutable `BindingState`;
`reduce(state, event)` returns the next state. Handlers never mutate their
input, so every transition can be tested in isolation.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from typing import Union

import structlog

from contact_binding.kernel.errors import InvariantViolationError

from .binder import bind
from .divergence import BindingEvent, next_status
from .revert import revert_with_status
from .types import (
    BindingStatus,
    ContactField,
    ContactRecord,
    Draft,
    Provenance,
    Snapshot,
    ValidationResult,
)
from .validation import validate_contact

logger = structlog.get_logger()


@dataclass(frozen=True)
class BindingState:
    draft: Draft = field(default_factory=Draft.empty)
    snapshot: Snapshot | None = None
    status: BindingStatus = BindingStatus.UNBOUND
    validation: ValidationResult = field(default_factory=ValidationResult)

    # Text currently shown in the name/search input.
    query: str = ""
    touched: bool = False
    suggestions_open: bool = False
    is_new_mode: bool = False

    # Record the form was mounted with; pinned first in suggestions.
    pinned: ContactRecord | None = None
    scope_candidates: tuple[ContactRecord, ...] = ()

    @property
    def scope_ids(self) -> frozenset[int | None]:
        return frozenset(record.id for record in self.scope_candidates)


# =============================================================================
# Events
# =============================================================================


@dataclass(frozen=True)
class TextInput:
    text: str


@dataclass(frozen=True)
class Focus:
    pass


@dataclass(frozen=True)
class Blur:
    pass


@dataclass(frozen=True)
class SelectRecord:
    record: ContactRecord


@dataclass(frozen=True)
class AddAsNew:
    pass


@dataclass(frozen=True)
class Clear:
    pass


@dataclass(frozen=True)
class Revert:
    pass


@dataclass(frozen=True)
class FieldEdit:
    field: ContactField
    value: str


@dataclass(frozen=True)
class ScopeCandidatesChanged:
    candidates: tuple[ContactRecord, ...]


Event = Union[
    TextInput,
    Focus,
    Blur,
    SelectRecord,
    AddAsNew,
    Clear,
    Revert,
    FieldEdit,
    ScopeCandidatesChanged,
]


# =============================================================================
# Initial state
# =============================================================================


def initial_state(
    initial_value: ContactRecord | None = None,
    scope_candidates: Iterable[ContactRecord] = (),
) -> BindingState:
    """
    Build the state a form instance mounts with.

    An initial value with an id becomes both the snapshot and the pinned
    suggestion. Provenance is taken from a `Draft` as supplied, otherwise
    derived from which fields are non-empty.
    """
    candidates = tuple(scope_candidates)
    if initial_value is None:
        return BindingState(scope_candidates=candidates)

    if isinstance(initial_value, Draft):
        draft = initial_value
    else:
        draft = Draft.from_record(initial_value, Provenance.from_record(initial_value))

    state = BindingState(
        draft=draft,
        validation=validate_contact(draft),
        query=draft.name,
        scope_candidates=candidates,
    )
    if draft.id is not None:
        snapshot = draft.to_record()
        state = replace(state, snapshot=snapshot, pinned=snapshot)

    status = next_status(
        BindingStatus.UNBOUND,
        BindingEvent.INITIALIZE,
        draft=draft,
        snapshot=state.snapshot,
        scope_ids=state.scope_ids,
    )
    state = replace(state, status=status)
    check_invariants(state)
    return state


# =============================================================================
# Handlers
# =============================================================================


def _text_input(state: BindingState, event: TextInput) -> BindingState:
    draft = state.draft.model_copy(update={"name": event.text})
    status = next_status(
        state.status,
        BindingEvent.TEXT_INPUT,
        draft=draft,
        snapshot=state.snapshot,
        scope_ids=state.scope_ids,
    )
    suggestions_open = (draft.id is None and bool(event.text)) or bool(
        state.scope_candidates
    )
    return replace(
        state,
        draft=draft,
        status=status,
        query=event.text,
        touched=True,
        suggestions_open=suggestions_open,
    )


def _focus(state: BindingState, event: Focus) -> BindingState:
    return replace(state, suggestions_open=True)


def _blur(state: BindingState, event: Blur) -> BindingState:
    status = next_status(
        state.status,
        BindingEvent.BLUR,
        draft=state.draft,
        snapshot=state.snapshot,
        scope_ids=state.scope_ids,
        touched=state.touched,
    )
    return replace(state, status=status, suggestions_open=False)


def _select(state: BindingState, event: SelectRecord) -> BindingState:
    binding = bind(event.record)
    status = next_status(
        state.status,
        BindingEvent.SELECT,
        draft=binding.draft,
        snapshot=binding.snapshot,
        scope_ids=state.scope_ids,
    )
    return replace(
        state,
        draft=binding.draft,
        snapshot=binding.snapshot,
        status=status,
        validation=binding.validation,
        query=binding.draft.name,
        touched=True,
        suggestions_open=False,
        is_new_mode=False,
    )


def _add_as_new(state: BindingState, event: AddAsNew) -> BindingState:
    draft = Draft(name=state.query)
    status = next_status(
        state.status,
        BindingEvent.ADD_AS_NEW,
        draft=draft,
        snapshot=None,
        scope_ids=state.scope_ids,
    )
    return replace(
        state,
        draft=draft,
        snapshot=None,
        status=status,
        validation=validate_contact(draft),
        touched=True,
        suggestions_open=False,
        is_new_mode=True,
    )


def _clear(state: BindingState, event: Clear) -> BindingState:
    draft = Draft.empty()
    status = next_status(
        state.status,
        BindingEvent.CLEAR,
        draft=draft,
        snapshot=None,
        scope_ids=state.scope_ids,
    )
    return replace(
        state,
        draft=draft,
        snapshot=None,
        status=status,
        validation=ValidationResult(),
        query="",
        touched=False,
        suggestions_open=False,
        is_new_mode=False,
    )


def _revert(state: BindingState, event: Revert) -> BindingState:
    if state.snapshot is None or state.draft.id is None:
        return state
    draft, status = revert_with_status(
        state.draft, state.snapshot, state.status, state.scope_ids
    )
    return replace(state, draft=draft, status=status, query=draft.name)


def _field_edit(state: BindingState, event: FieldEdit) -> BindingState:
    if event.field is ContactField.NAME:
        return _text_input(state, TextInput(text=event.value))
    draft = state.draft.with_field(event.field, event.value)
    status = next_status(
        state.status,
        BindingEvent.FIELD_EDIT,
        draft=draft,
        snapshot=state.snapshot,
        scope_ids=state.scope_ids,
    )
    return replace(
        state,
        draft=draft,
        status=status,
        validation=validate_contact(draft),
    )


def _scope_changed(state: BindingState, event: ScopeCandidatesChanged) -> BindingState:
    candidates = tuple(event.candidates)
    pinned = state.pinned
    if pinned is not None:
        pinned = next((c for c in candidates if c.id == pinned.id), pinned)
    updated = replace(state, scope_candidates=candidates, pinned=pinned)
    status = next_status(
        state.status,
        BindingEvent.SCOPE_CHANGED,
        draft=updated.draft,
        snapshot=updated.snapshot,
        scope_ids=updated.scope_ids,
    )
    return replace(updated, status=status)


_HANDLERS: dict[type, Callable[[BindingState, Event], BindingState]] = {
    TextInput: _text_input,
    Focus: _focus,
    Blur: _blur,
    SelectRecord: _select,
    AddAsNew: _add_as_new,
    Clear: _clear,
    Revert: _revert,
    FieldEdit: _field_edit,
    ScopeCandidatesChanged: _scope_changed,
}


def reduce(state: BindingState, event: Event) -> BindingState:
    """Apply one event and return the next state."""
    handler = _HANDLERS.get(type(event))
    if handler is None:
        raise InvariantViolationError(
            code="binding.unknown_event",
            message=f"Unsupported binding event: {type(event).__name__}",
        )
    next_state = handler(state, event)
    check_invariants(next_state)
    return next_state


def check_invariants(state: BindingState) -> None:
    """Fail fast if the state breaks the draft/snapshot/status contract."""
    if state.draft.id is not None and state.snapshot is None:
        raise InvariantViolationError(
            code="binding.missing_snapshot",
            message="A bound draft must have a snapshot",
            meta={"record_id": state.draft.id},
        )
    if state.status is BindingStatus.DIVERGENT_EDIT and (
        state.snapshot is None or state.draft.name == state.snapshot.name
    ):
        raise InvariantViolationError(
            code="binding.invalid_divergence",
            message="Divergent status requires a bound draft whose name differs",
            meta={"record_id": state.draft.id},
        )
