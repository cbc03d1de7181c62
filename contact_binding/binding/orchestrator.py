"""
Contact Binding Orchestrator

Single entrypoint consumed by the parent form. Owns the binding state for
one form instance, feeds keystrokes to the search controller, merges the
suggestion sources and notifies the parent after every processed event.

Must be driven from inside a running asyncio event loop: typing schedules
the debounced global search on it.

Usage:
    orchestrator = ContactBindingOrchestrator(
        search=HttpContactSearchClient(),
        scope_candidates=organization_contacts,
        initial_value=existing_contact,
        on_draft_change=form.set_contact,
    )
    orchestrator.text_input("Ali")
"""

from __future__ import annotations

from collections.abc import Callable, Iterable

import structlog

from .aggregator import merge
from .reducer import (
    AddAsNew,
    BindingState,
    Blur,
    Clear,
    Event,
    FieldEdit,
    Focus,
    Revert,
    ScopeCandidatesChanged,
    SelectRecord,
    TextInput,
    initial_state,
    reduce,
)
from .search import SearchController, SearchGlobal
from .types import (
    BindingOutput,
    BindingStatus,
    ContactField,
    ContactRecord,
    Draft,
    SearchResultSet,
    ValidationResult,
)

logger = structlog.get_logger()

# Minimum query length for offering "add as new".
ADD_NEW_MIN_LENGTH = 2


class ContactBindingOrchestrator:
    """
    Wires search, aggregation, binding, divergence detection and revert into
    one unit per form instance.

    Events are processed to completion one at a time. Search results arrive
    asynchronously and only refresh the suggestion list.
    """

    def __init__(
        self,
        search: SearchGlobal,
        *,
        scope_candidates: Iterable[ContactRecord] = (),
        initial_value: ContactRecord | None = None,
        on_draft_change: Callable[[Draft], None] | None = None,
        on_validation_change: Callable[[ValidationResult], None] | None = None,
        on_suggestions_open_change: Callable[[bool], None] | None = None,
        on_change: Callable[[BindingOutput], None] | None = None,
        debounce_seconds: float | None = None,
        min_query_length: int | None = None,
        cancel_in_flight: bool | None = None,
    ):
        self._on_draft_change = on_draft_change
        self._on_validation_change = on_validation_change
        self._on_suggestions_open_change = on_suggestions_open_change
        self._on_change = on_change
        self._dispatching = False

        self._search = SearchController(
            search,
            debounce_seconds=debounce_seconds,
            min_query_length=min_query_length,
            cancel_in_flight=cancel_in_flight,
            on_results=self._handle_results,
        )
        self._state = initial_state(initial_value, scope_candidates)
        self._output = self._build_output()

        logger.debug(
            "Contact binding mounted",
            status=self._state.status.value,
            record_id=self._state.draft.id,
            scope_size=len(self._state.scope_candidates),
        )

    # ---------------------------------------------------------------------
    # Outputs
    # ---------------------------------------------------------------------

    @property
    def state(self) -> BindingState:
        return self._state

    @property
    def output(self) -> BindingOutput:
        return self._output

    @property
    def draft(self) -> Draft:
        return self._state.draft

    @property
    def status(self) -> BindingStatus:
        return self._state.status

    @property
    def validation(self) -> ValidationResult:
        return self._state.validation

    @property
    def suggestions(self) -> tuple[ContactRecord, ...]:
        return self._output.suggestions

    @property
    def search_controller(self) -> SearchController:
        return self._search

    # ---------------------------------------------------------------------
    # Events
    # ---------------------------------------------------------------------

    def dispatch(self, event: Event) -> BindingOutput:
        """
        Apply one event, run its search side effects and notify the parent.

        Name edits that trigger a global search must be dispatched from a
        running event loop. If the side effects fail, the event is not
        committed and the previous state and output stay in place.
        """
        previous = self._state
        next_state = reduce(previous, event)
        self._dispatching = True
        try:
            self._run_search_effects(event, next_state)
        finally:
            self._dispatching = False
        self._state = next_state
        return self._publish(previous)

    def text_input(self, text: str) -> BindingOutput:
        return self.dispatch(TextInput(text=text))

    def focus(self) -> BindingOutput:
        return self.dispatch(Focus())

    def blur(self) -> BindingOutput:
        return self.dispatch(Blur())

    def select(self, record: ContactRecord) -> BindingOutput:
        return self.dispatch(SelectRecord(record=record))

    def add_as_new(self) -> BindingOutput:
        return self.dispatch(AddAsNew())

    def clear(self) -> BindingOutput:
        return self.dispatch(Clear())

    def revert(self) -> BindingOutput:
        return self.dispatch(Revert())

    def edit_field(self, contact_field: ContactField | str, value: str) -> BindingOutput:
        return self.dispatch(FieldEdit(field=ContactField(contact_field), value=value))

    def set_scope_candidates(self, candidates: Iterable[ContactRecord]) -> BindingOutput:
        return self.dispatch(ScopeCandidatesChanged(candidates=tuple(candidates)))

    async def aclose(self) -> None:
        """Cancel outstanding search work when the form instance is torn down."""
        self._search.reset()
        await self._search.drain()

    # ---------------------------------------------------------------------
    # Internals
    # ---------------------------------------------------------------------

    def _run_search_effects(self, event: Event, state: BindingState) -> None:
        if isinstance(event, TextInput) or (
            isinstance(event, FieldEdit) and event.field is ContactField.NAME
        ):
            self._search.on_query_change(state.query, bound=state.draft.id is not None)
        elif isinstance(event, (SelectRecord, AddAsNew, Clear)):
            self._search.reset()

    def _handle_results(self, results: SearchResultSet) -> None:
        # Results produced while dispatching are published by dispatch itself.
        if self._dispatching:
            return
        logger.debug(
            "Applied global search results",
            generation=results.generation,
            count=len(results.records),
        )
        self._publish(self._state)

    def _build_output(self) -> BindingOutput:
        state = self._state
        unbound = state.draft.id is None
        results = self._search.results

        show_global = (
            unbound
            and bool(state.query)
            and not self._search.pending
            and results.query == state.query
        )
        suggestions = merge(
            state.pinned,
            state.scope_candidates,
            results.records if show_global else (),
            state.draft.id,
        )
        return BindingOutput(
            draft=state.draft,
            status=state.status,
            validation=state.validation,
            suggestions=tuple(suggestions),
            suggestions_open=state.suggestions_open,
            can_add_new=unbound
            and len(state.query) >= ADD_NEW_MIN_LENGTH
            and not self._search.pending,
            search_pending=self._search.pending,
            is_new_mode=state.is_new_mode,
        )

    def _publish(self, previous: BindingState) -> BindingOutput:
        previous_output = self._output
        self._output = self._build_output()
        state = self._state

        if self._on_draft_change is not None and state.draft != previous.draft:
            self._on_draft_change(state.draft)
        if (
            self._on_validation_change is not None
            and state.validation != previous.validation
        ):
            self._on_validation_change(state.validation)
        if (
            self._on_suggestions_open_change is not None
            and self._output.suggestions_open != previous_output.suggestions_open
        ):
            self._on_suggestions_open_change(self._output.suggestions_open)
        if self._on_change is not None:
            self._on_change(self._output)
        return self._output
