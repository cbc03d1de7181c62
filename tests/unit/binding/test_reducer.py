"""
Unit tests for the binding state reducer.

Each test drives the pure `reduce(state, event)` function; no event loop or
search collaborator is involved.
"""

from dataclasses import replace
from functools import reduce as fold

import pytest

from contact_binding.binding.reducer import (
    AddAsNew,
    BindingState,
    Blur,
    Clear,
    FieldEdit,
    Focus,
    Revert,
    ScopeCandidatesChanged,
    SelectRecord,
    TextInput,
    check_invariants,
    initial_state,
    reduce,
)
from contact_binding.binding.types import (
    BindingStatus,
    ContactField,
    ContactRecord,
    Draft,
    Provenance,
)
from contact_binding.kernel.errors import InvariantViolationError

pytestmark = pytest.mark.unit


def _run(state, *events):
    return fold(reduce, events, state)


@pytest.fixture
def state(scope_candidates):
    return initial_state(None, scope_candidates)


# =============================================================================
# Initial state
# =============================================================================


class TestInitialState:
    def test_empty_mount(self, state):
        assert state.status is BindingStatus.UNBOUND
        assert state.draft == Draft()
        assert state.snapshot is None
        assert state.pinned is None

    def test_mount_with_bound_value(self, scope_candidates, mary_lee):
        state = initial_state(mary_lee, scope_candidates)
        assert state.status is BindingStatus.BOUND_CURRENT_SCOPE
        assert state.snapshot == mary_lee
        assert state.pinned == mary_lee
        assert state.query == "Mary Lee"
        assert state.draft.provenance == Provenance(position=True, phone=True, email=True)

    def test_mount_with_value_from_other_scope(self, scope_candidates, global_alice):
        state = initial_state(global_alice, scope_candidates)
        assert state.status is BindingStatus.BOUND_OTHER_SCOPE

    def test_mount_keeps_supplied_provenance(self, scope_candidates):
        value = Draft(id=5, name="John Tan", phone="+60123456789", provenance=Provenance())
        state = initial_state(value, scope_candidates)
        assert state.draft.provenance.phone is False

    def test_mount_with_unsaved_name(self, scope_candidates):
        state = initial_state(ContactRecord(name="Ali"), scope_candidates)
        assert state.status is BindingStatus.NEW_ENTRY
        assert state.snapshot is None


# =============================================================================
# Typing and selection
# =============================================================================


class TestTyping:
    def test_typing_free_text_is_new_entry(self, state):
        state = reduce(state, TextInput("Ali"))
        assert state.status is BindingStatus.NEW_ENTRY
        assert state.draft == Draft(name="Ali")
        assert state.touched is True
        assert state.suggestions_open is True

    def test_erasing_text_returns_to_unbound(self, state):
        state = _run(state, TextInput("A"), TextInput(""))
        assert state.status is BindingStatus.UNBOUND

    def test_focus_opens_blur_closes(self, state):
        state = reduce(state, Focus())
        assert state.suggestions_open is True
        state = reduce(state, Blur())
        assert state.suggestions_open is False

    def test_blur_on_untouched_field_is_unbound(self, state):
        state = _run(state, Focus(), Blur())
        assert state.status is BindingStatus.UNBOUND


class TestSelection:
    def test_select_from_current_scope(self, state, john_tan):
        state = reduce(state, SelectRecord(john_tan))
        assert state.status is BindingStatus.BOUND_CURRENT_SCOPE
        assert state.draft.provenance.phone is True
        assert state.draft.provenance.position is False
        assert state.snapshot == john_tan
        assert state.query == "John Tan"
        assert state.suggestions_open is False

    def test_select_from_global_search(self, state, global_alice):
        state = reduce(state, SelectRecord(global_alice))
        assert state.status is BindingStatus.BOUND_OTHER_SCOPE

    def test_selection_replaces_previous_binding(self, state, john_tan, mary_lee):
        state = _run(state, SelectRecord(john_tan), TextInput("Johnny"), SelectRecord(mary_lee))
        assert state.status is BindingStatus.BOUND_CURRENT_SCOPE
        assert state.draft.name == "Mary Lee"
        assert state.snapshot == mary_lee

    def test_select_unsaved_record_fails_fast(self, state):
        with pytest.raises(InvariantViolationError):
            reduce(state, SelectRecord(ContactRecord(name="Nobody")))


# =============================================================================
# Divergence and revert
# =============================================================================


class TestDivergence:
    def test_edit_name_then_revert(self, state, john_tan):
        state = _run(state, SelectRecord(john_tan), TextInput("John T."))
        assert state.status is BindingStatus.DIVERGENT_EDIT
        assert state.draft.id == 5

        state = reduce(state, Revert())
        assert state.draft.name == "John Tan"
        assert state.query == "John Tan"
        assert state.status is BindingStatus.BOUND_CURRENT_SCOPE

    def test_typing_back_to_snapshot_name_restores(self, state, global_alice):
        state = _run(
            state,
            SelectRecord(global_alice),
            TextInput("Alice W"),
            TextInput("Alice Wong"),
        )
        assert state.status is BindingStatus.BOUND_OTHER_SCOPE

    def test_revert_keeps_hand_edited_fields(self, state, john_tan):
        state = _run(
            state,
            SelectRecord(john_tan),
            FieldEdit(ContactField.PHONE, "0199999999"),
            TextInput("J. Tan"),
            Revert(),
        )
        assert state.draft.phone == "0199999999"
        assert state.draft.provenance.phone is False

    def test_revert_without_binding_is_noop(self, state):
        typed = reduce(state, TextInput("Ali"))
        assert reduce(typed, Revert()) is typed

    def test_name_field_edit_goes_through_divergence(self, state, john_tan):
        state = _run(state, SelectRecord(john_tan), FieldEdit(ContactField.NAME, "Jon Tan"))
        assert state.status is BindingStatus.DIVERGENT_EDIT
        assert state.query == "Jon Tan"


class TestFieldEdit:
    def test_manual_edit_clears_provenance_and_revalidates(self, state, mary_lee):
        state = _run(state, SelectRecord(mary_lee), FieldEdit(ContactField.EMAIL, "mary@"))
        assert state.draft.provenance.email is False
        assert state.draft.provenance.phone is True
        assert state.validation.email_valid is False
        assert state.status is BindingStatus.BOUND_CURRENT_SCOPE


# =============================================================================
# Add as new, clear, scope changes
# =============================================================================


class TestAddAsNewAndClear:
    def test_add_as_new_uses_query(self, state, john_tan):
        state = _run(state, SelectRecord(john_tan), Clear(), TextInput("Ali Baba"), AddAsNew())
        assert state.status is BindingStatus.NEW_ENTRY
        assert state.draft == Draft(name="Ali Baba")
        assert state.snapshot is None
        assert state.is_new_mode is True

    @pytest.mark.parametrize(
        "events",
        [
            (),
            (TextInput("Ali"),),
            (SelectRecord(ContactRecord(id=5, name="John Tan")),),
            (SelectRecord(ContactRecord(id=5, name="John Tan")), TextInput("John T.")),
        ],
    )
    def test_clear_from_any_state(self, state, events):
        state = _run(state, *events, Clear())
        assert state.draft == Draft(id=None, name="", position="", phone="", email="")
        assert state.status is BindingStatus.UNBOUND
        assert state.snapshot is None
        assert state.query == ""
        assert state.validation.is_valid is True

    def test_clear_keeps_pinned_record(self, scope_candidates, mary_lee):
        state = reduce(initial_state(mary_lee, scope_candidates), Clear())
        assert state.pinned == mary_lee


class TestScopeCandidatesChanged:
    def test_bound_record_joining_scope_becomes_current(self, state, global_alice):
        state = reduce(state, SelectRecord(global_alice))
        state = reduce(state, ScopeCandidatesChanged((global_alice,)))
        assert state.status is BindingStatus.BOUND_CURRENT_SCOPE

    def test_pinned_refreshed_from_new_candidates(self, scope_candidates, john_tan):
        state = initial_state(john_tan, scope_candidates)
        updated = john_tan.model_copy(update={"email": "john@acme.com"})
        state = reduce(state, ScopeCandidatesChanged((updated,)))
        assert state.pinned == updated
        # The draft keeps what the user is working on.
        assert state.draft.email == ""


def test_invariant_check_rejects_bound_draft_without_snapshot():
    broken = replace(BindingState(), draft=Draft(id=5, name="John Tan"))
    with pytest.raises(InvariantViolationError):
        check_invariants(broken)
