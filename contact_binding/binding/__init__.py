"""
Contact Binding Module

Resolves a contact for a parent form from three sources (the originally
bound record, current-scope candidates and global search) and tracks how the
editable draft relates to the record it is bound to.
"""

from .aggregator import merge
from .binder import Binding, bind
from .divergence import (
    ALLOWED_TRANSITIONS,
    BindingEvent,
    can_transition,
    classify,
    next_status,
    scope_status,
)
from .orchestrator import ContactBindingOrchestrator
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
from .revert import revert
from .search import SearchController, SearchGlobal
from .types import (
    BindingOutput,
    BindingStatus,
    ContactField,
    ContactRecord,
    Draft,
    Provenance,
    SearchResultSet,
    Snapshot,
    ValidationResult,
)
from .validation import (
    email_error,
    phone_error,
    validate_contact,
    validate_email,
    validate_phone,
)

__all__ = [
    "ContactBindingOrchestrator",
    "SearchController",
    "SearchGlobal",
    "merge",
    "bind",
    "Binding",
    "revert",
    "reduce",
    "initial_state",
    "BindingState",
    "Event",
    "TextInput",
    "Focus",
    "Blur",
    "SelectRecord",
    "AddAsNew",
    "Clear",
    "Revert",
    "FieldEdit",
    "ScopeCandidatesChanged",
    "ALLOWED_TRANSITIONS",
    "BindingEvent",
    "can_transition",
    "classify",
    "next_status",
    "scope_status",
    "BindingOutput",
    "BindingStatus",
    "ContactField",
    "ContactRecord",
    "Draft",
    "Provenance",
    "SearchResultSet",
    "Snapshot",
    "ValidationResult",
    "email_error",
    "phone_error",
    "validate_contact",
    "validate_email",
    "validate_phone",
]
