"""
Contact Binding Type Definitions

Types for binding a contact record to a parent form: the records offered
as suggestions, the editable draft, and the binding status.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BindingStatus(str, Enum):
    """Relationship between the draft and a persisted contact record."""

    UNBOUND = "unbound"
    NEW_ENTRY = "new_entry"
    BOUND_CURRENT_SCOPE = "bound_current_scope"
    BOUND_OTHER_SCOPE = "bound_other_scope"
    DIVERGENT_EDIT = "divergent_edit"


class ContactField(str, Enum):
    """Editable contact fields."""

    NAME = "name"
    POSITION = "position"
    PHONE = "phone"
    EMAIL = "email"


# Fields whose provenance is tracked. Name is the search field and is never
# considered auto-filled.
PROVENANCE_FIELDS = (ContactField.POSITION, ContactField.PHONE, ContactField.EMAIL)


class ContactRecord(BaseModel):
    """A bindable contact, from the current scope or from global search."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    name: str = ""
    position: str = ""
    phone: str = ""
    email: str = ""

    # Set only for records found through global (cross-scope) search.
    origin_scope_name: str | None = None

    @field_validator("name", "position", "phone", "email", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "ContactRecord":
        """
        Build a record from the client API shape.

        Example payload:
            {"id": 5, "name": "John Tan", "position": null,
             "contact_number": "+60123456789", "contact_email": null,
             "organization": {"name": "Acme"}}
        """
        organization = payload.get("organization") or {}
        origin = organization.get("name") if isinstance(organization, dict) else None
        raw_id = payload.get("id")
        return cls(
            id=int(raw_id) if raw_id is not None else None,
            name=payload.get("name") or "",
            position=payload.get("position"),
            phone=payload.get("contact_number", payload.get("phone")),
            email=payload.get("contact_email", payload.get("email")),
            origin_scope_name=origin,
        )


class Provenance(BaseModel):
    """Per-field flag: True when the value was auto-filled from a selected record."""

    model_config = ConfigDict(frozen=True)

    position: bool = False
    phone: bool = False
    email: bool = False

    @classmethod
    def from_record(cls, record: ContactRecord) -> "Provenance":
        return cls(
            position=bool(record.position),
            phone=bool(record.phone),
            email=bool(record.email),
        )

    def cleared(self, contact_field: ContactField) -> "Provenance":
        """Return a copy with the given field marked as manually edited."""
        if contact_field not in PROVENANCE_FIELDS:
            return self
        return self.model_copy(update={contact_field.value: False})


class Draft(ContactRecord):
    """The live, editable working copy the parent form binds to."""

    provenance: Provenance = Field(default_factory=Provenance)

    @classmethod
    def empty(cls) -> "Draft":
        return cls()

    @classmethod
    def from_record(
        cls, record: ContactRecord, provenance: Provenance | None = None
    ) -> "Draft":
        return cls(
            id=record.id,
            name=record.name,
            position=record.position,
            phone=record.phone,
            email=record.email,
            origin_scope_name=record.origin_scope_name,
            provenance=provenance if provenance is not None else Provenance(),
        )

    def to_record(self) -> ContactRecord:
        return ContactRecord(
            id=self.id,
            name=self.name,
            position=self.position,
            phone=self.phone,
            email=self.email,
            origin_scope_name=self.origin_scope_name,
        )

    def with_field(self, contact_field: ContactField, value: str) -> "Draft":
        """Return a copy with one field manually edited."""
        return self.model_copy(
            update={
                contact_field.value: value,
                "provenance": self.provenance.cleared(contact_field),
            }
        )


# Immutable copy of the last bound record. Only exists while Draft.id is set.
Snapshot = ContactRecord


class ValidationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    phone_valid: bool = True
    email_valid: bool = True

    @property
    def is_valid(self) -> bool:
        return self.phone_valid and self.email_valid


@dataclass(frozen=True)
class SearchResultSet:
    """Latest applied global search response, tagged with its query."""

    query: str
    generation: int
    records: tuple[ContactRecord, ...] = ()

    @classmethod
    def empty(cls, query: str = "", generation: int = 0) -> "SearchResultSet":
        return cls(query=query, generation=generation)


@dataclass(frozen=True)
class BindingOutput:
    """Everything the parent form renders after an event is processed."""

    draft: Draft
    status: BindingStatus
    validation: ValidationResult
    suggestions: tuple[ContactRecord, ...] = ()
    suggestions_open: bool = False
    can_add_new: bool = False
    search_pending: bool = False
    # Draft was started through "add as new" rather than free typing.
    is_new_mode: bool = False
