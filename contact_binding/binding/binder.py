"""Selection binding: write a chosen record into a fresh draft and snapshot."""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from contact_binding.kernel.errors import InvariantViolationError

from .types import ContactRecord, Draft, Provenance, Snapshot, ValidationResult
from .validation import validate_contact

logger = structlog.get_logger()


@dataclass(frozen=True)
class Binding:
    draft: Draft
    snapshot: Snapshot
    provenance: Provenance
    validation: ValidationResult


def bind(record: ContactRecord) -> Binding:
    """
    Bind a persisted record.

    Every field is copied into both the draft and the snapshot; provenance is
    set for each non-empty source field. Validation runs immediately so a
    record with malformed contact data is surfaced, not hidden.

    Raises:
        InvariantViolationError: if the record has no id.
    """
    if record.id is None:
        raise InvariantViolationError(
            code="binding.unpersisted_record",
            message="Only persisted records (with an id) can be bound",
            meta={"name": record.name},
        )

    provenance = Provenance.from_record(record)
    snapshot = ContactRecord(
        id=record.id,
        name=record.name,
        position=record.position,
        phone=record.phone,
        email=record.email,
        origin_scope_name=record.origin_scope_name,
    )
    draft = Draft.from_record(snapshot, provenance)
    validation = validate_contact(draft)

    if not validation.is_valid:
        logger.info(
            "Bound record has invalid contact data",
            record_id=record.id,
            phone_valid=validation.phone_valid,
            email_valid=validation.email_valid,
        )

    return Binding(
        draft=draft,
        snapshot=snapshot,
        provenance=provenance,
        validation=validation,
    )
