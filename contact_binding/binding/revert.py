"""Revert a divergent name edit back to the bound snapshot."""

from __future__ import annotations

from collections.abc import Collection

from .divergence import BindingEvent, next_status
from .types import BindingStatus, Draft, Snapshot


def revert(draft: Draft, snapshot: Snapshot | None) -> Draft:
    """
    Restore the draft's name from the snapshot.

    Only the name is restored; position, phone and email (including hand
    edits and their provenance) are left as they are. Without a snapshot the
    draft is returned unchanged.
    """
    if snapshot is None or draft.id is None:
        return draft
    return draft.model_copy(update={"name": snapshot.name})


def revert_with_status(
    draft: Draft,
    snapshot: Snapshot | None,
    current: BindingStatus,
    scope_ids: Collection[int | None],
) -> tuple[Draft, BindingStatus]:
    reverted = revert(draft, snapshot)
    status = next_status(
        current,
        BindingEvent.REVERT,
        draft=reverted,
        snapshot=snapshot,
        scope_ids=scope_ids,
    )
    return reverted, status
