"""
Suggestion list aggregation.

Merges the pinned (originally bound) record, the current-scope candidates
and the global search results into one ordered list with unique ids:

    [pinned-or-bound record] -> [other current-scope records] -> [global results]
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import structlog

from .types import ContactRecord

logger = structlog.get_logger()


def merge(
    pinned: ContactRecord | None,
    scope_list: Sequence[ContactRecord],
    global_list: Iterable[ContactRecord],
    bound_id: int | None,
) -> list[ContactRecord]:
    """
    Build the presentation list.

    Args:
        pinned: Record the form was originally bound to, always first.
        scope_list: Candidates belonging to the current parent record.
        global_list: Latest cross-scope search results.
        bound_id: Id of the record currently bound to the draft, if any.

    Returns:
        Ordered records, no two sharing an id.
    """
    by_id = {record.id: record for record in scope_list}
    seen: set[int | None] = set()
    merged: list[ContactRecord] = []

    if pinned is not None:
        # Prefer the scope list's copy: it is re-supplied on every render.
        merged.append(by_id.get(pinned.id, pinned))
        seen.add(pinned.id)

    scope_part: list[ContactRecord] = []
    for record in scope_list:
        if record.id in seen:
            continue
        seen.add(record.id)
        scope_part.append(record)

    if pinned is None and bound_id is not None:
        bound = [record for record in scope_part if record.id == bound_id]
        if bound:
            others = [record for record in scope_part if record.id != bound_id]
            scope_part = bound + others

    merged.extend(scope_part)

    dropped = 0
    for record in global_list:
        if record.id in seen:
            dropped += 1
            continue
        seen.add(record.id)
        merged.append(record)

    if dropped:
        logger.debug("Dropped duplicate global suggestions", count=dropped)
    return merged
