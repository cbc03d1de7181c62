"""Typed errors shared across the contact binding package.

Rules:
- Validation failures (malformed phone/email) are data, never exceptions.
- Search collaborator failures are raised as `UpstreamError` and recovered
  by the search controller.
- Contract misuse by the calling layer fails fast with
  `InvariantViolationError`.
"""

from __future__ import annotations

import re
from typing import Any


_ERROR_CODE_RE = re.compile(r"^[a-z][a-z0-9_]*(\.[a-z][a-z0-9_]*)*$")


class ContactBindingError(Exception):
    """Base typed error.

    - Stable `code` for programmatic handling by the parent form.
    - Human-readable `message`.
    - Optional `meta` payload for debugging.
    """

    def __init__(
        self,
        *,
        code: str,
        message: str,
        meta: dict[str, Any] | None = None,
    ) -> None:
        if not _ERROR_CODE_RE.fullmatch(code):
            raise ValueError(
                "Invalid error code. Expected dot-separated lowercase tokens, "
                f"got: {code!r}"
            )
        super().__init__(message)
        self.code = code
        self.message = message
        self.meta = dict(meta or {})


class InvariantViolationError(ContactBindingError, AssertionError):
    def __init__(
        self,
        *,
        message: str = "Binding invariant violated",
        code: str = "binding.invariant_violation",
        meta: dict[str, Any] | None = None,
    ):
        super().__init__(code=code, message=message, meta=meta)


class UpstreamError(ContactBindingError):
    def __init__(
        self,
        *,
        message: str = "Upstream service error",
        code: str = "upstream.error",
        meta: dict[str, Any] | None = None,
        status_code: int = 502,
    ):
        super().__init__(code=code, message=message, meta=meta)
        self.status_code = int(status_code)
