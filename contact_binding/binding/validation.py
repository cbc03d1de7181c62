"""
Phone/email validation gate.

Pure predicates: empty values are always valid (both fields are optional),
non-empty values are checked against fixed format rules. The `*_error`
helpers return a human-readable reason for the parent form to display.
"""

from __future__ import annotations

import re

from .types import ContactRecord, ValidationResult

PHONE_MIN_DIGITS = 7
PHONE_MAX_DIGITS = 15

_PHONE_CHARS_RE = re.compile(r"^[\d\s()+-]+$")
_EMAIL_RE = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9-]+(?:\.[a-zA-Z0-9-]+)*$"
)


def phone_error(value: str | None) -> str | None:
    if not value or not value.strip():
        return None
    if not _PHONE_CHARS_RE.fullmatch(value):
        return "Phone number may only contain digits, spaces, brackets, + and -"
    digits = sum(1 for char in value if char.isdigit())
    if digits < PHONE_MIN_DIGITS or digits > PHONE_MAX_DIGITS:
        return (
            f"Please enter a valid phone number "
            f"({PHONE_MIN_DIGITS}-{PHONE_MAX_DIGITS} digits)"
        )
    return None


def email_error(value: str | None) -> str | None:
    if not value or not value.strip():
        return None
    email = value.strip()

    if "@" not in email:
        return "Email must contain an @ symbol"
    if "." not in email:
        return "Email must contain a domain (like .com)"

    parts = email.split("@")
    local_part, domain_part = parts[0], parts[1]
    if not local_part:
        return "Email username cannot be empty"
    if not domain_part:
        return "Email domain cannot be empty"
    if len(parts) > 2:
        return "Email cannot contain multiple @ symbols"
    if "." not in domain_part:
        return "Email domain must include an extension (like .com)"
    if len(domain_part.rsplit(".", 1)[-1]) < 2:
        return "Domain extension is too short"
    if " " in email:
        return "Email cannot contain spaces"
    if not _EMAIL_RE.fullmatch(email):
        return "Please enter a valid email address"
    return None


def validate_phone(value: str | None) -> bool:
    return phone_error(value) is None


def validate_email(value: str | None) -> bool:
    return email_error(value) is None


def validate_contact(record: ContactRecord) -> ValidationResult:
    """Evaluate both contact fields of a record or draft."""
    return ValidationResult(
        phone_valid=validate_phone(record.phone),
        email_valid=validate_email(record.email),
    )
