"""
Submission checks that run before any account lookup.

Each function returns a list of ``FieldError``; an empty list means the
submission can be handed to the identity service. ``field`` is ``None`` for
form-level problems.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 100

PASSWORD_LENGTH_MESSAGE = (
    f"The Password must be at least {PASSWORD_MIN_LENGTH} "
    f"and at max {PASSWORD_MAX_LENGTH} characters long."
)


@dataclass(frozen=True)
class FieldError:
    field: Optional[str]
    message: str


def _required(field: str, label: str, value) -> List[FieldError]:
    if value is None or not str(value).strip():
        return [FieldError(field, f"The {label} field is required.")]
    return []


def _password(field: str, value) -> List[FieldError]:
    errors = _required(field, "Password", value)
    if errors:
        return errors
    if not PASSWORD_MIN_LENGTH <= len(value) <= PASSWORD_MAX_LENGTH:
        return [FieldError(field, PASSWORD_LENGTH_MESSAGE)]
    return []


def validate_login_register(identifier, password) -> List[FieldError]:
    return _required("identifier", "Username / Email", identifier) + _password("password", password)


def validate_forgot_password(identifier) -> List[FieldError]:
    return _required("identifier", "Username / Email", identifier)


def validate_reset_password(identifier, code, password, confirm_password) -> List[FieldError]:
    errors = _required("identifier", "Username / Email", identifier)
    errors += _required("code", "Code", code)
    errors += _password("password", password)
    if password and confirm_password != password:
        errors.append(
            FieldError("confirm_password", "The password and confirmation password do not match.")
        )
    return errors
