"""Pure validation and normalization of waitlist submissions."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from email_validator import EmailNotValidError, validate_email

from core.errors import EmptyFieldError, FieldTooLongError, InvalidEmailError, InvalidRoleError
from utils.sanitization import clean_optional_text


class WaitlistRole(str, Enum):
    BUYER = "buyer"
    SELLER = "seller"
    INVESTOR = "investor"


# Matches the column sizes on WaitlistEntry.
MAX_FIELD_LENGTHS = {"first_name": 120, "last_name": 120, "phone": 40}
OPTIONAL_TEXT_FIELDS = tuple(MAX_FIELD_LENGTHS)

_GMAIL_DOMAINS = {"gmail.com", "googlemail.com"}
_PLUS_TAG_DOMAINS = {"outlook.com", "hotmail.com", "live.com", "icloud.com", "me.com"}
_YAHOO_DOMAINS = {"yahoo.com", "ymail.com"}


@dataclass(frozen=True)
class WaitlistSubmission:
    email: str
    role: WaitlistRole
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None


def normalize_email(email: str) -> str:
    """Canonical form used as the uniqueness key.

    Lowercases the whole address and folds provider-specific aliases:
    gmail ignores dots and ``+tags``, outlook/icloud ignore ``+tags``,
    yahoo ignores ``-tags``.
    """
    local, _, domain = email.strip().lower().rpartition("@")
    if domain in _GMAIL_DOMAINS:
        local = local.split("+", 1)[0].replace(".", "")
        domain = "gmail.com"
    elif domain in _PLUS_TAG_DOMAINS:
        local = local.split("+", 1)[0]
    elif domain in _YAHOO_DOMAINS:
        local = local.split("-", 1)[0]
    return f"{local}@{domain}"


def validate_email_address(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidEmailError()
    try:
        result = validate_email(value.strip(), check_deliverability=False)
    except EmailNotValidError as exc:
        raise InvalidEmailError() from exc
    return normalize_email(result.normalized)


def validate_role(value: Any) -> WaitlistRole:
    if not isinstance(value, str):
        raise InvalidRoleError()
    try:
        return WaitlistRole(value.strip().lower())
    except ValueError as exc:
        raise InvalidRoleError() from exc


def validate_optional_text(field: str, value: Any) -> str | None:
    cleaned = clean_optional_text(value)
    if cleaned == "":
        raise EmptyFieldError(field)
    limit = MAX_FIELD_LENGTHS.get(field)
    if cleaned is not None and limit is not None and len(cleaned) > limit:
        raise FieldTooLongError(field, limit)
    return cleaned


def validate_submission(raw: Mapping[str, Any]) -> WaitlistSubmission:
    """Check fields in order and raise on the first offending one."""
    email = validate_email_address(raw.get("email"))
    role = validate_role(raw.get("role"))
    optional = {field: validate_optional_text(field, raw.get(field)) for field in OPTIONAL_TEXT_FIELDS}
    return WaitlistSubmission(email=email, role=role, **optional)
