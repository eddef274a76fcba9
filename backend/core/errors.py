"""Domain errors raised by the waitlist services.

Validation and duplicate errors are client-correctable and map to HTTP 400.
Store errors map to 500 with a generic message. Notifier errors are only
ever logged.
"""
from __future__ import annotations


class WaitlistError(Exception):
    message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message


class WaitlistValidationError(WaitlistError):
    field: str | None = None


class InvalidEmailError(WaitlistValidationError):
    field = "email"
    message = "Please provide a valid email address"


class InvalidRoleError(WaitlistValidationError):
    field = "role"
    message = "Please select a valid role (Buyer, Seller, or Investor)"


_FIELD_LABELS = {
    "first_name": "First name",
    "last_name": "Last name",
    "phone": "Phone number",
}


class EmptyFieldError(WaitlistValidationError):
    def __init__(self, field: str) -> None:
        self.field = field
        label = _FIELD_LABELS.get(field, field.replace("_", " ").capitalize())
        super().__init__(f"{label} cannot be empty")


class FieldTooLongError(WaitlistValidationError):
    def __init__(self, field: str, limit: int) -> None:
        self.field = field
        label = _FIELD_LABELS.get(field, field.replace("_", " ").capitalize())
        super().__init__(f"{label} must be at most {limit} characters")


class DuplicateEmailError(WaitlistError):
    message = "Email already registered in waitlist"


class StoreError(WaitlistError):
    message = "Database error"


class NotifierError(WaitlistError):
    message = "Email delivery failed"
