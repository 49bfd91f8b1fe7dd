"""
Validation utilities for input validation and error handling.
"""
import re
from typing import Any
from fastapi import HTTPException

EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
PHONE_PATTERN = r'^\+?\d{6,15}$'
CONTRACT_STATUSES = ("pending", "signed", "rejected")
WORK_PERMIT_STATUSES = ("preparation", "applied", "awaiting_decision", "approved", "rejected")


def validate_email(email: str) -> str:
    """Validate email format."""
    if not email or not isinstance(email, str):
        raise HTTPException(status_code=400, detail="Email is required")

    email = email.strip().lower()
    if len(email) > 255:
        raise HTTPException(status_code=400, detail="Email too long (max 255 characters)")

    if not re.match(EMAIL_PATTERN, email):
        raise HTTPException(status_code=400, detail="Invalid email format")

    return email


def validate_password(password: str) -> None:
    """Validate password strength."""
    if not password or not isinstance(password, str):
        raise HTTPException(status_code=400, detail="Password is required")

    if len(password) < 8:
        raise HTTPException(status_code=400, detail="Password must be at least 8 characters")

    if len(password) > 72:
        raise HTTPException(status_code=400, detail="Password too long (max 72 characters)")


def normalize_phone(phone: Any) -> str | None:
    """Strip formatting characters; None when the result isn't a plausible number."""
    if not phone or not isinstance(phone, str):
        return None
    cleaned = re.sub(r"[\s\-().]", "", phone.strip())
    if not re.match(PHONE_PATTERN, cleaned):
        return None
    return cleaned


def validate_phone(phone: Any) -> str:
    normalized = normalize_phone(phone)
    if not normalized:
        raise HTTPException(status_code=400, detail="Invalid phone number format")
    return normalized


def normalize_identifier(identifier: Any) -> str | None:
    """
    Normalize an OTP identifier (email or phone).

    Returns None for malformed input instead of raising: callers must answer
    malformed and unknown identifiers with the same error.
    """
    if not identifier or not isinstance(identifier, str):
        return None
    value = identifier.strip()
    if "@" in value:
        value = value.lower()
        if len(value) > 255 or not re.match(EMAIL_PATTERN, value):
            return None
        return value
    return normalize_phone(value)


def is_email_identifier(identifier: str) -> bool:
    return "@" in identifier


def validate_string_field(
    value: Any,
    field_name: str,
    min_length: int = 1,
    max_length: int = 1000,
    required: bool = True,
    pattern: str | None = None,
) -> str | None:
    """Validate a string field with common rules."""
    if value is None:
        if required:
            raise HTTPException(status_code=400, detail=f"{field_name} is required")
        return None

    if not isinstance(value, str):
        raise HTTPException(status_code=400, detail=f"{field_name} must be a string")

    value = value.strip()

    if required and not value:
        raise HTTPException(status_code=400, detail=f"{field_name} cannot be empty")

    if len(value) < min_length:
        raise HTTPException(
            status_code=400,
            detail=f"{field_name} must be at least {min_length} characters"
        )

    if len(value) > max_length:
        raise HTTPException(
            status_code=400,
            detail=f"{field_name} must not exceed {max_length} characters"
        )

    if pattern and not re.match(pattern, value):
        raise HTTPException(status_code=400, detail=f"{field_name} format is invalid")

    return value


def normalize_document_url(value: Any, field_name: str) -> str | None:
    """A document slot is either absent or a non-empty URL string; blank clears it."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise HTTPException(status_code=400, detail=f"{field_name} must be a string")
    value = value.strip()
    if not value:
        return None
    if len(value) > 1000:
        raise HTTPException(status_code=400, detail=f"{field_name} must not exceed 1000 characters")
    return value


def validate_contract_status(status: str | None, field_name: str = "status") -> str | None:
    """Validate contract/job offer status."""
    if status is None:
        return None

    status = status.strip().lower()
    if status not in CONTRACT_STATUSES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid {field_name}. Must be one of: {', '.join(CONTRACT_STATUSES)}"
        )

    return status


def validate_work_permit_status(status: str | None) -> str | None:
    if status is None:
        return None

    status = status.strip().lower().replace(" ", "_")
    if status not in WORK_PERMIT_STATUSES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid status. Must be one of: {', '.join(WORK_PERMIT_STATUSES)}"
        )

    return status
