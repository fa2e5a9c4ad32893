from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .errors import ValidationFailed
from .status import TokenStatus

__all__ = [
    "NAME_MIN_LEN",
    "NAME_MAX_LEN",
    "PHONE_MIN_DIGITS",
    "PHONE_MAX_DIGITS",
    "Token",
    "NewToken",
    "normalize_patient_name",
    "normalize_phone_number",
    "validate_new_token",
    "serving_order_key",
]

NAME_MIN_LEN = 3
NAME_MAX_LEN = 50
PHONE_MIN_DIGITS = 10
PHONE_MAX_DIGITS = 15

# ASCII digits plus the separators people type into phone fields.
_PHONE_INPUT_RE = re.compile(r"^[0-9+\-() .]+$")
_NON_DIGIT_RE = re.compile(r"[^0-9]")


class Token(BaseModel):
    """One patient's queue entry.

    Records are immutable; stores hand out copies made with `model_copy`.
    Aliases keep the camelCase names the front-end already speaks.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    token_number: int = Field(..., ge=1, alias="tokenNumber")
    patient_name: str = Field(..., alias="patientName")
    phone_number: str = Field(..., alias="phoneNumber")
    is_vip: bool = Field(False, alias="isVIP")
    status: TokenStatus = TokenStatus.waiting
    created_at: datetime = Field(..., alias="createdAt")


@dataclass(frozen=True)
class NewToken:
    """Validated, normalized input for a token that has no number yet."""

    patient_name: str
    phone_number: str
    is_vip: bool = False


def normalize_patient_name(value: object) -> str:
    """Trim and check a patient name.

    Raises:
        ValueError: with the reason if the name is unusable.
    """
    if not isinstance(value, str):
        raise ValueError("Patient name is required")
    name = value.strip()
    if not name:
        raise ValueError("Patient name is required")
    if len(name) < NAME_MIN_LEN:
        raise ValueError(f"Patient name must be at least {NAME_MIN_LEN} characters")
    if len(name) > NAME_MAX_LEN:
        raise ValueError(f"Patient name cannot exceed {NAME_MAX_LEN} characters")
    return name


def normalize_phone_number(value: object) -> str:
    """Trim a phone number, drop separators and check the digit count.

    "(555) 123-4567" -> "5551234567"

    Raises:
        ValueError: with the reason if the number is unusable.
    """
    if not isinstance(value, str):
        raise ValueError("Phone number is required")
    raw = value.strip()
    if not raw:
        raise ValueError("Phone number is required")
    if not _PHONE_INPUT_RE.match(raw):
        raise ValueError(f"{raw} is not a valid phone number")
    digits = _NON_DIGIT_RE.sub("", raw)
    if not (PHONE_MIN_DIGITS <= len(digits) <= PHONE_MAX_DIGITS):
        raise ValueError(
            f"Phone number must have {PHONE_MIN_DIGITS}-{PHONE_MAX_DIGITS} digits, got {len(digits)}"
        )
    return digits


def validate_new_token(*, patient_name: object, phone_number: object, is_vip: object = False) -> NewToken:
    """Validate every creation field at once.

    Raises `ValidationFailed` naming all failing fields, not just the first.
    """
    errors: dict[str, str] = {}
    name = phone = ""
    try:
        name = normalize_patient_name(patient_name)
    except ValueError as e:
        errors["patientName"] = str(e)
    try:
        phone = normalize_phone_number(phone_number)
    except ValueError as e:
        errors["phoneNumber"] = str(e)
    if not isinstance(is_vip, bool):
        errors["isVIP"] = "isVIP must be a boolean"
    if errors:
        raise ValidationFailed(errors)
    return NewToken(patient_name=name, phone_number=phone, is_vip=is_vip)


def serving_order_key(token: Token) -> tuple[bool, int]:
    """Sort key for waiting tokens: VIPs first, then lowest token number."""
    return (not token.is_vip, token.token_number)
