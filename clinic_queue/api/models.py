from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..domain.status import TokenStatus
from ..domain.tokens import Token


class TokenCreateRequest(BaseModel):
    """Inputs for a new token.

    Fields stay untyped so the engine checks all of them together and reports
    every bad one, instead of pydantic stopping at the first.
    """
    model_config = ConfigDict(populate_by_name=True)

    patient_name: Any = Field(None, alias="patientName")
    phone_number: Any = Field(None, alias="phoneNumber")
    is_vip: Any = Field(False, alias="isVIP")


class StatusUpdateRequest(BaseModel):
    status: TokenStatus


class VipUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_vip: bool = Field(..., alias="isVIP")


class TokenResponse(BaseModel):
    """Envelope around a single token (or none)."""
    success: bool = True
    data: Optional[Token] = None
    message: Optional[str] = None


class TokenListResponse(BaseModel):
    success: bool = True
    data: list[Token]


class QueueSummary(BaseModel):
    """Counts per status plus who is serving and who is next."""
    model_config = ConfigDict(populate_by_name=True)

    counts: dict[str, int]
    total: int
    current: Optional[Token] = None
    next_up: Optional[Token] = Field(None, alias="nextUp")


class QueueSummaryResponse(BaseModel):
    success: bool = True
    data: QueueSummary


class HealthResponse(BaseModel):
    status: str
    store: str
    version: str
    timestamp: str
