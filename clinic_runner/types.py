from __future__ import annotations

import time
from dataclasses import dataclass


@dataclass
class Created:
    """A token created during the smoke run."""

    token_id: str
    token_number: int
    patient_name: str
    is_vip: bool


@dataclass
class Served:
    """One promotion observed while draining the queue."""

    token_id: str
    token_number: int
    is_vip: bool
    served_at_ms: int


class SmokeError(RuntimeError):
    """Raised when the smoke flow cannot proceed (e.g., health never ready)."""


def now_ms() -> int:
    """Return current time in epoch milliseconds."""
    return int(time.time() * 1000)


class CreateTokenError(SmokeError):
    """Raised when creating a token fails after retries."""


class AdvanceError(SmokeError):
    """Raised when advancing the queue fails or misbehaves."""
