from __future__ import annotations

__all__ = [
    "QueueError",
    "ValidationFailed",
    "NotFound",
    "NumberGenerationFailed",
    "StoreUnavailable",
    "InvalidTransition",
    "DuplicateTokenNumber",
]


class QueueError(Exception):
    """Base class for queue errors.

    The `code` attribute lets the API map errors to stable machine codes.
    """

    code: str = "queue_error"


class ValidationFailed(QueueError):
    """One or more input fields are invalid.

    `fields` maps every failing field name to a human readable reason.
    """

    code = "validation_failed"

    def __init__(self, fields: dict[str, str]) -> None:
        self.fields = dict(fields)
        detail = "; ".join(f"{name}: {reason}" for name, reason in self.fields.items())
        super().__init__(f"Validation failed: {detail}")


class NotFound(QueueError):
    code = "not_found"

    def __init__(self, token_id: str) -> None:
        self.token_id = token_id
        super().__init__(f"Token not found: {token_id}")


class NumberGenerationFailed(QueueError):
    """Raised when no unique token number could be claimed within the retry budget."""

    code = "number_generation_failed"


class StoreUnavailable(QueueError):
    """The underlying token store cannot be reached."""

    code = "store_unavailable"


class InvalidTransition(QueueError):
    code = "invalid_transition"

    def __init__(self, token_id: str, current: str, target: str, reason: str) -> None:
        self.token_id = token_id
        self.current = current
        self.target = target
        super().__init__(f"Cannot move token {token_id} from {current} to {target}: {reason}")


class DuplicateTokenNumber(QueueError):
    """Store-level signal: the token number is already taken.

    The engine retries on this; it never reaches API callers.
    """

    code = "duplicate_token_number"

    def __init__(self, token_number: int) -> None:
        self.token_number = token_number
        super().__init__(f"Token number already assigned: {token_number}")
