from __future__ import annotations

from enum import Enum

__all__ = [
    "TokenStatus",
    "TERMINAL_STATUSES",
    "is_terminal",
    "check_transition",
]


class TokenStatus(str, Enum):
    waiting = "waiting"
    serving = "serving"
    completed = "completed"
    skipped = "skipped"
    canceled = "canceled"


TERMINAL_STATUSES = frozenset({TokenStatus.completed, TokenStatus.skipped, TokenStatus.canceled})


def is_terminal(status: TokenStatus) -> bool:
    """Return True when no operation may move a token out of `status`."""
    return status in TERMINAL_STATUSES


def check_transition(current: TokenStatus, target: TokenStatus) -> str | None:
    """Return why an explicit status update is refused, or None if it is allowed.

    Rules for explicit updates (advance has its own path):
      same status          -> allowed (no-op)
      terminal -> anything -> refused
      anything -> serving  -> refused, only advance promotes
      everything else      -> allowed
    """
    if current == target:
        return None
    if is_terminal(current):
        return f"{current.value} is terminal"
    if target is TokenStatus.serving:
        return "only advancing the queue may promote a token to serving"
    return None
