from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import uuid4

from ..config import get_number_retries_from_env
from ..domain.errors import (
    DuplicateTokenNumber,
    InvalidTransition,
    NotFound,
    NumberGenerationFailed,
    ValidationFailed,
)
from ..domain.status import TokenStatus, check_transition
from ..domain.tokens import Token, serving_order_key, validate_new_token
from ..logging_conf import get_logger
from ..store import InMemoryTokenStore, TokenStore

__all__ = ["QueueSnapshot", "QueueEngine", "get_engine", "reset_engine"]

logger = get_logger("engine")


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class QueueSnapshot:
    """Point-in-time view of the queue, read under one store transaction."""

    counts: dict[str, int]
    current: Token | None
    next_up: Token | None
    total: int = 0


class QueueEngine:
    """The single queue aggregate.

    Owns the invariant "at most one token is serving". Advance, status updates
    and VIP updates run one at a time behind `_write_lock` and inside a store
    transaction. Creation does not take the lock: it claims numbers
    optimistically and relies on the store's unique index, retrying on
    collisions.
    """

    def __init__(
        self,
        store: TokenStore | None = None,
        *,
        number_retries: int | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store: TokenStore = store if store is not None else InMemoryTokenStore()
        self.number_retries = (
            number_retries if number_retries is not None else get_number_retries_from_env()
        )
        if self.number_retries < 1:
            raise ValueError("number_retries must be >= 1")
        self._clock = clock
        self._write_lock = threading.Lock()

    # -------------------- numbering & creation --------------------

    def generate_token_number(self) -> int:
        """Return a candidate number above every number assigned so far.

        Only a candidate: two callers can read the same maximum. The store's
        unique index decides who gets it, see `create_token`.
        """
        return self.store.max_token_number() + 1

    def create_token(self, *, patient_name: object, phone_number: object, is_vip: object = False) -> Token:
        """Validate input, claim a fresh token number and persist a waiting token.

        Raises:
            ValidationFailed: naming every bad field; nothing is stored.
            NumberGenerationFailed: every attempt collided with another create.
        """
        new = validate_new_token(patient_name=patient_name, phone_number=phone_number, is_vip=is_vip)
        token_id = uuid4().hex
        created_at = self._clock()

        for attempt in range(1, self.number_retries + 1):
            number = self.generate_token_number()
            token = Token(
                id=token_id,
                token_number=number,
                patient_name=new.patient_name,
                phone_number=new.phone_number,
                is_vip=new.is_vip,
                status=TokenStatus.waiting,
                created_at=created_at,
            )
            try:
                saved = self.store.insert(token)
            except DuplicateTokenNumber:
                logger.info(
                    "token.number_retry",
                    extra={"event": "token_number_retry", "token_number": number, "attempt": attempt},
                )
                continue
            logger.info(
                "token.create",
                extra={
                    "event": "token_create",
                    "token_id": saved.id,
                    "token_number": saved.token_number,
                    "is_vip": saved.is_vip,
                },
            )
            return saved

        logger.error(
            "token.number_exhausted",
            extra={"event": "token_number_exhausted", "attempts": self.number_retries},
        )
        raise NumberGenerationFailed(
            f"Could not assign a unique token number after {self.number_retries} attempts"
        )

    # -------------------- reads --------------------

    def get_token(self, token_id: str) -> Token:
        token = self.store.get(token_id)
        if token is None:
            raise NotFound(token_id)
        return token

    def get_current(self) -> Token | None:
        """Return the serving token, or None when nobody is being served."""
        serving = self.store.find_by_status(TokenStatus.serving)
        return serving[0] if serving else None

    def peek_next(self) -> Token | None:
        """Return the token `advance_next` would promote, without promoting it."""
        waiting = self.store.find_by_status(TokenStatus.waiting)
        return min(waiting, key=serving_order_key, default=None)

    def list_tokens(self) -> list[Token]:
        return self.store.list_all()

    def snapshot(self) -> QueueSnapshot:
        with self.store.transaction():
            tokens = self.store.list_all()
            counts = {status.value: 0 for status in TokenStatus}
            for t in tokens:
                counts[t.status.value] += 1
            return QueueSnapshot(
                counts=counts,
                current=self.get_current(),
                next_up=self.peek_next(),
                total=len(tokens),
            )

    # -------------------- transitions --------------------

    def advance_next(self) -> Token | None:
        """Close out the serving token and promote the next waiting one.

        Selection: waiting tokens ordered by (VIP first, lowest number). If no
        token is waiting nothing changes, a stray serving token included, and
        None is returned. Otherwise every serving token becomes completed and
        the selected one becomes serving, all in one transaction.
        """
        with self._write_lock, self.store.transaction():
            nxt = self.peek_next()
            if nxt is None:
                logger.info("queue.empty", extra={"event": "queue_empty"})
                return None

            demoted = []
            for current in self.store.find_by_status(TokenStatus.serving):
                self.store.replace(current.model_copy(update={"status": TokenStatus.completed}))
                demoted.append(current.token_number)
            if len(demoted) > 1:
                logger.warning(
                    "queue.multiple_serving",
                    extra={"event": "queue_multiple_serving", "token_numbers": demoted},
                )

            promoted = self.store.replace(nxt.model_copy(update={"status": TokenStatus.serving}))

        logger.info(
            "queue.advance",
            extra={
                "event": "queue_advance",
                "token_id": promoted.id,
                "token_number": promoted.token_number,
                "is_vip": promoted.is_vip,
                "completed": demoted,
            },
        )
        return promoted

    def update_status(self, token_id: str, status: TokenStatus | str) -> Token:
        """Set a token's status explicitly.

        Raises:
            ValidationFailed: `status` is not one of the known statuses.
            NotFound: no token has this id; nothing changes.
            InvalidTransition: the token is terminal, or `status` is serving.
        """
        target = _coerce_status(status)
        with self._write_lock, self.store.transaction():
            token = self.get_token(token_id)
            reason = check_transition(token.status, target)
            if reason is not None:
                raise InvalidTransition(token_id, token.status.value, target.value, reason)
            if token.status is target:
                return token
            updated = self.store.replace(token.model_copy(update={"status": target}))

        logger.info(
            "token.status",
            extra={
                "event": "token_status",
                "token_id": token_id,
                "from": token.status.value,
                "to": target.value,
            },
        )
        return updated

    def set_vip(self, token_id: str, is_vip: bool) -> Token:
        """Flip the VIP flag. The next advance picks up the new order by itself."""
        if not isinstance(is_vip, bool):
            raise ValidationFailed({"isVIP": "isVIP must be a boolean"})
        with self._write_lock, self.store.transaction():
            token = self.get_token(token_id)
            updated = self.store.replace(token.model_copy(update={"is_vip": is_vip}))

        logger.info(
            "token.vip",
            extra={"event": "token_vip", "token_id": token_id, "is_vip": is_vip},
        )
        return updated


def _coerce_status(value: TokenStatus | str) -> TokenStatus:
    try:
        return TokenStatus(value)
    except ValueError as e:
        allowed = ", ".join(s.value for s in TokenStatus)
        raise ValidationFailed({"status": f"status must be one of: {allowed}"}) from e


# ------------------------
# Process-wide engine
# ------------------------

_engine: QueueEngine | None = None
_engine_lock = threading.Lock()


def get_engine() -> QueueEngine:
    """Return the process-wide engine, creating it on first use."""
    global _engine
    with _engine_lock:
        if _engine is None:
            _engine = QueueEngine()
        return _engine


def reset_engine(engine: QueueEngine | None = None) -> None:
    """Replace (or drop) the process-wide engine. Used by app factories and tests."""
    global _engine
    with _engine_lock:
        _engine = engine
