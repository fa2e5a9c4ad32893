from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from ..domain.errors import DuplicateTokenNumber, NotFound
from ..domain.status import TokenStatus
from ..domain.tokens import Token
from ..logging_conf import get_logger

__all__ = ["InMemoryTokenStore"]

logger = get_logger("store.memory")


class InMemoryTokenStore:
    """Process-local token store.

    One re-entrant lock guards both indexes, so every read sees a consistent
    state and `transaction()` can call the other methods while holding it.
    Records are frozen models, which makes a shallow copy of the indexes a
    complete snapshot for rollback.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._by_id: dict[str, Token] = {}
        self._id_by_number: dict[int, str] = {}  # unique index on token_number

    def ping(self) -> None:
        return None

    def get(self, token_id: str) -> Token | None:
        with self._lock:
            return self._by_id.get(token_id)

    def list_all(self) -> list[Token]:
        with self._lock:
            return [self._by_id[self._id_by_number[n]] for n in sorted(self._id_by_number)]

    def find_by_status(self, status: TokenStatus) -> list[Token]:
        with self._lock:
            return [t for t in self.list_all() if t.status is status]

    def max_token_number(self) -> int:
        with self._lock:
            return max(self._id_by_number, default=0)

    def insert(self, token: Token) -> Token:
        with self._lock:
            if token.token_number in self._id_by_number:
                raise DuplicateTokenNumber(token.token_number)
            if token.id in self._by_id:
                raise ValueError(f"duplicate token id: {token.id}")
            self._by_id[token.id] = token
            self._id_by_number[token.token_number] = token.id
            return token

    def replace(self, token: Token) -> Token:
        with self._lock:
            existing = self._by_id.get(token.id)
            if existing is None:
                raise NotFound(token.id)
            if existing.token_number != token.token_number:
                raise ValueError("token_number is immutable")
            self._by_id[token.id] = token
            return token

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Hold the store lock for the block; restore the snapshot if it raises."""
        with self._lock:
            by_id = dict(self._by_id)
            by_number = dict(self._id_by_number)
            try:
                yield
            except BaseException:
                self._by_id = by_id
                self._id_by_number = by_number
                logger.warning("store.rollback", extra={"event": "store_rollback"})
                raise
