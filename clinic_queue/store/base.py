from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Protocol, runtime_checkable

from ..domain.status import TokenStatus
from ..domain.tokens import Token

__all__ = ["TokenStore"]


@runtime_checkable
class TokenStore(Protocol):
    """What the queue engine needs from persistence.

    Implementations must:
    - reject an insert whose token number is taken with `DuplicateTokenNumber`;
    - make `transaction()` all-or-nothing and invisible to concurrent readers
      until it exits;
    - raise `StoreUnavailable` when the backing store cannot be reached.
    """

    def ping(self) -> None: ...

    def get(self, token_id: str) -> Token | None: ...

    def list_all(self) -> list[Token]:
        """Every token, ordered by token number ascending."""
        ...

    def find_by_status(self, status: TokenStatus) -> list[Token]: ...

    def max_token_number(self) -> int:
        """Highest assigned token number, 0 when the store is empty."""
        ...

    def insert(self, token: Token) -> Token: ...

    def replace(self, token: Token) -> Token:
        """Overwrite the record with the same id; its token number may not change."""
        ...

    def transaction(self) -> AbstractContextManager[None]: ...
