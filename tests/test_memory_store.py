from datetime import UTC, datetime

import pytest

from clinic_queue.domain.errors import DuplicateTokenNumber, NotFound
from clinic_queue.domain.status import TokenStatus
from clinic_queue.domain.tokens import Token
from clinic_queue.store import InMemoryTokenStore, TokenStore


def _token(token_id, number, status=TokenStatus.waiting):
    return Token(
        id=token_id,
        token_number=number,
        patient_name="Alice",
        phone_number="5551234567",
        status=status,
        created_at=datetime.now(UTC),
    )


def test_satisfies_protocol(store):
    assert isinstance(store, TokenStore)


def test_empty_store(store):
    assert store.max_token_number() == 0
    assert store.list_all() == []
    assert store.get("missing") is None


def test_insert_rejects_taken_number(store):
    store.insert(_token("a", 1))
    with pytest.raises(DuplicateTokenNumber) as ei:
        store.insert(_token("b", 1))
    assert ei.value.token_number == 1
    assert [t.id for t in store.list_all()] == ["a"]


def test_list_all_orders_by_number_not_insert_order(store):
    store.insert(_token("c", 3))
    store.insert(_token("a", 1))
    store.insert(_token("b", 2))
    assert [t.id for t in store.list_all()] == ["a", "b", "c"]
    assert store.max_token_number() == 3


def test_find_by_status(store):
    store.insert(_token("a", 1))
    store.insert(_token("b", 2, status=TokenStatus.serving))
    assert [t.id for t in store.find_by_status(TokenStatus.serving)] == ["b"]


def test_replace_requires_existing_record_and_same_number(store):
    with pytest.raises(NotFound):
        store.replace(_token("ghost", 1))
    store.insert(_token("a", 1))
    with pytest.raises(ValueError):
        store.replace(_token("a", 2))
    store.replace(_token("a", 1, status=TokenStatus.skipped))
    assert store.get("a").status is TokenStatus.skipped


def test_transaction_rolls_back_on_error(store):
    store.insert(_token("a", 1))
    with pytest.raises(RuntimeError):
        with store.transaction():
            store.replace(_token("a", 1, status=TokenStatus.completed))
            store.insert(_token("b", 2))
            raise RuntimeError("boom")
    assert store.get("a").status is TokenStatus.waiting
    assert store.get("b") is None
    assert store.max_token_number() == 1


def test_transaction_commits_on_success(store):
    with store.transaction():
        store.insert(_token("a", 1))
    assert store.get("a") is not None
