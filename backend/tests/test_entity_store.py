from __future__ import annotations

from decimal import Decimal

import pytest
from sqlalchemy.exc import StatementError

from landverse.models import IndexerCursor, Transaction, TransactionHourData
from landverse.repositories import CursorRepository, cursor_key


def _transaction(**overrides) -> Transaction:
    values = dict(
        id="0xabc",
        seller="0x1",
        buyer="0x2",
        token_id=2**255 + 7,
        amount=Decimal("1"),
        price=Decimal("123456789012345678901234567890.123456789012345678"),
        price_after_fee=Decimal("0.000000000000000001"),
        total_fee=Decimal("0"),
        platform_fee=Decimal("0"),
        partner_fee=Decimal("0"),
        is_buy_limit=False,
        block_number=1,
        block_timestamp=1000,
        transaction_hash="0xabc",
    )
    values.update(overrides)
    return Transaction(**values)


def test_load_missing_returns_none(store):
    """Loading an unknown id reports absence instead of raising."""
    assert store.load(Transaction, "missing") is None


def test_save_then_load_round_trips_exact_values(store, session_factory, session):
    """uint256 and 18-decimal amounts survive storage without rounding."""
    store.save(_transaction())
    session.commit()

    with session_factory() as other:
        loaded = other.get(Transaction, "0xabc")
        assert loaded.token_id == 2**255 + 7
        assert loaded.price == Decimal("123456789012345678901234567890.123456789012345678")
        assert loaded.price_after_fee == Decimal("0.000000000000000001")


def test_save_overwrites_record_with_same_id(store, session):
    store.save(TransactionHourData(
        id="3600",
        start_unix_time=3600,
        total_amount=1,
        total_price=Decimal("1"),
        total_price_after_fee=Decimal("1"),
        total_fee=Decimal("0"),
        total_platform_fee=Decimal("0"),
        total_partner_fee=Decimal("0"),
        total_transaction=1,
    ))
    store.save(TransactionHourData(
        id="3600",
        start_unix_time=3600,
        total_amount=5,
        total_price=Decimal("2"),
        total_price_after_fee=Decimal("1"),
        total_fee=Decimal("1"),
        total_platform_fee=Decimal("0"),
        total_partner_fee=Decimal("0"),
        total_transaction=2,
    ))
    session.commit()

    rows = session.query(TransactionHourData).all()
    assert len(rows) == 1
    assert rows[0].total_amount == 5
    assert rows[0].total_transaction == 2


def test_save_rejects_float_amounts(store, session):
    store.save(_transaction(price=1.5))
    with pytest.raises((StatementError, TypeError)):
        session.flush()


def test_cursor_advances_and_refuses_to_rewind(store):
    repo = CursorRepository(store)
    key = cursor_key("v1", "projection", "0xABC")
    assert key == "v1:projection:0xabc"
    assert repo.last_indexed_block(key) is None

    repo.advance(key, 10)
    repo.advance(key, 25)
    assert repo.last_indexed_block(key) == 25
    assert isinstance(repo.get(key), IndexerCursor)

    with pytest.raises(ValueError):
        repo.advance(key, 24)


def test_cursor_key_without_address_is_local():
    assert cursor_key("v2", "event_log", None) == "v2:event_log:local"
