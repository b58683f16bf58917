from __future__ import annotations

import sys
from contextlib import contextmanager
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from landverse.core.config import Settings
from landverse.db import Base, init_db
from landverse.domain import (
    EventEnvelope,
    FeeUpdated,
    MinimumTradePriceUpdated,
    Paused,
    RoleGranted,
    SetFeePercent,
    SetMinimumTradePrice,
    SetTotalFeePercent,
    Sold,
    SoldV2,
    Unpaused,
)
from landverse.repositories import EntityStore, MarketplaceConfigRepository, models_for

ETHER = 10**18
PERCENT = 10**8

SELLER = "0x1111111111111111111111111111111111111111"
BUYER = "0x2222222222222222222222222222222222222222"
RECEIVER = "0x3333333333333333333333333333333333333333"
ADMIN_ROLE = "0x" + "00" * 32


class EventFactory:
    """Builds typed events with sensible provenance defaults."""

    def __init__(self) -> None:
        self._next_block = 100

    def envelope(
        self,
        *,
        block: int | None = None,
        timestamp: int = 1_700_000_000,
        log_index: int = 0,
        tx_hash: str | None = None,
    ) -> EventEnvelope:
        if block is None:
            block = self._next_block
            self._next_block += 1
        return EventEnvelope(
            block_number=block,
            block_timestamp=timestamp,
            transaction_hash=tx_hash or f"0x{block:064x}",
            log_index=log_index,
        )

    def sold_v1(
        self,
        *,
        price: int,
        price_after_fee: int,
        amount: int = ETHER,
        token_id: int = 1,
        is_buy_limit: bool = False,
        **envelope,
    ) -> Sold:
        return Sold(
            envelope=self.envelope(**envelope),
            seller=SELLER,
            buyer=BUYER,
            token_id=token_id,
            amount=amount,
            price=price,
            price_after_fee=price_after_fee,
            is_buy_limit=is_buy_limit,
        )

    def sold_v2(
        self,
        *,
        price: int,
        net_amount: int,
        percentage_fee_amount: int = 0,
        fixed_fee_amount: int = 0,
        amount: int = ETHER,
        token_id: int = 1,
        is_buy_limit: bool = False,
        **envelope,
    ) -> SoldV2:
        return SoldV2(
            envelope=self.envelope(**envelope),
            seller=SELLER,
            buyer=BUYER,
            nft_to=RECEIVER,
            token_id=token_id,
            amount=amount,
            price=price,
            net_amount=net_amount,
            percentage_fee_amount=percentage_fee_amount,
            fixed_fee_amount=fixed_fee_amount,
            is_buy_limit=is_buy_limit,
        )

    def set_fee_percent(self, platform: int, partner: int, **envelope) -> SetFeePercent:
        return SetFeePercent(
            envelope=self.envelope(**envelope),
            new_platform_fee_percent=platform,
            new_partner_fee_percent=partner,
        )

    def set_total_fee_percent(self, total: int, **envelope) -> SetTotalFeePercent:
        return SetTotalFeePercent(envelope=self.envelope(**envelope), new_total_fee_percent=total)

    def set_minimum_trade_price(self, price: int, **envelope) -> SetMinimumTradePrice:
        return SetMinimumTradePrice(
            envelope=self.envelope(**envelope), new_minimum_trade_price=price
        )

    def fee_updated(self, percentage: int, fixed: int, **envelope) -> FeeUpdated:
        return FeeUpdated(
            envelope=self.envelope(**envelope),
            new_percentage_fee=percentage,
            new_fixed_fee=fixed,
        )

    def minimum_trade_price_updated(self, price: int, **envelope) -> MinimumTradePriceUpdated:
        return MinimumTradePriceUpdated(
            envelope=self.envelope(**envelope), new_minimum_trade_price=price
        )

    def paused(self, **envelope) -> Paused:
        return Paused(envelope=self.envelope(**envelope), account=SELLER)

    def unpaused(self, **envelope) -> Unpaused:
        return Unpaused(envelope=self.envelope(**envelope), account=SELLER)

    def role_granted(self, **envelope) -> RoleGranted:
        return RoleGranted(
            envelope=self.envelope(**envelope), role=ADMIN_ROLE, account=BUYER, sender=SELLER
        )


@pytest.fixture
def events() -> EventFactory:
    return EventFactory()


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'landverse-test.db'}",
        connect_args={"check_same_thread": False},
        future=True,
    )
    init_db(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    factory = sessionmaker(bind=engine, autoflush=True, expire_on_commit=False, future=True)

    @contextmanager
    def scope():
        session = factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    scope.factory = factory
    return scope


@pytest.fixture
def session(session_factory):
    session = session_factory.factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(session) -> EntityStore:
    return EntityStore(session)


@pytest.fixture
def v1_config(store) -> MarketplaceConfigRepository:
    return MarketplaceConfigRepository(store, models_for("v1").config)


@pytest.fixture
def v2_config(store) -> MarketplaceConfigRepository:
    return MarketplaceConfigRepository(store, models_for("v2").config)


@pytest.fixture
def test_settings(tmp_path, monkeypatch) -> Settings:
    settings = Settings(
        _env_file=None,
        database_url=f"sqlite:///{tmp_path / 'landverse.db'}",
        marketplace_address="0x" + "ab" * 20,
        contract_version="v1",
        indexing_strategy="projection",
        start_block=0,
        block_batch_size=10,
        confirmation_depth=0,
        poll_interval_seconds=0.01,
    )
    monkeypatch.setattr("landverse.core.config.get_settings", lambda: settings)
    monkeypatch.setattr("landverse.core.config.settings", settings)
    return settings
