from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import BigInteger, Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base
from .db_types import BigUint, TokenAmount

CONFIG_SINGLETON_ID = "1"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _zero() -> Decimal:
    return Decimal(0)


# ----------------------------------------------------------------------
# Stateful projection: marketplace configuration singletons


class MarketplaceConfig(Base):
    __tablename__ = "marketplace_configs"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=CONFIG_SINGLETON_ID)
    total_fee_percent: Mapped[int] = mapped_column(BigUint(), nullable=False, default=0)
    platform_fee_percent: Mapped[int] = mapped_column(BigUint(), nullable=False, default=0)
    partner_fee_percent: Mapped[int] = mapped_column(BigUint(), nullable=False, default=0)
    minimum_trade_price: Mapped[int] = mapped_column(BigUint(), nullable=False, default=0)
    paused: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class MarketplaceConfigV2(Base):
    __tablename__ = "marketplace_v2_configs"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=CONFIG_SINGLETON_ID)
    fee_percentage: Mapped[int] = mapped_column(BigUint(), nullable=False, default=0)
    fixed_fee: Mapped[int] = mapped_column(BigUint(), nullable=False, default=0)
    minimum_trade_price: Mapped[int] = mapped_column(BigUint(), nullable=False, default=0)
    paused: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


# ----------------------------------------------------------------------
# Stateful projection: trades


class _Provenance:
    block_number: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    block_timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    transaction_hash: Mapped[str] = mapped_column(String(66), nullable=False, index=True)


class Transaction(_Provenance, Base):
    __tablename__ = "transactions"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    seller: Mapped[str] = mapped_column(String(42), nullable=False, index=True)
    buyer: Mapped[str] = mapped_column(String(42), nullable=False, index=True)
    token_id: Mapped[int] = mapped_column(BigUint(), nullable=False)
    amount: Mapped[Decimal] = mapped_column(TokenAmount(), nullable=False)
    price: Mapped[Decimal] = mapped_column(TokenAmount(), nullable=False)
    price_after_fee: Mapped[Decimal] = mapped_column(TokenAmount(), nullable=False)
    total_fee: Mapped[Decimal] = mapped_column(TokenAmount(), nullable=False)
    platform_fee: Mapped[Decimal] = mapped_column(TokenAmount(), nullable=False)
    partner_fee: Mapped[Decimal] = mapped_column(TokenAmount(), nullable=False)
    is_buy_limit: Mapped[bool] = mapped_column(Boolean, nullable=False)


class TransactionV2(_Provenance, Base):
    __tablename__ = "transactions_v2"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    seller: Mapped[str] = mapped_column(String(42), nullable=False, index=True)
    buyer: Mapped[str] = mapped_column(String(42), nullable=False, index=True)
    nft_to: Mapped[str] = mapped_column(String(42), nullable=False)
    token_id: Mapped[int] = mapped_column(BigUint(), nullable=False)
    amount: Mapped[Decimal] = mapped_column(TokenAmount(), nullable=False)
    price: Mapped[Decimal] = mapped_column(TokenAmount(), nullable=False)
    net_amount: Mapped[Decimal] = mapped_column(TokenAmount(), nullable=False)
    total_fee: Mapped[Decimal] = mapped_column(TokenAmount(), nullable=False)
    trading_fee: Mapped[Decimal] = mapped_column(TokenAmount(), nullable=False)
    fixed_fee: Mapped[Decimal] = mapped_column(TokenAmount(), nullable=False)
    is_buy_limit: Mapped[bool] = mapped_column(Boolean, nullable=False)


# ----------------------------------------------------------------------
# Stateful projection: hour/day/month trade statistics


class _BucketTotals:
    id: Mapped[str] = mapped_column(String, primary_key=True)
    start_unix_time: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    total_amount: Mapped[int] = mapped_column(BigUint(), nullable=False, default=0)
    total_price: Mapped[Decimal] = mapped_column(TokenAmount(), nullable=False, default=_zero)
    total_price_after_fee: Mapped[Decimal] = mapped_column(
        TokenAmount(), nullable=False, default=_zero
    )
    total_fee: Mapped[Decimal] = mapped_column(TokenAmount(), nullable=False, default=_zero)
    total_transaction: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class _PlatformPartnerFees:
    total_platform_fee: Mapped[Decimal] = mapped_column(
        TokenAmount(), nullable=False, default=_zero
    )
    total_partner_fee: Mapped[Decimal] = mapped_column(
        TokenAmount(), nullable=False, default=_zero
    )


class _TradingFixedFees:
    total_trading_fee: Mapped[Decimal] = mapped_column(
        TokenAmount(), nullable=False, default=_zero
    )
    total_fixed_fee: Mapped[Decimal] = mapped_column(
        TokenAmount(), nullable=False, default=_zero
    )


class TransactionHourData(_BucketTotals, _PlatformPartnerFees, Base):
    __tablename__ = "transaction_hour_data"


class TransactionDayData(_BucketTotals, _PlatformPartnerFees, Base):
    __tablename__ = "transaction_day_data"


class TransactionMonthData(_BucketTotals, _PlatformPartnerFees, Base):
    __tablename__ = "transaction_month_data"


class TransactionHourDataV2(_BucketTotals, _TradingFixedFees, Base):
    __tablename__ = "transaction_hour_data_v2"


class TransactionDayDataV2(_BucketTotals, _TradingFixedFees, Base):
    __tablename__ = "transaction_day_data_v2"


class TransactionMonthDataV2(_BucketTotals, _TradingFixedFees, Base):
    __tablename__ = "transaction_month_data_v2"


# ----------------------------------------------------------------------
# Raw per-event log (one immutable row per emitted event)


class _EventLogEntry:
    id: Mapped[str] = mapped_column(String, primary_key=True)
    block_number: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    block_timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False)
    transaction_hash: Mapped[str] = mapped_column(String(66), nullable=False)


class PausedRecord(_EventLogEntry, Base):
    __tablename__ = "paused_events"

    account: Mapped[str] = mapped_column(String(42), nullable=False)


class UnpausedRecord(_EventLogEntry, Base):
    __tablename__ = "unpaused_events"

    account: Mapped[str] = mapped_column(String(42), nullable=False)


class RoleAdminChangedRecord(_EventLogEntry, Base):
    __tablename__ = "role_admin_changed_events"

    role: Mapped[str] = mapped_column(String(66), nullable=False)
    previous_admin_role: Mapped[str] = mapped_column(String(66), nullable=False)
    new_admin_role: Mapped[str] = mapped_column(String(66), nullable=False)


class RoleGrantedRecord(_EventLogEntry, Base):
    __tablename__ = "role_granted_events"

    role: Mapped[str] = mapped_column(String(66), nullable=False)
    account: Mapped[str] = mapped_column(String(42), nullable=False)
    sender: Mapped[str] = mapped_column(String(42), nullable=False)


class RoleRevokedRecord(_EventLogEntry, Base):
    __tablename__ = "role_revoked_events"

    role: Mapped[str] = mapped_column(String(66), nullable=False)
    account: Mapped[str] = mapped_column(String(42), nullable=False)
    sender: Mapped[str] = mapped_column(String(42), nullable=False)


class SetFeePercentRecord(_EventLogEntry, Base):
    __tablename__ = "set_fee_percent_events"

    new_platform_fee_percent: Mapped[int] = mapped_column(BigUint(), nullable=False)
    new_partner_fee_percent: Mapped[int] = mapped_column(BigUint(), nullable=False)


class SetMinimumTradePriceRecord(_EventLogEntry, Base):
    __tablename__ = "set_minimum_trade_price_events"

    new_minimum_trade_price: Mapped[int] = mapped_column(BigUint(), nullable=False)


class SetTotalFeePercentRecord(_EventLogEntry, Base):
    __tablename__ = "set_total_fee_percent_events"

    new_total_fee_percent: Mapped[int] = mapped_column(BigUint(), nullable=False)


class SoldRecord(_EventLogEntry, Base):
    __tablename__ = "sold_events"

    seller: Mapped[str] = mapped_column(String(42), nullable=False)
    buyer: Mapped[str] = mapped_column(String(42), nullable=False)
    token_id: Mapped[int] = mapped_column(BigUint(), nullable=False)
    amount: Mapped[int] = mapped_column(BigUint(), nullable=False)
    price: Mapped[int] = mapped_column(BigUint(), nullable=False)
    price_after_fee: Mapped[int] = mapped_column(BigUint(), nullable=False)
    is_buy_limit: Mapped[bool] = mapped_column(Boolean, nullable=False)


class FeeUpdatedRecord(_EventLogEntry, Base):
    __tablename__ = "fee_updated_events"

    new_percentage_fee: Mapped[int] = mapped_column(BigUint(), nullable=False)
    new_fixed_fee: Mapped[int] = mapped_column(BigUint(), nullable=False)


class MinimumTradePriceUpdatedRecord(_EventLogEntry, Base):
    __tablename__ = "minimum_trade_price_updated_events"

    new_minimum_trade_price: Mapped[int] = mapped_column(BigUint(), nullable=False)


class SoldV2Record(_EventLogEntry, Base):
    __tablename__ = "sold_v2_events"

    seller: Mapped[str] = mapped_column(String(42), nullable=False)
    buyer: Mapped[str] = mapped_column(String(42), nullable=False)
    nft_to: Mapped[str] = mapped_column(String(42), nullable=False)
    token_id: Mapped[int] = mapped_column(BigUint(), nullable=False)
    amount: Mapped[int] = mapped_column(BigUint(), nullable=False)
    price: Mapped[int] = mapped_column(BigUint(), nullable=False)
    net_amount: Mapped[int] = mapped_column(BigUint(), nullable=False)
    percentage_fee_amount: Mapped[int] = mapped_column(BigUint(), nullable=False)
    fixed_fee_amount: Mapped[int] = mapped_column(BigUint(), nullable=False)
    is_buy_limit: Mapped[bool] = mapped_column(Boolean, nullable=False)


# ----------------------------------------------------------------------
# Runner checkpoint


class IndexerCursor(Base):
    __tablename__ = "indexer_cursors"

    cursor_id: Mapped[str] = mapped_column(String, primary_key=True)
    last_indexed_block: Mapped[int] = mapped_column(BigInteger, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
