"""Hour/day/month trade statistics accumulated from Sold events."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Sequence

from landverse.domain.amounts import ZERO, add, subtract
from landverse.repositories import EntityStore, ProjectionModels

HOUR_SECONDS = 3600
DAY_SECONDS = 86400
MONTH_SECONDS = 2592000


@dataclass(frozen=True, slots=True)
class BucketWindow:
    name: str
    width_seconds: int
    model: type


@dataclass(frozen=True, slots=True)
class TradeSample:
    """The part of a trade that feeds the running totals."""

    timestamp: int
    raw_amount: int
    price: Decimal
    price_after_fee: Decimal


FeeSplitter = Callable[[Any], None]


def bucket_start(timestamp: int, width_seconds: int) -> int:
    return (timestamp // width_seconds) * width_seconds


def bucket_id(timestamp: int, width_seconds: int) -> str:
    return str(bucket_start(timestamp, width_seconds))


def windows_for(models: ProjectionModels) -> tuple[BucketWindow, ...]:
    return (
        BucketWindow("hour", HOUR_SECONDS, models.hour),
        BucketWindow("day", DAY_SECONDS, models.day),
        BucketWindow("month", MONTH_SECONDS, models.month),
    )


def _load_or_create(store: EntityStore, window: BucketWindow, timestamp: int, init_fields: Sequence[str]):
    key = bucket_id(timestamp, window.width_seconds)
    bucket = store.load(window.model, key)
    if bucket is not None:
        return bucket

    bucket = window.model(
        id=key,
        start_unix_time=bucket_start(timestamp, window.width_seconds),
        total_amount=0,
        total_price=ZERO,
        total_price_after_fee=ZERO,
        total_fee=ZERO,
        total_transaction=0,
    )
    for field_name in init_fields:
        setattr(bucket, field_name, ZERO)
    return bucket


def accumulate(
    store: EntityStore,
    window: BucketWindow,
    sample: TradeSample,
    split_fees: FeeSplitter,
    *,
    category_fields: Sequence[str] = (),
):
    """Fold one trade into the window's bucket and persist it."""

    bucket = _load_or_create(store, window, sample.timestamp, category_fields)
    bucket.total_amount = bucket.total_amount + sample.raw_amount
    bucket.total_price = add(bucket.total_price, sample.price)
    bucket.total_price_after_fee = add(bucket.total_price_after_fee, sample.price_after_fee)
    bucket.total_transaction = bucket.total_transaction + 1
    # Recomputed from the running totals rather than summed per trade.
    bucket.total_fee = subtract(bucket.total_price, bucket.total_price_after_fee)
    split_fees(bucket)
    return store.save(bucket)


def record_trade(
    store: EntityStore,
    windows: Sequence[BucketWindow],
    sample: TradeSample,
    split_fees: FeeSplitter,
    *,
    category_fields: Sequence[str] = (),
) -> list[Any]:
    return [
        accumulate(store, window, sample, split_fees, category_fields=category_fields)
        for window in windows
    ]
