"""Stateful projection of the V2 marketplace contract.

Same shape as the V1 projection with V2's fee model: a percentage trading
fee paid to the trading-fee wallet plus a fixed fee paid to the platform
treasury. A transaction's trading fee is taken from the event's
``percentageFeeAmount``; its fixed fee is the configured fixed fee at
processing time. Bucket fixed fees are the configured fixed fee times the
bucket's trade count and the trading fee is the remainder of the total
fee, so both follow the latest configuration. Raising the fixed fee after
a bucket already holds trades charges those trades the new fixed fee too,
which can leave the bucket's trading fee negative.
"""

from __future__ import annotations

from landverse.domain import FeeUpdated, MinimumTradePriceUpdated, Paused, SoldV2, Unpaused
from landverse.domain.amounts import multiply, subtract, to_token_amount
from landverse.models import MarketplaceConfigV2, TransactionV2
from landverse.repositories import V2_MODELS

from .aggregation import TradeSample, record_trade, windows_for
from .context import HandlerContext
from .dispatch import EventDispatcher

WINDOWS = windows_for(V2_MODELS)
FEE_CATEGORY_FIELDS = ("total_trading_fee", "total_fixed_fee")


def handle_paused(event: Paused, context: HandlerContext) -> None:
    accessor = context.require_config()
    config = accessor.get_or_init()
    config.paused = True
    accessor.save(config)


def handle_unpaused(event: Unpaused, context: HandlerContext) -> None:
    accessor = context.require_config()
    config = accessor.get_or_init()
    config.paused = False
    accessor.save(config)


def handle_fee_updated(event: FeeUpdated, context: HandlerContext) -> None:
    accessor = context.require_config()
    config = accessor.get_or_init()
    config.fee_percentage = event.new_percentage_fee
    config.fixed_fee = event.new_fixed_fee
    accessor.save(config)


def handle_minimum_trade_price_updated(
    event: MinimumTradePriceUpdated, context: HandlerContext
) -> None:
    accessor = context.require_config()
    config = accessor.get_or_init()
    config.minimum_trade_price = event.new_minimum_trade_price
    accessor.save(config)


def _bucket_fee_splitter(config: MarketplaceConfigV2):
    fixed_fee = to_token_amount(config.fixed_fee)

    def split(bucket) -> None:
        bucket.total_fixed_fee = multiply(fixed_fee, bucket.total_transaction)
        bucket.total_trading_fee = subtract(bucket.total_fee, bucket.total_fixed_fee)

    return split


def handle_sold(event: SoldV2, context: HandlerContext) -> None:
    config = context.require_config().get_or_init()
    envelope = event.envelope

    price = to_token_amount(event.price)
    net_amount = to_token_amount(event.net_amount)

    transaction = TransactionV2(
        id=envelope.entity_id,
        seller=event.seller,
        buyer=event.buyer,
        nft_to=event.nft_to,
        token_id=event.token_id,
        amount=to_token_amount(event.amount),
        price=price,
        net_amount=net_amount,
        total_fee=subtract(price, net_amount),
        trading_fee=to_token_amount(event.percentage_fee_amount),
        fixed_fee=to_token_amount(config.fixed_fee),
        is_buy_limit=event.is_buy_limit,
        block_number=envelope.block_number,
        block_timestamp=envelope.block_timestamp,
        transaction_hash=envelope.transaction_hash,
    )
    context.store.save(transaction)

    record_trade(
        context.store,
        WINDOWS,
        TradeSample(
            timestamp=envelope.block_timestamp,
            raw_amount=event.amount,
            price=price,
            price_after_fee=net_amount,
        ),
        _bucket_fee_splitter(config),
        category_fields=FEE_CATEGORY_FIELDS,
    )


DISPATCHER = EventDispatcher(
    "v2-projection",
    {
        Paused: handle_paused,
        Unpaused: handle_unpaused,
        FeeUpdated: handle_fee_updated,
        MinimumTradePriceUpdated: handle_minimum_trade_price_updated,
        SoldV2: handle_sold,
    },
)
