"""Stateful projection of the V1 marketplace contract.

Configuration events are folded into the ``MarketplaceConfig`` singleton,
each Sold event becomes an immutable ``Transaction`` and feeds the
hour/day/month statistics. Role events are not part of this projection.

Fee category splits (platform/partner) use the configuration as it stands
when the trade is processed, and bucket splits are recomputed from the
bucket's running fee total with the latest percentages.
"""

from __future__ import annotations

from landverse.domain import Paused, SetFeePercent, SetMinimumTradePrice, SetTotalFeePercent, Sold, Unpaused
from landverse.domain.amounts import fee_share, subtract, to_token_amount
from landverse.models import MarketplaceConfig, Transaction
from landverse.repositories import V1_MODELS

from .aggregation import TradeSample, record_trade, windows_for
from .context import HandlerContext
from .dispatch import EventDispatcher

WINDOWS = windows_for(V1_MODELS)
FEE_CATEGORY_FIELDS = ("total_platform_fee", "total_partner_fee")


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


def handle_set_fee_percent(event: SetFeePercent, context: HandlerContext) -> None:
    accessor = context.require_config()
    config = accessor.get_or_init()
    config.platform_fee_percent = event.new_platform_fee_percent
    config.partner_fee_percent = event.new_partner_fee_percent
    accessor.save(config)


def handle_set_total_fee_percent(event: SetTotalFeePercent, context: HandlerContext) -> None:
    accessor = context.require_config()
    config = accessor.get_or_init()
    config.total_fee_percent = event.new_total_fee_percent
    accessor.save(config)


def handle_set_minimum_trade_price(event: SetMinimumTradePrice, context: HandlerContext) -> None:
    accessor = context.require_config()
    config = accessor.get_or_init()
    config.minimum_trade_price = event.new_minimum_trade_price
    accessor.save(config)


def _bucket_fee_splitter(config: MarketplaceConfig):
    def split(bucket) -> None:
        bucket.total_platform_fee = fee_share(bucket.total_fee, config.platform_fee_percent)
        bucket.total_partner_fee = fee_share(bucket.total_fee, config.partner_fee_percent)

    return split


def handle_sold(event: Sold, context: HandlerContext) -> None:
    config = context.require_config().get_or_init()
    envelope = event.envelope

    price = to_token_amount(event.price)
    price_after_fee = to_token_amount(event.price_after_fee)
    total_fee = subtract(price, price_after_fee)

    transaction = Transaction(
        id=envelope.entity_id,
        seller=event.seller,
        buyer=event.buyer,
        token_id=event.token_id,
        amount=to_token_amount(event.amount),
        price=price,
        price_after_fee=price_after_fee,
        total_fee=total_fee,
        platform_fee=fee_share(total_fee, config.platform_fee_percent),
        partner_fee=fee_share(total_fee, config.partner_fee_percent),
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
            price_after_fee=price_after_fee,
        ),
        _bucket_fee_splitter(config),
        category_fields=FEE_CATEGORY_FIELDS,
    )


DISPATCHER = EventDispatcher(
    "v1-projection",
    {
        Paused: handle_paused,
        Unpaused: handle_unpaused,
        SetFeePercent: handle_set_fee_percent,
        SetTotalFeePercent: handle_set_total_fee_percent,
        SetMinimumTradePrice: handle_set_minimum_trade_price,
        Sold: handle_sold,
    },
)
