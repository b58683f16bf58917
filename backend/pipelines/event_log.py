"""Raw event-log indexing: one immutable record per emitted event, no aggregation."""

from __future__ import annotations

from dataclasses import fields
from typing import Any

from landverse.domain import (
    FeeUpdated,
    MinimumTradePriceUpdated,
    Paused,
    RoleAdminChanged,
    RoleGranted,
    RoleRevoked,
    SetFeePercent,
    SetMinimumTradePrice,
    SetTotalFeePercent,
    Sold,
    SoldV2,
    Unpaused,
)
from landverse.models import (
    FeeUpdatedRecord,
    MinimumTradePriceUpdatedRecord,
    PausedRecord,
    RoleAdminChangedRecord,
    RoleGrantedRecord,
    RoleRevokedRecord,
    SetFeePercentRecord,
    SetMinimumTradePriceRecord,
    SetTotalFeePercentRecord,
    SoldRecord,
    SoldV2Record,
    UnpausedRecord,
)

from .context import HandlerContext
from .dispatch import EventDispatcher, EventHandler


def build_record(model: type, event: Any):
    """Copy an event's parameters and provenance onto a new log record."""

    envelope = event.envelope
    params = {
        field.name: getattr(event, field.name)
        for field in fields(event)
        if field.name != "envelope"
    }
    return model(
        id=envelope.entity_id,
        block_number=envelope.block_number,
        block_timestamp=envelope.block_timestamp,
        transaction_hash=envelope.transaction_hash,
        **params,
    )


def log_to(model: type) -> EventHandler:
    def handler(event: Any, context: HandlerContext) -> None:
        context.store.save(build_record(model, event))

    handler.__name__ = f"log_{model.__tablename__}"
    return handler


_SHARED_ROUTES: dict[type, EventHandler] = {
    Paused: log_to(PausedRecord),
    Unpaused: log_to(UnpausedRecord),
    RoleAdminChanged: log_to(RoleAdminChangedRecord),
    RoleGranted: log_to(RoleGrantedRecord),
    RoleRevoked: log_to(RoleRevokedRecord),
}

V1_DISPATCHER = EventDispatcher(
    "v1-event-log",
    {
        **_SHARED_ROUTES,
        SetFeePercent: log_to(SetFeePercentRecord),
        SetMinimumTradePrice: log_to(SetMinimumTradePriceRecord),
        SetTotalFeePercent: log_to(SetTotalFeePercentRecord),
        Sold: log_to(SoldRecord),
    },
)

V2_DISPATCHER = EventDispatcher(
    "v2-event-log",
    {
        **_SHARED_ROUTES,
        FeeUpdated: log_to(FeeUpdatedRecord),
        MinimumTradePriceUpdated: log_to(MinimumTradePriceUpdatedRecord),
        SoldV2: log_to(SoldV2Record),
    },
)
