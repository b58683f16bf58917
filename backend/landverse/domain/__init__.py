"""Domain models representing marketplace contract events."""

from .events import (
    EventEnvelope,
    FeeUpdated,
    MarketplaceEvent,
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
    V1_EVENT_TYPES,
    V2_EVENT_TYPES,
    event_entity_id,
)

__all__ = [
    "EventEnvelope",
    "FeeUpdated",
    "MarketplaceEvent",
    "MinimumTradePriceUpdated",
    "Paused",
    "RoleAdminChanged",
    "RoleGranted",
    "RoleRevoked",
    "SetFeePercent",
    "SetMinimumTradePrice",
    "SetTotalFeePercent",
    "Sold",
    "SoldV2",
    "Unpaused",
    "V1_EVENT_TYPES",
    "V2_EVENT_TYPES",
    "event_entity_id",
]
