"""Typed marketplace events as delivered by the contract, one class per event kind."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Union


def event_entity_id(transaction_hash: str, log_index: int) -> str:
    """Return the chain-unique id for an event: tx hash bytes + little-endian int32 log index."""

    raw_hash = transaction_hash[2:] if transaction_hash.lower().startswith("0x") else transaction_hash
    suffix = (log_index & 0xFFFFFFFF).to_bytes(4, "little").hex()
    return f"0x{raw_hash.lower()}{suffix}"


@dataclass(frozen=True, slots=True)
class EventEnvelope:
    """Positional provenance shared by every event."""

    block_number: int
    block_timestamp: int
    transaction_hash: str
    log_index: int

    @property
    def entity_id(self) -> str:
        return event_entity_id(self.transaction_hash, self.log_index)

    @property
    def sort_key(self) -> tuple[int, int]:
        return (self.block_number, self.log_index)


# ----------------------------------------------------------------------
# Shared by both contract versions


@dataclass(frozen=True, slots=True)
class Paused:
    EVENT_NAME: ClassVar[str] = "Paused"

    envelope: EventEnvelope
    account: str


@dataclass(frozen=True, slots=True)
class Unpaused:
    EVENT_NAME: ClassVar[str] = "Unpaused"

    envelope: EventEnvelope
    account: str


@dataclass(frozen=True, slots=True)
class RoleAdminChanged:
    EVENT_NAME: ClassVar[str] = "RoleAdminChanged"

    envelope: EventEnvelope
    role: str
    previous_admin_role: str
    new_admin_role: str


@dataclass(frozen=True, slots=True)
class RoleGranted:
    EVENT_NAME: ClassVar[str] = "RoleGranted"

    envelope: EventEnvelope
    role: str
    account: str
    sender: str


@dataclass(frozen=True, slots=True)
class RoleRevoked:
    EVENT_NAME: ClassVar[str] = "RoleRevoked"

    envelope: EventEnvelope
    role: str
    account: str
    sender: str


# ----------------------------------------------------------------------
# V1 contract


@dataclass(frozen=True, slots=True)
class SetFeePercent:
    EVENT_NAME: ClassVar[str] = "SetFeePercent"

    envelope: EventEnvelope
    new_platform_fee_percent: int
    new_partner_fee_percent: int


@dataclass(frozen=True, slots=True)
class SetMinimumTradePrice:
    EVENT_NAME: ClassVar[str] = "SetMinimumTradePrice"

    envelope: EventEnvelope
    new_minimum_trade_price: int


@dataclass(frozen=True, slots=True)
class SetTotalFeePercent:
    EVENT_NAME: ClassVar[str] = "SetTotalFeePercent"

    envelope: EventEnvelope
    new_total_fee_percent: int


@dataclass(frozen=True, slots=True)
class Sold:
    EVENT_NAME: ClassVar[str] = "Sold"

    envelope: EventEnvelope
    seller: str
    buyer: str
    token_id: int
    amount: int
    price: int
    price_after_fee: int
    is_buy_limit: bool


# ----------------------------------------------------------------------
# V2 contract


@dataclass(frozen=True, slots=True)
class FeeUpdated:
    EVENT_NAME: ClassVar[str] = "FeeUpdated"

    envelope: EventEnvelope
    new_percentage_fee: int
    new_fixed_fee: int


@dataclass(frozen=True, slots=True)
class MinimumTradePriceUpdated:
    EVENT_NAME: ClassVar[str] = "MinimumTradePriceUpdated"

    envelope: EventEnvelope
    new_minimum_trade_price: int


@dataclass(frozen=True, slots=True)
class SoldV2:
    EVENT_NAME: ClassVar[str] = "Sold"

    envelope: EventEnvelope
    seller: str
    buyer: str
    nft_to: str
    token_id: int
    amount: int
    price: int
    net_amount: int
    percentage_fee_amount: int
    fixed_fee_amount: int
    is_buy_limit: bool


MarketplaceEvent = Union[
    Paused,
    Unpaused,
    RoleAdminChanged,
    RoleGranted,
    RoleRevoked,
    SetFeePercent,
    SetMinimumTradePrice,
    SetTotalFeePercent,
    Sold,
    FeeUpdated,
    MinimumTradePriceUpdated,
    SoldV2,
]

V1_EVENT_TYPES: tuple[type, ...] = (
    Paused,
    RoleAdminChanged,
    RoleGranted,
    RoleRevoked,
    SetFeePercent,
    SetMinimumTradePrice,
    SetTotalFeePercent,
    Sold,
    Unpaused,
)

V2_EVENT_TYPES: tuple[type, ...] = (
    FeeUpdated,
    MinimumTradePriceUpdated,
    Paused,
    RoleAdminChanged,
    RoleGranted,
    RoleRevoked,
    SoldV2,
    Unpaused,
)
