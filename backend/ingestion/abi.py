"""Event ABI catalogue for both marketplace contract generations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from web3 import Web3

from landverse.core.config import ContractVersion
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


def hex_prefixed(value: Any) -> str:
    raw = value.hex() if hasattr(value, "hex") else str(value)
    if raw.startswith("0x"):
        return raw
    return f"0x{raw}"


@dataclass(frozen=True, slots=True)
class EventInput:
    name: str
    abi_type: str
    field: str
    indexed: bool = False


@dataclass(frozen=True, slots=True)
class EventAbi:
    name: str
    event_type: type
    inputs: tuple[EventInput, ...]

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(item.abi_type for item in self.inputs)})"

    @property
    def topic(self) -> str:
        return hex_prefixed(Web3.keccak(text=self.signature)).lower()

    @property
    def indexed_inputs(self) -> tuple[EventInput, ...]:
        return tuple(item for item in self.inputs if item.indexed)

    @property
    def data_inputs(self) -> tuple[EventInput, ...]:
        return tuple(item for item in self.inputs if not item.indexed)


class EventCatalogue:
    """Lookup of a contract's events by topic0 and by name."""

    def __init__(self, version: ContractVersion, entries: Iterable[EventAbi]) -> None:
        self.version = version
        self.entries = tuple(entries)
        self.by_topic = {entry.topic: entry for entry in self.entries}
        self.by_name = {entry.name: entry for entry in self.entries}

    @property
    def topics(self) -> list[str]:
        return list(self.by_topic)

    def __len__(self) -> int:
        return len(self.entries)


_PAUSED = EventAbi("Paused", Paused, (EventInput("account", "address", "account"),))
_UNPAUSED = EventAbi("Unpaused", Unpaused, (EventInput("account", "address", "account"),))
_ROLE_ADMIN_CHANGED = EventAbi(
    "RoleAdminChanged",
    RoleAdminChanged,
    (
        EventInput("role", "bytes32", "role", indexed=True),
        EventInput("previousAdminRole", "bytes32", "previous_admin_role", indexed=True),
        EventInput("newAdminRole", "bytes32", "new_admin_role", indexed=True),
    ),
)
_ROLE_GRANTED = EventAbi(
    "RoleGranted",
    RoleGranted,
    (
        EventInput("role", "bytes32", "role", indexed=True),
        EventInput("account", "address", "account", indexed=True),
        EventInput("sender", "address", "sender", indexed=True),
    ),
)
_ROLE_REVOKED = EventAbi(
    "RoleRevoked",
    RoleRevoked,
    (
        EventInput("role", "bytes32", "role", indexed=True),
        EventInput("account", "address", "account", indexed=True),
        EventInput("sender", "address", "sender", indexed=True),
    ),
)

V1_CATALOGUE = EventCatalogue(
    ContractVersion.V1,
    (
        _PAUSED,
        _UNPAUSED,
        _ROLE_ADMIN_CHANGED,
        _ROLE_GRANTED,
        _ROLE_REVOKED,
        EventAbi(
            "SetFeePercent",
            SetFeePercent,
            (
                EventInput("newPlatformFeePercent", "uint256", "new_platform_fee_percent"),
                EventInput("newPartnerFeePercent", "uint256", "new_partner_fee_percent"),
            ),
        ),
        EventAbi(
            "SetMinimumTradePrice",
            SetMinimumTradePrice,
            (EventInput("newMinimumTradePrice", "uint256", "new_minimum_trade_price"),),
        ),
        EventAbi(
            "SetTotalFeePercent",
            SetTotalFeePercent,
            (EventInput("newTotalFeePercent", "uint256", "new_total_fee_percent"),),
        ),
        EventAbi(
            "Sold",
            Sold,
            (
                EventInput("seller", "address", "seller"),
                EventInput("buyer", "address", "buyer"),
                EventInput("tokenId", "uint256", "token_id"),
                EventInput("amount", "uint256", "amount"),
                EventInput("price", "uint256", "price"),
                EventInput("priceAfterFee", "uint256", "price_after_fee"),
                EventInput("isBuyLimit", "bool", "is_buy_limit"),
            ),
        ),
    ),
)

V2_CATALOGUE = EventCatalogue(
    ContractVersion.V2,
    (
        _PAUSED,
        _UNPAUSED,
        _ROLE_ADMIN_CHANGED,
        _ROLE_GRANTED,
        _ROLE_REVOKED,
        EventAbi(
            "FeeUpdated",
            FeeUpdated,
            (
                EventInput("newPercentageFee", "uint256", "new_percentage_fee"),
                EventInput("newFixedFee", "uint256", "new_fixed_fee"),
            ),
        ),
        EventAbi(
            "MinimumTradePriceUpdated",
            MinimumTradePriceUpdated,
            (EventInput("newMinimumTradePrice", "uint256", "new_minimum_trade_price"),),
        ),
        EventAbi(
            "Sold",
            SoldV2,
            (
                EventInput("seller", "address", "seller"),
                EventInput("buyer", "address", "buyer"),
                EventInput("nftTo", "address", "nft_to"),
                EventInput("tokenId", "uint256", "token_id"),
                EventInput("amount", "uint256", "amount"),
                EventInput("price", "uint256", "price"),
                EventInput("netAmount", "uint256", "net_amount"),
                EventInput("percentageFeeAmount", "uint256", "percentage_fee_amount"),
                EventInput("fixedFeeAmount", "uint256", "fixed_fee_amount"),
                EventInput("isBuyLimit", "bool", "is_buy_limit"),
            ),
        ),
    ),
)


def catalogue_for(version: ContractVersion | str) -> EventCatalogue:
    if ContractVersion(version) is ContractVersion.V1:
        return V1_CATALOGUE
    return V2_CATALOGUE
