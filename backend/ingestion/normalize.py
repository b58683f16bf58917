from __future__ import annotations

from typing import Any, Mapping

from eth_abi import decode
from web3 import Web3

from landverse.core.config import ContractVersion
from landverse.domain import EventEnvelope

from .abi import EventCatalogue, EventInput, EventAbi, catalogue_for, hex_prefixed


class EventDecodeError(ValueError):
    """Raised when a log or payload cannot be mapped onto a known event."""


def _as_bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        raw = value[2:] if value.startswith("0x") else value
        try:
            return bytes.fromhex(raw)
        except ValueError as exc:
            raise EventDecodeError(f"Invalid hex value: {value!r}") from exc
    raise EventDecodeError(f"Expected bytes or hex string, got {type(value).__name__}")


def _as_int(value: Any) -> int:
    """Accept ints, decimal strings and 0x-prefixed hex strings."""
    if isinstance(value, bool):
        raise EventDecodeError(f"Expected an integer, got boolean {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        candidate = value.strip()
        try:
            if candidate.lower().startswith("0x"):
                return int(candidate, 16)
            return int(candidate)
        except ValueError as exc:
            raise EventDecodeError(f"Invalid integer value: {value!r}") from exc
    raise EventDecodeError(f"Expected an integer, got {type(value).__name__}")


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in {"true", "false"}:
        return value.strip().lower() == "true"
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    raise EventDecodeError(f"Invalid boolean value: {value!r}")


def _as_address(value: Any) -> str:
    try:
        return Web3.to_checksum_address(value)
    except (TypeError, ValueError) as exc:
        raise EventDecodeError(f"Invalid address: {value!r}") from exc


def _as_bytes32(value: Any) -> str:
    raw = _as_bytes(value)
    if len(raw) != 32:
        raise EventDecodeError(f"Expected 32 bytes, got {len(raw)}")
    return "0x" + raw.hex()


def _coerce(item: EventInput, value: Any) -> Any:
    if item.abi_type.startswith("uint"):
        integer = _as_int(value)
        if integer < 0:
            raise EventDecodeError(f"{item.name} must be unsigned, got {integer}")
        return integer
    if item.abi_type == "bool":
        return _as_bool(value)
    if item.abi_type == "address":
        return _as_address(value)
    if item.abi_type == "bytes32":
        return _as_bytes32(value)
    raise EventDecodeError(f"Unsupported ABI type {item.abi_type}")


def _build_event(entry: EventAbi, envelope: EventEnvelope, values: Mapping[str, Any]):
    return entry.event_type(envelope=envelope, **values)


def decode_log(log: Mapping[str, Any], catalogue: EventCatalogue, block_timestamp: int):
    """Decode an ``eth_getLogs`` entry; returns None for topics outside the catalogue."""

    topics = list(log.get("topics") or [])
    if not topics:
        return None
    entry = catalogue.by_topic.get(hex_prefixed(topics[0]).lower())
    if entry is None:
        return None

    indexed_inputs = entry.indexed_inputs
    if len(topics) - 1 != len(indexed_inputs):
        raise EventDecodeError(
            f"{entry.name} expects {len(indexed_inputs)} indexed topics, got {len(topics) - 1}"
        )

    data_inputs = entry.data_inputs
    try:
        decoded_topics = [
            decode([item.abi_type], _as_bytes(topic))[0]
            for item, topic in zip(indexed_inputs, topics[1:])
        ]
        decoded_data = decode(
            [item.abi_type for item in data_inputs], _as_bytes(log.get("data", b""))
        )
    except EventDecodeError:
        raise
    except Exception as exc:  # eth_abi raises several decoding error types
        raise EventDecodeError(f"Could not decode {entry.name}: {exc}") from exc

    values: dict[str, Any] = {}
    for item, decoded in zip(indexed_inputs, decoded_topics):
        values[item.field] = _coerce(item, decoded)
    for item, decoded in zip(data_inputs, decoded_data):
        values[item.field] = _coerce(item, decoded)

    envelope = EventEnvelope(
        block_number=_as_int(log["blockNumber"]),
        block_timestamp=int(block_timestamp),
        transaction_hash=hex_prefixed(log["transactionHash"]).lower(),
        log_index=_as_int(log["logIndex"]),
    )
    return _build_event(entry, envelope, values)


def _require(payload: Mapping[str, Any], key: str, context: str) -> Any:
    if key not in payload or payload[key] is None:
        raise EventDecodeError(f"{context} is missing required field '{key}'")
    return payload[key]


def event_from_payload(
    payload: Mapping[str, Any], catalogue: EventCatalogue | ContractVersion | str
):
    """Build a typed event from an exported JSON object.

    Expected shape::

        {"event": "Sold", "blockNumber": 1, "blockTimestamp": 1700000000,
         "transactionHash": "0x...", "logIndex": 0, "params": {...}}

    Params are keyed by their Solidity names (``priceAfterFee``); snake_case
    keys are accepted too.
    """

    if not isinstance(catalogue, EventCatalogue):
        catalogue = catalogue_for(catalogue)

    name = _require(payload, "event", "Event payload")
    entry = catalogue.by_name.get(name)
    if entry is None:
        raise EventDecodeError(
            f"Unknown {catalogue.version.value} event '{name}'"
        )

    envelope = EventEnvelope(
        block_number=_as_int(_require(payload, "blockNumber", name)),
        block_timestamp=_as_int(_require(payload, "blockTimestamp", name)),
        transaction_hash=hex_prefixed(_require(payload, "transactionHash", name)).lower(),
        log_index=_as_int(_require(payload, "logIndex", name)),
    )

    params = payload.get("params") or {}
    if not isinstance(params, Mapping):
        raise EventDecodeError(f"{name} params must be an object")

    values: dict[str, Any] = {}
    for item in entry.inputs:
        if item.name in params:
            raw_value = params[item.name]
        elif item.field in params:
            raw_value = params[item.field]
        else:
            raise EventDecodeError(f"{name} is missing parameter '{item.name}'")
        values[item.field] = _coerce(item, raw_value)

    return _build_event(entry, envelope, values)
