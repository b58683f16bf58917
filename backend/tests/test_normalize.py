from __future__ import annotations

import json

import pytest
from eth_abi import encode
from hexbytes import HexBytes
from web3 import Web3

from conftest import ADMIN_ROLE, BUYER, ETHER, RECEIVER, SELLER
from ingestion.abi import V1_CATALOGUE, V2_CATALOGUE, catalogue_for
from ingestion.normalize import EventDecodeError, decode_log, event_from_payload
from ingestion.service import EventFileSource, load_event_file
from landverse.domain import RoleGranted, Sold, SoldV2

TX_HASH = "0x" + "ef" * 32


def _log(entry, *, topics=(), data=b"", block=321, log_index=2):
    return {
        "topics": [HexBytes(entry.topic), *topics],
        "data": HexBytes(data),
        "blockNumber": block,
        "transactionHash": HexBytes(TX_HASH),
        "logIndex": log_index,
        "address": "0x" + "ab" * 20,
    }


def test_topics_match_event_signatures():
    sold = V1_CATALOGUE.by_name["Sold"]
    assert sold.signature == "Sold(address,address,uint256,uint256,uint256,uint256,bool)"
    assert sold.topic == "0x" + Web3.keccak(text=sold.signature).hex().removeprefix("0x")
    assert V2_CATALOGUE.by_name["Sold"].signature == (
        "Sold(address,address,address,uint256,uint256,uint256,uint256,uint256,uint256,bool)"
    )
    assert catalogue_for("v1") is V1_CATALOGUE
    assert len(set(V2_CATALOGUE.topics)) == len(V2_CATALOGUE)


def test_decode_v1_sold_log():
    entry = V1_CATALOGUE.by_name["Sold"]
    data = encode(
        ["address", "address", "uint256", "uint256", "uint256", "uint256", "bool"],
        [SELLER, BUYER, 7, 2 * ETHER, 100 * ETHER, 90 * ETHER, True],
    )

    event = decode_log(_log(entry, data=data), V1_CATALOGUE, block_timestamp=1_700_000_000)

    assert isinstance(event, Sold)
    assert event.seller == Web3.to_checksum_address(SELLER)
    assert event.buyer == Web3.to_checksum_address(BUYER)
    assert (event.token_id, event.amount, event.price, event.price_after_fee) == (
        7,
        2 * ETHER,
        100 * ETHER,
        90 * ETHER,
    )
    assert event.is_buy_limit is True
    assert event.envelope.block_number == 321
    assert event.envelope.block_timestamp == 1_700_000_000
    assert event.envelope.transaction_hash == TX_HASH
    assert event.envelope.log_index == 2


def test_decode_indexed_role_topics():
    entry = V2_CATALOGUE.by_name["RoleGranted"]
    topics = [
        HexBytes(bytes(32)),
        HexBytes(encode(["address"], [BUYER])),
        HexBytes(encode(["address"], [SELLER])),
    ]

    event = decode_log(_log(entry, topics=topics), V2_CATALOGUE, block_timestamp=5)

    assert isinstance(event, RoleGranted)
    assert event.role == ADMIN_ROLE
    assert event.account == Web3.to_checksum_address(BUYER)
    assert event.sender == Web3.to_checksum_address(SELLER)


def test_unknown_topic_is_skipped():
    log = {
        "topics": [HexBytes(Web3.keccak(text="Transfer(address,address,uint256)"))],
        "data": HexBytes(b""),
        "blockNumber": 1,
        "transactionHash": HexBytes(TX_HASH),
        "logIndex": 0,
    }
    assert decode_log(log, V1_CATALOGUE, block_timestamp=0) is None


def test_truncated_data_raises_decode_error():
    entry = V1_CATALOGUE.by_name["SetFeePercent"]
    with pytest.raises(EventDecodeError):
        decode_log(_log(entry, data=b"\x00" * 16), V1_CATALOGUE, block_timestamp=0)


def test_wrong_topic_count_raises_decode_error():
    entry = V1_CATALOGUE.by_name["RoleRevoked"]
    with pytest.raises(EventDecodeError):
        decode_log(_log(entry, topics=[HexBytes(bytes(32))]), V1_CATALOGUE, block_timestamp=0)


def _sold_v2_payload(**overrides):
    payload = {
        "event": "Sold",
        "blockNumber": "12",
        "blockTimestamp": 1_700_000_000,
        "transactionHash": TX_HASH,
        "logIndex": 0,
        "params": {
            "seller": SELLER,
            "buyer": BUYER,
            "nftTo": RECEIVER,
            "tokenId": "115792089237316195423570985008687907853269984665640564039457584007913129639935",
            "amount": str(ETHER),
            "price": str(100 * ETHER),
            "netAmount": str(93 * ETHER),
            "percentageFeeAmount": str(5 * ETHER),
            "fixedFeeAmount": str(2 * ETHER),
            "isBuyLimit": "false",
        },
    }
    payload.update(overrides)
    return payload


def test_payload_accepts_string_integers():
    event = event_from_payload(_sold_v2_payload(), "v2")

    assert isinstance(event, SoldV2)
    assert event.token_id == 2**256 - 1
    assert event.net_amount == 93 * ETHER
    assert event.is_buy_limit is False
    assert event.nft_to == Web3.to_checksum_address(RECEIVER)
    assert event.envelope.block_number == 12


def test_payload_accepts_snake_case_params():
    payload = _sold_v2_payload()
    params = payload["params"]
    params["net_amount"] = params.pop("netAmount")
    assert event_from_payload(payload, V2_CATALOGUE).net_amount == 93 * ETHER


@pytest.mark.parametrize(
    "payload",
    [
        {"event": "Transfer", "blockNumber": 1, "blockTimestamp": 1, "transactionHash": TX_HASH, "logIndex": 0},
        _sold_v2_payload(params={"seller": SELLER}),
        _sold_v2_payload(blockTimestamp=None),
        _sold_v2_payload(logIndex="not-a-number"),
    ],
)
def test_malformed_payloads_raise(payload):
    with pytest.raises(EventDecodeError):
        event_from_payload(payload, "v2")


def test_payload_rejects_bad_addresses():
    payload = _sold_v2_payload()
    payload["params"]["seller"] = "0x1234"
    with pytest.raises(EventDecodeError):
        event_from_payload(payload, "v2")


def test_event_file_source_reads_jsonl_in_chain_order(tmp_path):
    later = {
        "event": "SetTotalFeePercent",
        "blockNumber": 9,
        "blockTimestamp": 90,
        "transactionHash": TX_HASH,
        "logIndex": 1,
        "params": {"newTotalFeePercent": "10"},
    }
    earlier = {**later, "blockNumber": 3, "params": {"newTotalFeePercent": "5"}}
    path = tmp_path / "events.jsonl"
    path.write_text("\n".join(json.dumps(item) for item in (later, earlier)) + "\n", encoding="utf-8")

    source = EventFileSource.from_path(path, "v1")

    assert [event.new_total_fee_percent for event in source.events] == [5, 10]
    assert source.latest_block() == 9
    assert [e.envelope.block_number for e in source.fetch_events(4, 9)] == [9]


def test_load_event_file_accepts_wrapped_json(tmp_path):
    path = tmp_path / "events.json"
    path.write_text(
        json.dumps(
            {
                "events": [
                    {
                        "event": "Paused",
                        "blockNumber": 1,
                        "blockTimestamp": 10,
                        "transactionHash": TX_HASH,
                        "logIndex": 0,
                        "params": {"account": SELLER},
                    }
                ]
            }
        ),
        encoding="utf-8",
    )
    [event] = load_event_file(path, "v1")
    assert event.account == Web3.to_checksum_address(SELLER)


def test_invalid_json_file_raises(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(EventDecodeError):
        load_event_file(path, "v1")
