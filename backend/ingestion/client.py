from __future__ import annotations

from typing import Any

from loguru import logger
from web3 import Web3

from landverse.core.config import ContractVersion, settings
from landverse.domain import MarketplaceEvent

from .abi import EventCatalogue, catalogue_for
from .normalize import EventDecodeError, decode_log


class MarketplaceLogClient:
    """Thin wrapper around a JSON-RPC node for one marketplace deployment."""

    def __init__(
        self,
        *,
        rpc_url: str | None = None,
        address: str | None = None,
        version: ContractVersion | str | None = None,
        timeout: float = 10.0,
        web3: Web3 | None = None,
    ) -> None:
        address = address or settings.marketplace_address
        if not address:
            raise ValueError("A marketplace contract address is required to read chain logs")
        self.address = Web3.to_checksum_address(address)
        self.version = ContractVersion(version or settings.contract_version)
        self.catalogue: EventCatalogue = catalogue_for(self.version)
        self.rpc_url = rpc_url or settings.resolved_rpc_url
        self.web3 = web3 or Web3(
            Web3.HTTPProvider(self.rpc_url, request_kwargs={"timeout": timeout})
        )
        self._timestamps: dict[int, int] = {}

    def latest_block(self) -> int:
        return int(self.web3.eth.block_number)

    def _block_timestamp(self, block_number: int) -> int:
        cached = self._timestamps.get(block_number)
        if cached is not None:
            return cached
        block = self.web3.eth.get_block(block_number)
        timestamp = int(block["timestamp"])
        self._timestamps[block_number] = timestamp
        return timestamp

    def fetch_logs(self, from_block: int, to_block: int) -> list[Any]:
        logger.debug(
            "eth_getLogs address={} blocks={}..{}", self.address, from_block, to_block
        )
        return list(
            self.web3.eth.get_logs(
                {
                    "fromBlock": from_block,
                    "toBlock": to_block,
                    "address": self.address,
                    "topics": [self.catalogue.topics],
                }
            )
        )

    def fetch_events(self, from_block: int, to_block: int) -> list[MarketplaceEvent]:
        events: list[MarketplaceEvent] = []
        for log in self.fetch_logs(from_block, to_block):
            block_number = int(log["blockNumber"])
            try:
                event = decode_log(log, self.catalogue, self._block_timestamp(block_number))
            except EventDecodeError as exc:
                logger.warning(
                    "Skipping undecodable log block={} index={}: {}",
                    block_number,
                    log.get("logIndex"),
                    exc,
                )
                continue
            if event is not None:
                events.append(event)
        events.sort(key=lambda event: event.envelope.sort_key)
        # Older blocks will not be requested again.
        self._timestamps = {
            number: ts for number, ts in self._timestamps.items() if number >= to_block
        }
        return events

    def close(self) -> None:
        provider = getattr(self.web3, "provider", None)
        session = getattr(provider, "_request_session", None)
        if session is not None and hasattr(session, "close"):
            session.close()

    def __enter__(self) -> "MarketplaceLogClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
