"""Read-side conveniences behind the marketplace API."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.orm import Session

from landverse import schemas
from landverse.core.config import ContractVersion, IndexingStrategy
from landverse.repositories import (
    CursorRepository,
    EntityStore,
    MarketplaceRepository,
    cursor_key,
    default_config_values,
    models_for,
)

_SCHEMAS = {
    ContractVersion.V1: (schemas.MarketplaceConfigV1, schemas.TransactionV1, schemas.BucketV1),
    ContractVersion.V2: (schemas.MarketplaceConfigV2, schemas.TransactionV2, schemas.BucketV2),
}


@dataclass(slots=True)
class TransactionQuery:
    seller: str | None = None
    buyer: str | None = None
    token_id: int | None = None
    limit: int = 50
    offset: int = 0


class MarketplaceStatsService:
    """Serve one contract version's projection as API schemas."""

    def __init__(
        self,
        session: Session,
        *,
        version: ContractVersion | str,
        strategy: IndexingStrategy | str = IndexingStrategy.PROJECTION,
        address: str | None = None,
    ) -> None:
        self.version = ContractVersion(version)
        self.strategy = IndexingStrategy(strategy)
        self._session = session
        self._address = address
        self._models = models_for(self.version)
        self._repo = MarketplaceRepository(session, self._models)
        self._config_schema, self._transaction_schema, self._bucket_schema = _SCHEMAS[
            self.version
        ]

    def get_config(self):
        record = self._repo.get_config()
        if record is None:
            return self._config_schema(**default_config_values(self._models.config))
        return self._config_schema.model_validate(record)

    def list_transactions(self, query: TransactionQuery) -> schemas.TransactionList:
        records, total = self._repo.list_transactions(
            seller=query.seller,
            buyer=query.buyer,
            token_id=query.token_id,
            limit=query.limit,
            offset=query.offset,
        )
        items = [self._transaction_schema.model_validate(record) for record in records]
        return schemas.TransactionList(total=total, items=items)

    def get_transaction(self, transaction_id: str):
        record = self._repo.get_transaction(transaction_id)
        if record is None:
            return None
        return self._transaction_schema.model_validate(record)

    def list_buckets(
        self,
        window: str,
        *,
        start: int | None = None,
        end: int | None = None,
        limit: int = 100,
    ) -> schemas.BucketList:
        records = self._repo.list_buckets(window, start=start, end=end, limit=limit)
        items = [self._bucket_schema.model_validate(record) for record in records]
        return schemas.BucketList(window=window, items=items)

    def indexer_status(self) -> schemas.IndexerStatus:
        cursor_id = cursor_key(self.version.value, self.strategy.value, self._address)
        cursor = CursorRepository(EntityStore(self._session)).get(cursor_id)
        return schemas.IndexerStatus(
            cursor_id=cursor_id,
            contract_version=self.version.value,
            indexing_strategy=self.strategy.value,
            last_indexed_block=cursor.last_indexed_block if cursor else None,
            updated_at=cursor.updated_at if cursor else None,
        )
