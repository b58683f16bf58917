"""Read-side queries over the marketplace projection."""

from __future__ import annotations

from typing import Any

from sqlalchemy import desc, func, select
from sqlalchemy.orm import Session

from landverse.models import CONFIG_SINGLETON_ID

from .types import ProjectionModels


class MarketplaceRepository:
    """Query one contract version's configuration, trades and statistics."""

    def __init__(self, session: Session, models: ProjectionModels) -> None:
        self._session = session
        self._models = models

    def get_config(self):
        return self._session.get(self._models.config, CONFIG_SINGLETON_ID)

    def get_transaction(self, transaction_id: str):
        return self._session.get(self._models.transaction, transaction_id)

    def list_transactions(
        self,
        *,
        seller: str | None = None,
        buyer: str | None = None,
        token_id: int | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[Any], int]:
        model = self._models.transaction
        filters: list[Any] = []
        if seller:
            filters.append(func.lower(model.seller) == seller.lower())
        if buyer:
            filters.append(func.lower(model.buyer) == buyer.lower())
        if token_id is not None:
            filters.append(model.token_id == token_id)

        total_query = select(func.count()).select_from(model)
        if filters:
            total_query = total_query.where(*filters)
        total = self._session.execute(total_query).scalar_one()

        query = select(model)
        if filters:
            query = query.where(*filters)
        query = (
            query.order_by(desc(model.block_number), desc(model.id))
            .offset(offset)
            .limit(limit)
        )
        records = list(self._session.execute(query).scalars().all())
        return records, total

    def list_buckets(
        self,
        window: str,
        *,
        start: int | None = None,
        end: int | None = None,
        limit: int = 100,
    ) -> list[Any]:
        model = self._models.bucket_model(window)
        query = select(model)
        if start is not None:
            query = query.where(model.start_unix_time >= start)
        if end is not None:
            query = query.where(model.start_unix_time <= end)
        query = query.order_by(model.start_unix_time).limit(limit)
        return list(self._session.execute(query).scalars().all())
