from __future__ import annotations

from typing import Annotated

from fastapi import Depends, FastAPI, HTTPException, Path, Query

from . import schemas
from .core.config import settings
from .db import get_db, init_db
from .services.stats_service import MarketplaceStatsService, TransactionQuery

app = FastAPI(title="Landverse Marketplace Indexer API", version="0.1.0", debug=settings.debug)


@app.on_event("startup")
def on_startup() -> None:
    """Initialize database connections when the API boots."""

    init_db()


@app.get("/healthz", tags=["system"])
def healthcheck() -> dict[str, str]:
    """Basic readiness probe consumed by infrastructure monitors."""

    return {"status": "ok"}


def _stats_service(db=Depends(get_db)) -> MarketplaceStatsService:
    """Provide the stats service for the configured contract version."""

    return MarketplaceStatsService(
        db,
        version=settings.contract_version,
        strategy=settings.indexing_strategy,
        address=settings.marketplace_address,
    )


def _transaction_query(
    *,
    seller: Annotated[str | None, Query(description="Seller address")] = None,
    buyer: Annotated[str | None, Query(description="Buyer address")] = None,
    token_id: Annotated[int | None, Query(ge=0, description="Land token id")] = None,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> TransactionQuery:
    return TransactionQuery(
        seller=seller, buyer=buyer, token_id=token_id, limit=limit, offset=offset
    )


@app.get(
    "/config",
    response_model=schemas.MarketplaceConfigV1 | schemas.MarketplaceConfigV2,
    tags=["marketplace"],
)
def get_config(service: MarketplaceStatsService = Depends(_stats_service)):
    """Current marketplace configuration; defaults when nothing was indexed yet."""

    return service.get_config()


@app.get("/transactions", response_model=schemas.TransactionList, tags=["transactions"])
def list_transactions(
    *,
    query: TransactionQuery = Depends(_transaction_query),
    service: MarketplaceStatsService = Depends(_stats_service),
):
    """List trades, newest first."""

    return service.list_transactions(query)


@app.get(
    "/transactions/{transaction_id}",
    response_model=schemas.TransactionV1 | schemas.TransactionV2,
    tags=["transactions"],
)
def get_transaction(
    transaction_id: str, service: MarketplaceStatsService = Depends(_stats_service)
):
    transaction = service.get_transaction(transaction_id)
    if transaction is None:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return transaction


@app.get("/stats/{window}", response_model=schemas.BucketList, tags=["stats"])
def list_stats(
    window: Annotated[str, Path(pattern="^(hour|day|month)$")],
    start: Annotated[int | None, Query(ge=0, description="Earliest bucket start (unix seconds)")] = None,
    end: Annotated[int | None, Query(ge=0, description="Latest bucket start (unix seconds)")] = None,
    limit: Annotated[int, Query(ge=1, le=1000)] = 100,
    service: MarketplaceStatsService = Depends(_stats_service),
):
    """Hourly, daily or monthly trade statistics ordered by bucket start."""

    return service.list_buckets(window, start=start, end=end, limit=limit)


@app.get("/status", response_model=schemas.IndexerStatus, tags=["system"])
def indexer_status(service: MarketplaceStatsService = Depends(_stats_service)):
    """Checkpoint of the indexer writing this projection."""

    return service.indexer_status()
