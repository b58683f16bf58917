from __future__ import annotations

import argparse
import json
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, ContextManager, Protocol

from loguru import logger

from landverse.core.config import ContractVersion, IndexingStrategy, Settings, get_settings
from landverse.db import init_db
from landverse.repositories import CursorRepository, EntityStore, cursor_key
from ingestion.client import MarketplaceLogClient
from ingestion.service import session_scope

from .registry import IndexingPipeline, get_pipeline


class EventSource(Protocol):
    def latest_block(self) -> int: ...

    def fetch_events(self, from_block: int, to_block: int) -> list[Any]: ...


@dataclass(slots=True)
class IndexRunSummary:
    pipeline: str
    cursor_id: str
    first_block: int | None = None
    last_block: int | None = None
    batches: int = 0
    events_seen: int = 0
    events_handled: int = 0

    @property
    def blocks(self) -> int:
        if self.first_block is None or self.last_block is None:
            return 0
        return self.last_block - self.first_block + 1

    def record_batch(self, from_block: int, to_block: int, seen: int, handled: int) -> None:
        if self.first_block is None:
            self.first_block = from_block
        self.last_block = to_block
        self.batches += 1
        self.events_seen += seen
        self.events_handled += handled

    def to_dict(self) -> dict[str, object]:
        return {
            "pipeline": self.pipeline,
            "cursor_id": self.cursor_id,
            "first_block": self.first_block,
            "last_block": self.last_block,
            "blocks": self.blocks,
            "batches": self.batches,
            "events_seen": self.events_seen,
            "events_handled": self.events_handled,
        }


def configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level)


def _last_indexed_block(
    session_factory: Callable[[], ContextManager[Any]], cursor_id: str
) -> int | None:
    with session_factory() as session:
        return CursorRepository(EntityStore(session)).last_indexed_block(cursor_id)


def _run_batch(
    session_factory: Callable[[], ContextManager[Any]],
    source: EventSource,
    pipeline: IndexingPipeline,
    cursor_id: str,
    from_block: int,
    to_block: int,
) -> tuple[int, int]:
    """Apply one block range and its checkpoint inside a single transaction."""

    with session_factory() as session:
        context = pipeline.bind(session)
        try:
            events = source.fetch_events(from_block, to_block)
            handled = pipeline.process(events, context)
            CursorRepository(context.store).advance(cursor_id, to_block)
        except Exception:
            logger.exception(
                "Batch {}..{} failed for {}; rolling back", from_block, to_block, pipeline.name
            )
            raise
    return len(events), handled


def run_indexer(
    settings: Settings,
    source: EventSource,
    pipeline: IndexingPipeline | None = None,
    *,
    address: str | None = None,
    from_block: int | None = None,
    to_block: int | None = None,
    follow: bool = False,
    confirmation_depth: int | None = None,
    session_factory: Callable[[], ContextManager[Any]] | None = None,
    init_db_fn: Callable[[], None] = init_db,
    sleep_fn: Callable[[float], None] = time.sleep,
) -> IndexRunSummary:
    pipeline = pipeline or get_pipeline(settings.contract_version, settings.indexing_strategy)

    if session_factory is None:
        init_db_fn()
        session_factory = session_scope

    cursor_id = cursor_key(
        pipeline.version.value,
        pipeline.strategy.value,
        address if address is not None else settings.marketplace_address,
    )
    confirmations = (
        settings.confirmation_depth if confirmation_depth is None else confirmation_depth
    )
    batch_size = settings.block_batch_size

    last_indexed = _last_indexed_block(session_factory, cursor_id)
    if from_block is None:
        next_block = settings.start_block if last_indexed is None else last_indexed + 1
    elif last_indexed is not None and from_block <= last_indexed:
        # Aggregates are not idempotent: indexed blocks are never replayed.
        raise ValueError(
            f"Cursor {cursor_id} already covers block {last_indexed}; "
            f"cannot start at block {from_block}"
        )
    else:
        next_block = from_block

    summary = IndexRunSummary(pipeline=pipeline.name, cursor_id=cursor_id)
    logger.info(
        "Starting {} at block {} (cursor {}, follow={})",
        pipeline.name,
        next_block,
        cursor_id,
        follow,
    )

    while True:
        head = source.latest_block() - confirmations
        target = head if to_block is None else min(head, to_block)

        while next_block <= target:
            batch_end = min(next_block + batch_size - 1, target)
            seen, handled = _run_batch(
                session_factory, source, pipeline, cursor_id, next_block, batch_end
            )
            summary.record_batch(next_block, batch_end, seen, handled)
            logger.info(
                "Indexed blocks {}..{}: {} events, {} handled",
                next_block,
                batch_end,
                seen,
                handled,
            )
            next_block = batch_end + 1

        if not follow or (to_block is not None and next_block > to_block):
            break
        try:
            sleep_fn(settings.poll_interval_seconds)
        except KeyboardInterrupt:
            logger.info("Stopped following the chain head")
            break

    logger.info(
        "Finished {}: {} blocks in {} batches, {} events ({} handled)",
        pipeline.name,
        summary.blocks,
        summary.batches,
        summary.events_seen,
        summary.events_handled,
    )
    return summary


def _write_summary(path: Path, summary: IndexRunSummary) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(summary.to_dict(), indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )


def _parse_args() -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Index marketplace contract events")
    parser.add_argument(
        "--from-block",
        type=int,
        default=None,
        help="First block to index (defaults to the stored checkpoint or START_BLOCK)",
    )
    parser.add_argument(
        "--to-block",
        type=int,
        default=None,
        help="Last block to index (defaults to the confirmed chain head)",
    )
    parser.add_argument(
        "--follow",
        action="store_true",
        help="Keep polling for new blocks after catching up",
    )
    parser.add_argument(
        "--version",
        choices=[item.value for item in ContractVersion],
        default=settings.contract_version.value,
        help="Marketplace contract generation",
    )
    parser.add_argument(
        "--strategy",
        choices=[item.value for item in IndexingStrategy],
        default=settings.indexing_strategy.value,
        help="Stateful projection or raw per-event log",
    )
    parser.add_argument(
        "--summary-path",
        type=Path,
        default=None,
        help="Write JSON summary to the specified path",
    )
    return parser.parse_args()


def main() -> None:
    args = _parse_args()
    settings = get_settings()
    configure_logging(settings.log_level)

    pipeline = get_pipeline(args.version, args.strategy)
    with MarketplaceLogClient(version=pipeline.version) as client:
        summary = run_indexer(
            settings,
            client,
            pipeline,
            address=client.address,
            from_block=args.from_block,
            to_block=args.to_block,
            follow=args.follow,
        )

    if args.summary_path:
        _write_summary(args.summary_path, summary)
        logger.info("Wrote index summary to {}", args.summary_path)


if __name__ == "__main__":
    main()
