import argparse
from pathlib import Path

from loguru import logger

from landverse.core.config import ContractVersion, IndexingStrategy, get_settings
from ingestion.service import EventFileSource
from pipelines.index_run import _write_summary, configure_logging, run_indexer
from pipelines.registry import get_pipeline


def parse_args() -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Replay exported marketplace events")
    parser.add_argument("path", type=Path, help="JSON array or JSON-lines event export")
    parser.add_argument(
        "--version",
        choices=[item.value for item in ContractVersion],
        default=settings.contract_version.value,
        help="Contract generation the export was taken from",
    )
    parser.add_argument(
        "--strategy",
        choices=[item.value for item in IndexingStrategy],
        default=settings.indexing_strategy.value,
        help="Stateful projection or raw per-event log",
    )
    parser.add_argument(
        "--from-block",
        type=int,
        default=None,
        help="Skip events before this block (defaults to the stored checkpoint)",
    )
    parser.add_argument("--to-block", type=int, default=None, help="Stop after this block")
    parser.add_argument(
        "--summary-path",
        type=Path,
        default=None,
        help="Write JSON summary to the specified path",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    settings = get_settings()
    configure_logging(settings.log_level)

    pipeline = get_pipeline(args.version, args.strategy)
    source = EventFileSource.from_path(args.path, pipeline.version)
    if not source.events:
        logger.warning("No events found in {}", args.path)
        return

    # Without a checkpoint, start at the first exported block rather than scanning from zero.
    first_block = source.events[0].envelope.block_number
    replay_settings = settings.model_copy(
        update={"start_block": max(settings.start_block, first_block)}
    )
    summary = run_indexer(
        replay_settings,
        source,
        pipeline,
        from_block=args.from_block,
        to_block=args.to_block,
        confirmation_depth=0,
    )
    if args.summary_path:
        _write_summary(args.summary_path, summary)
        logger.info("Wrote replay summary to {}", args.summary_path)


if __name__ == "__main__":
    main()
