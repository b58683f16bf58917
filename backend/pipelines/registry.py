from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from loguru import logger
from sqlalchemy.orm import Session

from landverse.core.config import ContractVersion, IndexingStrategy
from landverse.repositories import EntityStore, MarketplaceConfigRepository, models_for

from . import event_log, projection_v1, projection_v2
from .context import HandlerContext
from .dispatch import EventDispatcher


class UnknownPipelineError(LookupError):
    """Raised when no pipeline exists for a contract version and strategy."""


@dataclass(frozen=True, slots=True)
class IndexingPipeline:
    """One selectable way of indexing one contract version."""

    version: ContractVersion
    strategy: IndexingStrategy
    dispatcher: EventDispatcher

    @property
    def name(self) -> str:
        return self.dispatcher.name

    def bind(self, session: Session) -> HandlerContext:
        store = EntityStore(session)
        config = None
        if self.strategy is IndexingStrategy.PROJECTION:
            config = MarketplaceConfigRepository(store, models_for(self.version).config)
        return HandlerContext(store=store, config=config)

    def process(self, events: Iterable[Any], context: HandlerContext) -> int:
        """Dispatch events in canonical order and return how many had a route."""

        ordered = sorted(events, key=lambda event: event.envelope.sort_key)
        handled = 0
        for event in ordered:
            if self.dispatcher.dispatch(event, context):
                handled += 1
        return handled


_PIPELINES: dict[tuple[ContractVersion, IndexingStrategy], IndexingPipeline] = {
    (ContractVersion.V1, IndexingStrategy.PROJECTION): IndexingPipeline(
        ContractVersion.V1, IndexingStrategy.PROJECTION, projection_v1.DISPATCHER
    ),
    (ContractVersion.V2, IndexingStrategy.PROJECTION): IndexingPipeline(
        ContractVersion.V2, IndexingStrategy.PROJECTION, projection_v2.DISPATCHER
    ),
    (ContractVersion.V1, IndexingStrategy.EVENT_LOG): IndexingPipeline(
        ContractVersion.V1, IndexingStrategy.EVENT_LOG, event_log.V1_DISPATCHER
    ),
    (ContractVersion.V2, IndexingStrategy.EVENT_LOG): IndexingPipeline(
        ContractVersion.V2, IndexingStrategy.EVENT_LOG, event_log.V2_DISPATCHER
    ),
}


def get_pipeline(
    version: ContractVersion | str, strategy: IndexingStrategy | str
) -> IndexingPipeline:
    try:
        key = (ContractVersion(version), IndexingStrategy(strategy))
    except ValueError as exc:
        raise UnknownPipelineError(str(exc)) from exc
    pipeline = _PIPELINES.get(key)
    if pipeline is None:
        raise UnknownPipelineError(f"No pipeline registered for {key[0].value}/{key[1].value}")
    logger.debug("Selected pipeline {}", pipeline.name)
    return pipeline


def available_pipelines() -> list[IndexingPipeline]:
    return list(_PIPELINES.values())


__all__ = ["IndexingPipeline", "UnknownPipelineError", "available_pipelines", "get_pipeline"]
