from __future__ import annotations

from typing import Callable, Mapping

from loguru import logger

from landverse.domain import MarketplaceEvent

from .context import HandlerContext

EventHandler = Callable[[MarketplaceEvent, HandlerContext], None]


class EventDispatcher:
    """Route typed events to their handler, one event at a time.

    Routes are keyed by event class. Events without a route are ignored.
    """

    def __init__(self, name: str, handlers: Mapping[type, EventHandler]) -> None:
        self.name = name
        self._handlers = dict(handlers)

    @property
    def event_types(self) -> tuple[type, ...]:
        return tuple(self._handlers)

    def handles(self, event_type: type) -> bool:
        return event_type in self._handlers

    def dispatch(self, event: MarketplaceEvent, context: HandlerContext) -> bool:
        handler = self._handlers.get(type(event))
        if handler is None:
            logger.debug("{} has no route for {}", self.name, type(event).__name__)
            return False
        logger.debug(
            "{} dispatching {} at block {} log {}",
            self.name,
            type(event).__name__,
            event.envelope.block_number,
            event.envelope.log_index,
        )
        handler(event, context)
        return True
