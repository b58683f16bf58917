from __future__ import annotations

from dataclasses import dataclass

from landverse.repositories import EntityStore, MarketplaceConfigRepository


@dataclass(slots=True)
class HandlerContext:
    """State handed to every event handler invocation."""

    store: EntityStore
    config: MarketplaceConfigRepository | None = None

    def require_config(self) -> MarketplaceConfigRepository:
        if self.config is None:
            raise RuntimeError("This pipeline was bound without a configuration accessor")
        return self.config
