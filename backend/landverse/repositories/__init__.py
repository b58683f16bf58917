"""Repository abstractions for database interactions."""

from .config_repository import MarketplaceConfigRepository, default_config_values
from .cursor_repository import CursorRepository, cursor_key
from .entity_store import EntityStore
from .marketplace_repository import MarketplaceRepository
from .types import ProjectionModels, V1_MODELS, V2_MODELS, models_for

__all__ = [
    "EntityStore",
    "MarketplaceConfigRepository",
    "CursorRepository",
    "MarketplaceRepository",
    "ProjectionModels",
    "V1_MODELS",
    "V2_MODELS",
    "cursor_key",
    "default_config_values",
    "models_for",
]
