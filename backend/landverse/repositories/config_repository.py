"""Lazily initialised access to the marketplace configuration singleton."""

from __future__ import annotations

from typing import Generic, TypeVar

from loguru import logger

from landverse.models import CONFIG_SINGLETON_ID, MarketplaceConfig, MarketplaceConfigV2

from .entity_store import EntityStore

ConfigT = TypeVar("ConfigT", MarketplaceConfig, MarketplaceConfigV2)

_DEFAULTS: dict[type, dict[str, object]] = {
    MarketplaceConfig: {
        "total_fee_percent": 0,
        "platform_fee_percent": 0,
        "partner_fee_percent": 0,
        "minimum_trade_price": 0,
        "paused": False,
    },
    MarketplaceConfigV2: {
        "fee_percentage": 0,
        "fixed_fee": 0,
        "minimum_trade_price": 0,
        "paused": False,
    },
}


class MarketplaceConfigRepository(Generic[ConfigT]):
    """Load-or-default accessor handed to every projection handler."""

    def __init__(self, store: EntityStore, model: type[ConfigT]) -> None:
        if model not in _DEFAULTS:
            raise TypeError(f"{model.__name__} is not a marketplace configuration entity")
        self._store = store
        self._model = model

    @property
    def model(self) -> type[ConfigT]:
        return self._model

    def get_or_init(self) -> ConfigT:
        config = self._store.load(self._model, CONFIG_SINGLETON_ID)
        if config is not None:
            return config

        logger.debug("Initialising {} singleton with defaults", self._model.__name__)
        config = self._model(**default_config_values(self._model))
        return self._store.save(config)

    def save(self, config: ConfigT) -> ConfigT:
        return self._store.save(config)


def default_config_values(model: type) -> dict[str, object]:
    """Field values of a configuration singleton before any event touched it."""

    return {"id": CONFIG_SINGLETON_ID, **_DEFAULTS[model]}
