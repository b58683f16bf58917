from __future__ import annotations

import pytest
from pydantic import ValidationError

from landverse.core.config import ContractVersion, IndexingStrategy, Settings


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


def test_defaults():
    settings = _settings()
    assert settings.contract_version is ContractVersion.V2
    assert settings.indexing_strategy is IndexingStrategy.PROJECTION
    assert settings.network == "maxiTestnet"
    assert settings.chain_id == 898
    assert settings.resolved_rpc_url == "https://rpc-testnet.maxi.network"
    assert settings.resolved_database_url.startswith("sqlite:///")
    assert settings.marketplace_address is None


def test_rpc_override_and_network_selection():
    settings = _settings(network="bsc", rpc_url="http://localhost:8545")
    assert settings.chain_id == 56
    assert settings.resolved_rpc_url == "http://localhost:8545"


def test_unknown_network_fails_on_resolution():
    settings = _settings(network="goerli")
    with pytest.raises(ValueError):
        settings.active_network


def test_postgres_urls_use_psycopg_driver():
    settings = _settings(database_url="postgres://user:secret@db:5432/landverse")
    url = settings.resolved_database_url
    assert url.startswith("postgresql+psycopg://user:secret@db:5432/landverse")
    assert "target_session_attrs=read-write" in url


@pytest.mark.parametrize(
    "overrides",
    [
        {"marketplace_address": "0x1234"},
        {"marketplace_address": "1111111111111111111111111111111111111111"},
        {"contract_version": "v3"},
        {"indexing_strategy": "snapshot"},
        {"block_batch_size": 0},
        {"confirmation_depth": -1},
        {"poll_interval_seconds": 0},
        {"log_level": "chatty"},
    ],
)
def test_invalid_values_fail_fast(overrides):
    with pytest.raises(ValidationError):
        _settings(**overrides)


def test_blank_address_means_unset_and_log_level_is_normalised():
    settings = _settings(marketplace_address="  ", log_level="debug")
    assert settings.marketplace_address is None
    assert settings.log_level == "DEBUG"


def test_settings_read_from_environment(monkeypatch):
    monkeypatch.setenv("CONTRACT_VERSION", "v1")
    monkeypatch.setenv("INDEXING_STRATEGY", "event_log")
    monkeypatch.setenv("MARKETPLACE_ADDRESS", "0x" + "Ab" * 20)
    settings = _settings()
    assert settings.contract_version is ContractVersion.V1
    assert settings.indexing_strategy is IndexingStrategy.EVENT_LOG
    assert settings.marketplace_address == "0x" + "Ab" * 20
