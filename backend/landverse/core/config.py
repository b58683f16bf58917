from enum import Enum
from functools import lru_cache
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

from pydantic import AnyUrl, BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ContractVersion(str, Enum):
    V1 = "v1"
    V2 = "v2"


class IndexingStrategy(str, Enum):
    PROJECTION = "projection"
    EVENT_LOG = "event_log"


class NetworkConfig(BaseModel):
    chain_id: int
    rpc_url: str
    explorer_url: str | None = None


def _default_networks() -> dict[str, NetworkConfig]:
    return {
        "bscTestnet": NetworkConfig(
            chain_id=97,
            rpc_url="https://data-seed-prebsc-1-s1.binance.org:8545",
            explorer_url="https://testnet.bscscan.com",
        ),
        "bsc": NetworkConfig(
            chain_id=56,
            rpc_url="https://bsc-dataseed.binance.org",
            explorer_url="https://bscscan.com",
        ),
        "maxiTestnet": NetworkConfig(
            chain_id=898,
            rpc_url="https://rpc-testnet.maxi.network",
            explorer_url="https://testnet.maxi.network",
        ),
        "maxiMainnet": NetworkConfig(
            chain_id=899,
            rpc_url="https://rpc.maxi.network",
            explorer_url="https://mainnet.maxi.network",
        ),
    }


def _ensure_sqlalchemy_postgres_scheme(value: str) -> str:
    if not value.lower().startswith("postgres"):
        return value

    parsed = urlparse(value)
    scheme = parsed.scheme.lower()

    if scheme == "postgres":
        scheme = "postgresql"

    if scheme == "postgresql":
        scheme = "postgresql+psycopg"

    if scheme not in {"postgresql+psycopg", "postgresql+asyncpg"}:
        scheme = "postgresql+psycopg"

    query_params = dict(parse_qsl(parsed.query, keep_blank_values=True))
    query_params.setdefault("target_session_attrs", "read-write")
    new_query = urlencode(query_params, doseq=True)

    normalized = urlunparse(
        parsed._replace(
            scheme=scheme,
            query=new_query,
        )
    )
    return normalized


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    debug: bool = Field(False, description="Enable FastAPI debug mode")
    environment: str = Field(
        default="development",
        description="Runtime environment (development|staging|production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level emitted by the command line tools",
    )
    database_url: AnyUrl | str = Field(
        default="sqlite:///./data/landverse.db",
        description="SQLAlchemy compatible database URL",
    )
    networks: dict[str, NetworkConfig] = Field(
        default_factory=_default_networks,
        description="Known networks keyed by name",
    )
    network: str = Field(
        default="maxiTestnet",
        description="Network the marketplace contract is deployed to",
    )
    rpc_url: AnyUrl | str | None = Field(
        default=None,
        description="Optional override for the active network's RPC endpoint",
    )
    marketplace_address: str | None = Field(
        default=None,
        description="Deployed marketplace contract address",
    )
    contract_version: ContractVersion = Field(
        default=ContractVersion.V2,
        description="Marketplace contract generation being indexed",
    )
    indexing_strategy: IndexingStrategy = Field(
        default=IndexingStrategy.PROJECTION,
        description="Either the stateful projection or the raw per-event log",
    )
    start_block: int = Field(
        default=0,
        description="First block scanned when no checkpoint exists",
        ge=0,
    )
    block_batch_size: int = Field(
        default=1000,
        description="Number of blocks fetched and committed per batch",
        ge=1,
    )
    confirmation_depth: int = Field(
        default=3,
        description="Blocks kept between the chain head and the indexed range",
        ge=0,
    )
    poll_interval_seconds: float = Field(
        default=5.0,
        description="Delay between head polls when following the chain",
        gt=0,
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unsupported LOG_LEVEL '{value}'")
        return level

    @field_validator("database_url", mode="before")
    @classmethod
    def _normalize_postgres_urls(cls, value: Any) -> Any:
        if value is None or not isinstance(value, str):
            return value

        if value.startswith("postgresql+psycopg://") or value.startswith(
            "postgresql+asyncpg://"
        ):
            return value

        normalized = value
        if normalized.startswith("postgres://"):
            normalized = "postgresql://" + normalized[len("postgres://") :]

        return normalized

    @field_validator("marketplace_address")
    @classmethod
    def _validate_address(cls, value: str | None) -> str | None:
        if value is None:
            return value
        candidate = value.strip()
        if not candidate:
            return None
        body = candidate[2:] if candidate.lower().startswith("0x") else ""
        if len(body) != 40 or any(char not in "0123456789abcdefABCDEF" for char in body):
            raise ValueError(
                "MARKETPLACE_ADDRESS must be a 0x-prefixed 20 byte hex address"
            )
        return candidate

    @property
    def resolved_database_url(self) -> str:
        return _ensure_sqlalchemy_postgres_scheme(str(self.database_url))

    @property
    def active_network(self) -> NetworkConfig:
        try:
            return self.networks[self.network]
        except KeyError:
            known = ", ".join(sorted(self.networks))
            raise ValueError(f"Unknown network '{self.network}' (known: {known})") from None

    @property
    def resolved_rpc_url(self) -> str:
        if self.rpc_url:
            return str(self.rpc_url)
        return self.active_network.rpc_url

    @property
    def chain_id(self) -> int:
        return self.active_network.chain_id


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
