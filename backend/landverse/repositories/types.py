"""Per-version entity families shared by the projections and the read side."""

from __future__ import annotations

from dataclasses import dataclass

from landverse.core.config import ContractVersion
from landverse.models import (
    MarketplaceConfig,
    MarketplaceConfigV2,
    Transaction,
    TransactionDayData,
    TransactionDayDataV2,
    TransactionHourData,
    TransactionHourDataV2,
    TransactionMonthData,
    TransactionMonthDataV2,
    TransactionV2,
)


@dataclass(frozen=True, slots=True)
class ProjectionModels:
    """Entity classes making up one contract version's stateful projection."""

    config: type
    transaction: type
    hour: type
    day: type
    month: type

    def bucket_model(self, window: str) -> type:
        try:
            return {"hour": self.hour, "day": self.day, "month": self.month}[window]
        except KeyError:
            raise ValueError(f"Unknown bucket window '{window}'") from None


V1_MODELS = ProjectionModels(
    config=MarketplaceConfig,
    transaction=Transaction,
    hour=TransactionHourData,
    day=TransactionDayData,
    month=TransactionMonthData,
)

V2_MODELS = ProjectionModels(
    config=MarketplaceConfigV2,
    transaction=TransactionV2,
    hour=TransactionHourDataV2,
    day=TransactionDayDataV2,
    month=TransactionMonthDataV2,
)


def models_for(version: ContractVersion | str) -> ProjectionModels:
    if ContractVersion(version) is ContractVersion.V1:
        return V1_MODELS
    return V2_MODELS


__all__ = ["ProjectionModels", "V1_MODELS", "V2_MODELS", "models_for"]
