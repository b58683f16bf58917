from datetime import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, PlainSerializer

# uint256 values exceed JSON's safe integer range; decimals keep every digit.
BigIntStr = Annotated[int, PlainSerializer(lambda value: str(value), return_type=str)]
DecimalStr = Annotated[
    Decimal, PlainSerializer(lambda value: format(value, "f"), return_type=str)
]


class MarketplaceConfigV1(BaseModel):
    id: str
    total_fee_percent: BigIntStr
    platform_fee_percent: BigIntStr
    partner_fee_percent: BigIntStr
    minimum_trade_price: BigIntStr
    paused: bool

    model_config = {"from_attributes": True}


class MarketplaceConfigV2(BaseModel):
    id: str
    fee_percentage: BigIntStr
    fixed_fee: BigIntStr
    minimum_trade_price: BigIntStr
    paused: bool

    model_config = {"from_attributes": True}


class TransactionBase(BaseModel):
    id: str
    seller: str
    buyer: str
    token_id: BigIntStr
    amount: DecimalStr
    price: DecimalStr
    total_fee: DecimalStr
    is_buy_limit: bool
    block_number: int
    block_timestamp: int
    transaction_hash: str

    model_config = {"from_attributes": True}


class TransactionV1(TransactionBase):
    price_after_fee: DecimalStr
    platform_fee: DecimalStr
    partner_fee: DecimalStr


class TransactionV2(TransactionBase):
    nft_to: str
    net_amount: DecimalStr
    trading_fee: DecimalStr
    fixed_fee: DecimalStr


class TransactionList(BaseModel):
    total: int
    items: list[TransactionV1] | list[TransactionV2]


class BucketBase(BaseModel):
    id: str
    start_unix_time: int
    total_amount: BigIntStr
    total_price: DecimalStr
    total_price_after_fee: DecimalStr
    total_fee: DecimalStr
    total_transaction: int

    model_config = {"from_attributes": True}


class BucketV1(BucketBase):
    total_platform_fee: DecimalStr
    total_partner_fee: DecimalStr


class BucketV2(BucketBase):
    total_trading_fee: DecimalStr
    total_fixed_fee: DecimalStr


class BucketList(BaseModel):
    window: str
    items: list[BucketV1] | list[BucketV2]


class IndexerStatus(BaseModel):
    cursor_id: str
    contract_version: str
    indexing_strategy: str
    last_indexed_block: int | None = None
    updated_at: datetime | None = None
