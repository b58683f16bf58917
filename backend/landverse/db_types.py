"""Column types that keep on-chain integers and token amounts exact."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from sqlalchemy import String
from sqlalchemy.types import TypeDecorator


class BigUint(TypeDecorator):
    """uint256 values persisted as base-10 text."""

    impl = String(80)
    cache_ok = True

    def process_bind_param(self, value: Any, dialect) -> str | None:
        if value is None:
            return None
        integer = int(value)
        if integer < 0:
            raise ValueError(f"BigUint columns cannot hold negative values: {integer}")
        return str(integer)

    def process_result_value(self, value: Any, dialect) -> int | None:
        if value is None:
            return None
        return int(value)


class TokenAmount(TypeDecorator):
    """Token-scaled decimals persisted as plain decimal text (never floats)."""

    impl = String(120)
    cache_ok = True

    def process_bind_param(self, value: Any, dialect) -> str | None:
        if value is None:
            return None
        if isinstance(value, float):
            raise TypeError("TokenAmount columns only accept Decimal or int values")
        return format(Decimal(value), "f")

    def process_result_value(self, value: Any, dialect) -> Decimal | None:
        if value is None:
            return None
        return Decimal(value)
