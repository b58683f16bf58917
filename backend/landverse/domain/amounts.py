"""Fixed-point helpers for token amounts and fee percentages.

Raw event values are uint256 integers. Token amounts carry 18 decimals and
fee percentages are scaled by 10**8 (a raw ``1_000_000_000`` is 10%). All
arithmetic runs in a dedicated decimal context wide enough for uint256
values plus 18 fractional digits, so nothing is rounded.
"""

from __future__ import annotations

from decimal import Context, Decimal

TOKEN_DECIMALS = 18
TOKEN_SCALE = Decimal(10) ** TOKEN_DECIMALS
FEE_PERCENT_SCALE = Decimal(10) ** 8
# raw percent / (10**8 * 100) is the fraction of the fee
FEE_FRACTION_SCALE = FEE_PERCENT_SCALE * 100

DECIMAL_CONTEXT = Context(prec=120)
ZERO = Decimal(0)


def to_token_amount(raw: int) -> Decimal:
    return DECIMAL_CONTEXT.divide(Decimal(raw), TOKEN_SCALE)


def add(left: Decimal, right: Decimal) -> Decimal:
    return DECIMAL_CONTEXT.add(left, right)


def subtract(left: Decimal, right: Decimal) -> Decimal:
    return DECIMAL_CONTEXT.subtract(left, right)


def multiply(value: Decimal, factor: int | Decimal) -> Decimal:
    return DECIMAL_CONTEXT.multiply(value, Decimal(factor))


def fee_share(total_fee: Decimal, raw_percent: int) -> Decimal:
    """Portion of ``total_fee`` owed to a recipient with ``raw_percent`` of the fee."""

    return DECIMAL_CONTEXT.divide(multiply(total_fee, raw_percent), FEE_FRACTION_SCALE)
