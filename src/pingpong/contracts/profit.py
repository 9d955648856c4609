"""ProfitRecord contract.

Profit of one executed order relative to the recent out-amount in the same
direction. A buy opens a position, so only unrealized fields are non-zero;
a sell closes the round trip, so only realized fields are non-zero.
"""

from __future__ import annotations

from decimal import Decimal  # noqa: TC003 - used at runtime in validators
from typing import Annotated

from pydantic import Field, field_validator

from pingpong.contracts.base import ContractBase, parse_decimal

_ZERO = Decimal("0")


class ProfitRecord(ContractBase):
    """Realized and unrealized profit of an executed order."""

    profit: Annotated[Decimal, Field(description="Realized profit (human units)")] = _ZERO
    profit_int: int = Field(default=0, description="Realized profit (base units)")
    profit_percent: Annotated[Decimal, Field(description="Realized profit percent")] = _ZERO
    unrealized_profit: Annotated[Decimal, Field(description="Unrealized profit (human)")] = _ZERO
    unrealized_profit_int: int = Field(default=0, description="Unrealized profit (base units)")
    unrealized_profit_percent: Annotated[
        Decimal, Field(description="Unrealized profit percent")
    ] = _ZERO

    @field_validator(
        "profit",
        "profit_percent",
        "unrealized_profit",
        "unrealized_profit_percent",
        mode="before",
    )
    @classmethod
    def parse_decimal_fields(cls, v: object) -> Decimal:
        """Parse Decimal fields."""
        return parse_decimal(v)
