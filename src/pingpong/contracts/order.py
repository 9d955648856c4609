"""Order contract.

One target-price order per cycle of the ping-pong strategy.
Producer: order factory (create_order)
Consumer: StateStore ledger, decision engine, journal

An Order is frozen. The only change ever applied to it is execution,
expressed as mark_executed() returning a new instance.
"""

from __future__ import annotations

from decimal import Decimal  # noqa: TC003 - used at runtime in validators
from typing import Annotated

from pydantic import Field, field_validator, model_validator

from pingpong.contracts.base import ContractBase, parse_decimal
from pingpong.contracts.types import Direction, OrderType  # noqa: TC001 - used at runtime


class Order(ContractBase):
    """A target-price swap order.

    Price semantics depend on direction:
    - BUY: price is in-per-out (A paid per B received); lower is better.
    - SELL: price is out-per-in (A received per B sold); higher is better.
    """

    id: str = Field(min_length=1, description="Order id, the runtime id of the creating cycle")
    strategy_id: str = Field(min_length=1, description="Owning strategy instance")
    direction: Direction = Field(description="buy or sell")
    type: OrderType = Field(default=OrderType.TARGET_PRICE, description="Order type tag")

    size_int: int = Field(gt=0, description="Input amount in base units")
    size: Annotated[Decimal, Field(description="Input amount in human units")] = Field()

    in_token_address: str = Field(min_length=1)
    out_token_address: str = Field(min_length=1)
    in_token_symbol: str = Field(default="n/a")
    out_token_symbol: str = Field(default="n/a")
    in_token_decimals: int = Field(ge=0)
    out_token_decimals: int = Field(ge=0)

    price: Annotated[Decimal, Field(description="Target price, see class docstring")] = Field()
    desired_out_amount: Annotated[
        Decimal, Field(description="Out-amount threshold (human units) including target profit")
    ] = Field()
    slippage_bps: int = Field(ge=0, description="Slippage tolerance in basis points")

    is_executed: bool = Field(default=False)
    out_amount_int: int | None = Field(default=None, gt=0, description="Received base units")

    created_at: int = Field(description="Creation timestamp (ms)")
    updated_at: int = Field(description="Last update timestamp (ms)")
    executed_at: int | None = Field(default=None, description="Execution timestamp (ms)")

    @field_validator("size", "price", "desired_out_amount", mode="before")
    @classmethod
    def parse_decimal_fields(cls, v: object) -> Decimal:
        """Parse Decimal fields."""
        return parse_decimal(v)

    @model_validator(mode="after")
    def check_execution_fields(self) -> Order:
        """Executed orders carry an out-amount and timestamp; open orders carry neither."""
        if self.is_executed and (self.out_amount_int is None or self.executed_at is None):
            raise ValueError("executed order requires out_amount_int and executed_at")
        if not self.is_executed and (self.out_amount_int is not None or self.executed_at is not None):
            raise ValueError("open order cannot have out_amount_int or executed_at")
        if self.in_token_address == self.out_token_address:
            raise ValueError("in and out token must differ")
        return self

    @property
    def is_open(self) -> bool:
        """Whether the order still waits for execution."""
        return not self.is_executed

    def mark_executed(self, out_amount_int: int, ts: int) -> Order:
        """Return a copy stamped with the received out-amount and execution time."""
        if self.is_executed:
            raise ValueError(f"order {self.id} is already executed")
        return self.model_validate(
            {
                **self.model_dump(),
                "is_executed": True,
                "out_amount_int": out_amount_int,
                "executed_at": ts,
                "updated_at": ts,
            }
        )
