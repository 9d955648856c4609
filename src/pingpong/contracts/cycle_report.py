"""CycleReport contract.

Journaled outcome of one run-loop cycle, for audit and the host scheduler.
Producer: PingPongStrategy.run()
Consumer: host scheduler, CLI summary, logs
"""

from __future__ import annotations

from decimal import Decimal  # noqa: TC003 - used at runtime in validators
from typing import Annotated

from pydantic import Field, field_validator

from pingpong.contracts.base import ContractBase, parse_optional_decimal
from pingpong.contracts.profit import ProfitRecord  # noqa: TC001 - used at runtime
from pingpong.contracts.types import CycleOutcome, DecisionReason  # noqa: TC001
from pingpong.errors import ErrorKind  # noqa: TC001 - used at runtime in Pydantic


class CycleReport(ContractBase):
    """Outcome of one cycle.

    A failed cycle carries error_kind and error; other fields are filled as
    far as the cycle got.
    """

    runtime_id: str = Field(description="Cycle identifier")
    strategy_id: str = Field(description="Strategy instance")
    outcome: CycleOutcome = Field(description="executed, skipped or failed")
    ts: int = Field(description="Cycle end timestamp (ms)")

    order_id: str | None = Field(default=None, description="Order evaluated this cycle")
    order_created: bool = Field(default=False, description="Order was created this cycle")
    reason: DecisionReason | None = Field(default=None, description="Execution decision reason")
    live_price: Annotated[Decimal | None, Field(description="Live route price")] = None
    expected_profit_percent: Annotated[
        Decimal | None, Field(description="Live out-amount vs recent out-amount, percent")
    ] = None
    profit: ProfitRecord | None = Field(default=None, description="Set when executed")

    error_kind: ErrorKind | None = Field(default=None)
    error: str | None = Field(default=None)

    @field_validator("live_price", "expected_profit_percent", mode="before")
    @classmethod
    def parse_decimal_fields(cls, v: object) -> Decimal | None:
        """Parse optional Decimal fields."""
        return parse_optional_decimal(v)

    @property
    def is_failed(self) -> bool:
        """Whether the cycle ended with an error."""
        return self.outcome == CycleOutcome.FAILED
