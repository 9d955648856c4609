"""Ping-pong data contracts.

Pydantic models for everything the decision engine persists or journals.

All contracts follow these invariants:
- schema_version is required on every model
- Human amounts/prices use Decimal (not float); base-unit amounts use int
- Strict enums for direction/reason/outcome
- No extra fields allowed (extra='forbid'), instances are frozen
"""

from pingpong.contracts.cycle_report import CycleReport
from pingpong.contracts.order import Order
from pingpong.contracts.profit import ProfitRecord
from pingpong.contracts.token import TokenInfo
from pingpong.contracts.types import (
    CycleOutcome,
    DecisionReason,
    Direction,
    ExecutionStatus,
    OrderType,
)

__all__ = [
    "CycleOutcome",
    "CycleReport",
    "DecisionReason",
    "Direction",
    "ExecutionStatus",
    "Order",
    "OrderType",
    "ProfitRecord",
    "TokenInfo",
]
