"""Contract enums.

Closed string enums; every decision point handles each member explicitly.
"""

from enum import Enum


class Direction(str, Enum):
    """Order direction. Buy swaps token A into B, sell swaps B back into A."""

    BUY = "buy"
    SELL = "sell"

    @property
    def opposite(self) -> "Direction":
        return Direction.SELL if self is Direction.BUY else Direction.BUY


class OrderType(str, Enum):
    """Order type. Orders execute when the live price reaches a target price."""

    TARGET_PRICE = "target-price"


class DecisionReason(str, Enum):
    """Why an order was (or was not) selected for execution."""

    DEFAULT = "default"
    PRICE_MATCH = "price-match"
    FORCED_BY_USER = "forced-by-user"


class CycleOutcome(str, Enum):
    """Terminal state of one run-loop cycle."""

    EXECUTED = "executed"
    SKIPPED = "skipped"
    FAILED = "failed"


class ExecutionStatus(str, Enum):
    """Status reported by the aggregator after an execution attempt."""

    SUCCESS = "success"
    FAILED = "failed"
