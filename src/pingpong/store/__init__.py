"""Order ledger state: immutable snapshots, pure mutators, serialized commits."""

from pingpong.store.state import (
    Mutator,
    StoreState,
    StrategyStatus,
    add_order,
    force_execute,
    mark_order_executed,
    request_reset,
    update_status,
)
from pingpong.store.store import StateStore

__all__ = [
    "Mutator",
    "StateStore",
    "StoreState",
    "StrategyStatus",
    "add_order",
    "force_execute",
    "mark_order_executed",
    "request_reset",
    "update_status",
]
