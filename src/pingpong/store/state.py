"""Store state and pure mutators.

StoreState is an immutable snapshot. Every change is a Mutator: a pure
function from one snapshot to the next, committed atomically by StateStore.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pingpong.contracts import Order


@dataclass(frozen=True)
class StrategyStatus:
    """Strategy status and the external signals it carries.

    should_execute: user forced execution of the open order.
    should_reset: user requested re-anchoring at the next cycle.
    reset_at: ms timestamp of the last completed reset, journaled with the orders.
    """

    value: str = "idle"
    should_execute: bool = False
    should_reset: bool = False
    reset_at: int | None = None


@dataclass(frozen=True)
class StoreState:
    """Snapshot of all orders (by id, insertion-ordered) and the strategy status."""

    orders: dict[str, Order] = field(default_factory=dict)
    status: StrategyStatus = field(default_factory=StrategyStatus)

    def orders_for(self, strategy_id: str) -> list[Order]:
        """Orders of one strategy instance, in insertion order."""
        return [o for o in self.orders.values() if o.strategy_id == strategy_id]


Mutator = Callable[[StoreState], StoreState]


def add_order(order: Order) -> Mutator:
    """Append a new open order.

    Rejects duplicate ids and a second open order for the same strategy.
    """

    def mutate(state: StoreState) -> StoreState:
        if order.id in state.orders:
            raise ValueError(f"order {order.id} already exists")
        if any(o.is_open for o in state.orders_for(order.strategy_id)):
            raise ValueError(f"strategy {order.strategy_id} already has an open order")
        return replace(state, orders={**state.orders, order.id: order})

    return mutate


def mark_order_executed(order_id: str, out_amount_int: int, ts: int) -> Mutator:
    """Stamp an open order as executed with the received out-amount."""

    def mutate(state: StoreState) -> StoreState:
        order = state.orders.get(order_id)
        if order is None:
            raise KeyError(f"order {order_id} not found")
        executed = order.mark_executed(out_amount_int, ts)
        return replace(state, orders={**state.orders, order_id: executed})

    return mutate


def update_status(**changes: object) -> Mutator:
    """Replace fields of the strategy status, e.g. ``update_status(value="running")``."""

    def mutate(state: StoreState) -> StoreState:
        return replace(state, status=replace(state.status, **changes))

    return mutate


def force_execute() -> Mutator:
    """Signal: execute the open order at the next evaluation regardless of price."""
    return update_status(should_execute=True)


def request_reset() -> Mutator:
    """Signal: re-capture anchors at the start of the next cycle."""
    return update_status(should_reset=True)
