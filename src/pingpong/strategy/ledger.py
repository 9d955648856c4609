"""Order ledger: read-only queries over one strategy's order history.

The ledger is a snapshot. It is rebuilt from the store at the start of each
cycle and never updated in place.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pingpong.contracts import Direction, Order

if TYPE_CHECKING:
    from pingpong.strategy.config import PingPongConfig


@dataclass(frozen=True)
class OrderLedger:
    """Open and filled orders of a strategy instance, in insertion order."""

    open_orders: tuple[Order, ...] = ()
    filled_orders: tuple[Order, ...] = ()

    @classmethod
    def from_orders(cls, orders: Iterable[Order], strategy_id: str) -> OrderLedger:
        """Classify the orders belonging to ``strategy_id``."""
        open_orders: list[Order] = []
        filled_orders: list[Order] = []
        for order in orders:
            if order.strategy_id != strategy_id:
                continue
            if order.is_executed:
                filled_orders.append(order)
            else:
                open_orders.append(order)
        return cls(open_orders=tuple(open_orders), filled_orders=tuple(filled_orders))

    @property
    def open_order(self) -> Order | None:
        """The open order, if any (at most one exists)."""
        return self.open_orders[0] if self.open_orders else None

    def last_filled(self) -> Order | None:
        """Most recent filled order overall."""
        return self.filled_orders[-1] if self.filled_orders else None

    def last_filled_in(
        self,
        direction: Direction,
        *,
        executed_after: int | None = None,
    ) -> Order | None:
        """Most recent filled order in ``direction``.

        Args:
            direction: Direction to match.
            executed_after: If set, ignore fills executed at or before this ms timestamp.
        """
        for order in reversed(self.filled_orders):
            if order.direction != direction:
                continue
            if executed_after is not None and (order.executed_at or 0) <= executed_after:
                continue
            return order
        return None

    def next_direction(self) -> Direction:
        """Direction of the next order: opposite of the last fill, buy when none."""
        last = self.last_filled()
        return Direction.BUY if last is None else last.direction.opposite


def recent_out_amount_int(
    ledger: OrderLedger,
    config: PingPongConfig,
    direction: Direction,
    size_int: int | None = None,
) -> int:
    """Baseline out-amount (base units) for an order in ``direction``.

    The out-amount of the most recent fill in the same direction since the last
    reset, falling back to the anchor captured at initialization.

    A buy of ``size_int`` that differs from the size the baseline was earned on
    (compounding) gets the baseline scaled to its size, rounded up, so the
    target keeps the same per-unit improvement. Sell baselines are never scaled.

    Raises:
        MissingAnchorError: no such fill and no anchor captured.
    """
    previous = ledger.last_filled_in(direction, executed_after=config.reset_at)
    if previous is not None and previous.out_amount_int is not None:
        out_amount_int = previous.out_amount_int
        earned_on_int = previous.size_int
    else:
        out_amount_int = config.anchor_out_amount(direction)
        # The sell-side anchor is the in-amount of the anchor quote
        earned_on_int = config.anchor_out_amount(Direction.SELL)

    if direction != Direction.BUY or size_int is None or size_int == earned_on_int:
        return out_amount_int
    return -(-out_amount_int * size_int // earned_on_int)
