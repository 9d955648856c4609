"""Execution decision and profit engine.

Given an open order and a live route, decide whether to execute and compute
expected, realized and unrealized profit. Everything here except
fetch_best_route is pure.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, localcontext
from typing import TYPE_CHECKING

from pingpong.contracts import DecisionReason, Direction, ProfitRecord
from pingpong.errors import NoRouteFoundError
from pingpong.strategy.order_factory import route_price
from pingpong.units import PRICE_CONTEXT, to_decimal_amount

if TYPE_CHECKING:
    from pingpong.aggregator.base import QuoteSource, Route
    from pingpong.contracts import Order

logger = logging.getLogger(__name__)

_HUNDRED = Decimal("100")


@dataclass(frozen=True)
class ExecutionDecision:
    """Whether to execute, and why."""

    value: bool
    reason: DecisionReason

    @classmethod
    def initial(cls, forced: bool) -> ExecutionDecision:
        """Starting decision: forced by the user, or the default (don't execute)."""
        if forced:
            return cls(value=True, reason=DecisionReason.FORCED_BY_USER)
        return cls(value=False, reason=DecisionReason.DEFAULT)


@dataclass(frozen=True)
class Evaluation:
    """Evaluation of an open order against a live route."""

    decision: ExecutionDecision
    route: Route
    live_out_amount: Decimal
    live_price: Decimal
    recent_out_amount_int: int
    recent_out_amount: Decimal
    expected_profit_percent: Decimal


def percent_change(new: Decimal, base: Decimal) -> Decimal:
    """(new - base) / base * 100."""
    with localcontext(PRICE_CONTEXT):
        return (new - base) / base * _HUNDRED


def price_matches(order: Order, live_price: Decimal) -> bool:
    """Whether the live price is at least as good as the order's target price."""
    if order.direction == Direction.BUY:
        return live_price <= order.price
    return live_price >= order.price


def decide(order: Order, live_price: Decimal, *, forced: bool) -> ExecutionDecision:
    """Execution decision for ``order`` at ``live_price``.

    A price match wins over the forced flag as the recorded reason.
    """
    if price_matches(order, live_price):
        return ExecutionDecision(value=True, reason=DecisionReason.PRICE_MATCH)
    return ExecutionDecision.initial(forced)


async def fetch_best_route(quote_source: QuoteSource, order: Order) -> Route:
    """Quote the order's swap at its size and return the best route.

    Raises:
        NoRouteFoundError: the aggregator failed, returned no routes or a zero quote.
    """
    result = await quote_source.compute_routes(
        order.in_token_address,
        order.out_token_address,
        order.size_int,
        order.slippage_bps,
    )
    best = result.best
    if best is None:
        raise NoRouteFoundError(
            "no routes found", order_id=order.id, error=result.error or "empty routes"
        )
    if best.amount_in <= 0 or best.amount_out <= 0:
        raise NoRouteFoundError(
            "route has no liquidity",
            order_id=order.id,
            amount_in=best.amount_in,
            amount_out=best.amount_out,
        )
    return best


def evaluate(
    order: Order,
    route: Route,
    recent_out_amount_int: int,
    *,
    forced: bool = False,
) -> Evaluation:
    """Evaluate ``order`` against a live route.

    Args:
        order: The open order.
        route: Best live route for the order's pair at the order's size.
        recent_out_amount_int: Out-amount of the most recent fill in the order's
            direction, or the configured anchor (base units).
        forced: Whether the user forced execution.
    """
    live_in_amount = to_decimal_amount(route.amount_in, order.in_token_decimals)
    live_out_amount = to_decimal_amount(route.amount_out, order.out_token_decimals)
    live_price = route_price(order.direction, live_in_amount, live_out_amount)

    decision = decide(order, live_price, forced=forced)

    recent_out_amount = to_decimal_amount(recent_out_amount_int, order.out_token_decimals)
    expected_profit_percent = percent_change(live_out_amount, recent_out_amount)

    logger.debug(
        "Order evaluated",
        extra={
            "order_id": order.id,
            "direction": order.direction.value,
            "live_price": live_price,
            "order_price": order.price,
            "should_execute": decision.value,
            "reason": decision.reason.value,
        },
    )

    return Evaluation(
        decision=decision,
        route=route,
        live_out_amount=live_out_amount,
        live_price=live_price,
        recent_out_amount_int=recent_out_amount_int,
        recent_out_amount=recent_out_amount,
        expected_profit_percent=expected_profit_percent,
    )


def compute_profit(
    order: Order,
    out_amount_int: int,
    recent_out_amount_int: int,
) -> ProfitRecord:
    """Profit of an executed order.

    A buy opens a position: profit is unrealized, realized fields are zero.
    A sell closes the round trip: profit is realized, unrealized fields are zero.
    """
    delta_int = out_amount_int - recent_out_amount_int
    delta = to_decimal_amount(delta_int, order.out_token_decimals)
    percent = percent_change(
        to_decimal_amount(out_amount_int, order.out_token_decimals),
        to_decimal_amount(recent_out_amount_int, order.out_token_decimals),
    )

    if order.direction == Direction.BUY:
        return ProfitRecord(
            unrealized_profit=delta,
            unrealized_profit_int=delta_int,
            unrealized_profit_percent=percent,
        )
    return ProfitRecord(
        profit=delta,
        profit_int=delta_int,
        profit_percent=percent,
    )
