"""Ping-pong decision engine.

- PingPongConfig: frozen strategy configuration and captured anchors
- OrderLedger: read-only queries over the order history
- create_order: next target-price order from the history
- evaluate / compute_profit: execution decision and profit
- PingPongStrategy: per-cycle run loop
"""

from pingpong.strategy.config import PingPongConfig, TokenAnchor
from pingpong.strategy.decision import (
    Evaluation,
    ExecutionDecision,
    compute_profit,
    decide,
    evaluate,
    fetch_best_route,
)
from pingpong.strategy.ledger import OrderLedger, recent_out_amount_int
from pingpong.strategy.order_factory import create_order, route_price
from pingpong.strategy.pingpong import PingPongStrategy

__all__ = [
    "Evaluation",
    "ExecutionDecision",
    "OrderLedger",
    "PingPongConfig",
    "PingPongStrategy",
    "TokenAnchor",
    "compute_profit",
    "create_order",
    "decide",
    "evaluate",
    "fetch_best_route",
    "recent_out_amount_int",
    "route_price",
]
