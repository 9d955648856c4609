"""Test doubles and builders shared by the ping-pong tests."""

from __future__ import annotations

import itertools
from decimal import Decimal

from pingpong.aggregator.base import Aggregator, ExecutionResult, Route, RouteResult
from pingpong.contracts import Direction, ExecutionStatus, Order, TokenInfo
from pingpong.strategy import PingPongConfig
from pingpong.units import to_decimal_amount

TOKEN_A = TokenInfo(address="TokenAMint1111111111111111111111111111111111", symbol="USDC", decimals=6)
TOKEN_B = TokenInfo(address="TokenBMint1111111111111111111111111111111111", symbol="SOL", decimals=9)

# 10 USDC quoted at 95 SOL (base units)
INITIAL_AMOUNT_INT = 10_000000
INITIAL_QUOTE_OUT = 95_000000000


def make_config(*, anchors: bool = True, **overrides: object) -> PingPongConfig:
    """Config for 10 token A at 1% target profit, anchors optionally captured."""
    fields: dict[str, object] = {
        "tokens_info": (TOKEN_A, TOKEN_B),
        "amount": Decimal("10"),
        "slippage_bps": 50,
        "target_profit_percent": Decimal("1"),
    }
    fields.update(overrides)
    config = PingPongConfig(**fields)  # type: ignore[arg-type]
    if anchors:
        config = config.with_anchors(INITIAL_AMOUNT_INT, INITIAL_QUOTE_OUT)
    return config


def make_order(
    direction: Direction = Direction.BUY,
    *,
    order_id: str = "order-1",
    strategy_id: str = "ping-pong",
    size_int: int = INITIAL_AMOUNT_INT,
    created_at: int = 1,
) -> Order:
    """Open order between TOKEN_A and TOKEN_B with placeholder price fields."""
    in_token, out_token = (TOKEN_A, TOKEN_B) if direction == Direction.BUY else (TOKEN_B, TOKEN_A)
    return Order(
        id=order_id,
        strategy_id=strategy_id,
        direction=direction,
        size_int=size_int,
        size=to_decimal_amount(size_int, in_token.decimals),
        in_token_address=in_token.address,
        out_token_address=out_token.address,
        in_token_symbol=in_token.symbol,
        out_token_symbol=out_token.symbol,
        in_token_decimals=in_token.decimals,
        out_token_decimals=out_token.decimals,
        price=Decimal("1"),
        desired_out_amount=Decimal("1"),
        slippage_bps=50,
        created_at=created_at,
        updated_at=created_at,
    )


def filled_order(
    direction: Direction,
    out_amount_int: int,
    *,
    executed_at: int,
    **kwargs: object,
) -> Order:
    """Executed order, see make_order for the other fields."""
    return make_order(direction, **kwargs).mark_executed(out_amount_int, executed_at)  # type: ignore[arg-type]


class FakeAggregator(Aggregator):
    """Aggregator quoting from a per-pair table.

    quotes[(in, out)] is the amount_out returned for any amount_in, or None to
    report no routes. execute() fills at the current quote unless
    ``execute_status`` says otherwise.
    """

    def __init__(self) -> None:
        self.quotes: dict[tuple[str, str], int | None] = {}
        self.execute_status = ExecutionStatus.SUCCESS
        self.execute_calls: list[dict[str, object]] = []
        self.route_calls: list[tuple[str, str, int, int]] = []
        self._tx = itertools.count(1)

    @property
    def name(self) -> str:
        return "fake"

    def set_quote(self, in_token: TokenInfo, out_token: TokenInfo, amount_out: int | None) -> None:
        self.quotes[(in_token.address, out_token.address)] = amount_out

    async def compute_routes(
        self,
        in_token: str,
        out_token: str,
        amount_in: int,
        slippage_bps: int,
    ) -> RouteResult:
        self.route_calls.append((in_token, out_token, amount_in, slippage_bps))
        amount_out = self.quotes.get((in_token, out_token))
        if amount_out is None:
            return RouteResult(success=False, error="no liquidity")
        return RouteResult(success=True, routes=[Route(amount_in=amount_in, amount_out=amount_out)])

    async def execute(
        self,
        in_token: str,
        out_token: str,
        amount_in: int,
        slippage_bps: int,
        *,
        min_out_amount_int: int | None = None,
        priority_fee_micro_lamports: int | None = None,
    ) -> ExecutionResult:
        self.execute_calls.append(
            {
                "in_token": in_token,
                "out_token": out_token,
                "amount_in": amount_in,
                "slippage_bps": slippage_bps,
                "min_out_amount_int": min_out_amount_int,
                "priority_fee_micro_lamports": priority_fee_micro_lamports,
            }
        )
        if self.execute_status != ExecutionStatus.SUCCESS:
            return ExecutionResult(status=self.execute_status, error="rejected")
        amount_out = self.quotes.get((in_token, out_token))
        if amount_out is None:
            return ExecutionResult(status=ExecutionStatus.FAILED, error="no liquidity")
        return ExecutionResult(
            status=ExecutionStatus.SUCCESS,
            out_amount_int=amount_out,
            tx_id=f"tx-{next(self._tx)}",
        )

    async def close(self) -> None:
        return None


class StepClock:
    """Millisecond clock advancing by ``step`` on every call."""

    def __init__(self, start: int = 1_700_000_000_000, step: int = 1) -> None:
        self._counter = itertools.count(start, step)

    def __call__(self) -> int:
        return next(self._counter)
