"""Order creation: derive the next target-price order from trading history.

Called only when the strategy has no open order. Fails fast; nothing is
persisted unless a complete Order is returned.

Price convention (human units, A = token A, B = token B):
- BUY  (A -> B): price = size_A / desired_B, A paid per B. Execute when live <= target.
- SELL (B -> A): price = desired_A / size_B, A received per B. Execute when live >= target.
Both comparisons read "better than or equal to the target".
"""

from __future__ import annotations

import logging
from decimal import Decimal, localcontext
from typing import TYPE_CHECKING

from pingpong.contracts import Direction, Order, OrderType
from pingpong.errors import ConfigurationError, NoPriorBuyToSellError
from pingpong.strategy.ledger import recent_out_amount_int
from pingpong.units import PRICE_CONTEXT, to_base_units, to_decimal_amount

if TYPE_CHECKING:
    from pingpong.contracts import TokenInfo
    from pingpong.strategy.config import PingPongConfig
    from pingpong.strategy.ledger import OrderLedger

logger = logging.getLogger(__name__)


def route_price(
    direction: Direction,
    in_amount: Decimal,
    out_amount: Decimal,
) -> Decimal:
    """Price of a swap in the direction's convention, from human amounts."""
    with localcontext(PRICE_CONTEXT):
        if direction == Direction.BUY:
            return in_amount / out_amount
        return out_amount / in_amount


def order_size_int(
    direction: Direction,
    config: PingPongConfig,
    ledger: OrderLedger,
    in_token: TokenInfo,
) -> int:
    """Input size (base units) of the next order.

    Buys spend the configured amount of token A, or with compounding the proceeds
    of the most recent sell. Sells spend exactly what the most recent buy received.
    """
    if direction == Direction.SELL:
        previous_buy = ledger.last_filled_in(Direction.BUY)
        if previous_buy is None or not previous_buy.out_amount_int:
            raise NoPriorBuyToSellError("no filled buy order to sell back")
        return previous_buy.out_amount_int

    if config.enable_compounding:
        previous_sell = ledger.last_filled_in(Direction.SELL)
        if previous_sell is not None and previous_sell.out_amount_int:
            return previous_sell.out_amount_int

    size_int = to_base_units(config.amount, in_token.decimals)
    if size_int <= 0:
        raise ConfigurationError("invalid amount", amount=str(config.amount))
    return size_int


def create_order(
    *,
    config: PingPongConfig,
    ledger: OrderLedger,
    runtime_id: str,
    strategy_id: str,
    now_ms: int,
) -> Order:
    """Create the next order for the strategy.

    Raises:
        ConfigurationError: missing tokens/amount, sell without prior buy, no anchor.
        NumericError: amount does not fit the token's decimals.
    """
    direction = ledger.next_direction()
    in_token, out_token = config.token_pair(direction)

    size_int = order_size_int(direction, config, ledger, in_token)
    size = to_decimal_amount(size_int, in_token.decimals)

    baseline_int = recent_out_amount_int(ledger, config, direction, size_int)
    baseline = to_decimal_amount(baseline_int, out_token.decimals)

    with localcontext(PRICE_CONTEXT):
        desired_out_amount = baseline * config.profit_multiplier
    price = route_price(direction, size, desired_out_amount)

    order = Order(
        id=runtime_id,
        strategy_id=strategy_id,
        direction=direction,
        type=OrderType.TARGET_PRICE,
        size_int=size_int,
        size=size,
        in_token_address=in_token.address,
        out_token_address=out_token.address,
        in_token_symbol=in_token.symbol,
        out_token_symbol=out_token.symbol,
        in_token_decimals=in_token.decimals,
        out_token_decimals=out_token.decimals,
        price=price,
        desired_out_amount=desired_out_amount,
        slippage_bps=config.slippage_bps,
        created_at=now_ms,
        updated_at=now_ms,
    )

    logger.info(
        "Order created",
        extra={
            "order_id": order.id,
            "direction": direction.value,
            "size_int": size_int,
            "baseline_out_amount_int": baseline_int,
            "desired_out_amount": desired_out_amount,
            "target_price": price,
        },
    )
    return order
