"""Ping-pong strategy run loop.

One cycle per external tick:

    NoOpenOrder -> Created -> Evaluated -> Executed | Skipped

- No open order: create one from the ledger and commit it.
- Evaluate the open order against the best live route.
- Execute when the decision says so, then commit the fill.

Cycles are not re-entrant. Every cycle ends by calling ``done`` exactly once,
whatever happened, and returns a CycleReport describing the outcome.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

from pingpong.contracts import CycleOutcome, CycleReport, DecisionReason, Direction
from pingpong.errors import (
    ConfigurationError,
    CycleInProgressError,
    ErrorKind,
    ExecutionFailedError,
    NoRouteFoundError,
    PingPongError,
)
from pingpong.store import add_order, mark_order_executed, update_status
from pingpong.strategy.decision import compute_profit, evaluate, fetch_best_route
from pingpong.strategy.ledger import OrderLedger, recent_out_amount_int
from pingpong.strategy.order_factory import create_order
from pingpong.telemetry import StrategyReporter
from pingpong.units import to_base_units

if TYPE_CHECKING:
    from collections.abc import Callable

    from pingpong.aggregator.base import Aggregator
    from pingpong.contracts import Order, ProfitRecord
    from pingpong.store import StateStore, StoreState
    from pingpong.strategy.config import PingPongConfig
    from pingpong.strategy.decision import Evaluation

logger = logging.getLogger(__name__)

# Slippage used for the anchor quote at initialization/reset
ANCHOR_QUOTE_SLIPPAGE_BPS = 50


def now_ms() -> int:
    """Current wall-clock time in milliseconds."""
    return int(time.time() * 1000)


@dataclass
class _CycleProgress:
    """How far the current cycle got, for the final report."""

    order_id: str | None = None
    order_created: bool = False
    evaluation: Evaluation | None = None
    profit: ProfitRecord | None = None


class PingPongStrategy:
    """Alternates buy/sell target-price orders between two tokens.

    Usage:
        strategy = PingPongStrategy(config, aggregator=agg, store=store)
        await strategy.init()
        report = await strategy.run("cycle-1", done=scheduler.on_done)
    """

    id = "ping-pong"
    name = "Ping Pong"
    version = "0.1.0"

    def __init__(
        self,
        config: PingPongConfig,
        *,
        aggregator: Aggregator,
        store: StateStore,
        reporter: StrategyReporter | None = None,
        strategy_id: str | None = None,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        """Initialize strategy.

        Args:
            config: Strategy configuration. Anchors are captured by init().
            aggregator: Route quoting and swap execution.
            store: Shared state store holding the order ledger.
            reporter: Telemetry sink. A private one is created if not provided.
            strategy_id: Strategy instance id (defaults to the class id).
            clock: Millisecond clock, injectable for tests.
        """
        self.config = config
        self.strategy_id = strategy_id or self.id
        self._aggregator = aggregator
        self._store = store
        self._reporter = reporter or StrategyReporter()
        self._clock = clock
        self._cycle_active = False

    # === Initialization ===

    async def init(self) -> None:
        """Validate config, capture anchors and report initial settings.

        Raises:
            ConfigurationError: fewer than two tokens or a non-positive amount.
            NumericError: amount does not fit token A's decimals.
            NoRouteFoundError: the anchor quote failed.
        """
        # A reset restored from the journal keeps hiding the fills before it
        self.config = await self._capture_anchors(
            reset_at=self._store.get_state().status.reset_at
        )

        if self.config.priority_fee_micro_lamports:
            self._reporter.report_priority_fee(self.config.priority_fee_micro_lamports)
        self._reporter.report_auto_slippage(Decimal("0"), self.config.enable_auto_slippage)
        self._reporter.report_desired_profit_percent(self.config.target_profit_percent)

        logger.info(
            "Strategy initialized",
            extra={
                "strategy_id": self.strategy_id,
                "in_anchor_out_amount": self.config.anchor_out_amount(Direction.SELL),
                "out_anchor_out_amount": self.config.anchor_out_amount(Direction.BUY),
            },
        )

    async def _capture_anchors(self, *, reset_at: int | None = None) -> PingPongConfig:
        """Quote token A -> B at the trade amount and return config with new anchors."""
        token_a, token_b = self.config.require_tokens()
        if self.config.amount <= 0:
            raise ConfigurationError("invalid amount", amount=str(self.config.amount))

        amount_int = to_base_units(self.config.amount, token_a.decimals)
        result = await self._aggregator.compute_routes(
            token_a.address,
            token_b.address,
            amount_int,
            ANCHOR_QUOTE_SLIPPAGE_BPS,
        )
        best = result.best
        if best is None or best.amount_out <= 0:
            raise NoRouteFoundError(
                "anchor quote returned no routes", error=result.error or "empty routes"
            )
        return self.config.with_anchors(amount_int, best.amount_out, reset_at=reset_at)

    async def _reset(self) -> None:
        """Re-capture anchors from the market and clear the reset signal."""
        reset_at = self._clock()
        self.config = await self._capture_anchors(reset_at=reset_at)
        await self._store.set_state(update_status(should_reset=False, reset_at=reset_at))
        logger.info(
            "Strategy reset, anchors re-captured",
            extra={"strategy_id": self.strategy_id, "reset_at": reset_at},
        )

    # === Cycle ===

    async def run(
        self,
        runtime_id: str,
        done: Callable[[PingPongStrategy], None] | None = None,
    ) -> CycleReport:
        """Run one cycle.

        Errors never escape: they are logged and reported in the returned
        CycleReport. ``done`` is called exactly once on every path.

        Raises:
            CycleInProgressError: the previous cycle has not finished.
        """
        if self._cycle_active:
            raise CycleInProgressError(f"cycle already running for {self.strategy_id}")
        self._cycle_active = True

        progress = _CycleProgress()
        try:
            report = await self._run_cycle(runtime_id, progress)
        except PingPongError as e:
            report = self._failed(runtime_id, progress, e.kind, e)
        except Exception as e:
            report = self._failed(runtime_id, progress, ErrorKind.UNEXPECTED, e)
        finally:
            self._cycle_active = False
            if done is not None:
                done(self)

        self._reporter.report_cycle(report.outcome)
        return report

    async def _run_cycle(self, runtime_id: str, progress: _CycleProgress) -> CycleReport:
        if self._store.get_state().status.should_reset:
            await self._reset()

        state = self._store.get_state()
        ledger = OrderLedger.from_orders(state.orders.values(), self.strategy_id)

        order = ledger.open_order
        if order is None:
            order = create_order(
                config=self.config,
                ledger=ledger,
                runtime_id=runtime_id,
                strategy_id=self.strategy_id,
                now_ms=self._clock(),
            )
            await self._store.set_state(add_order(order))
            progress.order_created = True
        progress.order_id = order.id

        recent_int = recent_out_amount_int(ledger, self.config, order.direction, order.size_int)
        route = await fetch_best_route(self._aggregator, order)
        evaluation = evaluate(
            order,
            route,
            recent_int,
            forced=self._store.get_state().status.should_execute,
        )
        progress.evaluation = evaluation
        self._reporter.report_expected_profit_percent(evaluation.expected_profit_percent)

        if not evaluation.decision.value:
            logger.debug(
                "Order skipped",
                extra={"runtime_id": runtime_id, "order_id": order.id},
            )
            return self._report(runtime_id, CycleOutcome.SKIPPED, progress)

        progress.profit = await self._execute(runtime_id, order, evaluation)
        return self._report(runtime_id, CycleOutcome.EXECUTED, progress)

    async def _execute(
        self,
        runtime_id: str,
        order: Order,
        evaluation: Evaluation,
    ) -> ProfitRecord:
        """Execute the order, then commit the fill and compute its profit."""
        forced = evaluation.decision.reason == DecisionReason.FORCED_BY_USER
        if forced:
            await self._store.set_state(update_status(value="execute:shouldExecute"))
            logger.info(
                "User forced execution",
                extra={"runtime_id": runtime_id, "order_id": order.id},
            )

        if self.config.priority_fee_micro_lamports:
            self._reporter.report_priority_fee(self.config.priority_fee_micro_lamports)

        min_out_amount_int: int | None = None
        if self.config.enable_auto_slippage:
            min_out_amount_int = evaluation.recent_out_amount_int
            self._reporter.report_auto_slippage(evaluation.recent_out_amount, True)
            logger.debug(
                "Auto slippage threshold set",
                extra={"runtime_id": runtime_id, "min_out_amount": min_out_amount_int},
            )

        try:
            result = await self._aggregator.execute(
                order.in_token_address,
                order.out_token_address,
                order.size_int,
                order.slippage_bps,
                min_out_amount_int=min_out_amount_int,
                priority_fee_micro_lamports=self.config.priority_fee_micro_lamports,
            )
            if not result.is_success or result.out_amount_int is None:
                raise ExecutionFailedError(
                    "execution failed",
                    order_id=order.id,
                    status=result.status.value,
                    error=result.error or "",
                )
        except Exception:
            # The force signal stays set, only the status value goes back
            if forced:
                await self._store.set_state(update_status(value="idle"))
            raise

        out_amount_int = result.out_amount_int
        executed_at = self._clock()

        def commit(state: StoreState) -> StoreState:
            state = mark_order_executed(order.id, out_amount_int, executed_at)(state)
            return update_status(should_execute=False, value="idle")(state)

        await self._store.set_state(commit)

        profit = compute_profit(order, out_amount_int, evaluation.recent_out_amount_int)
        self._reporter.report_unrealized_profit_percent(profit.unrealized_profit_percent)

        logger.info(
            "Order executed",
            extra={
                "runtime_id": runtime_id,
                "order_id": order.id,
                "direction": order.direction.value,
                "out_amount_int": out_amount_int,
                "tx_id": result.tx_id,
                "profit": profit.profit,
                "unrealized_profit": profit.unrealized_profit,
            },
        )
        return profit

    # === Reporting ===

    def _report(
        self,
        runtime_id: str,
        outcome: CycleOutcome,
        progress: _CycleProgress,
        *,
        error_kind: ErrorKind | None = None,
        error: str | None = None,
    ) -> CycleReport:
        evaluation = progress.evaluation
        return CycleReport(
            runtime_id=runtime_id,
            strategy_id=self.strategy_id,
            outcome=outcome,
            ts=self._clock(),
            order_id=progress.order_id,
            order_created=progress.order_created,
            reason=evaluation.decision.reason if evaluation else None,
            live_price=evaluation.live_price if evaluation else None,
            expected_profit_percent=evaluation.expected_profit_percent if evaluation else None,
            profit=progress.profit,
            error_kind=error_kind,
            error=error,
        )

    def _failed(
        self,
        runtime_id: str,
        progress: _CycleProgress,
        kind: ErrorKind,
        error: Exception,
    ) -> CycleReport:
        """Log a failed cycle according to its error kind and build its report."""
        context = {
            "error": str(error),
            "runtime_id": runtime_id,
            "strategy_id": self.strategy_id,
            "order_id": progress.order_id,
            "error_kind": kind.value,
            **getattr(error, "context", {}),
        }
        if kind == ErrorKind.EXTERNAL:
            logger.warning("Cycle failed, retrying next cycle", extra=context)
        elif kind in (ErrorKind.CONFIGURATION, ErrorKind.NUMERIC):
            logger.error("Cycle aborted", extra=context)
        else:
            logger.error("Cycle crashed", extra=context, exc_info=error)

        return self._report(
            runtime_id,
            CycleOutcome.FAILED,
            progress,
            error_kind=kind,
            error=str(error),
        )
