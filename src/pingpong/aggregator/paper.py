"""
Paper-trading aggregator.

Executes swaps against live quotes without submitting anything: a swap fills
at the best route's out-amount at execution time. Used for dry runs and tests.
"""

from __future__ import annotations

import itertools
import logging
from collections import deque
from typing import TYPE_CHECKING

from pingpong.aggregator.base import Aggregator, ExecutionResult, RouteResult
from pingpong.contracts import ExecutionStatus

if TYPE_CHECKING:
    from pingpong.aggregator.base import QuoteSource

logger = logging.getLogger(__name__)


class PaperAggregator(Aggregator):
    """Aggregator that quotes through a QuoteSource and fills on paper.

    A fill is rejected when the re-quoted out-amount is below
    ``min_out_amount_int``. Only the last ``max_fills`` fills are kept.
    """

    def __init__(self, quote_source: QuoteSource, *, max_fills: int = 1000) -> None:
        if max_fills < 1:
            raise ValueError("max_fills must be positive")
        self._quote_source = quote_source
        self._tx_seq = itertools.count(1)
        self.fills: deque[ExecutionResult] = deque(maxlen=max_fills)

    @property
    def name(self) -> str:
        return "paper"

    async def compute_routes(
        self,
        in_token: str,
        out_token: str,
        amount_in: int,
        slippage_bps: int,
    ) -> RouteResult:
        return await self._quote_source.compute_routes(in_token, out_token, amount_in, slippage_bps)

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
        quote = await self.compute_routes(in_token, out_token, amount_in, slippage_bps)
        best = quote.best
        if best is None:
            return ExecutionResult(
                status=ExecutionStatus.FAILED,
                error=quote.error or "no routes found",
            )

        if min_out_amount_int is not None and best.amount_out < min_out_amount_int:
            logger.info(
                "Paper fill rejected by minimum out-amount",
                extra={"amount_out": best.amount_out, "min_out_amount": min_out_amount_int},
            )
            return ExecutionResult(
                status=ExecutionStatus.FAILED,
                error=f"out amount {best.amount_out} below minimum {min_out_amount_int}",
            )

        result = ExecutionResult(
            status=ExecutionStatus.SUCCESS,
            out_amount_int=best.amount_out,
            tx_id=f"paper-{next(self._tx_seq)}",
        )
        self.fills.append(result)
        logger.info(
            "Paper fill",
            extra={
                "tx_id": result.tx_id,
                "amount_in": amount_in,
                "amount_out": best.amount_out,
                "priority_fee_micro_lamports": priority_fee_micro_lamports,
            },
        )
        return result

    async def close(self) -> None:
        close = getattr(self._quote_source, "close", None)
        if close is not None:
            await close()
