"""
Aggregator interfaces.

The route computation and swap execution live outside this package. The
decision engine only sees these result types and the two interfaces below.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Protocol

from pingpong.contracts import ExecutionStatus


@dataclass(frozen=True)
class Route:
    """A quoted swap: base-unit amounts in and out."""

    amount_in: int
    amount_out: int


@dataclass(frozen=True)
class RouteResult:
    """Result of a route query. Routes are sorted best-first."""

    success: bool
    routes: list[Route] = field(default_factory=list)
    error: str | None = None

    @property
    def best(self) -> Route | None:
        """Best route, if any."""
        return self.routes[0] if self.success and self.routes else None


@dataclass(frozen=True)
class ExecutionResult:
    """Result of a swap execution attempt."""

    status: ExecutionStatus
    out_amount_int: int | None = None
    tx_id: str | None = None
    error: str | None = None

    @property
    def is_success(self) -> bool:
        """Whether the swap completed and reported its out-amount."""
        return self.status == ExecutionStatus.SUCCESS and bool(self.out_amount_int)


class QuoteSource(Protocol):
    """Anything that can quote swap routes."""

    async def compute_routes(
        self,
        in_token: str,
        out_token: str,
        amount_in: int,
        slippage_bps: int,
    ) -> RouteResult:
        """Quote routes for swapping ``amount_in`` base units of ``in_token``."""
        ...


class Aggregator(ABC):
    """Abstract base class for swap aggregators."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique name for this aggregator."""
        ...

    @abstractmethod
    async def compute_routes(
        self,
        in_token: str,
        out_token: str,
        amount_in: int,
        slippage_bps: int,
    ) -> RouteResult:
        """
        Quote routes for a swap.

        Args:
            in_token: Input token address.
            out_token: Output token address.
            amount_in: Input amount in base units.
            slippage_bps: Slippage tolerance in basis points.

        Returns:
            RouteResult with routes sorted best-first, or success=False.
        """
        ...

    @abstractmethod
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
        """
        Execute a swap.

        Args:
            in_token: Input token address.
            out_token: Output token address.
            amount_in: Input amount in base units.
            slippage_bps: Slippage tolerance in basis points.
            min_out_amount_int: Reject the swap if it would return less (base units).
            priority_fee_micro_lamports: Optional priority fee.

        Returns:
            ExecutionResult with the out-amount actually received.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close any resources held by this aggregator."""
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
