"""
Prometheus telemetry for the ping-pong strategy.

Reports are observational only: every report method catches and logs its own
failure, so telemetry can never block or fail a cycle.

Metric names:
- pingpong_expected_profit_percent
- pingpong_unrealized_profit_percent
- pingpong_desired_profit_percent
- pingpong_priority_fee_micro_lamports
- pingpong_auto_slippage_enabled / pingpong_auto_slippage_threshold
- pingpong_cycles (by outcome)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from prometheus_client import Counter, Gauge
from prometheus_client.registry import CollectorRegistry

if TYPE_CHECKING:
    from collections.abc import Callable
    from decimal import Decimal

    from pingpong.contracts import CycleOutcome

logger = logging.getLogger(__name__)


class StrategyReporter:
    """
    Telemetry sink for one strategy instance.

    Usage:
        registry = CollectorRegistry()
        reporter = StrategyReporter(registry=registry)
        reporter.report_expected_profit_percent(Decimal("0.42"))
        # generate_latest(registry) -> bytes for a /metrics endpoint
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """
        Initialize reporter.

        Args:
            registry: Prometheus CollectorRegistry. If None, a private registry is created.
        """
        self._registry = registry or CollectorRegistry()

        self._expected_profit_percent = Gauge(
            "pingpong_expected_profit_percent",
            "Live out-amount vs recent out-amount in the open order's direction, percent",
            registry=self._registry,
        )
        self._unrealized_profit_percent = Gauge(
            "pingpong_unrealized_profit_percent",
            "Unrealized profit of the held position, percent (0 after a sell)",
            registry=self._registry,
        )
        self._desired_profit_percent = Gauge(
            "pingpong_desired_profit_percent",
            "Target profit per trade, percent",
            registry=self._registry,
        )
        self._priority_fee = Gauge(
            "pingpong_priority_fee_micro_lamports",
            "Configured priority fee",
            registry=self._registry,
        )
        self._auto_slippage_enabled = Gauge(
            "pingpong_auto_slippage_enabled",
            "1 if auto slippage is enabled",
            registry=self._registry,
        )
        self._auto_slippage_threshold = Gauge(
            "pingpong_auto_slippage_threshold",
            "Minimum out-amount (human units) enforced by auto slippage",
            registry=self._registry,
        )
        self._cycles = Counter(
            "pingpong_cycles",
            "Completed cycles by outcome",
            ["outcome"],
            registry=self._registry,
        )

    @property
    def registry(self) -> CollectorRegistry:
        """Registry holding this reporter's metrics."""
        return self._registry

    def _safe(self, name: str, fn: Callable[[], None]) -> None:
        try:
            fn()
        except Exception:
            logger.warning("Telemetry report failed", extra={"report": name}, exc_info=True)

    def report_expected_profit_percent(self, value: Decimal) -> None:
        self._safe(
            "expected_profit_percent",
            lambda: self._expected_profit_percent.set(float(value)),
        )

    def report_unrealized_profit_percent(self, value: Decimal) -> None:
        self._safe(
            "unrealized_profit_percent",
            lambda: self._unrealized_profit_percent.set(float(value)),
        )

    def report_desired_profit_percent(self, value: Decimal) -> None:
        self._safe(
            "desired_profit_percent",
            lambda: self._desired_profit_percent.set(float(value)),
        )

    def report_priority_fee(self, micro_lamports: int) -> None:
        self._safe("priority_fee", lambda: self._priority_fee.set(micro_lamports))

    def report_auto_slippage(self, threshold: Decimal, enabled: bool) -> None:
        def report() -> None:
            self._auto_slippage_enabled.set(1 if enabled else 0)
            self._auto_slippage_threshold.set(float(threshold))

        self._safe("auto_slippage", report)

    def report_cycle(self, outcome: CycleOutcome) -> None:
        self._safe("cycle", lambda: self._cycles.labels(outcome=outcome.value).inc())
