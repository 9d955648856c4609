"""Fire-and-forget strategy telemetry (Prometheus)."""

from pingpong.telemetry.reporter import StrategyReporter

__all__ = ["StrategyReporter"]
