"""
Error taxonomy for the ping-pong trader.

Every error raised by the decision engine carries an ErrorKind so the run
loop can decide, in one place, how a failed cycle is logged and reported:

- CONFIGURATION: missing tokens/amount/anchor, sell without a prior buy.
  Fatal to init or to the current cycle.
- NUMERIC: invalid decimals or a conversion that would lose precision.
  A programming or configuration defect, never coerced.
- EXTERNAL: no route, failed execution. Recoverable, the next cycle retries
  from the same open order.
- UNEXPECTED: anything else caught at the run-loop boundary.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Error category used by the run loop."""

    CONFIGURATION = "configuration"
    NUMERIC = "numeric"
    EXTERNAL = "external"
    UNEXPECTED = "unexpected"


class PingPongError(Exception):
    """Base class for all decision-engine errors."""

    kind: ErrorKind = ErrorKind.UNEXPECTED

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.context = context

    @property
    def is_recoverable(self) -> bool:
        """Whether the next cycle may succeed without operator action."""
        return self.kind == ErrorKind.EXTERNAL


class ConfigurationError(PingPongError):
    """Strategy configuration is missing or inconsistent."""

    kind = ErrorKind.CONFIGURATION


class NoPriorBuyToSellError(ConfigurationError):
    """A sell order was requested but no buy has ever been filled."""


class MissingAnchorError(ConfigurationError):
    """No filled order and no captured anchor to derive a baseline from."""


class NumericError(PingPongError):
    """Exact decimal/base-unit conversion failed."""

    kind = ErrorKind.NUMERIC


class InvalidDecimalsError(NumericError):
    """Token decimals are not a finite non-negative integer."""


class PrecisionLossError(NumericError):
    """Value has more fractional digits than the token's decimals allow."""


class InvalidAmountError(NumericError):
    """Value is not a finite number."""


class ExternalError(PingPongError):
    """An external collaborator (aggregator) failed."""

    kind = ErrorKind.EXTERNAL


class NoRouteFoundError(ExternalError):
    """The aggregator reported no viable route for the swap."""


class ExecutionFailedError(ExternalError):
    """The aggregator did not complete the swap."""


class CycleInProgressError(RuntimeError):
    """A cycle was started while the previous one has not finished."""
