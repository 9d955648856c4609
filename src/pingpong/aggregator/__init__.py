"""Swap aggregator interfaces and adapters.

- Aggregator / QuoteSource: what the decision engine needs from an aggregator
- JupiterQuoteClient: live quotes over HTTP (aiohttp)
- PaperAggregator: fills on paper at the live quote
"""

from pingpong.aggregator.base import (
    Aggregator,
    ExecutionResult,
    QuoteSource,
    Route,
    RouteResult,
)
from pingpong.aggregator.jupiter import JupiterConfig, JupiterQuoteClient
from pingpong.aggregator.paper import PaperAggregator

__all__ = [
    "Aggregator",
    "ExecutionResult",
    "JupiterConfig",
    "JupiterQuoteClient",
    "PaperAggregator",
    "QuoteSource",
    "Route",
    "RouteResult",
]
