"""
Async quote client for the Jupiter swap HTTP API.

Quote only: GET {base_url}/quote returns the best route for a swap. Signing
and submitting transactions is not handled here; pair this client with
PaperAggregator for dry runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import aiohttp
import orjson

from pingpong.aggregator.base import Route, RouteResult

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://lite-api.jup.ag/swap/v1"


@dataclass(frozen=True)
class JupiterConfig:
    """Jupiter quote client configuration."""

    base_url: str = DEFAULT_BASE_URL
    request_timeout_ms: int = 10_000
    only_direct_routes: bool = False

    def __post_init__(self) -> None:
        if self.request_timeout_ms <= 0:
            raise ValueError(f"request_timeout_ms must be > 0, got {self.request_timeout_ms}")


def parse_quote(payload: dict[str, Any]) -> Route:
    """Extract base-unit amounts from a quote response.

    Raises:
        ValueError: amounts missing or not integers.
    """
    try:
        return Route(amount_in=int(payload["inAmount"]), amount_out=int(payload["outAmount"]))
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"malformed quote response: {e}") from e


class JupiterQuoteClient:
    """
    Quote source backed by the Jupiter HTTP API.

    Errors never raise out of compute_routes: HTTP failures, network errors and
    malformed payloads all become RouteResult(success=False, error=...).
    """

    def __init__(self, config: JupiterConfig | None = None) -> None:
        self._config = config or JupiterConfig()
        self._session: aiohttp.ClientSession | None = None

    @property
    def name(self) -> str:
        return "jupiter"

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self._config.request_timeout_ms / 1000)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def compute_routes(
        self,
        in_token: str,
        out_token: str,
        amount_in: int,
        slippage_bps: int,
    ) -> RouteResult:
        """Quote the best route for swapping ``amount_in`` of ``in_token``."""
        params = {
            "inputMint": in_token,
            "outputMint": out_token,
            "amount": str(amount_in),
            "slippageBps": str(slippage_bps),
            "onlyDirectRoutes": "true" if self._config.only_direct_routes else "false",
        }
        url = f"{self._config.base_url}/quote"

        try:
            session = await self._get_session()
            async with session.get(url, params=params) as response:
                body = await response.read()
                if response.status != 200:
                    logger.warning(
                        "Quote request failed",
                        extra={"status": response.status, "url": url},
                    )
                    return RouteResult(success=False, error=f"HTTP {response.status}")
            route = parse_quote(orjson.loads(body))
        except aiohttp.ClientError as e:
            logger.warning("Quote request error", extra={"error": str(e), "url": url})
            return RouteResult(success=False, error=str(e))
        except (orjson.JSONDecodeError, ValueError) as e:
            logger.warning("Quote response invalid", extra={"error": str(e)})
            return RouteResult(success=False, error=str(e))

        return RouteResult(success=True, routes=[route])
