"""Spot price source backed by the Polygon previous-close aggregate.

The service never fails: without an API key, on provider errors, or while the
circuit breaker is open, it falls back to a static price table and, for
tickers outside the table, to a random price in [100, 300).
"""

import logging
import random
from typing import Any

import httpx
from fastapi.concurrency import run_in_threadpool
from pybreaker import CircuitBreaker, CircuitBreakerError

from app.core.config import settings
from app.core.constants import FALLBACK_PRICE_RANGE, FALLBACK_PRICES, CircuitBreakerConfig

logger = logging.getLogger(__name__)

# Circuit breaker: Open if 5 failures, stay open for 60s
polygon_circuit_breaker = CircuitBreaker(
    fail_max=CircuitBreakerConfig.FAIL_MAX,
    reset_timeout=CircuitBreakerConfig.RESET_TIMEOUT,
)


class QuoteService:
    """Previous-session close prices with a deterministic-table fallback."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        rng: random.Random | None = None,
        transport: httpx.BaseTransport | None = None,
        breaker: CircuitBreaker | None = None,
    ) -> None:
        """Initialize QuoteService.

        Args:
            api_key: Polygon API key; defaults to settings. Empty disables the provider.
            base_url: Polygon base URL; defaults to settings
            timeout: HTTP timeout in seconds; defaults to settings
            rng: Random source for prices of unknown tickers
            transport: Optional httpx transport (tests use ``httpx.MockTransport``)
            breaker: Circuit breaker guarding the provider; defaults to the shared one
        """
        self._api_key = settings.polygon_api_key if api_key is None else api_key
        self._base_url = (base_url or settings.polygon_base_url).rstrip("/")
        self._timeout = settings.quote_timeout_seconds if timeout is None else timeout
        self._rng = rng or random.Random()
        self._transport = transport
        self._breaker = breaker or polygon_circuit_breaker

    @property
    def has_credentials(self) -> bool:
        return bool(self._api_key)

    def fallback_price(self, ticker: str) -> float:
        """Table price for known tickers, otherwise a random price in [100, 300)."""
        if ticker in FALLBACK_PRICES:
            return FALLBACK_PRICES[ticker]
        low, high = FALLBACK_PRICE_RANGE
        return low + self._rng.random() * (high - low)

    def _call_polygon_sync(self, ticker: str) -> float:
        """
        Fetch the previous-session close for ``ticker``.

        Raises:
            httpx.HTTPStatusError: Provider returned an error status
            httpx.RequestError: Transport failure or timeout
            ValueError: Payload has no usable close price
        """
        url = f"{self._base_url}/v2/aggs/ticker/{ticker}/prev"
        params = {"adjusted": "true", "apikey": self._api_key}
        with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
            response = client.get(url, params=params)
            response.raise_for_status()
            data: dict[str, Any] = response.json()

        results = data.get("results") or []
        if not results:
            raise ValueError(f"No previous-close results for {ticker}")
        close = float(results[0]["c"])
        if close <= 0:
            raise ValueError(f"Non-positive close {close} for {ticker}")
        return close

    def get_spot_price_sync(self, ticker: str) -> float:
        """Blocking variant of :meth:`fetch_spot_price`."""
        ticker = ticker.upper()
        if not self.has_credentials:
            logger.info(f"No Polygon API key configured, using fallback price for {ticker}")
            return self.fallback_price(ticker)

        try:
            price = self._breaker.call(self._call_polygon_sync, ticker)
            logger.debug(f"Polygon previous close for {ticker}: {price}")
            return price
        except CircuitBreakerError:
            logger.warning(f"Polygon circuit breaker OPEN, using fallback price for {ticker}")
        except httpx.HTTPStatusError as e:
            logger.error(f"Polygon API error for {ticker}: {e.response.status_code} - {e.response.text}")
        except httpx.RequestError as e:
            logger.error(f"Polygon API request error for {ticker}: {e}")
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Malformed Polygon response for {ticker}: {e}")
        return self.fallback_price(ticker)

    async def fetch_spot_price(self, ticker: str) -> float:
        """
        Current spot price for ``ticker`` (prior-session close).

        Runs the blocking HTTP call in a thread pool so the event loop stays free.

        Args:
            ticker: Stock symbol (case-insensitive)

        Returns:
            Positive spot price; never raises for provider failures
        """
        return await run_in_threadpool(self.get_spot_price_sync, ticker)


# Global service instance
quote_service = QuoteService()
