"""Orchestration of one strategy scan: quote, synthesize, filter."""

import logging
import random
from datetime import date

from app.api.schemas import ScanRequest, ScanResponse
from app.core.config import settings
from app.services.quote_service import QuoteService, quote_service
from app.services.risk_filter import select_strategies
from app.services.strategy_engine import StrategyEngine

logger = logging.getLogger(__name__)


class ScanService:
    """Runs the scan pipeline for a validated request."""

    def __init__(
        self,
        quotes: QuoteService | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._quotes = quotes or quote_service
        self._rng = rng

    async def scan(self, request: ScanRequest, today: date | None = None) -> ScanResponse:
        """
        Scan one ticker.

        The ticker must already be non-blank; the request layer rejects
        blank tickers before calling this.

        Args:
            request: Scan parameters
            today: Reference date for the expiration calendar

        Returns:
            ScanResponse with the filtered, ranked strategies
        """
        ticker = (request.ticker or "").strip().upper()
        min_dte = settings.default_min_dte if request.min_dte is None else request.min_dte
        max_dte = settings.default_max_dte if request.max_dte is None else request.max_dte
        max_strategies = (
            settings.default_max_strategies if request.max_strategies is None else request.max_strategies
        )

        spot = await self._quotes.fetch_spot_price(ticker)

        # Fresh engine per scan; no state is shared between requests
        engine = StrategyEngine(rng=self._rng)
        catalog = engine.generate_strategies(spot, ticker, min_dte, max_dte, today)
        strategies = select_strategies(catalog, request.risk_profile, max_strategies)

        logger.info(
            f"Scan {ticker} @ {spot:.2f} ({request.risk_profile}, {min_dte}-{max_dte} DTE): "
            f"{len(strategies)}/{len(catalog)} strategies"
        )
        return ScanResponse(
            success=True,
            strategies=strategies,
            current_price=spot,
            ticker=ticker,
        )


# Global service instance
scan_service = ScanService()
