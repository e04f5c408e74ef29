"""Unit tests for ScanService orchestration."""

import random
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.api.schemas import ScanRequest
from app.core.config import settings
from app.services.scan_service import ScanService


def _quotes(price: float) -> MagicMock:
    quotes = MagicMock()
    quotes.fetch_spot_price = AsyncMock(return_value=price)
    return quotes


class TestScanService:
    """Test ScanService.scan."""

    @pytest.mark.asyncio
    async def test_scan_uses_defaults(self):
        quotes = _quotes(200.0)
        service = ScanService(quotes=quotes, rng=random.Random(11))

        response = await service.scan(ScanRequest(ticker=" msft "), today=date(2026, 10, 18))

        quotes.fetch_spot_price.assert_awaited_once_with("MSFT")
        assert response.success is True
        assert response.ticker == "MSFT"
        assert response.current_price == 200.0
        assert response.error is None
        assert 0 < len(response.strategies) <= settings.default_max_strategies
        for strategy in response.strategies:
            for leg in strategy.legs:
                assert leg.expiry == date(2026, 11, 20)

    @pytest.mark.asyncio
    async def test_conservative_scan(self):
        service = ScanService(quotes=_quotes(150.0))
        request = ScanRequest(ticker="QQQ", risk_profile="conservative", max_strategies=7)

        response = await service.scan(request)

        confidences = [strategy.confidence for strategy in response.strategies]
        assert confidences == sorted(confidences, reverse=True)
        assert all(strategy.category.value != "volatility" for strategy in response.strategies)
        assert all(strategy.confidence >= 65 for strategy in response.strategies)

    @pytest.mark.asyncio
    async def test_quote_failure_propagates(self):
        quotes = MagicMock()
        quotes.fetch_spot_price = AsyncMock(side_effect=RuntimeError("boom"))

        with pytest.raises(RuntimeError):
            await ScanService(quotes=quotes).scan(ScanRequest(ticker="AAPL"))
