"""Tests for the scan endpoint with the quote service mocked."""

import logging
from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient

from app.core.config import settings
from app.core.constants import STRATEGY_CATALOG
from app.main import app
from app.services.quote_service import quote_service

client = TestClient(app)

CATALOG_NAMES = {heuristic.name for heuristic in STRATEGY_CATALOG}
EMPTY_ERROR_BODY = {"success": False, "strategies": [], "currentPrice": 0, "ticker": ""}


class TestScanEndpoint:
    """POST /api/v1/scan."""

    def test_aggressive_scan(self):
        """Spot 200, aggressive profile, up to 7 strategies."""
        with patch.object(quote_service, "fetch_spot_price", AsyncMock(return_value=200.0)) as fetch:
            response = client.post(
                "/api/v1/scan",
                json={"ticker": "aapl", "riskProfile": "aggressive", "minDte": 30, "maxDte": 45, "maxStrategies": 7},
            )

        assert response.status_code == 200
        fetch.assert_awaited_once_with("AAPL")
        data = response.json()
        assert data["success"] is True
        assert data["ticker"] == "AAPL"
        assert data["currentPrice"] == 200.0
        assert "error" not in data
        assert 0 < len(data["strategies"]) <= 7

        confidences = [strategy["confidence"] for strategy in data["strategies"]]
        assert confidences == sorted(confidences, reverse=True)
        for strategy in data["strategies"]:
            assert strategy["name"] in CATALOG_NAMES
            assert strategy["type"] in {"bullish", "bearish", "neutral", "volatility"}
            assert strategy["capitalRequired"] >= 0
            assert len(strategy["legs"]) in {1, 2, 4}
            assert strategy["breakEvenPoints"]
            assert 0 <= strategy["probabilityOfProfit"] <= 1
            assert set(strategy["greeks"]) == {"delta", "gamma", "theta", "vega"}
            for leg in strategy["legs"]:
                assert leg["type"] in {"call", "put"}
                assert leg["action"] in {"buy", "sell"}
                assert len(leg["expiry"]) == 10

    def test_defaults_applied(self):
        with patch.object(quote_service, "fetch_spot_price", AsyncMock(return_value=237.88)):
            response = client.post("/api/v1/scan", json={"ticker": "AAPL"})

        assert response.status_code == 200
        assert len(response.json()["strategies"]) <= 5

    def test_conservative_excludes_volatility(self):
        with patch.object(quote_service, "fetch_spot_price", AsyncMock(return_value=200.0)):
            response = client.post(
                "/api/v1/scan", json={"ticker": "SPY", "riskProfile": "conservative", "maxStrategies": 7}
            )

        assert response.status_code == 200
        assert all(strategy["type"] != "volatility" for strategy in response.json()["strategies"])

    def test_blank_ticker(self):
        with patch.object(quote_service, "fetch_spot_price", AsyncMock(return_value=200.0)) as fetch:
            response = client.post("/api/v1/scan", json={"ticker": "   ", "riskProfile": "moderate"})

        assert response.status_code == 400
        assert response.json() == {**EMPTY_ERROR_BODY, "error": "Ticker is required"}
        fetch.assert_not_awaited()

    def test_missing_ticker(self):
        response = client.post("/api/v1/scan", json={"riskProfile": "moderate"})

        assert response.status_code == 400
        assert response.json()["error"] == "Ticker is required"

    def test_invalid_body(self):
        response = client.post(
            "/api/v1/scan", content="not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 422

    def test_invalid_field_type(self):
        response = client.post("/api/v1/scan", json={"ticker": "AAPL", "minDte": "soon"})

        assert response.status_code == 422

    def test_dte_above_ten_years_rejected(self):
        with patch.object(quote_service, "fetch_spot_price", AsyncMock(return_value=200.0)) as fetch:
            response = client.post("/api/v1/scan", json={"ticker": "AAPL", "minDte": 5000000, "maxDte": 6000000})

        assert response.status_code == 422
        fetch.assert_not_awaited()

    def test_ten_year_dte_accepted(self):
        with patch.object(quote_service, "fetch_spot_price", AsyncMock(return_value=200.0)):
            response = client.post("/api/v1/scan", json={"ticker": "AAPL", "minDte": 3650, "maxDte": 3650})

        assert response.status_code == 200
        assert response.json()["strategies"]

    def test_method_not_allowed(self):
        assert client.get("/api/v1/scan").status_code == 405

    def test_internal_error(self):
        with patch.object(quote_service, "fetch_spot_price", AsyncMock(side_effect=RuntimeError("boom"))):
            response = client.post("/api/v1/scan", json={"ticker": "AAPL"})

        assert response.status_code == 500
        assert response.json() == {**EMPTY_ERROR_BODY, "error": "Internal server error"}


class TestServiceEndpoints:
    """Health and root endpoints."""

    def test_health(self):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert "environment" in response.json()

    def test_root(self):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json() == {"message": "OptionScan API", "version": "0.1.0", "docs": "/docs"}


class TestLifespan:
    """Startup configuration."""

    def test_startup_applies_log_level_and_warns_without_key_in_production(self, caplog):
        with (
            patch.object(settings, "environment", "production"),
            patch.object(settings, "log_level", "warning"),
            patch.object(quote_service, "_api_key", ""),
            caplog.at_level(logging.INFO),
        ):
            with TestClient(app):
                assert logging.getLogger().level == logging.WARNING

        warnings = [record for record in caplog.records if record.levelno == logging.WARNING]
        assert any("POLYGON_API_KEY not set in production" in record.getMessage() for record in warnings)

    def test_startup_without_key_outside_production(self, caplog):
        with (
            patch.object(settings, "environment", "development"),
            patch.object(quote_service, "_api_key", ""),
            caplog.at_level(logging.INFO),
        ):
            with TestClient(app):
                pass

        assert not [record for record in caplog.records if record.levelno >= logging.WARNING]
        assert any("fallback table" in record.getMessage() for record in caplog.records)
