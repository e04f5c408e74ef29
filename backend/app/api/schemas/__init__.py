"""Pydantic schemas for API request/response models."""

from pydantic import BaseModel, Field

from app.schemas.strategy import CamelModel, RiskProfile, Strategy

# Upper bound for DTE inputs (ten years)
MAX_DTE = 3650


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str = Field(..., description="Service health status")
    environment: str = Field(..., description="Current environment")


class RootResponse(BaseModel):
    """Root endpoint response model."""

    message: str = Field(..., description="API message")
    version: str = Field(..., description="API version")
    docs: str = Field(..., description="API documentation path")


class ScanRequest(CamelModel):
    """Strategy scan request model.

    DTE window and result count fall back to the configured defaults when
    omitted. ``riskProfile`` is a free string; unknown values are not filtered.
    """

    ticker: str | None = Field(None, description="Underlying symbol (case-insensitive)")
    risk_profile: str = Field(RiskProfile.AGGRESSIVE.value, description="Risk profile name")
    min_dte: int | None = Field(None, ge=0, le=MAX_DTE, description="Minimum days to expiry")
    max_dte: int | None = Field(None, ge=0, le=MAX_DTE, description="Maximum days to expiry")
    max_strategies: int | None = Field(None, ge=0, description="Maximum strategies returned")


class ScanResponse(CamelModel):
    """Strategy scan response model."""

    success: bool = Field(..., description="Whether the scan completed")
    strategies: list[Strategy] = Field(default_factory=list, description="Ranked strategies")
    current_price: float = Field(0.0, description="Spot price used for synthesis")
    ticker: str = Field("", description="Upper-cased ticker")
    error: str | None = Field(None, description="Error message when success is false")
