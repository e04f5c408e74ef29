"""Pydantic models for priced option legs and synthesized strategies.

Python attribute names are snake_case; the wire format is camelCase, with
the leg option kind and the strategy category both serialized as ``type``.
"""

from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class OptionType(str, Enum):
    """Option type."""

    CALL = "call"
    PUT = "put"


class LegAction(str, Enum):
    """Side of an option leg."""

    BUY = "buy"
    SELL = "sell"


class StrategyCategory(str, Enum):
    """Market view a strategy expresses."""

    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"
    VOLATILITY = "volatility"


class RiskProfile(str, Enum):
    """Risk tolerance used to filter the strategy catalog."""

    CONSERVATIVE = "conservative"
    MODERATE = "moderate"
    MODERATE_AGGRESSIVE = "moderate_aggressive"
    AGGRESSIVE = "aggressive"


class CamelModel(BaseModel):
    """Base model serializing field names as camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Greeks(CamelModel):
    """Option sensitivities. Theta is per calendar day, vega per vol point."""

    delta: float = Field(..., description="Price change per $1 move in the underlying")
    gamma: float = Field(..., description="Delta change per $1 move in the underlying")
    theta: float = Field(..., description="Price decay per day")
    vega: float = Field(..., description="Price change per 1% change in volatility")


class PricingQuote(CamelModel):
    """One evaluation of the pricing model. Not cacheable: price carries market noise."""

    price: float = Field(..., ge=0, description="Option price after market noise, floored at the minimum tick")
    greeks: Greeks


class StrategyLeg(CamelModel):
    """One priced option contract within a strategy."""

    kind: OptionType = Field(..., alias="type", description="Option type: call or put")
    action: LegAction = Field(..., description="Buy or sell")
    strike: float = Field(..., gt=0, description="Strike price")
    expiry: date = Field(..., description="Expiration date (YYYY-MM-DD)")
    quantity: int = Field(1, gt=0, description="Number of contracts")
    premium: float = Field(..., ge=0, description="Per-share option price")

    # Greeks copied from the leg's pricing quote
    delta: float | None = None
    gamma: float | None = None
    theta: float | None = None
    vega: float | None = None


class Strategy(CamelModel):
    """A named multi-leg strategy with aggregate risk metrics."""

    id: str = Field(..., description="Catalog identifier of the strategy template")
    name: str = Field(..., description="Strategy name (e.g., 'Iron Condor')")
    category: StrategyCategory = Field(..., alias="type", description="Market view")
    confidence: float = Field(..., ge=0, le=100, description="Heuristic confidence score (percent)")
    max_profit: float = Field(..., description="Maximum profit per contract set (dollars)")
    max_loss: float = Field(..., description="Maximum loss, negative by convention (dollars)")
    capital_required: float = Field(..., ge=0, description="Capital tied up (dollars)")
    probability_of_profit: float = Field(..., ge=0, le=1, description="Heuristic probability of profit")
    description: str = Field(..., description="Human readable strike/expiry summary")
    legs: list[StrategyLeg] = Field(..., min_length=1, description="Ordered option legs")
    greeks: Greeks = Field(..., description="Aggregate position Greeks")
    break_even_points: list[float] = Field(..., min_length=1, description="Underlying prices with zero payoff at expiry")
