"""Application constants to replace magic numbers."""

from typing import Final, NamedTuple


class PricingConstants:
    """Option pricing constants."""

    DAYS_PER_YEAR: Final[int] = 365
    MIN_TICK: Final[float] = 0.05  # Minimum quoted option price
    MARKET_NOISE: Final[float] = 0.05  # Price multiplied by U(1 - noise, 1 + noise)
    BASE_IMPLIED_VOL: Final[float] = 0.35
    IMPLIED_VOL_JITTER: Final[float] = 0.15  # iv = base + U(0, jitter)
    STRADDLE_VOL_PREMIUM: Final[float] = 0.05


class ContractConstants:
    """Contract sizing and payoff representation."""

    MULTIPLIER: Final[int] = 100  # Shares per contract
    UNBOUNDED_PROFIT: Final[int] = 99999  # Sentinel for unlimited upside
    DEFAULT_QUANTITY: Final[int] = 1


class LadderConstants:
    """Strike ladder construction."""

    STEPS_EACH_SIDE: Final[int] = 6  # Ladder is base + i * interval for i in [-6, 6]
    # (upper bound exclusive, interval) bands by spot price
    INTERVAL_BANDS: Final[tuple[tuple[float, float], ...]] = (
        (50.0, 2.5),
        (100.0, 5.0),
        (200.0, 5.0),
        (500.0, 10.0),
    )
    TOP_INTERVAL: Final[float] = 25.0


class CalendarConstants:
    """Expiration calendar generation."""

    FRIDAY: Final[int] = 4  # date.weekday()
    WEEKLY_HORIZON: Final[int] = 12  # weeks
    MONTHLY_HORIZON: Final[int] = 3  # months
    MONTHLY_ANCHOR_DAY: Final[int] = 15  # First candidate day for the 3rd Friday
    MAX_EXPIRATIONS: Final[int] = 3


class CircuitBreakerConfig:
    """Circuit breaker constants for the quote provider."""

    FAIL_MAX: Final[int] = 5
    RESET_TIMEOUT: Final[int] = 60  # seconds


class FinancialPrecision:
    """Financial calculation precision constants."""

    ROUNDING_MODE: Final[str] = "ROUND_HALF_UP"  # Standard financial rounding
    DELTA_PLACES: Final[int] = 2
    GAMMA_PLACES: Final[int] = 3
    THETA_PLACES: Final[int] = 2  # Applied to annual theta before the per-day division
    VEGA_PLACES: Final[int] = 2


class StrategyHeuristic(NamedTuple):
    """Presentation scores for one strategy template.

    confidence = base_confidence + U(0, confidence_jitter)
    probability_of_profit = base_pop + U(0, pop_jitter)
    """

    id: str
    name: str
    category: str
    base_confidence: float
    confidence_jitter: float
    base_pop: float
    pop_jitter: float


BULL_PUT_SPREAD: Final = StrategyHeuristic("1", "Bull Put Spread", "bullish", 72.5, 5.0, 0.68, 0.1)
IRON_CONDOR: Final = StrategyHeuristic("2", "Iron Condor", "neutral", 65.2, 5.0, 0.58, 0.1)
CASH_SECURED_PUT: Final = StrategyHeuristic("3", "Cash Secured Put", "bullish", 69.8, 5.0, 0.65, 0.1)
LONG_STRADDLE: Final = StrategyHeuristic("4", "Long Straddle", "volatility", 58.5, 5.0, 0.45, 0.1)
COVERED_CALL: Final = StrategyHeuristic("5", "Covered Call", "neutral", 66.7, 5.0, 0.72, 0.1)
BEAR_CALL_SPREAD: Final = StrategyHeuristic("6", "Bear Call Spread", "bearish", 63.5, 5.0, 0.62, 0.1)
BULL_CALL_SPREAD: Final = StrategyHeuristic("7", "Bull Call Spread", "bullish", 68.2, 5.0, 0.58, 0.1)

STRATEGY_CATALOG: Final[tuple[StrategyHeuristic, ...]] = (
    BULL_PUT_SPREAD,
    IRON_CONDOR,
    CASH_SECURED_PUT,
    LONG_STRADDLE,
    COVERED_CALL,
    BEAR_CALL_SPREAD,
    BULL_CALL_SPREAD,
)


# Minimum (credit or profit) per share for a template to be offered
MIN_SPREAD_CREDIT: Final[float] = 0.05
MIN_CONDOR_CREDIT: Final[float] = 0.10
MIN_DEBIT_SPREAD_PROFIT: Final[float] = 0.10


# Risk profile confidence floors. Profiles not listed here are unfiltered.
RISK_PROFILE_MIN_CONFIDENCE: Final[dict[str, float]] = {
    "conservative": 65.0,
    "moderate": 60.0,
    "moderate_aggressive": 55.0,
}


# Prices used when the quote provider is unavailable or unconfigured.
FALLBACK_PRICES: Final[dict[str, float]] = {
    "AAPL": 237.88,
    "SPY": 590.25,
    "TSLA": 248.50,
    "MSFT": 425.32,
    "NVDA": 138.45,
    "META": 563.12,
    "GOOGL": 175.28,
    "AMZN": 197.85,
    "QQQ": 515.75,
    "AMD": 120.33,
}
FALLBACK_PRICE_RANGE: Final[tuple[float, float]] = (100.0, 300.0)
