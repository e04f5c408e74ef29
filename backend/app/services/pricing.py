"""Black-Scholes option pricing with Greeks and market-noise adjustment.

The fair value is the closed-form European price. Each evaluation then
multiplies it by an independent U(0.95, 1.05) draw to mimic bid/ask noise,
so identical inputs can return different quotes. Pass a seeded
``random.Random`` (or any object with ``uniform(a, b)``) for repeatable
results.
"""

import math
import random
from decimal import Decimal

from app.core.constants import FinancialPrecision, PricingConstants
from app.schemas.strategy import Greeks, PricingQuote

# Abramowitz-Stegun 7.1.26 coefficients (max error 1.5e-7)
_ERF_P = 0.3275911
_ERF_A1 = 0.254829592
_ERF_A2 = -0.284496736
_ERF_A3 = 1.421413741
_ERF_A4 = -1.453152027
_ERF_A5 = 1.061405429

_SQRT_2 = math.sqrt(2.0)
_SQRT_2PI = math.sqrt(2.0 * math.pi)


def round_half_up(value: float, places: int) -> float:
    """Round with ties away from zero instead of Python's banker's rounding."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=FinancialPrecision.ROUNDING_MODE))


def erf(x: float) -> float:
    """Rational approximation of the error function."""
    sign = 1.0 if x >= 0 else -1.0
    x = abs(x)
    t = 1.0 / (1.0 + _ERF_P * x)
    y = 1.0 - (((((_ERF_A5 * t + _ERF_A4) * t) + _ERF_A3) * t + _ERF_A2) * t + _ERF_A1) * t * math.exp(-x * x)
    return sign * y


def norm_cdf(x: float) -> float:
    """Standard normal cumulative distribution."""
    return 0.5 * (1.0 + erf(x / _SQRT_2))


def norm_pdf(x: float) -> float:
    """Standard normal density."""
    return math.exp(-0.5 * x * x) / _SQRT_2PI


def _d1_d2(spot: float, strike: float, years: float, volatility: float, risk_free_rate: float) -> tuple[float, float]:
    sqrt_t = math.sqrt(years)
    d1 = (math.log(spot / strike) + (risk_free_rate + 0.5 * volatility**2) * years) / (volatility * sqrt_t)
    return d1, d1 - volatility * sqrt_t


def fair_value(
    spot: float,
    strike: float,
    years: float,
    volatility: float,
    risk_free_rate: float,
    is_call: bool,
) -> float:
    """Undisturbed Black-Scholes price for ``years > 0``."""
    d1, d2 = _d1_d2(spot, strike, years, volatility, risk_free_rate)
    discounted_strike = strike * math.exp(-risk_free_rate * years)
    if is_call:
        return spot * norm_cdf(d1) - discounted_strike * norm_cdf(d2)
    return discounted_strike * norm_cdf(-d2) - spot * norm_cdf(-d1)


class OptionPricer:
    """Prices single options and returns a noisy quote with rounded Greeks."""

    def __init__(self, rng: random.Random | None = None) -> None:
        """Initialize the pricer.

        Args:
            rng: Random source for the market-noise multiplier. Defaults to a
                fresh unseeded ``random.Random``.
        """
        self._rng = rng or random.Random()

    def price(
        self,
        spot: float,
        strike: float,
        days_to_expiry: float,
        volatility: float = 0.25,
        risk_free_rate: float = 0.05,
        is_call: bool = True,
    ) -> PricingQuote:
        """
        Price a European option.

        Args:
            spot: Current underlying price
            strike: Strike price
            days_to_expiry: Calendar days to expiration
            volatility: Annualized volatility (0.35 = 35%)
            risk_free_rate: Annualized risk-free rate
            is_call: True for a call, False for a put

        Returns:
            PricingQuote with the adjusted price and Greeks
        """
        years = days_to_expiry / PricingConstants.DAYS_PER_YEAR

        if years <= 0:
            return self._expired_quote(spot, strike, is_call)

        sqrt_t = math.sqrt(years)
        d1, d2 = _d1_d2(spot, strike, years, volatility, risk_free_rate)
        nd1 = norm_pdf(d1)
        discount = math.exp(-risk_free_rate * years)

        price = fair_value(spot, strike, years, volatility, risk_free_rate, is_call)
        if is_call:
            delta = norm_cdf(d1)
            carry = norm_cdf(d2)
        else:
            delta = norm_cdf(d1) - 1.0
            carry = norm_cdf(-d2)

        gamma = nd1 / (spot * volatility * sqrt_t)
        theta_annual = -(spot * nd1 * volatility) / (2.0 * sqrt_t) - risk_free_rate * strike * discount * carry
        vega = spot * nd1 * sqrt_t / 100.0  # Per 1% change in volatility

        noise = PricingConstants.MARKET_NOISE
        adjusted = price * self._rng.uniform(1.0 - noise, 1.0 + noise)

        return PricingQuote(
            price=max(adjusted, PricingConstants.MIN_TICK),
            greeks=Greeks(
                delta=round_half_up(delta, FinancialPrecision.DELTA_PLACES),
                gamma=round_half_up(gamma, FinancialPrecision.GAMMA_PLACES),
                theta=round_half_up(theta_annual, FinancialPrecision.THETA_PLACES) / PricingConstants.DAYS_PER_YEAR,
                vega=round_half_up(vega, FinancialPrecision.VEGA_PLACES),
            ),
        )

    @staticmethod
    def _expired_quote(spot: float, strike: float, is_call: bool) -> PricingQuote:
        """Intrinsic value and step delta for contracts with no time left."""
        if is_call:
            intrinsic = max(spot - strike, 0.0)
            delta = 1.0 if spot > strike else 0.0
        else:
            intrinsic = max(strike - spot, 0.0)
            delta = -1.0 if spot < strike else 0.0
        return PricingQuote(
            price=intrinsic,
            greeks=Greeks(delta=delta, gamma=0.0, theta=0.0, vega=0.0),
        )
