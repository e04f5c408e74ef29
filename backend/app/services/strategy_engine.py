"""Strategy Synthesis Engine - multi-leg strategies from a theoretical option chain.

The engine prices every leg with the Black-Scholes model (services/pricing.py)
against a strike ladder and expiration calendar derived from the spot price
(services/contract_space.py). It does not need a live option chain.

All strategies of one invocation share the same strike ladder, primary
expiry and implied-volatility draw (iv = 0.35 + U(0, 0.15)); the long
straddle is priced at iv + 0.05.

Sign conventions:
- Net premium: sold legs add, bought legs subtract (positive = credit).
- Aggregate Greeks follow each structure's premium convention.
- Money fields are per contract set (x100), rounded half-up to whole dollars;
  losses are negative.
"""

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date

from app.core.config import settings
from app.core.constants import (
    BEAR_CALL_SPREAD,
    BULL_CALL_SPREAD,
    BULL_PUT_SPREAD,
    CASH_SECURED_PUT,
    COVERED_CALL,
    IRON_CONDOR,
    LONG_STRADDLE,
    MIN_CONDOR_CREDIT,
    MIN_DEBIT_SPREAD_PROFIT,
    MIN_SPREAD_CREDIT,
    STRATEGY_CATALOG,
    ContractConstants,
    PricingConstants,
    StrategyHeuristic,
)
from app.schemas.strategy import (
    Greeks,
    LegAction,
    OptionType,
    PricingQuote,
    Strategy,
    StrategyLeg,
)
from app.services.contract_space import (
    first_strike,
    generate_strikes,
    market_today,
    primary_expiry,
)
from app.services.pricing import OptionPricer, round_half_up

logger = logging.getLogger(__name__)

# Minimum distance between the short and long strikes of a spread
WING_OFFSET = 10.0
# Straddle strike must sit within this distance of spot
ATM_TOLERANCE = 5.0


def format_price(value: float) -> str:
    """Price without trailing zeros: 140.0 -> '140', 142.5 -> '142.5'."""
    return f"{value:.2f}".rstrip("0").rstrip(".")


def dollars(per_share: float) -> float:
    """Per-share amount scaled to one contract and rounded to whole dollars."""
    return round_half_up(per_share * ContractConstants.MULTIPLIER, 0)


@dataclass(frozen=True)
class ScanContext:
    """Inputs shared by every strategy of one synthesis run."""

    spot: float
    ticker: str
    strikes: list[float]
    expiry: date
    dte: int
    iv: float


class StrategyEngine:
    """Builds the fixed strategy catalog for a spot price and DTE window."""

    def __init__(
        self,
        pricer: OptionPricer | None = None,
        rng: random.Random | None = None,
        risk_free_rate: float | None = None,
    ) -> None:
        """Initialize the strategy engine.

        Args:
            pricer: Option pricer; defaults to one sharing ``rng``
            rng: Random source for the IV draw and heuristic score jitter
            risk_free_rate: Annual rate for pricing; defaults to settings
        """
        self._rng = rng or random.Random()
        self._pricer = pricer or OptionPricer(self._rng)
        self._risk_free_rate = settings.risk_free_rate if risk_free_rate is None else risk_free_rate

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------

    def _price(self, ctx: ScanContext, strike: float, option_type: OptionType, iv: float | None = None) -> PricingQuote:
        return self._pricer.price(
            spot=ctx.spot,
            strike=strike,
            days_to_expiry=ctx.dte,
            volatility=ctx.iv if iv is None else iv,
            risk_free_rate=self._risk_free_rate,
            is_call=option_type == OptionType.CALL,
        )

    @staticmethod
    def _leg(
        ctx: ScanContext,
        option_type: OptionType,
        action: LegAction,
        strike: float,
        quote: PricingQuote,
    ) -> StrategyLeg:
        """Create a leg carrying the quote's price and Greeks."""
        return StrategyLeg(
            kind=option_type,
            action=action,
            strike=strike,
            expiry=ctx.expiry,
            quantity=ContractConstants.DEFAULT_QUANTITY,
            premium=quote.price,
            **quote.greeks.model_dump(),
        )

    @staticmethod
    def _combine_greeks(terms: list[tuple[int, PricingQuote]], extra_delta: float = 0.0) -> Greeks:
        """
        Sum ``sign * greek`` across quotes.

        Args:
            terms: (sign, quote) pairs with sign +1 or -1
            extra_delta: Delta contributed by stock held alongside the options

        Returns:
            Aggregate Greeks
        """
        totals = {"delta": extra_delta, "gamma": 0.0, "theta": 0.0, "vega": 0.0}
        for sign, quote in terms:
            for greek_name, value in quote.greeks.model_dump().items():
                totals[greek_name] += sign * value
        return Greeks(**totals)

    def _scores(self, heuristic: StrategyHeuristic) -> dict[str, float]:
        """Jittered presentation scores; not derived from the pricing model."""
        return {
            "confidence": heuristic.base_confidence + self._rng.uniform(0.0, heuristic.confidence_jitter),
            "probability_of_profit": heuristic.base_pop + self._rng.uniform(0.0, heuristic.pop_jitter),
        }

    def template_for(self, heuristic: StrategyHeuristic) -> Callable[[ScanContext], Strategy | None]:
        """Template method for a catalog entry: 'Bull Put Spread' -> ``_algorithm_bull_put_spread``."""
        return getattr(self, "_algorithm_" + heuristic.name.lower().replace(" ", "_"))

    def _strategy(self, heuristic: StrategyHeuristic, **fields) -> Strategy:
        return Strategy(
            id=heuristic.id,
            name=heuristic.name,
            category=heuristic.category,
            **self._scores(heuristic),
            **fields,
        )

    # ------------------------------------------------------------------
    # Strategy templates
    # ------------------------------------------------------------------

    def _algorithm_bull_put_spread(self, ctx: ScanContext) -> Strategy | None:
        """
        Bull Put Spread (bullish credit spread).

        Sell an OTM put below 0.93 x spot, buy a put more than $10 lower.
        Offered only when the net credit exceeds $0.05.
        """
        short_strike = first_strike(ctx.strikes, lambda s: s < ctx.spot * 0.93, 2)
        long_strike = first_strike(ctx.strikes, lambda s: s < short_strike - WING_OFFSET, 1)

        short_put = self._price(ctx, short_strike, OptionType.PUT)
        long_put = self._price(ctx, long_strike, OptionType.PUT)

        credit = short_put.price - long_put.price
        if credit <= MIN_SPREAD_CREDIT:
            logger.debug(f"Bull Put Spread: credit {credit:.2f} <= {MIN_SPREAD_CREDIT}, skipped")
            return None

        max_loss = (short_strike - long_strike) - credit

        return self._strategy(
            BULL_PUT_SPREAD,
            max_profit=dollars(credit),
            max_loss=-dollars(max_loss),
            capital_required=dollars(abs(max_loss)),
            description=(
                f"Sell {format_price(short_strike)}P, Buy {format_price(long_strike)}P. "
                f"Profit if {ctx.ticker} stays above ${format_price(short_strike)} by {ctx.expiry.isoformat()}"
            ),
            legs=[
                self._leg(ctx, OptionType.PUT, LegAction.SELL, short_strike, short_put),
                self._leg(ctx, OptionType.PUT, LegAction.BUY, long_strike, long_put),
            ],
            greeks=self._combine_greeks([(1, short_put), (-1, long_put)]),
            break_even_points=[short_strike - credit],
        )

    def _algorithm_iron_condor(self, ctx: ScanContext) -> Strategy | None:
        """
        Iron Condor (neutral, four legs).

        Short call above 1.07 x spot with a long call more than $10 higher;
        short put below 0.93 x spot with a long put more than $10 lower.
        Offered only when the combined credit exceeds $0.10.
        """
        short_call_strike = first_strike(ctx.strikes, lambda s: s > ctx.spot * 1.07, 6)
        long_call_strike = first_strike(ctx.strikes, lambda s: s > short_call_strike + WING_OFFSET, 7)
        short_put_strike = first_strike(ctx.strikes, lambda s: s < ctx.spot * 0.93, 2)
        long_put_strike = first_strike(ctx.strikes, lambda s: s < short_put_strike - WING_OFFSET, 1)

        short_call = self._price(ctx, short_call_strike, OptionType.CALL)
        long_call = self._price(ctx, long_call_strike, OptionType.CALL)
        short_put = self._price(ctx, short_put_strike, OptionType.PUT)
        long_put = self._price(ctx, long_put_strike, OptionType.PUT)

        credit = (short_call.price - long_call.price) + (short_put.price - long_put.price)
        if credit <= MIN_CONDOR_CREDIT:
            logger.debug(f"Iron Condor: credit {credit:.2f} <= {MIN_CONDOR_CREDIT}, skipped")
            return None

        wing_width = max(long_call_strike - short_call_strike, short_put_strike - long_put_strike)
        max_loss = wing_width - credit

        return self._strategy(
            IRON_CONDOR,
            max_profit=dollars(credit),
            max_loss=-dollars(max_loss),
            capital_required=dollars(abs(max_loss)),
            description=(
                f"Trade {ctx.ticker} sideways between ${format_price(short_put_strike)} and "
                f"${format_price(short_call_strike)} by {ctx.expiry.isoformat()}"
            ),
            legs=[
                self._leg(ctx, OptionType.CALL, LegAction.SELL, short_call_strike, short_call),
                self._leg(ctx, OptionType.CALL, LegAction.BUY, long_call_strike, long_call),
                self._leg(ctx, OptionType.PUT, LegAction.SELL, short_put_strike, short_put),
                self._leg(ctx, OptionType.PUT, LegAction.BUY, long_put_strike, long_put),
            ],
            greeks=self._combine_greeks([(1, short_call), (-1, long_call), (1, short_put), (-1, long_put)]),
            break_even_points=[short_put_strike - credit, short_call_strike + credit],
        )

    def _algorithm_cash_secured_put(self, ctx: ScanContext) -> Strategy:
        """Cash Secured Put: sell one put below 0.95 x spot, fully collateralized."""
        strike = first_strike(ctx.strikes, lambda s: s < ctx.spot * 0.95, 3)
        put = self._price(ctx, strike, OptionType.PUT)

        return self._strategy(
            CASH_SECURED_PUT,
            max_profit=dollars(put.price),
            max_loss=-dollars(strike - put.price),
            capital_required=dollars(strike),
            description=(
                f"Sell {format_price(strike)}P. Collect premium or buy {ctx.ticker} at "
                f"${format_price(strike)} discount by {ctx.expiry.isoformat()}"
            ),
            legs=[self._leg(ctx, OptionType.PUT, LegAction.SELL, strike, put)],
            greeks=put.greeks,
            break_even_points=[strike - put.price],
        )

    def _algorithm_long_straddle(self, ctx: ScanContext) -> Strategy:
        """
        Long Straddle (volatility play).

        Buy a call and a put at the strike nearest spot (within $5), priced at
        a volatility premium over the shared IV. Upside is unbounded and is
        reported with the sentinel max profit.
        """
        near_spot = [s for s in ctx.strikes if abs(s - ctx.spot) < ATM_TOLERANCE]
        if near_spot:
            strike = min(near_spot, key=lambda s: abs(s - ctx.spot))
        else:
            strike = first_strike(ctx.strikes, lambda s: False, 4)

        iv = ctx.iv + PricingConstants.STRADDLE_VOL_PREMIUM
        call = self._price(ctx, strike, OptionType.CALL, iv)
        put = self._price(ctx, strike, OptionType.PUT, iv)
        cost = call.price + put.price

        return self._strategy(
            LONG_STRADDLE,
            max_profit=ContractConstants.UNBOUNDED_PROFIT,
            max_loss=-dollars(cost),
            capital_required=dollars(cost),
            description=(
                f"Buy {format_price(strike)}C and {format_price(strike)}P. Profit if {ctx.ticker} "
                f"moves beyond ${strike + cost:.2f} or ${strike - cost:.2f}"
            ),
            legs=[
                self._leg(ctx, OptionType.CALL, LegAction.BUY, strike, call),
                self._leg(ctx, OptionType.PUT, LegAction.BUY, strike, put),
            ],
            greeks=self._combine_greeks([(1, call), (1, put)]),
            break_even_points=[strike - cost, strike + cost],
        )

    def _algorithm_covered_call(self, ctx: ScanContext) -> Strategy:
        """Covered Call: own 100 shares and sell one call above 1.05 x spot."""
        strike = first_strike(ctx.strikes, lambda s: s > ctx.spot * 1.05, 6)
        call = self._price(ctx, strike, OptionType.CALL)

        return self._strategy(
            COVERED_CALL,
            max_profit=dollars(strike - ctx.spot + call.price),
            max_loss=-dollars(ctx.spot - call.price),
            capital_required=dollars(ctx.spot),
            description=(
                f"Own 100 shares of {ctx.ticker}, sell {format_price(strike)}C. "
                f"Cap gains at ${format_price(strike)}, collect premium"
            ),
            legs=[self._leg(ctx, OptionType.CALL, LegAction.SELL, strike, call)],
            # Short call plus one delta per share of stock owned
            greeks=self._combine_greeks([(-1, call)], extra_delta=1.0),
            break_even_points=[ctx.spot - call.price],
        )

    def _algorithm_bear_call_spread(self, ctx: ScanContext) -> Strategy | None:
        """
        Bear Call Spread (bearish credit spread).

        Sell a call above 1.02 x spot, buy a call more than $10 higher.
        Offered only when the net credit exceeds $0.05.
        """
        short_strike = first_strike(ctx.strikes, lambda s: s > ctx.spot * 1.02, 5)
        long_strike = first_strike(ctx.strikes, lambda s: s > short_strike + WING_OFFSET, 6)

        short_call = self._price(ctx, short_strike, OptionType.CALL)
        long_call = self._price(ctx, long_strike, OptionType.CALL)

        credit = short_call.price - long_call.price
        if credit <= MIN_SPREAD_CREDIT:
            logger.debug(f"Bear Call Spread: credit {credit:.2f} <= {MIN_SPREAD_CREDIT}, skipped")
            return None

        max_loss = (long_strike - short_strike) - credit

        return self._strategy(
            BEAR_CALL_SPREAD,
            max_profit=dollars(credit),
            max_loss=-dollars(max_loss),
            capital_required=dollars(abs(max_loss)),
            description=(
                f"Sell {format_price(short_strike)}C, Buy {format_price(long_strike)}C. "
                f"Profit if {ctx.ticker} stays below ${format_price(short_strike)} by {ctx.expiry.isoformat()}"
            ),
            legs=[
                self._leg(ctx, OptionType.CALL, LegAction.SELL, short_strike, short_call),
                self._leg(ctx, OptionType.CALL, LegAction.BUY, long_strike, long_call),
            ],
            greeks=self._combine_greeks([(1, short_call), (-1, long_call)]),
            break_even_points=[short_strike + credit],
        )

    def _algorithm_bull_call_spread(self, ctx: ScanContext) -> Strategy | None:
        """
        Bull Call Spread (bullish debit spread).

        Buy a call above 1.02 x spot, sell a call more than $10 higher.
        Offered only when it costs a debit and can still earn more than $0.10.
        """
        long_strike = first_strike(ctx.strikes, lambda s: s > ctx.spot * 1.02, 5)
        short_strike = first_strike(ctx.strikes, lambda s: s > long_strike + WING_OFFSET, 6)

        long_call = self._price(ctx, long_strike, OptionType.CALL)
        short_call = self._price(ctx, short_strike, OptionType.CALL)

        debit = long_call.price - short_call.price
        max_profit = (short_strike - long_strike) - debit
        if debit <= 0 or max_profit <= MIN_DEBIT_SPREAD_PROFIT:
            logger.debug(
                f"Bull Call Spread: debit {debit:.2f}, max profit {max_profit:.2f} not tradable, skipped"
            )
            return None

        return self._strategy(
            BULL_CALL_SPREAD,
            max_profit=dollars(max_profit),
            max_loss=-dollars(debit),
            capital_required=dollars(debit),
            description=(
                f"Buy {format_price(long_strike)}C, Sell {format_price(short_strike)}C. "
                f"Profit if {ctx.ticker} rises above ${long_strike + debit:.2f} by {ctx.expiry.isoformat()}"
            ),
            legs=[
                self._leg(ctx, OptionType.CALL, LegAction.BUY, long_strike, long_call),
                self._leg(ctx, OptionType.CALL, LegAction.SELL, short_strike, short_call),
            ],
            greeks=self._combine_greeks([(1, long_call), (-1, short_call)]),
            break_even_points=[long_strike + debit],
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build_context(
        self,
        spot: float,
        ticker: str,
        min_dte: int,
        max_dte: int,
        today: date | None = None,
    ) -> ScanContext:
        """Compute the ladder, primary expiry and IV draw shared by all templates."""
        today = today or market_today()
        expiry = primary_expiry(min_dte, max_dte, today)
        iv = PricingConstants.BASE_IMPLIED_VOL + self._rng.uniform(0.0, PricingConstants.IMPLIED_VOL_JITTER)
        return ScanContext(
            spot=spot,
            ticker=ticker,
            strikes=generate_strikes(spot),
            expiry=expiry,
            dte=(expiry - today).days,
            iv=iv,
        )

    def generate_strategies(
        self,
        spot: float,
        ticker: str,
        min_dte: int = 30,
        max_dte: int = 45,
        today: date | None = None,
    ) -> list[Strategy]:
        """
        Synthesize the strategy catalog for one underlying.

        Args:
            spot: Current underlying price
            ticker: Symbol used in descriptions
            min_dte: Minimum days to expiry of the primary expiration
            max_dte: Maximum days to expiry of the primary expiration
            today: Reference date; defaults to today in the market timezone

        Returns:
            Catalog-ordered strategies that passed their inclusion tests
            (unsorted, unfiltered by risk profile)
        """
        ctx = self.build_context(spot, ticker, min_dte, max_dte, today)
        logger.debug(
            f"Synthesizing {ticker} @ {spot:.2f}: expiry {ctx.expiry} ({ctx.dte} DTE), "
            f"iv {ctx.iv:.3f}, strikes {ctx.strikes[0]}-{ctx.strikes[-1]}"
        )

        strategies = []
        for heuristic in STRATEGY_CATALOG:
            strategy = self.template_for(heuristic)(ctx)
            if strategy:
                strategies.append(strategy)

        logger.info(f"Synthesized {len(strategies)} strategies for {ticker}")
        return strategies
