"""Risk profile filtering and confidence ranking of synthesized strategies."""

import logging

from app.core.constants import RISK_PROFILE_MIN_CONFIDENCE
from app.schemas.strategy import RiskProfile, Strategy, StrategyCategory

logger = logging.getLogger(__name__)


def matches_profile(strategy: Strategy, profile: str) -> bool:
    """Whether ``strategy`` is acceptable for ``profile``.

    Profiles without a confidence floor (``aggressive`` and unrecognized
    values) accept everything.
    """
    min_confidence = RISK_PROFILE_MIN_CONFIDENCE.get(profile)
    if min_confidence is None:
        return True
    if profile == RiskProfile.CONSERVATIVE.value and strategy.category == StrategyCategory.VOLATILITY:
        return False
    return strategy.confidence >= min_confidence


def select_strategies(strategies: list[Strategy], profile: str, max_count: int = 5) -> list[Strategy]:
    """
    Filter strategies by risk profile and keep the most confident ones.

    Args:
        strategies: Synthesized strategies in catalog order
        profile: Risk profile name (conservative, moderate, moderate_aggressive, aggressive)
        max_count: Maximum number of strategies to return

    Returns:
        Strategies sorted by confidence, highest first (ties keep catalog order)
    """
    if profile not in RISK_PROFILE_MIN_CONFIDENCE and profile != RiskProfile.AGGRESSIVE.value:
        logger.info(f"Unrecognized risk profile '{profile}', returning unfiltered strategies")

    eligible = [strategy for strategy in strategies if matches_profile(strategy, profile)]
    ranked = sorted(eligible, key=lambda strategy: strategy.confidence, reverse=True)
    return ranked[: max(max_count, 0)]
