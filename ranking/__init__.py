"""
Comedy competition ranking

Tier-weighted place points, series deduplication and overall ranking.
"""
from .tiers import (
    TierConfig,
    DEFAULT_TIER_CONFIG,
    TIER_MULTIPLIERS,
    RANK_POINTS,
)
from .series import is_event_past, select_counting_performances
from .calculator import (
    RankingCalculator,
    RankingSnapshot,
    RankedComedian,
    CountedResult,
    calculate_performance_points,
    calculate_comedian_total_points,
    compute_ranking,
)

__all__ = [
    "TierConfig",
    "DEFAULT_TIER_CONFIG",
    "TIER_MULTIPLIERS",
    "RANK_POINTS",
    "is_event_past",
    "select_counting_performances",
    "RankingCalculator",
    "RankingSnapshot",
    "RankedComedian",
    "CountedResult",
    "calculate_performance_points",
    "calculate_comedian_total_points",
    "compute_ranking",
]
