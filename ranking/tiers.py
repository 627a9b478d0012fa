"""
Tier configuration

Event prestige tiers (S highest ... E lowest) and the place-finish point
schedule. The tables are immutable values handed to the point calculator,
so tests can swap in their own tables without touching module state.
"""
import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional


# =====================================================
# Constants
# =====================================================

# Points multiplier per event tier
TIER_MULTIPLIERS: Mapping[str, float] = MappingProxyType({
    "S": 10,
    "A": 7,
    "B": 5,
    "C": 3.5,
    "D": 2,
    "E": 1,
})

# Base points per finishing place (1st is best)
RANK_POINTS: Mapping[int, int] = MappingProxyType({
    1: 100,
    2: 80,
    3: 60,
    4: 50,
    5: 40,
    6: 30,
    7: 25,
    8: 20,
    9: 15,
    10: 10,
})


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class TierConfig:
    """Lookup tables used by the point calculator"""
    multipliers: Mapping[str, float] = field(default_factory=lambda: TIER_MULTIPLIERS)
    rank_points: Mapping[int, int] = field(default_factory=lambda: RANK_POINTS)

    def __post_init__(self):
        # freeze caller-supplied dicts as well
        object.__setattr__(self, "multipliers", MappingProxyType(dict(self.multipliers)))
        object.__setattr__(self, "rank_points", MappingProxyType(dict(self.rank_points)))

    def base_points(self, rank: int) -> int:
        """
        Base points for a finishing place.

        Places outside the schedule fall back to ``max(0, 10 - (rank - 10) * 2)``,
        so 11th gets 8, 12th gets 6 and 15th onwards gets nothing.
        """
        if rank < 1:
            return 0
        if rank in self.rank_points:
            return self.rank_points[rank]
        return max(0, 10 - (rank - 10) * 2)

    def multiplier(self, tier: Optional[str]) -> float:
        """Tier multiplier, 0 for a missing or unknown tier"""
        if not tier:
            return 0
        return self.multipliers.get(tier, 0)


DEFAULT_TIER_CONFIG = TierConfig()
