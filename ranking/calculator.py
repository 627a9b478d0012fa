"""
Comedy competition ranking calculator

- Event tier multiplier x place-finish base points
- Only the furthest round of a series counts
- Only events strictly in the past count
- Totals are recomputed from the full history on every call
"""
import json
from datetime import datetime, date
from typing import List, Dict, Any, Optional, Iterable, Mapping, Tuple
from dataclasses import dataclass, field
from collections import defaultdict
from loguru import logger

from data_pipeline.normalizer import normalize_snapshot
from data_pipeline.schemas import ComedianSchema, EventSchema, PerformanceSchema
from ranking.series import select_counting_performances
from ranking.tiers import TierConfig, DEFAULT_TIER_CONFIG, round_half_up


# =====================================================
# Data classes
# =====================================================

@dataclass(frozen=True)
class CountedResult:
    """One result that contributes to a comedian's total"""
    event: EventSchema
    performance: PerformanceSchema
    points: int


@dataclass
class RankedComedian:
    """Comedian with derived ranking fields"""
    comedian: ComedianSchema
    total_points: int = 0
    rank: int = 0
    counted_results: List[CountedResult] = field(default_factory=list)
    gold_count: int = 0
    silver_count: int = 0
    bronze_count: int = 0

    @property
    def id(self) -> str:
        return self.comedian.id

    @property
    def name(self) -> str:
        return self.comedian.name

    def to_dict(self) -> Dict[str, Any]:
        """The caller's comedian record with totalPoints and rank merged in"""
        data = self.comedian.model_dump()
        data["totalPoints"] = self.total_points
        data["rank"] = self.rank
        return data


@dataclass
class RankingSnapshot:
    """
    Ranking computed from one snapshot of raw rows.

    Read-only once built. Events and performances are passed through so odds
    can be priced from the same snapshot.
    """
    comedians: Dict[str, RankedComedian]
    ranking: List[RankedComedian]
    events: Dict[str, EventSchema]
    performances: Tuple[PerformanceSchema, ...]
    as_of: date

    def get(self, comedian_id: str) -> Optional[RankedComedian]:
        return self.comedians.get(comedian_id)

    def total_points(self, comedian_id: str) -> int:
        """Total points, 0 for an unknown comedian"""
        ranked = self.comedians.get(comedian_id)
        return ranked.total_points if ranked else 0

    def performances_for_event(self, event_id: str) -> List[PerformanceSchema]:
        return [p for p in self.performances if p.event_id == event_id]

    def comedian_names(self) -> Dict[str, str]:
        return {cid: r.name for cid, r in self.comedians.items()}

    def breakdown(self, comedian_id: str) -> List[CountedResult]:
        """Results behind a comedian's total, best first"""
        ranked = self.comedians.get(comedian_id)
        if not ranked:
            return []
        return sorted(ranked.counted_results, key=lambda r: -r.points)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "comedians": {cid: r.to_dict() for cid, r in self.comedians.items()},
            "events": {eid: e.model_dump(mode="json", by_alias=True) for eid, e in self.events.items()},
            "performances": [p.model_dump(mode="json") for p in self.performances],
        }


# =====================================================
# Point calculation
# =====================================================

def calculate_performance_points(
    performance: PerformanceSchema,
    event: EventSchema,
    tiers: TierConfig = DEFAULT_TIER_CONFIG,
) -> int:
    """
    Points for one performance.

    Formula: round(base points for place x tier multiplier). No tier or no
    final place yields 0.
    """
    if not event.tier or performance.rank is None:
        return 0
    return round_half_up(tiers.base_points(performance.rank) * tiers.multiplier(event.tier))


def calculate_comedian_total_points(
    performances: Iterable[PerformanceSchema],
    events_by_id: Mapping[str, EventSchema],
    today: Optional[date] = None,
    tiers: TierConfig = DEFAULT_TIER_CONFIG,
) -> Tuple[int, List[CountedResult]]:
    """Total points from one comedian's performances"""
    counted = [
        CountedResult(event=event, performance=performance,
                      points=calculate_performance_points(performance, event, tiers))
        for event, performance in select_counting_performances(performances, events_by_id, today)
    ]
    return sum(r.points for r in counted), counted


def compute_ranking(
    comedians: Iterable[ComedianSchema],
    events: Iterable[EventSchema],
    performances: Iterable[PerformanceSchema],
    today: Optional[date] = None,
    tiers: TierConfig = DEFAULT_TIER_CONFIG,
) -> RankingSnapshot:
    """
    Compute every comedian's total and the overall ranking.

    Ranks are 1..N by descending total. Ties keep the input order of
    ``comedians`` (sorted() is stable), so equal totals still get distinct
    ranks.
    """
    today = today or date.today()
    comedian_list = list(comedians)
    events_by_id = {e.id: e for e in events}
    performance_list = tuple(performances)

    by_comedian: Dict[str, List[PerformanceSchema]] = defaultdict(list)
    for p in performance_list:
        by_comedian[p.comedian_id].append(p)

    ranked: Dict[str, RankedComedian] = {}
    for comedian in comedian_list:
        total, counted = calculate_comedian_total_points(
            by_comedian.get(comedian.id, []), events_by_id, today, tiers
        )
        ranked[comedian.id] = RankedComedian(
            comedian=comedian,
            total_points=total,
            counted_results=counted,
            gold_count=sum(1 for r in counted if r.performance.rank == 1),
            silver_count=sum(1 for r in counted if r.performance.rank == 2),
            bronze_count=sum(1 for r in counted if r.performance.rank == 3),
        )

    # stable sort: ties keep input order
    ranking = sorted(ranked.values(), key=lambda r: -r.total_points)
    for i, r in enumerate(ranking, 1):
        r.rank = i

    logger.debug(
        f"Ranking computed: {len(ranking)} comedians, {len(events_by_id)} events, "
        f"{len(performance_list)} performances (as of {today.isoformat()})"
    )

    return RankingSnapshot(
        comedians=ranked,
        ranking=ranking,
        events=events_by_id,
        performances=performance_list,
        as_of=today,
    )


# =====================================================
# Ranking calculator
# =====================================================

class RankingCalculator:
    """Comedy ranking calculator"""

    def __init__(self, data_file: str = None, tiers: TierConfig = DEFAULT_TIER_CONFIG):
        self.tiers = tiers
        self.comedians: List[ComedianSchema] = []
        self.events: List[EventSchema] = []
        self.performances: List[PerformanceSchema] = []

        if data_file:
            self.load_data(data_file)

    def load_data(self, data_file: str):
        """Load a JSON snapshot file"""
        with open(data_file, "r", encoding="utf-8") as f:
            data = json.load(f)

        self.load_from_data(data)

    def load_from_data(self, data: dict):
        """Load rows from memory

        Args:
            data: {"comedians": [...], "events": [...], "performances": [...]}
        """
        snapshot = normalize_snapshot(
            data.get("comedians") or [],
            data.get("events") or [],
            data.get("performances") or [],
        )
        self.comedians = snapshot.comedians
        self.events = snapshot.events
        self.performances = snapshot.performances

        if snapshot.errors:
            logger.warning(f"Skipped {len(snapshot.errors)} invalid rows")
        logger.info(
            f"Data loaded: {len(self.comedians)} comedians, {len(self.events)} events, "
            f"{len(self.performances)} performances"
        )

    def calculate_rankings(self, today: Optional[date] = None) -> RankingSnapshot:
        """Compute the ranking for the loaded rows"""
        return compute_ranking(self.comedians, self.events, self.performances, today, self.tiers)

    def export_rankings(self, output_file: str, today: Optional[date] = None, top_n: int = 100):
        """Write the ranking to a JSON file"""
        snapshot = self.calculate_rankings(today)

        export_data = {
            "meta": {
                "generated_at": datetime.now().isoformat(),
                "as_of": snapshot.as_of.isoformat(),
                "total_comedians": len(snapshot.ranking),
            },
            "rankings": [
                {
                    "rank": r.rank,
                    "id": r.id,
                    "name": r.name,
                    "points": r.total_points,
                    "results": len(r.counted_results),
                    "medals": {
                        "gold": r.gold_count,
                        "silver": r.silver_count,
                        "bronze": r.bronze_count,
                    },
                    "best_results": [
                        {
                            "event": c.event.name,
                            "date": c.event.event_date.isoformat() if c.event.event_date else None,
                            "tier": c.event.tier,
                            "rank": c.performance.rank,
                            "points": c.points,
                        }
                        for c in snapshot.breakdown(r.id)
                    ],
                }
                for r in snapshot.ranking[:top_n]
            ],
        }

        with open(output_file, "w", encoding="utf-8") as f:
            json.dump(export_data, f, ensure_ascii=False, indent=2)

        logger.info(f"Rankings exported: {output_file}")
        return export_data

    def print_ranking_summary(self, snapshot: RankingSnapshot, title: str = "", top_n: int = 20):
        """Print a ranking table"""
        print(f"\n{'='*60}")
        print(f" {title}")
        print(f"{'='*60}")
        print(f"{'Rank':>4} {'Name':<24} {'Points':>10} {'Res':>4} {'1st':>3} {'2nd':>3} {'3rd':>3}")
        print(f"{'-'*60}")

        for r in snapshot.ranking[:top_n]:
            name = r.name
            if len(name) > 22:
                name = name[:22] + ".."
            print(f"{r.rank:>4} {name:<24} {r.total_points:>10} {len(r.counted_results):>4} "
                  f"{r.gold_count:>3} {r.silver_count:>3} {r.bronze_count:>3}")
