"""
Odds calculation

Odds are inversely proportional to a comedian's points relative to the
average of the event's line-up: favorites pay less. Easier prediction types
are priced lower. The quoted odds are stored with the bet and never
recomputed afterwards.
"""
import math
from typing import Optional, Sequence

from loguru import logger

from data_pipeline.schemas import EventSchema, PredictionType
from ranking.calculator import RankingSnapshot


MIN_ODDS = 1.0
MAX_ODDS = 10.0

# Odds multiplier per prediction type
TYPE_MULTIPLIERS = {
    PredictionType.WINNER: 1.0,
    PredictionType.TOP3: 0.5,
    PredictionType.FINALIST: 0.3,
}

# Brands of the four major competitions that accept predictions
MAJOR_BRANDS = ("M-1", "R-1", "THE SECOND", "キングオブコント")


def is_predictable_event(event: Optional[EventSchema]) -> bool:
    """Only the major competitions accept predictions"""
    if event is None or not event.brand:
        return False
    return event.brand in MAJOR_BRANDS


def get_type_multiplier(prediction_type: PredictionType) -> float:
    return TYPE_MULTIPLIERS.get(PredictionType(prediction_type), 1.0)


def clamp_odds(value: float) -> float:
    """Clamp to [1.0, 10.0] and round half up to one decimal"""
    odds = max(MIN_ODDS, min(MAX_ODDS, value))
    return math.floor(odds * 10 + 0.5) / 10


def compute_odds(
    comedian_id: str,
    event_id: str,
    prediction_type: PredictionType,
    snapshot: RankingSnapshot,
) -> float:
    """
    Odds for betting on one comedian at one event.

    The reference population is every performance row of the event; a row
    whose comedian is unknown counts as 0 points. Returns 1.0 when there is
    nothing to compare against (unknown comedian, empty line-up, or a
    line-up with no points at all).
    """
    comedian = snapshot.get(comedian_id)
    if comedian is None:
        return MIN_ODDS

    line_up = snapshot.performances_for_event(event_id)
    if not line_up:
        return MIN_ODDS

    average_points = sum(snapshot.total_points(p.comedian_id) for p in line_up) / len(line_up)
    if average_points == 0:
        return MIN_ODDS

    popularity_ratio = comedian.total_points / average_points
    if popularity_ratio == 0:
        # no points against a scoring field: longest odds
        base_odds = math.inf
    else:
        base_odds = 1 / popularity_ratio

    odds = clamp_odds(base_odds * get_type_multiplier(prediction_type))
    logger.debug(
        f"Odds {comedian_id}@{event_id} ({PredictionType(prediction_type).value}): "
        f"ratio={popularity_ratio:.3f} -> {odds}"
    )
    return odds


def quote_selection(
    selected_ids: Sequence[str],
    event_id: str,
    prediction_type: PredictionType,
    snapshot: RankingSnapshot,
) -> float:
    """Odds shown for a selection: priced by the first selected comedian"""
    if not selected_ids:
        return MIN_ODDS
    return compute_odds(selected_ids[0], event_id, prediction_type, snapshot)
