"""
Prediction evaluation

Decides whether a stored prediction entry won once an event's results are
in, and summarizes a user's prediction history.

Win conditions:
- winner:   the rank-1 finisher is one of the predicted comedians
- top3:     at least one predicted comedian finished rank 3 or better
- finalist: at least one predicted comedian is in the first ceil(N/2)
            ranked entries. This top-half rule stands in for a real
            finals designation, which the data does not record.
"""
import math
from typing import Optional, List, Iterable, Mapping, Sequence
from dataclasses import dataclass, field, asdict
from loguru import logger

from data_pipeline.schemas import (
    EventPredictionSchema,
    PerformanceSchema,
    PredictionEntrySchema,
    PredictionType,
    parse_prediction_entries,
)
from ranking.calculator import RankingSnapshot


UNDETERMINED = "undetermined"
UNKNOWN_NAME = "unknown"


@dataclass
class PredictionResult:
    """Evaluated prediction entry (never stored)"""
    prediction_type: PredictionType
    is_won: bool
    bet_points: float
    odds: float
    payout: float
    profit: float
    details: str
    predicted_comedian_names: List[str] = field(default_factory=list)
    actual_comedian_names: List[str] = field(default_factory=list)
    event_id: Optional[str] = None
    event_name: Optional[str] = None
    created_at: Optional[str] = None

    def to_dict(self):
        data = asdict(self)
        data["prediction_type"] = PredictionType(self.prediction_type).value
        return data


@dataclass
class PredictionSummary:
    """Aggregate numbers for a list of results"""
    total: int = 0
    won: int = 0
    win_rate: float = 0.0  # percent
    total_bet: float = 0.0
    total_payout: float = 0.0
    total_profit: float = 0.0

    def to_dict(self):
        return asdict(self)


# =====================================================
# Standings
# =====================================================

def sorted_standings(performances: Iterable[PerformanceSchema]) -> List[PerformanceSchema]:
    """Ranked performances, best place first"""
    ranked = [p for p in performances if p.rank is not None]
    return sorted(ranked, key=lambda p: p.rank)


def actual_outcome(prediction_type: PredictionType, standings: Sequence[PerformanceSchema]) -> List[PerformanceSchema]:
    """The observed set a prediction of this type is checked against"""
    prediction_type = PredictionType(prediction_type)

    if prediction_type == PredictionType.WINNER:
        if standings and standings[0].rank == 1:
            return [standings[0]]
        return []

    if prediction_type == PredictionType.TOP3:
        return [p for p in standings if p.rank <= 3]

    if prediction_type == PredictionType.FINALIST:
        finalist_count = math.ceil(len(standings) / 2)
        return list(standings[:finalist_count])

    return []


# =====================================================
# Evaluation
# =====================================================

def _names(ids: Iterable[str], names: Mapping[str, str]) -> List[str]:
    return [names.get(cid) or UNKNOWN_NAME for cid in ids]


def get_prediction_details(
    prediction_type: PredictionType,
    predicted_names: Sequence[str],
    actual_names: Sequence[str],
) -> str:
    """Trace line: what was predicted vs what happened"""
    prediction_type = PredictionType(prediction_type)
    predicted = ", ".join(predicted_names)
    actual = ", ".join(actual_names) or UNDETERMINED

    if prediction_type == PredictionType.WINNER:
        return f"Predicted: {predicted} / Actual winner: {actual}"
    if prediction_type == PredictionType.TOP3:
        return f"Predicted: {predicted} / Actual top 3: {actual}"
    return f"Predicted: {predicted} / Actual finalists: {actual}"


def evaluate(
    entry: PredictionEntrySchema,
    performances: Iterable[PerformanceSchema],
    comedian_names: Mapping[str, str],
) -> PredictionResult:
    """
    Evaluate one stored prediction entry against an event's performances.

    payout = bet x odds when won, else 0; profit = payout - bet. Entries
    stored without odds (or with 0) pay at 1.0.
    """
    standings = sorted_standings(performances)
    outcome = actual_outcome(entry.prediction_type, standings)
    outcome_ids = {p.comedian_id for p in outcome}

    is_won = any(cid in outcome_ids for cid in entry.predicted_comedian_ids)
    odds = entry.odds or 1.0
    payout = entry.bet_points * odds if is_won else 0
    profit = payout - entry.bet_points

    # unknown ids are dropped from the trace but kept (as "unknown") in the name list
    known_predicted = [comedian_names[cid] for cid in entry.predicted_comedian_ids if comedian_names.get(cid)]
    actual_names = _names((p.comedian_id for p in outcome), comedian_names)

    return PredictionResult(
        prediction_type=entry.prediction_type,
        is_won=is_won,
        bet_points=entry.bet_points,
        odds=odds,
        payout=payout,
        profit=profit,
        details=get_prediction_details(entry.prediction_type, known_predicted, actual_names),
        predicted_comedian_names=_names(entry.predicted_comedian_ids, comedian_names),
        actual_comedian_names=actual_names,
    )


def evaluate_event_prediction(
    record: EventPredictionSchema,
    snapshot: RankingSnapshot,
    comedian_names: Optional[Mapping[str, str]] = None,
) -> List[PredictionResult]:
    """
    Evaluate every entry of one stored event_predictions row.

    Rows for unknown events and rows whose payload cannot be parsed yield
    no results.
    """
    event = snapshot.events.get(record.event_id)
    if event is None:
        logger.debug(f"Prediction {record.id}: unknown event {record.event_id}, skipped")
        return []

    parsed = parse_prediction_entries(record.predictions)
    if not parsed.is_valid:
        logger.warning(f"Prediction {record.id}: unreadable payload treated as empty ({parsed.error})")
        return []

    names = comedian_names if comedian_names is not None else snapshot.comedian_names()
    performances = snapshot.performances_for_event(event.id)

    results = []
    for entry in parsed.entries:
        result = evaluate(entry, performances, names)
        result.event_id = event.id
        result.event_name = event.name
        result.created_at = record.created_at
        results.append(result)
    return results


def analyze_predictions(
    records: Iterable[EventPredictionSchema],
    snapshot: RankingSnapshot,
) -> List[PredictionResult]:
    """Evaluate a user's whole prediction history"""
    names = snapshot.comedian_names()
    results: List[PredictionResult] = []
    for record in records:
        results.extend(evaluate_event_prediction(record, snapshot, names))
    logger.info(f"Evaluated {len(results)} prediction entries")
    return results


def summarize_results(results: Sequence[PredictionResult]) -> PredictionSummary:
    """Totals for the prediction analysis view"""
    total = len(results)
    won = sum(1 for r in results if r.is_won)
    return PredictionSummary(
        total=total,
        won=won,
        win_rate=(won / total) * 100 if total > 0 else 0.0,
        total_bet=sum(r.bet_points for r in results),
        total_payout=sum(r.payout for r in results),
        total_profit=sum(r.profit for r in results),
    )
