"""
Point-bet predictions: odds quoting and result evaluation
"""
from .odds import (
    compute_odds,
    quote_selection,
    is_predictable_event,
    get_type_multiplier,
    MIN_ODDS,
    MAX_ODDS,
)
from .evaluator import (
    PredictionResult,
    PredictionSummary,
    evaluate,
    evaluate_event_prediction,
    analyze_predictions,
    summarize_results,
)

__all__ = [
    "compute_odds",
    "quote_selection",
    "is_predictable_event",
    "get_type_multiplier",
    "MIN_ODDS",
    "MAX_ODDS",
    "PredictionResult",
    "PredictionSummary",
    "evaluate",
    "evaluate_event_prediction",
    "analyze_predictions",
    "summarize_results",
]
