"""
Data pipeline package

Typed schemas for raw store rows and stored prediction payloads, plus row
normalization. Placement checks live in ``data_pipeline.validators``.
"""

from .schemas import (
    ComedianSchema,
    EventSchema,
    PerformanceSchema,
    PredictionEntrySchema,
    EventPredictionSchema,
    ParsedPredictions,
    PredictionType,
    ValidationResult,
    ValidationError,
    ValidationSeverity,
    parse_prediction_entries,
    max_selections,
)
from .normalizer import NormalizedSnapshot, normalize_snapshot, normalize_event_predictions

__all__ = [
    # Schemas
    "ComedianSchema",
    "EventSchema",
    "PerformanceSchema",
    "PredictionEntrySchema",
    "EventPredictionSchema",
    "ParsedPredictions",
    "PredictionType",
    "ValidationResult",
    "ValidationError",
    "ValidationSeverity",
    "parse_prediction_entries",
    "max_selections",
    # Normalizer
    "NormalizedSnapshot",
    "normalize_snapshot",
    "normalize_event_predictions",
]
