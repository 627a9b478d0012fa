"""
Row normalization module
- Turns raw store rows into typed schemas
- Invalid rows are skipped and reported instead of failing the whole load
"""
from typing import Any, Iterable, List, Mapping, Type, TypeVar, Union
from dataclasses import dataclass, field
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from loguru import logger

from .schemas import (
    ComedianSchema,
    EventSchema,
    PerformanceSchema,
    EventPredictionSchema,
    ValidationError,
    ValidationSeverity,
)

T = TypeVar("T", bound=BaseModel)

Rows = Union[Iterable[Mapping[str, Any]], Mapping[str, Mapping[str, Any]]]


@dataclass
class NormalizedSnapshot:
    """Typed rows ready for the ranking engine"""
    comedians: List[ComedianSchema] = field(default_factory=list)
    events: List[EventSchema] = field(default_factory=list)
    performances: List[PerformanceSchema] = field(default_factory=list)
    errors: List[ValidationError] = field(default_factory=list)


def _iter_rows(rows: Rows) -> Iterable[Any]:
    # id -> row mappings are accepted as well as plain lists
    if isinstance(rows, Mapping):
        return rows.values()
    return rows


def normalize_rows(rows: Rows, schema: Type[T], table: str, errors: List[ValidationError]) -> List[T]:
    """
    Validate rows against a schema.

    Rows that fail are left out and appended to ``errors``.
    """
    normalized: List[T] = []
    for index, row in enumerate(_iter_rows(rows or [])):
        if isinstance(row, schema):
            normalized.append(row)
            continue
        try:
            normalized.append(schema.model_validate(row))
        except PydanticValidationError as e:
            first = e.errors()[0]
            errors.append(ValidationError(
                error_type="SCHEMA_VALIDATION_FAILED",
                severity=ValidationSeverity.HIGH,
                message=f"{table}[{index}]: {first['msg']}",
                field=".".join(str(loc) for loc in first["loc"]),
                value=first.get("input"),
                suggestion="Check the row in the store",
            ))
            logger.warning(f"Skipping invalid {table} row #{index}: {first['msg']}")
    return normalized


def normalize_snapshot(comedian_rows: Rows, event_rows: Rows, performance_rows: Rows) -> NormalizedSnapshot:
    """Normalize the three raw collections in one pass"""
    errors: List[ValidationError] = []
    snapshot = NormalizedSnapshot(
        comedians=normalize_rows(comedian_rows, ComedianSchema, "comedians", errors),
        events=normalize_rows(event_rows, EventSchema, "events", errors),
        performances=normalize_rows(performance_rows, PerformanceSchema, "performances", errors),
        errors=errors,
    )
    logger.debug(
        f"Normalized {len(snapshot.comedians)} comedians, {len(snapshot.events)} events, "
        f"{len(snapshot.performances)} performances ({len(errors)} skipped)"
    )
    return snapshot


def normalize_event_predictions(rows: Rows) -> List[EventPredictionSchema]:
    """Normalize event_predictions rows, skipping broken ones"""
    errors: List[ValidationError] = []
    return normalize_rows(rows, EventPredictionSchema, "event_predictions", errors)

