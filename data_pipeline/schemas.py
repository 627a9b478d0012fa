"""
Data pipeline schema definitions

Pydantic models for the raw rows read from the store (comedians, events,
performances) and for the stored prediction payloads.
"""

import json
from pydantic import BaseModel, Field, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError
from typing import Optional, List, Dict, Any, Literal, Tuple, get_args
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from loguru import logger


class ValidationSeverity(str, Enum):
    """Validation error severity"""
    CRITICAL = "critical"   # cannot be used
    HIGH = "high"           # cannot be used, needs manual review
    MEDIUM = "medium"       # usable, show a warning
    LOW = "low"             # usable, log only
    INFO = "info"           # informational


class ValidationError(BaseModel):
    """Validation error"""
    error_type: str = Field(..., description="Error type")
    severity: ValidationSeverity = Field(..., description="Severity")
    message: str = Field(..., description="Error message")
    field: Optional[str] = Field(None, description="Related field")
    value: Optional[Any] = Field(None, description="Offending value")
    suggestion: Optional[str] = Field(None, description="Suggested fix")


class ValidationResult(BaseModel):
    """Validation result"""
    is_valid: bool = Field(default=True, description="Overall validity")
    errors: List[ValidationError] = Field(default_factory=list)
    warnings: List[ValidationError] = Field(default_factory=list)
    pass_rate: float = Field(default=1.0, description="Pass rate (0-1)")
    validated_at: datetime = Field(default_factory=datetime.now)

    @property
    def has_critical_errors(self) -> bool:
        return any(e.severity in [ValidationSeverity.CRITICAL, ValidationSeverity.HIGH] for e in self.errors)

    @property
    def can_save(self) -> bool:
        """Whether the checked data may be stored"""
        return not self.has_critical_errors


# ==================== Enums ====================

EventTier = Literal["S", "A", "B", "C", "D", "E"]
EVENT_TIERS = get_args(EventTier)


class PredictionType(str, Enum):
    """Prediction type"""
    WINNER = "winner"       # names the rank-1 finisher
    TOP3 = "top3"           # named performer finishes rank 3 or better
    FINALIST = "finalist"   # named performer lands in the top half


# Maximum number of performers per prediction type
MAX_SELECTIONS = {
    PredictionType.WINNER: 1,
    PredictionType.TOP3: 3,
    PredictionType.FINALIST: 5,
}


def max_selections(prediction_type: PredictionType) -> int:
    """How many performers one entry of this type may name"""
    return MAX_SELECTIONS[PredictionType(prediction_type)]


# ==================== Core schemas ====================

class ComedianSchema(BaseModel):
    """Comedian (performer) row. Extra columns are kept as-is."""

    id: str = Field(..., min_length=1, description="Comedian ID")
    name: str = Field(default="", description="Display name")

    class Config:
        extra = "allow"

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    @field_validator("name", mode="before")
    @classmethod
    def default_name(cls, v: Any) -> Any:
        return "" if v is None else v


class EventSchema(BaseModel):
    """Event row"""

    id: str = Field(..., min_length=1, description="Event ID")
    name: str = Field(default="", description="Event name")
    event_date: Optional[date] = Field(None, alias="date", description="Event date")
    date_tbd: bool = Field(default=False, description="Date to be determined")
    tier: Optional[EventTier] = Field(None, description="Prestige tier")
    brand: Optional[str] = Field(None, description="Competition brand (M-1, R-1 ...)")
    series_id: Optional[str] = Field(None, description="Groups rounds of one competition")
    round: Optional[str] = Field(None, description="Round label")
    round_order: int = Field(default=0, description="Higher = later round")

    class Config:
        extra = "ignore"
        populate_by_name = True

    @field_validator("id", "series_id", mode="before")
    @classmethod
    def coerce_ids(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    @field_validator("event_date", mode="before")
    @classmethod
    def parse_date(cls, v: Any) -> Any:
        """Keep only the calendar part of ISO timestamps"""
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str):
            v = v.strip()
            if not v:
                return None
            return v[:10]
        return v

    @field_validator("tier", mode="before")
    @classmethod
    def normalize_tier(cls, v: Any) -> Any:
        """Unknown tiers are treated as no tier"""
        if not isinstance(v, str):
            return None
        v = v.strip().upper()
        return v if v in EVENT_TIERS else None

    @field_validator("name", mode="before")
    @classmethod
    def default_name(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("date_tbd", mode="before")
    @classmethod
    def default_date_tbd(cls, v: Any) -> Any:
        return False if v is None else v

    @field_validator("round_order", mode="before")
    @classmethod
    def default_round_order(cls, v: Any) -> Any:
        return 0 if v is None else v


class PerformanceSchema(BaseModel):
    """Performance row: one comedian's appearance at one event"""

    id: Optional[str] = Field(None, description="Performance ID")
    comedian_id: str = Field(..., min_length=1, description="Comedian ID")
    event_id: str = Field(..., min_length=1, description="Event ID")
    rank: Optional[int] = Field(None, description="Final place, None until decided")
    score: Optional[float] = Field(None, description="Judges' score")

    class Config:
        extra = "ignore"

    @field_validator("id", "comedian_id", "event_id", mode="before")
    @classmethod
    def coerce_ids(cls, v: Any) -> Any:
        return str(v) if isinstance(v, int) else v

    @field_validator("rank", mode="before")
    @classmethod
    def unresolved_rank(cls, v: Any) -> Any:
        """Places below 1 mean the result is not final yet"""
        if isinstance(v, (int, float)) and not isinstance(v, bool) and v < 1:
            return None
        return v


class PredictionEntrySchema(BaseModel):
    """One bet inside a stored prediction payload"""

    prediction_type: PredictionType = Field(..., alias="predictionType")
    predicted_comedian_ids: List[str] = Field(..., min_length=1, alias="predictedComedianIds")
    bet_points: float = Field(..., alias="betPoints")
    odds: Optional[float] = Field(None, description="Odds locked in when the bet was placed")

    class Config:
        populate_by_name = True

    @field_validator("predicted_comedian_ids", mode="before")
    @classmethod
    def coerce_ids(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [str(x) if isinstance(x, int) else x for x in v]
        return v

    def to_payload(self) -> Dict[str, Any]:
        """Dict in the stored camelCase shape"""
        return self.model_dump(by_alias=True, mode="json")


class EventPredictionSchema(BaseModel):
    """event_predictions row. ``predictions`` stays opaque until parsed."""

    id: Optional[str] = None
    user_id: Optional[str] = None
    event_id: str = Field(..., min_length=1)
    predictions: Any = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    class Config:
        extra = "ignore"

    @field_validator("id", "user_id", "event_id", "created_at", "updated_at", mode="before")
    @classmethod
    def coerce_strings(cls, v: Any) -> Any:
        if isinstance(v, (int, datetime)):
            return v.isoformat() if isinstance(v, datetime) else str(v)
        return v


# ==================== Stored payload parsing ====================

_ENTRY_LIST = TypeAdapter(List[PredictionEntrySchema])


@dataclass(frozen=True)
class ParsedPredictions:
    """Outcome of decoding a stored predictions payload"""
    status: Literal["ok", "empty", "invalid"]
    entries: Tuple[PredictionEntrySchema, ...] = ()
    error: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.status != "invalid"


def parse_prediction_entries(payload: Any) -> ParsedPredictions:
    """
    Decode a stored predictions payload.

    Accepts the list itself or its JSON text. Anything that is not a list of
    well-formed entries comes back as ``invalid`` with no entries, so a bad
    row never reaches win-condition logic.
    """
    if payload is None:
        return ParsedPredictions(status="empty")

    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except ValueError as e:
            logger.warning(f"Prediction payload is not valid JSON: {e}")
            return ParsedPredictions(status="invalid", error=f"invalid JSON: {e}")

    if not isinstance(payload, list):
        logger.warning(f"Prediction payload is not a list: {type(payload).__name__}")
        return ParsedPredictions(status="invalid", error=f"expected a list, got {type(payload).__name__}")

    if not payload:
        return ParsedPredictions(status="empty")

    try:
        entries = _ENTRY_LIST.validate_python(payload)
    except PydanticValidationError as e:
        logger.warning(f"Prediction payload failed validation: {e.error_count()} error(s)")
        return ParsedPredictions(status="invalid", error=str(e))

    return ParsedPredictions(status="ok", entries=tuple(entries))
