"""
Prediction placement validation

Checks a bet before it is stored. The engine itself accepts any entry; the
rules here (selection limits, positive whole bet points, predictable event)
belong to whoever places the bet.
"""

from typing import List, Dict, Any, Optional
from pydantic import ValidationError as PydanticValidationError
from datetime import datetime
from loguru import logger

from prediction.odds import is_predictable_event, MIN_ODDS, MAX_ODDS
from ranking.calculator import RankingSnapshot
from .schemas import (
    PredictionEntrySchema,
    ValidationResult,
    ValidationError,
    ValidationSeverity,
    max_selections,
)


def _is_whole_positive(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return value > 0 and float(value).is_integer()


class PredictionValidator:
    """
    Placement checks for prediction entries

    - schema shape
    - selection count per prediction type
    - duplicate selections
    - bet points: positive whole number
    - event / line-up checks when a ranking snapshot is given
    """

    def __init__(self, snapshot: Optional[RankingSnapshot] = None):
        self.snapshot = snapshot

    def validate_entry(self, data: Dict[str, Any], event_id: Optional[str] = None) -> ValidationResult:
        """Validate one entry in its stored (camelCase) shape"""
        errors: List[ValidationError] = []
        warnings: List[ValidationError] = []

        try:
            entry = PredictionEntrySchema.model_validate(data)
        except PydanticValidationError as e:
            for error in e.errors():
                errors.append(ValidationError(
                    error_type="SCHEMA_VALIDATION_FAILED",
                    severity=ValidationSeverity.CRITICAL,
                    message=error["msg"],
                    field=".".join(str(loc) for loc in error["loc"]),
                    value=error.get("input"),
                    suggestion="Check the entry format",
                ))
            return self._result(errors, warnings)

        ids = entry.predicted_comedian_ids
        limit = max_selections(entry.prediction_type)
        if len(ids) > limit:
            errors.append(ValidationError(
                error_type="TOO_MANY_SELECTIONS",
                severity=ValidationSeverity.HIGH,
                message=f"{entry.prediction_type.value} allows at most {limit} comedian(s), got {len(ids)}",
                field="predictedComedianIds",
                value=len(ids),
                suggestion=f"Select up to {limit}",
            ))

        if len(set(ids)) != len(ids):
            errors.append(ValidationError(
                error_type="DUPLICATE_SELECTION",
                severity=ValidationSeverity.HIGH,
                message="The same comedian is selected more than once",
                field="predictedComedianIds",
                value=ids,
            ))

        raw_bet = data.get("betPoints", data.get("bet_points"))
        if not _is_whole_positive(raw_bet):
            errors.append(ValidationError(
                error_type="INVALID_BET_POINTS",
                severity=ValidationSeverity.CRITICAL,
                message=f"Bet points must be a positive whole number: {raw_bet}",
                field="betPoints",
                value=raw_bet,
                suggestion="Bet at least 1 point",
            ))

        if entry.odds is not None and not (MIN_ODDS <= entry.odds <= MAX_ODDS):
            warnings.append(ValidationError(
                error_type="ODDS_OUT_OF_RANGE",
                severity=ValidationSeverity.MEDIUM,
                message=f"Odds outside [{MIN_ODDS}, {MAX_ODDS}]: {entry.odds}",
                field="odds",
                value=entry.odds,
                suggestion="Re-quote the odds before placing the bet",
            ))

        if self.snapshot is not None and event_id is not None:
            self._validate_against_snapshot(ids, event_id, errors, warnings)

        return self._result(errors, warnings)

    def validate_payload(self, payload: Any, event_id: Optional[str] = None) -> ValidationResult:
        """Validate a whole predictions list; results of all entries are merged"""
        if not isinstance(payload, list):
            return self._result([ValidationError(
                error_type="PAYLOAD_NOT_A_LIST",
                severity=ValidationSeverity.CRITICAL,
                message=f"Predictions must be a list, got {type(payload).__name__}",
                field="predictions",
            )], [])

        errors: List[ValidationError] = []
        warnings: List[ValidationError] = []
        for index, item in enumerate(payload):
            if not isinstance(item, dict):
                errors.append(ValidationError(
                    error_type="ENTRY_NOT_AN_OBJECT",
                    severity=ValidationSeverity.CRITICAL,
                    message=f"Entry #{index} is not an object",
                    field=f"predictions[{index}]",
                ))
                continue
            result = self.validate_entry(item, event_id)
            errors.extend(result.errors)
            warnings.extend(result.warnings)

        result = self._result(errors, warnings)
        if not result.is_valid:
            logger.info(f"Prediction payload rejected: {len(errors)} error(s)")
        return result

    def _validate_against_snapshot(
        self,
        ids: List[str],
        event_id: str,
        errors: List[ValidationError],
        warnings: List[ValidationError],
    ):
        event = self.snapshot.events.get(event_id)
        if event is None:
            errors.append(ValidationError(
                error_type="UNKNOWN_EVENT",
                severity=ValidationSeverity.HIGH,
                message=f"Unknown event: {event_id}",
                field="event_id",
                value=event_id,
            ))
            return

        if not is_predictable_event(event):
            errors.append(ValidationError(
                error_type="EVENT_NOT_PREDICTABLE",
                severity=ValidationSeverity.HIGH,
                message=f"Predictions are not open for this event: {event.name}",
                field="event_id",
                value=event_id,
                suggestion="Only the major competitions accept predictions",
            ))

        line_up = {p.comedian_id for p in self.snapshot.performances_for_event(event_id)}
        for cid in ids:
            if self.snapshot.get(cid) is None:
                errors.append(ValidationError(
                    error_type="UNKNOWN_COMEDIAN",
                    severity=ValidationSeverity.HIGH,
                    message=f"Unknown comedian: {cid}",
                    field="predictedComedianIds",
                    value=cid,
                ))
            elif cid not in line_up:
                warnings.append(ValidationError(
                    error_type="NOT_IN_LINE_UP",
                    severity=ValidationSeverity.LOW,
                    message=f"Comedian {cid} has no performance registered for this event",
                    field="predictedComedianIds",
                    value=cid,
                ))

    @staticmethod
    def _result(errors: List[ValidationError], warnings: List[ValidationError]) -> ValidationResult:
        return ValidationResult(
            is_valid=len(errors) == 0,
            errors=errors,
            warnings=warnings,
            pass_rate=1.0 if not errors else 0.0,
            validated_at=datetime.now(),
        )
