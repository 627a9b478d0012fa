"""
Series deduplication

A series is one competition split over several rounds (heats, semifinal,
final ...). Only a comedian's furthest round in a series counts toward the
ranking; events outside any series always count on their own.
"""
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from data_pipeline.schemas import EventSchema, PerformanceSchema


def is_event_past(event: EventSchema, today: Optional[date] = None) -> bool:
    """
    Whether an event is over and may count.

    Date-only comparison: an event held today does not count yet, and events
    with no date or a TBD date never count.
    """
    if event.date_tbd or event.event_date is None:
        return False
    today = today or date.today()
    return event.event_date < today


def series_key(event: EventSchema) -> str:
    """Group key: the series id, or the event itself for one-off events"""
    if event.series_id:
        return f"series:{event.series_id}"
    return f"event:{event.id}"


def select_counting_performances(
    performances: Iterable[PerformanceSchema],
    events_by_id: Mapping[str, EventSchema],
    today: Optional[date] = None,
) -> List[Tuple[EventSchema, PerformanceSchema]]:
    """
    Pick the (event, performance) pairs of ONE comedian that count.

    Performances on unknown or not-yet-past events are dropped first, then
    each series keeps the entry with the highest round_order. On equal
    round_order the earlier entry wins.
    """
    today = today or date.today()
    best: Dict[str, Tuple[EventSchema, PerformanceSchema]] = {}

    for performance in performances:
        event = events_by_id.get(performance.event_id)
        if event is None or not is_event_past(event, today):
            continue

        key = series_key(event)
        current = best.get(key)
        if current is None or event.round_order > current[0].round_order:
            best[key] = (event, performance)

    return list(best.values())
