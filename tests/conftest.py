"""
Pytest configuration and fixtures for the comedy ranking tests
"""

import pytest
import sys
from datetime import date
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from data_pipeline.schemas import ComedianSchema, EventSchema, PerformanceSchema


TODAY = date(2025, 6, 1)


def make_comedian(cid, name=None, **extra):
    return ComedianSchema(id=cid, name=name or cid, **extra)


def make_event(eid, tier="S", event_date="2025-01-01", **kwargs):
    return EventSchema(id=eid, name=kwargs.pop("name", eid), tier=tier, date=event_date, **kwargs)


def make_performance(cid, eid, rank=None, **kwargs):
    return PerformanceSchema(id=kwargs.pop("id", f"{cid}-{eid}"), comedian_id=cid, event_id=eid, rank=rank, **kwargs)


@pytest.fixture
def today():
    """Fixed evaluation date"""
    return TODAY


@pytest.fixture
def two_finalists():
    """A wins an S-tier final, B is runner-up"""
    comedians = [make_comedian("a", "Alpha"), make_comedian("b", "Bravo")]
    events = [make_event("final", tier="S", event_date="2025-03-01", brand="M-1")]
    performances = [
        make_performance("a", "final", rank=1),
        make_performance("b", "final", rank=2),
    ]
    return comedians, events, performances


@pytest.fixture
def raw_snapshot():
    """Snapshot rows as they come out of the store"""
    return {
        "comedians": [
            {"id": "c1", "name": "Sandwichman", "agency": "Grape Company", "cheer_count": 3},
            {"id": "c2", "name": "Pekopa", "agency": None, "cheer_count": 0},
            {"id": "c3", "name": "Okazu Club", "agency": None, "cheer_count": 1},
        ],
        "events": [
            {"id": "m1-semi", "name": "M-1 semifinal", "date": "2025-02-01", "date_tbd": False,
             "tier": "B", "brand": "M-1", "series_id": "m1-2025", "round": "semifinal", "round_order": 1},
            {"id": "m1-final", "name": "M-1 final", "date": "2025-03-01T19:00:00+09:00", "date_tbd": False,
             "tier": "B", "brand": "M-1", "series_id": "m1-2025", "round": "final", "round_order": 2},
            {"id": "live", "name": "Monthly live", "date": "2025-04-10", "date_tbd": False,
             "tier": "E", "brand": None, "series_id": None, "round": None, "round_order": 0},
            {"id": "r1-2025", "name": "R-1 2025", "date": "2025-12-01", "date_tbd": False,
             "tier": "A", "brand": "R-1", "series_id": None, "round": None, "round_order": 0},
        ],
        "performances": [
            {"id": "p1", "comedian_id": "c1", "event_id": "m1-semi", "rank": 5, "score": None},
            {"id": "p2", "comedian_id": "c1", "event_id": "m1-final", "rank": 1, "score": 96.5},
            {"id": "p3", "comedian_id": "c2", "event_id": "m1-final", "rank": 2, "score": 93.0},
            {"id": "p4", "comedian_id": "c3", "event_id": "live", "rank": 1, "score": None},
            {"id": "p5", "comedian_id": "c1", "event_id": "r1-2025", "rank": None, "score": None},
            {"id": "p6", "comedian_id": "c2", "event_id": "r1-2025", "rank": None, "score": None},
            {"id": "p7", "comedian_id": "c3", "event_id": "r1-2025", "rank": None, "score": None},
        ],
    }
