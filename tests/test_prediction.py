"""
Prediction tests
- odds pricing
- win conditions, payout and trace
- history analysis
"""
import pytest

from conftest import make_comedian, make_event, make_performance
from data_pipeline.schemas import EventPredictionSchema, PredictionEntrySchema, PredictionType
from prediction.odds import (
    compute_odds,
    quote_selection,
    is_predictable_event,
    clamp_odds,
    get_type_multiplier,
)
from prediction.evaluator import (
    evaluate,
    evaluate_event_prediction,
    analyze_predictions,
    summarize_results,
    sorted_standings,
)
from ranking.calculator import RankingCalculator, compute_ranking


def entry(prediction_type, ids, bet=100, odds=None):
    return PredictionEntrySchema(
        predictionType=prediction_type, predictedComedianIds=ids, betPoints=bet, odds=odds
    )


@pytest.fixture
def snapshot(raw_snapshot, today):
    calculator = RankingCalculator()
    calculator.load_from_data(raw_snapshot)
    return calculator.calculate_rankings(today)


@pytest.fixture
def names():
    return {"a": "Alpha", "b": "Bravo", "c": "Charlie", "d": "Delta"}


# =============================================================================
# Odds
# =============================================================================

class TestOdds:
    """Popularity-inverse odds"""

    def test_favorite_is_clamped_to_minimum(self, today, two_finalists):
        """1000 vs average 900: 0.9 -> 1.0"""
        snapshot = compute_ranking(*two_finalists, today)
        assert compute_odds("a", "final", PredictionType.WINNER, snapshot) == 1.0

    def test_underdog_gets_longer_odds(self, snapshot):
        """100pt vs average 333.3: 3.33 -> 3.3"""
        assert compute_odds("c3", "r1-2025", PredictionType.WINNER, snapshot) == 3.3

    def test_type_multiplier(self, snapshot):
        assert compute_odds("c3", "r1-2025", PredictionType.TOP3, snapshot) == 1.7
        assert compute_odds("c3", "r1-2025", PredictionType.FINALIST, snapshot) == 1.0

    def test_winner_never_cheaper_than_finalist(self, snapshot):
        for cid in ["c1", "c2", "c3"]:
            winner = compute_odds(cid, "r1-2025", PredictionType.WINNER, snapshot)
            finalist = compute_odds(cid, "r1-2025", PredictionType.FINALIST, snapshot)
            assert winner >= finalist

    def test_pointless_comedian_gets_maximum(self, today):
        comedians = [make_comedian("a"), make_comedian("b")]
        events = [make_event("past"), make_event("next", event_date="2025-09-01")]
        performances = [
            make_performance("a", "past", rank=1),
            make_performance("a", "next"),
            make_performance("b", "next"),
        ]
        snapshot = compute_ranking(comedians, events, performances, today)

        assert compute_odds("b", "next", PredictionType.WINNER, snapshot) == 10.0

    def test_neutral_odds_fallbacks(self, snapshot, today):
        # unknown comedian
        assert compute_odds("nobody", "r1-2025", PredictionType.WINNER, snapshot) == 1.0
        # event with no line-up
        assert compute_odds("c1", "no-such-event", PredictionType.WINNER, snapshot) == 1.0
        # line-up with no points at all
        empty = compute_ranking(
            [make_comedian("a"), make_comedian("b")],
            [make_event("e", event_date="2025-09-01")],
            [make_performance("a", "e"), make_performance("b", "e")],
            today,
        )
        assert compute_odds("a", "e", PredictionType.WINNER, empty) == 1.0

    def test_odds_always_in_range(self, snapshot):
        for cid in ["c1", "c2", "c3"]:
            for prediction_type in PredictionType:
                odds = compute_odds(cid, "r1-2025", prediction_type, snapshot)
                assert 1.0 <= odds <= 10.0
                assert round(odds, 1) == odds

    def test_clamp_odds(self):
        assert clamp_odds(0.2) == 1.0
        assert clamp_odds(42) == 10.0
        assert clamp_odds(2.25) == 2.3
        assert clamp_odds(float("inf")) == 10.0

    def test_type_multipliers(self):
        assert get_type_multiplier(PredictionType.WINNER) == 1.0
        assert get_type_multiplier("top3") == 0.5
        assert get_type_multiplier("finalist") == 0.3

    def test_quote_selection_uses_first_pick(self, snapshot):
        assert quote_selection(["c3", "c1"], "r1-2025", PredictionType.TOP3, snapshot) == 1.7
        assert quote_selection([], "r1-2025", PredictionType.TOP3, snapshot) == 1.0

    def test_predictable_events(self):
        assert is_predictable_event(make_event("e", brand="M-1"))
        assert is_predictable_event(make_event("e", brand="キングオブコント"))
        assert not is_predictable_event(make_event("e", brand="Local live"))
        assert not is_predictable_event(make_event("e"))
        assert not is_predictable_event(None)


# =============================================================================
# Evaluation
# =============================================================================

class TestEvaluate:
    """Win conditions and payout"""

    def test_winner_bet_pays_out(self, names):
        performances = [make_performance("a", "e", rank=1), make_performance("b", "e", rank=2)]

        result = evaluate(entry("winner", ["a"], bet=100, odds=1.0), performances, names)

        assert result.is_won
        assert result.payout == 100
        assert result.profit == 0
        assert result.details == "Predicted: Alpha / Actual winner: Alpha"

    def test_winner_bet_loses(self, names):
        performances = [make_performance("a", "e", rank=1), make_performance("b", "e", rank=2)]

        result = evaluate(entry("winner", ["b"], bet=50, odds=2.5), performances, names)

        assert not result.is_won
        assert result.payout == 0
        assert result.profit == -50

    def test_winner_with_no_results_never_wins(self, names):
        performances = [make_performance("a", "e"), make_performance("b", "e")]

        result = evaluate(entry("winner", ["a", "b"]), performances, names)

        assert not result.is_won
        assert result.details == "Predicted: Alpha, Bravo / Actual winner: undetermined"
        assert result.actual_comedian_names == []

    def test_winner_needs_rank_one(self, names):
        """Standings that start at 2nd have no winner"""
        performances = [make_performance("a", "e", rank=2), make_performance("b", "e", rank=3)]

        assert not evaluate(entry("winner", ["a"]), performances, names).is_won

    def test_top3_any_pick_is_enough(self, names):
        performances = [
            make_performance("a", "e", rank=4),
            make_performance("b", "e", rank=3),
            make_performance("c", "e", rank=1),
            make_performance("d", "e", rank=2),
        ]

        result = evaluate(entry("top3", ["a", "b"], bet=10, odds=1.5), performances, names)

        assert result.is_won
        assert result.payout == 15
        assert result.profit == 5
        assert result.actual_comedian_names == ["Charlie", "Delta", "Bravo"]
        assert result.details == "Predicted: Alpha, Bravo / Actual top 3: Charlie, Delta, Bravo"

    def test_finalist_is_top_half(self, names):
        """5 ranked entries -> first 3 are finalists"""
        performances = [make_performance(cid, "e", rank=r) for cid, r in
                        [("a", 1), ("b", 2), ("c", 3), ("d", 4), ("x", 5)]]

        assert evaluate(entry("finalist", ["c"]), performances, names).is_won
        assert not evaluate(entry("finalist", ["d", "x"]), performances, names).is_won

    def test_finalist_ignores_unranked(self, names):
        performances = [
            make_performance("a", "e", rank=1),
            make_performance("b", "e", rank=2),
            make_performance("c", "e"),
            make_performance("d", "e"),
        ]

        result = evaluate(entry("finalist", ["b"]), performances, names)

        assert not result.is_won
        assert result.actual_comedian_names == ["Alpha"]

    def test_missing_odds_pay_even(self, names):
        performances = [make_performance("a", "e", rank=1)]

        result = evaluate(entry("winner", ["a"], bet=30), performances, names)

        assert result.odds == 1.0
        assert result.payout == 30

    def test_unknown_names(self, names):
        performances = [make_performance("ghost", "e", rank=1)]

        result = evaluate(entry("winner", ["a", "nobody"]), performances, names)

        assert result.predicted_comedian_names == ["Alpha", "unknown"]
        assert result.actual_comedian_names == ["unknown"]
        assert result.details == "Predicted: Alpha / Actual winner: unknown"

    def test_sorted_standings(self):
        performances = [
            make_performance("a", "e", rank=3),
            make_performance("b", "e"),
            make_performance("c", "e", rank=1),
        ]
        assert [p.comedian_id for p in sorted_standings(performances)] == ["c", "a"]


# =============================================================================
# End to end
# =============================================================================

class TestEndToEnd:
    """Quote, place, resolve"""

    def test_quoted_odds_are_used_for_payout(self, today, two_finalists):
        comedians, events, performances = two_finalists
        snapshot = compute_ranking(comedians, events, performances, today)
        odds = compute_odds("a", "final", PredictionType.WINNER, snapshot)

        record = EventPredictionSchema(
            id="pred-1",
            event_id="final",
            predictions=[{"predictionType": "winner", "predictedComedianIds": ["a"],
                          "betPoints": 100, "odds": odds}],
            created_at="2025-02-20T10:00:00Z",
        )
        results = evaluate_event_prediction(record, snapshot)

        assert len(results) == 1
        assert results[0].is_won
        assert results[0].payout == 100
        assert results[0].profit == 0
        assert results[0].event_name == "final"
        assert results[0].created_at == "2025-02-20T10:00:00Z"


class TestAnalysis:
    """Prediction history"""

    def test_history(self, snapshot):
        records = [
            EventPredictionSchema(id="1", event_id="m1-final", predictions=[
                {"predictionType": "winner", "predictedComedianIds": ["c1"], "betPoints": 100, "odds": 2.0},
                {"predictionType": "top3", "predictedComedianIds": ["c3"], "betPoints": 50, "odds": 1.5},
            ]),
            EventPredictionSchema(id="2", event_id="missing", predictions=[
                {"predictionType": "winner", "predictedComedianIds": ["c1"], "betPoints": 100},
            ]),
            EventPredictionSchema(id="3", event_id="live", predictions={"not": "a list"}),
            EventPredictionSchema(id="4", event_id="live", predictions='[{"predictionType": "winner", '
                                  '"predictedComedianIds": ["c3"], "betPoints": 20, "odds": 3.0}]'),
        ]

        results = analyze_predictions(records, snapshot)
        summary = summarize_results(results)

        assert [r.is_won for r in results] == [True, False, True]
        assert summary.total == 3
        assert summary.won == 2
        assert summary.win_rate == pytest.approx(66.666, rel=1e-3)
        assert summary.total_bet == 170
        assert summary.total_payout == 260
        assert summary.total_profit == 90

    def test_empty_summary(self):
        summary = summarize_results([])
        assert summary.total == 0
        assert summary.win_rate == 0.0

    def test_result_to_dict(self, names):
        result = evaluate(entry("top3", ["a"]), [make_performance("a", "e", rank=2)], names)
        data = result.to_dict()
        assert data["prediction_type"] == "top3"
        assert data["is_won"] is True
