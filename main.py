"""
Comedy competition ranking & prediction tool main
"""
import json
import sys
from datetime import date
from typing import Optional
from loguru import logger

from data_pipeline.normalizer import NormalizedSnapshot, normalize_event_predictions
from data_pipeline.schemas import PredictionType
from prediction.evaluator import analyze_predictions, summarize_results
from prediction.odds import compute_odds, is_predictable_event
from ranking.calculator import RankingCalculator, RankingSnapshot
from ranking.config import ranking_config


def setup_logging(level: Optional[str] = None):
    """Console + daily rotated file logging"""
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=level or ranking_config.log_level
    )
    logger.add(
        f"{ranking_config.log_dir}/ranking_{{time:YYYY-MM-DD}}.log",
        rotation="1 day",
        retention=f"{ranking_config.log_retention_days} days",
        level="DEBUG"
    )


class RankingApp:
    """Loads a snapshot (JSON file or Supabase) and runs the engine on it"""

    def __init__(self, data_file: Optional[str] = None, as_of: Optional[date] = None):
        self.data_file = data_file
        self.as_of = as_of or ranking_config.as_of
        self.calculator = RankingCalculator()
        self._db = None
        self._snapshot: Optional[RankingSnapshot] = None

    @property
    def db(self):
        if self._db is None:
            # only needed when no snapshot file is given
            from database.supabase_client import SupabaseDB
            self._db = SupabaseDB()
        return self._db

    def load(self):
        """Load raw rows"""
        if self.data_file:
            self.calculator.load_data(self.data_file)
        else:
            rows: NormalizedSnapshot = self.db.load_snapshot()
            self.calculator.comedians = rows.comedians
            self.calculator.events = rows.events
            self.calculator.performances = rows.performances

    @property
    def snapshot(self) -> RankingSnapshot:
        if self._snapshot is None:
            self.load()
            self._snapshot = self.calculator.calculate_rankings(today=self.as_of)
        return self._snapshot

    def show_rankings(self, top_n: int, output: Optional[str] = None):
        if output:
            if self._snapshot is None:
                self.load()
            self.calculator.export_rankings(output, today=self.as_of, top_n=ranking_config.export_top_n)
            return
        snapshot = self.snapshot
        self.calculator.print_ranking_summary(
            snapshot, title=f"Ranking as of {snapshot.as_of.isoformat()}", top_n=top_n
        )

    def show_odds(self, event_id: str, prediction_type: PredictionType):
        snapshot = self.snapshot
        event = snapshot.events.get(event_id)
        if event is None:
            logger.error(f"Unknown event: {event_id}")
            return False
        if not is_predictable_event(event):
            logger.warning(f"{event.name} is not open for predictions")

        print(f"\n=== Odds: {event.name} ({prediction_type.value}) ===")
        seen = set()
        for p in snapshot.performances_for_event(event_id):
            if p.comedian_id in seen:
                continue
            seen.add(p.comedian_id)
            ranked = snapshot.get(p.comedian_id)
            name = ranked.name if ranked else p.comedian_id
            points = ranked.total_points if ranked else 0
            odds = compute_odds(p.comedian_id, event_id, prediction_type, snapshot)
            print(f"  {name:<24} {points:>8}pt  x{odds:.1f}")
        return True

    def show_analysis(self, user_id: Optional[str] = None, predictions_file: Optional[str] = None):
        if predictions_file:
            with open(predictions_file, "r", encoding="utf-8") as f:
                records = normalize_event_predictions(json.load(f))
        elif user_id:
            records = self.db.get_user_predictions(user_id)
        else:
            logger.error("Give --user or --predictions")
            return False

        results = analyze_predictions(records, self.snapshot)
        summary = summarize_results(results)

        print("\n=== Prediction analysis ===")
        for r in results:
            mark = "WIN " if r.is_won else "LOSE"
            print(f"  [{mark}] {r.event_name} {PredictionType(r.prediction_type).value}: "
                  f"{r.bet_points:g}pt x{r.odds:.1f} -> {r.profit:+g}pt | {r.details}")
        print(f"\n  Predictions: {summary.total}  Won: {summary.won} ({summary.win_rate:.1f}%)")
        print(f"  Bet: {summary.total_bet:g}pt  Payout: {summary.total_payout:g}pt  Profit: {summary.total_profit:+g}pt")
        return True


def main():
    """Main"""
    import argparse

    parser = argparse.ArgumentParser(description="Comedy competition ranking & predictions")
    parser.add_argument(
        "--mode",
        choices=["rankings", "odds", "analyze"],
        default="rankings",
        help="What to run"
    )
    parser.add_argument("--data", type=str, help="Snapshot JSON file (default: load from Supabase)")
    parser.add_argument("--as-of", type=date.fromisoformat, help="Evaluation date YYYY-MM-DD")
    parser.add_argument("--top", type=int, default=ranking_config.summary_top_n, help="Rows to print")
    parser.add_argument("--output", type=str, help="Export rankings JSON to this file")
    parser.add_argument("--event", type=str, help="Event ID (odds mode)")
    parser.add_argument(
        "--type",
        choices=[t.value for t in PredictionType],
        default=PredictionType.WINNER.value,
        help="Prediction type (odds mode)"
    )
    parser.add_argument("--user", type=str, help="User ID (analyze mode, Supabase)")
    parser.add_argument("--predictions", type=str, help="event_predictions JSON file (analyze mode)")
    parser.add_argument("--log-level", type=str, help="Console log level")

    args = parser.parse_args()
    setup_logging(args.log_level.upper() if args.log_level else None)

    app = RankingApp(data_file=args.data, as_of=args.as_of)

    ok = True
    if args.mode == "rankings":
        app.show_rankings(top_n=args.top, output=args.output)

    elif args.mode == "odds":
        if not args.event:
            parser.error("--event is required in odds mode")
        ok = app.show_odds(args.event, PredictionType(args.type))

    elif args.mode == "analyze":
        ok = app.show_analysis(user_id=args.user, predictions_file=args.predictions)

    if not ok:
        sys.exit(1)


if __name__ == "__main__":
    main()
