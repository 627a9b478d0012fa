"""
Supabase database client

Read-only: loads the raw rows the ranking engine works on. Writes to
performances and predictions happen elsewhere.
"""
import time
from typing import List, Optional, Dict, Any
from supabase import create_client, Client
from loguru import logger

from database.config import supabase_config, SupabaseConfig
from data_pipeline.normalizer import NormalizedSnapshot, normalize_snapshot, normalize_event_predictions
from data_pipeline.schemas import EventPredictionSchema


class SupabaseDB:
    """Supabase database client"""

    def __init__(self, client: Optional[Client] = None, config: Optional[SupabaseConfig] = None):
        self.config = config or supabase_config
        if client is not None:
            self.client = client
            return

        if not self.config.supabase_url or not self.config.supabase_key:
            raise ValueError("Set the SUPABASE_URL and SUPABASE_KEY environment variables")

        self.client: Client = create_client(
            self.config.supabase_url,
            self.config.supabase_key
        )

    # ==================== Raw rows ====================

    def fetch_all(self, table: str, filters: Optional[Dict[str, Any]] = None,
                  order_by: Optional[str] = None, desc: bool = False) -> List[Dict[str, Any]]:
        """
        Fetch every row of a table, one page at a time.

        Errors are logged and resolve to the rows fetched so far.
        """
        rows: List[Dict[str, Any]] = []
        page_size = self.config.page_size
        offset = 0

        while True:
            result = None
            for attempt in range(self.config.max_retries):
                try:
                    query = self.client.table(table).select("*")
                    for column, value in (filters or {}).items():
                        query = query.eq(column, value)
                    if order_by:
                        query = query.order(order_by, desc=desc)
                    result = query.range(offset, offset + page_size - 1).execute()
                    break
                except Exception as e:
                    if attempt < self.config.max_retries - 1:
                        wait_time = (attempt + 1) * 2
                        logger.warning(f"{table} load retry {attempt + 1}/{self.config.max_retries} ({wait_time}s): {e}")
                        time.sleep(wait_time)
                    else:
                        logger.error(f"{table} load error: {e}")

            if result is None or not result.data:
                break
            rows.extend(result.data)
            if len(result.data) < page_size:
                break
            offset += page_size

        logger.debug(f"{table}: {len(rows)} rows loaded")
        return rows

    def get_comedians(self) -> List[Dict[str, Any]]:
        return self.fetch_all(self.config.comedians_table)

    def get_events(self) -> List[Dict[str, Any]]:
        return self.fetch_all(self.config.events_table)

    def get_performances(self) -> List[Dict[str, Any]]:
        return self.fetch_all(self.config.performances_table)

    # ==================== Typed views ====================

    def load_snapshot(self) -> NormalizedSnapshot:
        """Comedians, events and performances as typed rows"""
        snapshot = normalize_snapshot(
            self.get_comedians(),
            self.get_events(),
            self.get_performances(),
        )
        logger.info(
            f"Snapshot loaded: {len(snapshot.comedians)} comedians, {len(snapshot.events)} events, "
            f"{len(snapshot.performances)} performances"
        )
        return snapshot

    def get_user_predictions(self, user_id: str) -> List[EventPredictionSchema]:
        """A user's stored predictions, newest first"""
        rows = self.fetch_all(
            self.config.predictions_table,
            filters={"user_id": user_id},
            order_by="created_at",
            desc=True,
        )
        return normalize_event_predictions(rows)
