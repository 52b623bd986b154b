"""
Feedback Repository for the team learning loop.

Append-only store of feedback events in Supabase, keyed by
(partition_key, row_key):
- partition_key = lower-cased file extension (fast queries by file type)
- row_key = uuid4 generated on append (no conflicts on concurrent inserts)

Reads are full scans of a partition (or the whole table), paged by row
key until exhausted. Store failures are logged and raised as StoreError.
"""

import uuid
from datetime import datetime, timezone

from loguru import logger
from supabase import Client

from models.feedback import FeedbackEvent
from utils.metrics import store_errors_total

# PostgREST caps responses at 1000 rows by default
PAGE_SIZE = 1000


class StoreError(Exception):
    """Raised when the Supabase store is unavailable or returns malformed data."""

    def __init__(self, operation: str, cause: Exception):
        super().__init__(f"Store {operation} failed: {cause}")
        self.operation = operation


class FeedbackRepository:
    """
    Repository for managing feedback events in Supabase.

    Events are immutable: the repository only inserts and reads.
    """

    def __init__(self, supabase_client: Client, table: str = "feedback"):
        """
        Initialize feedback repository.

        Args:
            supabase_client: Supabase client instance
            table: Feedback table name
        """
        self.client = supabase_client
        self.table = table

    def ensure_table(self) -> None:
        """
        Create the feedback table if it does not exist.

        Idempotent; failures are treated as "already satisfied" and only
        logged, since the table is normally provisioned by
        scripts/init_supabase.py.
        """
        try:
            self.client.rpc("ensure_feedback_table", {"p_table": self.table}).execute()
        except Exception as e:
            logger.debug(f"ensure_feedback_table skipped: {e}")

    def append(self, event: FeedbackEvent) -> FeedbackEvent:
        """
        Insert a feedback event.

        The row key and feedback timestamp are assigned here; any values on
        the incoming event are ignored.

        Args:
            event: Normalized feedback event

        Returns:
            FeedbackEvent as stored

        Raises:
            StoreError: If the insert fails
        """
        stored = event.model_copy(
            update={
                "row_key": str(uuid.uuid4()),
                "feedback_timestamp": datetime.now(timezone.utc),
            }
        )

        try:
            self.client.table(self.table).insert(stored.model_dump(mode="json")).execute()
        except Exception as e:
            store_errors_total.labels(operation="append").inc()
            logger.error(f"Failed to append feedback event: {e}")
            raise StoreError("append", e) from e

        logger.bind(
            extension=stored.partition_key,
            row_key=stored.row_key,
        ).info(f"Feedback submitted from {stored.contributor or 'anonymous'}")

        return stored

    def query_by_partition(
        self,
        partition_key: str,
        filters: dict[str, object] | None = None,
    ) -> list[FeedbackEvent]:
        """
        Retrieve every feedback event of one partition.

        Args:
            partition_key: Lower-cased file extension
            filters: Optional extra equality filters applied server-side

        Returns:
            All matching FeedbackEvent objects

        Raises:
            StoreError: If the query fails or rows cannot be parsed
        """
        def build_query():
            query = self.client.table(self.table).select("*").eq("partition_key", partition_key)
            for column, value in (filters or {}).items():
                query = query.eq(column, value)
            return query

        return self._scan(build_query, operation="query_by_partition")

    def query_all(self) -> list[FeedbackEvent]:
        """
        Retrieve every feedback event across all partitions.

        Raises:
            StoreError: If the query fails or rows cannot be parsed
        """
        return self._scan(
            lambda: self.client.table(self.table).select("*"),
            operation="query_all",
        )

    # -------------------------------------------------------------------------
    # Private Helper Methods
    # -------------------------------------------------------------------------

    def _scan(self, build_query, operation: str) -> list[FeedbackEvent]:
        """
        Page through a query by row key until an empty page comes back.

        Each page starts after the last key already read, so rows inserted
        mid-scan never shift later pages (no duplicates, no skips of rows
        that existed when the scan began). A server row cap below PAGE_SIZE
        only means more pages.
        """
        events: list[FeedbackEvent] = []
        last_key: str | None = None

        try:
            while True:
                query = build_query()
                if last_key is not None:
                    query = query.gt("row_key", last_key)

                result = query.order("row_key").limit(PAGE_SIZE).execute()
                rows = list(result.data or [])
                if not rows:
                    break

                events.extend(FeedbackEvent(**row) for row in rows)
                last_key = rows[-1]["row_key"]

        except Exception as e:
            store_errors_total.labels(operation=operation).inc()
            logger.error(f"Failed to read feedback ({operation}): {e}")
            raise StoreError(operation, e) from e

        return events


# =============================================================================
# Module Exports
# =============================================================================
__all__ = ["FeedbackRepository", "PAGE_SIZE", "StoreError"]
