"""
Standards Repository for centrally hosted rule documents.

Keeps the live standards document in Supabase under row_key "current"
and archives each replaced version as "v{n}". Versions only ever grow;
archived rows are never modified.
"""

from datetime import datetime, timezone

from loguru import logger
from supabase import Client

from models.standards import CURRENT_ROW_KEY, StandardsRecord
from repositories.feedback import StoreError
from utils.metrics import store_errors_total


def archive_row_key(version: int) -> str:
    return f"v{version}"


class StandardsRepository:
    """Repository for versioned standards documents in Supabase."""

    def __init__(self, supabase_client: Client, table: str = "standards", standard_id: str = "central"):
        """
        Initialize standards repository.

        Args:
            supabase_client: Supabase client instance
            table: Standards table name
            standard_id: Which standards document this repository manages
        """
        self.client = supabase_client
        self.table = table
        self.standard_id = standard_id

    def get_current(self) -> StandardsRecord | None:
        """
        Fetch the live version.

        Returns:
            The current record, or None if nothing has been published yet

        Raises:
            StoreError: If the query fails
        """
        return self._get(CURRENT_ROW_KEY, operation="get_standards")

    def get_version(self, version: int) -> StandardsRecord | None:
        """
        Fetch a version by number, whether live or archived.

        Raises:
            StoreError: If the query fails
        """
        current = self.get_current()
        if current is not None and current.version == version:
            return current
        return self._get(archive_row_key(version), operation="get_standards_version")

    def list_history(self) -> list[StandardsRecord]:
        """
        Every stored version, newest first.

        Raises:
            StoreError: If the query fails
        """
        try:
            result = (
                self.client.table(self.table)
                .select("*")
                .eq("standard_id", self.standard_id)
                .order("version", desc=True)
                .execute()
            )
            return [StandardsRecord(**row) for row in result.data or []]

        except Exception as e:
            store_errors_total.labels(operation="list_standards_history").inc()
            logger.error(f"Failed to list standards history: {e}")
            raise StoreError("list_standards_history", e) from e

    def save(self, yaml_content: str, updated_by: str, change_description: str) -> StandardsRecord:
        """
        Publish a new version.

        The previous live version is archived first. Archived row keys are
        unique, so two concurrent publishes on the same base version cannot
        both succeed; the loser gets a StoreError.

        Args:
            yaml_content: Already validated YAML document
            updated_by: Author of the change
            change_description: Free-text summary

        Returns:
            The new current record

        Raises:
            StoreError: If reading, archiving or writing fails
        """
        previous = self.get_current()

        record = StandardsRecord(
            standard_id=self.standard_id,
            row_key=CURRENT_ROW_KEY,
            version=previous.version + 1 if previous else 1,
            yaml_content=yaml_content,
            updated_by=updated_by,
            change_description=change_description,
            updated_at=datetime.now(timezone.utc),
        )

        try:
            table = self.client.table(self.table)
            if previous is None:
                table.insert(record.model_dump(mode="json")).execute()
            else:
                archived = previous.model_copy(update={"row_key": archive_row_key(previous.version)})
                table.insert(archived.model_dump(mode="json")).execute()
                (
                    self.client.table(self.table)
                    .update(record.model_dump(mode="json"))
                    .eq("standard_id", self.standard_id)
                    .eq("row_key", CURRENT_ROW_KEY)
                    .execute()
                )

        except Exception as e:
            store_errors_total.labels(operation="save_standards").inc()
            logger.error(f"Failed to save standards v{record.version}: {e}")
            raise StoreError("save_standards", e) from e

        logger.bind(layer="central").info(f"Standards updated to v{record.version} by {updated_by}")
        return record

    # -------------------------------------------------------------------------
    # Private Helper Methods
    # -------------------------------------------------------------------------

    def _get(self, row_key: str, operation: str) -> StandardsRecord | None:
        try:
            result = (
                self.client.table(self.table)
                .select("*")
                .eq("standard_id", self.standard_id)
                .eq("row_key", row_key)
                .limit(1)
                .execute()
            )
            rows = result.data or []
            return StandardsRecord(**rows[0]) if rows else None

        except Exception as e:
            store_errors_total.labels(operation=operation).inc()
            logger.error(f"Failed to read standards {row_key}: {e}")
            raise StoreError(operation, e) from e


# =============================================================================
# Module Exports
# =============================================================================
__all__ = ["StandardsRepository", "archive_row_key"]
