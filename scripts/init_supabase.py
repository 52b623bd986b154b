"""
Supabase database initialization script for Stagebot Team Learning.

Creates the feedback event table, its indexes, the idempotent
ensure_feedback_table() RPC used by FeedbackRepository.ensure_table(),
and the versioned standards table behind /v1/standards.

Run this script once during initial setup:
    python scripts/init_supabase.py

Environment Variables Required:
    SUPABASE_DB_URL: PostgreSQL connection string
    FEEDBACK_TABLE: Table name (optional, default "feedback")
    STANDARDS_TABLE: Hosted standards table name (optional, default "standards")
"""

import os
import sys
from pathlib import Path

import psycopg2
from dotenv import load_dotenv
from loguru import logger

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Load environment variables
load_dotenv()

SUPABASE_DB_URL = os.getenv("SUPABASE_DB_URL")
FEEDBACK_TABLE = os.getenv("FEEDBACK_TABLE", "feedback")
STANDARDS_TABLE = os.getenv("STANDARDS_TABLE", "standards")


# ============================================================================
# SQL Statements for Database Initialization
# ============================================================================

SQL_STATEMENTS = [
    # ============================================================================
    # Feedback Event Table
    # ============================================================================
    f"""
    -- Table: {FEEDBACK_TABLE}
    -- Append-only feedback events, partitioned logically by file extension
    CREATE TABLE IF NOT EXISTS {FEEDBACK_TABLE} (
        partition_key TEXT NOT NULL,
        row_key TEXT NOT NULL,
        rule TEXT NOT NULL,
        code_snippet TEXT NOT NULL DEFAULT '',
        suggestion TEXT NOT NULL DEFAULT '',
        issue_hash TEXT NOT NULL,
        is_helpful BOOLEAN NOT NULL DEFAULT FALSE,
        reason TEXT,
        correction TEXT,
        contributor TEXT NOT NULL DEFAULT '',
        repository TEXT NOT NULL DEFAULT '',
        feedback_timestamp TIMESTAMP WITH TIME ZONE DEFAULT NOW(),

        PRIMARY KEY (partition_key, row_key),
        CONSTRAINT {FEEDBACK_TABLE}_extension_check CHECK (partition_key LIKE '.%%')
    );

    -- Index for pattern grouping within a partition
    CREATE INDEX IF NOT EXISTS {FEEDBACK_TABLE}_pattern_idx
    ON {FEEDBACK_TABLE}(partition_key, rule, issue_hash);

    -- Index for contributor statistics
    CREATE INDEX IF NOT EXISTS {FEEDBACK_TABLE}_contributor_idx
    ON {FEEDBACK_TABLE}(contributor);
    """,
    # ============================================================================
    # Hosted Standards Table
    # ============================================================================
    f"""
    -- Table: {STANDARDS_TABLE}
    -- Current standards document (row_key = 'current') plus archived versions ('v1', 'v2', ...)
    CREATE TABLE IF NOT EXISTS {STANDARDS_TABLE} (
        standard_id TEXT NOT NULL,
        row_key TEXT NOT NULL,
        version INTEGER NOT NULL CHECK (version >= 0),
        yaml_content TEXT NOT NULL DEFAULT '',
        updated_by TEXT NOT NULL DEFAULT '',
        change_description TEXT NOT NULL DEFAULT '',
        updated_at TIMESTAMP WITH TIME ZONE DEFAULT NOW(),

        PRIMARY KEY (standard_id, row_key)
    );

    -- Index for version history listing
    CREATE INDEX IF NOT EXISTS {STANDARDS_TABLE}_version_idx
    ON {STANDARDS_TABLE}(standard_id, version DESC);
    """,
    # ============================================================================
    # Helper Functions
    # ============================================================================
    """
    -- Function: create the feedback table if missing (idempotent)
    -- Called by FeedbackRepository.ensure_table()
    CREATE OR REPLACE FUNCTION ensure_feedback_table(p_table TEXT DEFAULT 'feedback')
    RETURNS BOOLEAN AS $$
    BEGIN
        EXECUTE format(
            'CREATE TABLE IF NOT EXISTS %I (
                partition_key TEXT NOT NULL,
                row_key TEXT NOT NULL,
                rule TEXT NOT NULL,
                code_snippet TEXT NOT NULL DEFAULT '''',
                suggestion TEXT NOT NULL DEFAULT '''',
                issue_hash TEXT NOT NULL,
                is_helpful BOOLEAN NOT NULL DEFAULT FALSE,
                reason TEXT,
                correction TEXT,
                contributor TEXT NOT NULL DEFAULT '''',
                repository TEXT NOT NULL DEFAULT '''',
                feedback_timestamp TIMESTAMP WITH TIME ZONE DEFAULT NOW(),
                PRIMARY KEY (partition_key, row_key)
            )',
            p_table
        );
        RETURN TRUE;
    END;
    $$ LANGUAGE plpgsql SECURITY DEFINER;
    """,
]


def main():
    """Initialize Supabase database with the Stagebot feedback schema."""
    if not SUPABASE_DB_URL:
        logger.error("SUPABASE_DB_URL environment variable not set")
        logger.info("Create a .env file with SUPABASE_DB_URL=postgresql://...")
        sys.exit(1)

    logger.info("Starting Supabase database initialization...")

    try:
        logger.info(
            f"Connecting to Supabase at {SUPABASE_DB_URL.split('@')[1] if '@' in SUPABASE_DB_URL else 'localhost'}"
        )
        conn = psycopg2.connect(SUPABASE_DB_URL)
        conn.autocommit = True
        cursor = conn.cursor()

        for i, statement in enumerate(SQL_STATEMENTS, start=1):
            logger.info(f"Executing SQL statement {i}/{len(SQL_STATEMENTS)}...")
            cursor.execute(statement)

        for table in (FEEDBACK_TABLE, STANDARDS_TABLE):
            cursor.execute(
                """
                SELECT table_name
                FROM information_schema.tables
                WHERE table_schema = 'public' AND table_name = %s;
                """,
                (table,),
            )
            if cursor.fetchone() is None:
                raise RuntimeError(f"table {table} was not created")

        cursor.close()
        conn.close()

        logger.success(f"Tables '{FEEDBACK_TABLE}' and '{STANDARDS_TABLE}' are ready")
        logger.info("Next: configure .env with SUPABASE_URL and SUPABASE_SERVICE_KEY, then run: python main.py")

    except Exception as e:
        logger.error(f"Failed to initialize Supabase database: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
