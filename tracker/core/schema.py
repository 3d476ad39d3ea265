"""
SQLite schema for Outcome Tracker.

Shared by scripts/init_db.py and the test suite so both build the same
tables, indexes and triggers.
"""

import sqlite3
from pathlib import Path
from typing import List

TABLES = ('outcomes', 'outputs', 'action_logs', 'skill_items', 'skill_logs')

# Columns holding lists, stored as JSON text in SQLite
JSON_COLUMNS = {
    'outputs': ('schedule_weekdays',),
}

SCHEMA_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS outcomes (
        id TEXT PRIMARY KEY,
        title TEXT NOT NULL,
        category TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS outputs (
        id TEXT PRIMARY KEY,
        outcome_id TEXT NOT NULL,
        description TEXT NOT NULL,
        frequency_type TEXT NOT NULL
            CHECK(frequency_type IN ('daily', 'fixed_weekly', 'flexible_weekly')),
        frequency_value INTEGER NOT NULL DEFAULT 1,
        schedule_weekdays TEXT,
        is_starter INTEGER NOT NULL DEFAULT 0,
        status TEXT NOT NULL DEFAULT 'active'
            CHECK(status IN ('active', 'paused', 'archived')),
        sort_order INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        FOREIGN KEY (outcome_id) REFERENCES outcomes(id) ON DELETE CASCADE
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_outputs_outcome ON outputs(outcome_id);",
    """
    CREATE TABLE IF NOT EXISTS action_logs (
        id TEXT PRIMARY KEY,
        output_id TEXT NOT NULL,
        action_date TEXT NOT NULL,
        completed REAL NOT NULL DEFAULT 0,
        total REAL NOT NULL DEFAULT 0,
        notes TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        UNIQUE (output_id, action_date),
        FOREIGN KEY (output_id) REFERENCES outputs(id) ON DELETE CASCADE
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS skill_items (
        id TEXT PRIMARY KEY,
        outcome_id TEXT NOT NULL,
        name TEXT NOT NULL,
        stage TEXT NOT NULL DEFAULT 'active'
            CHECK(stage IN ('active', 'review', 'archived')),
        target_label TEXT,
        target_value REAL,
        initial_confidence INTEGER NOT NULL DEFAULT 3,
        graduation_suppressed_at TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        FOREIGN KEY (outcome_id) REFERENCES outcomes(id) ON DELETE CASCADE
    );
    """,
    """
    CREATE UNIQUE INDEX IF NOT EXISTS skill_items_outcome_name_live_unique_idx
        ON skill_items(outcome_id, lower(name))
        WHERE stage != 'archived';
    """,
    """
    CREATE TABLE IF NOT EXISTS skill_logs (
        id TEXT PRIMARY KEY,
        skill_item_id TEXT NOT NULL,
        action_log_id TEXT,
        confidence INTEGER NOT NULL CHECK(confidence BETWEEN 1 AND 5),
        target_result REAL,
        logged_at TEXT NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        FOREIGN KEY (skill_item_id) REFERENCES skill_items(id) ON DELETE CASCADE
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_skill_logs_skill ON skill_logs(skill_item_id, logged_at);",
    "CREATE INDEX IF NOT EXISTS idx_skill_logs_action ON skill_logs(action_log_id);",
]


def create_schema(conn: sqlite3.Connection) -> None:
    """Create every tracker table and index on an open connection."""
    cursor = conn.cursor()
    cursor.execute("PRAGMA foreign_keys = ON;")
    for statement in SCHEMA_STATEMENTS:
        cursor.execute(statement)
    conn.commit()


def init_database(db_path: Path) -> List[str]:
    """
    Create the database file at db_path with every tracker table.

    Returns:
        Names of the tables present afterwards
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path)
    try:
        create_schema(conn)
        cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table' ORDER BY name;")
        return [row[0] for row in cursor.fetchall()]
    finally:
        conn.close()
