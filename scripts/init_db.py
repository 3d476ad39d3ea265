#!/usr/bin/env python3
"""
Database initialization script for Outcome Tracker
Creates the SQLite database with the outcome, output, action log and skill tables
"""

import sqlite3
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from tracker.core.config import Config
from tracker.core.schema import init_database


def main() -> bool:
    db_path = Config().get_database_path()

    if db_path.exists():
        response = input(f"Database already exists at {db_path}. Overwrite? (yes/no): ")
        if response.lower() != 'yes':
            print("Aborting database initialization.")
            return False
        db_path.unlink()

    print(f"Creating database at {db_path}...")
    try:
        tables = init_database(db_path)
    except sqlite3.Error as e:
        print(f"✗ Database error: {e}")
        return False

    print("✓ Database schema created successfully!")
    print(f"✓ Database location: {db_path}")
    print(f"\n✓ Tables created: {', '.join(tables)}")
    return True


if __name__ == "__main__":
    print("=" * 60)
    print("Outcome Tracker - Database Initialization")
    print("=" * 60)
    print()

    success = main()

    print("\n" + "=" * 60)
    print("Database initialization complete!" if success else "Database initialization failed!")
    print("=" * 60)
    sys.exit(0 if success else 1)
