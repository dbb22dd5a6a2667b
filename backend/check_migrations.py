#!/usr/bin/env python3
"""Quick script to check that the ranking tables exist in the database"""

import sys

from sqlalchemy import inspect

from league.database import engine

REQUIRED_TABLES = ["category", "player", "tournament", "tournamentresult", "registration", "ranking"]


def check_tables():
    """Check if required tables exist"""
    inspector = inspect(engine)
    existing_tables = set(inspector.get_table_names())

    print(f"Database: {engine.url}")
    missing_tables = [t for t in REQUIRED_TABLES if t not in existing_tables]
    for table in REQUIRED_TABLES:
        print(f"{'ok' if table in existing_tables else 'MISSING':8} {table}")

    if missing_tables:
        print("Run migrations with: alembic upgrade head")
        return False
    return True


if __name__ == "__main__":
    sys.exit(0 if check_tables() else 1)
