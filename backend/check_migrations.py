#!/usr/bin/env python3
"""Quick script to check that the league tables exist in the database"""

import sys

from sqlalchemy import inspect
from sqlalchemy.exc import SQLAlchemyError

from league.database import engine

REQUIRED_TABLES = ["category", "player", "round", "match", "standing"]


def check_tables():
    """Report which league tables are present; True when none are missing"""
    inspector = inspect(engine)
    existing_tables = inspector.get_table_names()

    print(f"Database: {engine.url}")
    print()

    missing_tables = []
    for table in REQUIRED_TABLES:
        if table in existing_tables:
            print(f"  ok       {table}")
        else:
            print(f"  MISSING  {table}")
            missing_tables.append(table)

    print()
    if missing_tables:
        print(f"{len(missing_tables)} table(s) missing. Run migrations with: alembic upgrade head")
        return False
    print("All league tables exist")
    return True


if __name__ == "__main__":
    try:
        success = check_tables()
    except SQLAlchemyError as e:
        print(f"Error checking tables: {e}")
        sys.exit(1)
    sys.exit(0 if success else 1)
