"""
Create the schema directly from the SQLAlchemy models.

Convenience for local SQLite databases. Deployed databases should be managed
with `alembic upgrade head` (see scripts/release.py); the first migration skips
tables that already exist, so running both is safe.

Usage:
  python scripts/init_db.py
"""

import os
import sys
from pathlib import Path

# Ensure repo root is on sys.path when running as a script (Windows-friendly).
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from sqlalchemy import inspect

from app.crm.models import Base
from scripts._db_utils import script_engine


def create_tables(*, database_url: str | None = None) -> list[str]:
    """
    Create any missing tables. Idempotent; returns the names of tables created.
    """
    db_url = (database_url or os.environ.get("DATABASE_URL") or "sqlite:///crm.db").strip()

    with script_engine(db_url) as engine:
        before = set(inspect(engine).get_table_names())
        Base.metadata.create_all(bind=engine)
        after = set(inspect(engine).get_table_names())

    created = sorted(after - before)
    print(f"Initialized database. Created tables: {', '.join(created) or '(none)'}")
    return created


def main() -> None:
    create_tables(database_url=None)


if __name__ == "__main__":
    main()
