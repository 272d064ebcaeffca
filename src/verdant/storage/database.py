"""SQLite engine creation and lightweight schema migration for the local store."""

from __future__ import annotations

import sqlite3
from pathlib import Path

from sqlalchemy import JSON, Boolean, Float, Integer
from sqlmodel import SQLModel, create_engine

from verdant.storage.models import TABLES

_engines: dict[str, object] = {}


def _column_type(column) -> str:
    if isinstance(column.type, (Integer, Boolean)):
        return "INTEGER"
    if isinstance(column.type, Float):
        return "REAL"
    if isinstance(column.type, JSON):
        return "JSON DEFAULT '{}'"
    return "TEXT"


def _migrate_if_needed(db_path: Path) -> None:
    """Add columns that exist on the models but not yet in an older database file."""
    if not db_path.exists():
        return

    conn = sqlite3.connect(str(db_path))
    try:
        for table_name, model in TABLES.items():
            cursor = conn.execute(f"PRAGMA table_info({table_name})")
            existing_cols = {row[1] for row in cursor.fetchall()}
            if not existing_cols:
                continue  # create_all() builds new tables

            for column in model.__table__.columns:
                if column.name not in existing_cols:
                    conn.execute(
                        f"ALTER TABLE {table_name} ADD COLUMN {column.name} "
                        f"{_column_type(column)}"
                    )

        conn.commit()
    finally:
        conn.close()


def get_engine(db_path: Path):
    """Get or create a SQLAlchemy engine for the given database path."""
    key = str(db_path)
    if key not in _engines:
        db_path.parent.mkdir(parents=True, exist_ok=True)
        _migrate_if_needed(db_path)
        engine = create_engine(
            f"sqlite:///{db_path}",
            echo=False,
            connect_args={"check_same_thread": False},
        )
        SQLModel.metadata.create_all(engine)
        _engines[key] = engine
    return _engines[key]
