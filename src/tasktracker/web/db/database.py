"""Async SQLite connection manager (singleton pattern)."""

from __future__ import annotations

from pathlib import Path

import aiosqlite

SCHEMA_PATH = Path(__file__).parent / "schema.sql"

_db: aiosqlite.Connection | None = None


async def connect(db_path: str) -> aiosqlite.Connection:
    """Open a connection with row access by name and the schema applied."""
    if db_path != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(db_path)
    conn.row_factory = aiosqlite.Row
    if db_path != ":memory:":
        await conn.execute("PRAGMA journal_mode=WAL")
    await conn.execute("PRAGMA foreign_keys=ON")
    await conn.executescript(SCHEMA_PATH.read_text())
    await conn.commit()
    return conn


async def init_db(db_path: str) -> None:
    """Initialize the shared database connection and run schema."""
    global _db
    _db = await connect(db_path)


async def get_db() -> aiosqlite.Connection:
    """Get the active database connection."""
    if _db is None:
        raise RuntimeError("Database not initialized. Call init_db() first.")
    return _db


async def close_db() -> None:
    """Close the database connection."""
    global _db
    if _db is not None:
        await _db.close()
        _db = None
