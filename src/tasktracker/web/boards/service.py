"""Board service - storage and ownership."""

from __future__ import annotations

import uuid

import aiosqlite

TITLE_MAX = 100
DESCRIPTION_MAX = 500


def parse_board_id(raw: str | None) -> str | None:
    """Return the canonical form of a board UUID, or None if malformed."""
    if not raw:
        return None
    try:
        return str(uuid.UUID(raw))
    except ValueError:
        return None


def validate_title(title: str) -> str:
    title = title.strip()
    if not title or len(title) > TITLE_MAX:
        raise ValueError(f"Title is required and must be <= {TITLE_MAX} characters")
    return title


def validate_description(description: str) -> str:
    if len(description) > DESCRIPTION_MAX:
        raise ValueError(f"Description must be <= {DESCRIPTION_MAX} characters")
    return description


async def list_boards(db: aiosqlite.Connection, owner_id: str) -> list[dict]:
    """List boards owned by the user, newest first."""
    cursor = await db.execute(
        "SELECT * FROM boards WHERE owner_id = ? ORDER BY created_at DESC, id",
        (owner_id,),
    )
    return [dict(r) for r in await cursor.fetchall()]


async def create_board(
    db: aiosqlite.Connection, title: str, description: str, owner_id: str
) -> dict:
    board_id = str(uuid.uuid4())
    await db.execute(
        "INSERT INTO boards (id, owner_id, title, description) VALUES (?, ?, ?, ?)",
        (board_id, owner_id, validate_title(title), validate_description(description)),
    )
    await db.commit()
    return await get_board(db, board_id)


async def get_board(db: aiosqlite.Connection, board_id: str) -> dict | None:
    cursor = await db.execute("SELECT * FROM boards WHERE id = ?", (board_id,))
    row = await cursor.fetchone()
    return dict(row) if row else None


async def update_board(db: aiosqlite.Connection, board_id: str, updates: dict) -> dict | None:
    """Apply title/description updates. Returns None if the board is gone."""
    fields: list[str] = []
    values: list[str] = []
    if "title" in updates:
        fields.append("title = ?")
        values.append(validate_title(updates["title"]))
    if "description" in updates:
        fields.append("description = ?")
        values.append(validate_description(updates["description"]))
    if fields:
        values.append(board_id)
        await db.execute(
            f"UPDATE boards SET {', '.join(fields)}, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            values,
        )
        await db.commit()
    return await get_board(db, board_id)


async def delete_board(db: aiosqlite.Connection, board_id: str) -> bool:
    cursor = await db.execute("DELETE FROM boards WHERE id = ?", (board_id,))
    await db.commit()
    return cursor.rowcount > 0


class BoardStore:
    """Read-only board lookup for code outside the request cycle."""

    def __init__(self, db: aiosqlite.Connection) -> None:
        self.db = db

    async def get_by_id(self, board_id: str) -> dict | None:
        return await get_board(self.db, board_id)
