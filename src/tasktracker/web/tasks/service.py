"""Task service - storage and status rules."""

from __future__ import annotations

import uuid

import aiosqlite

from ..boards.service import validate_description, validate_title

STATUS_TODO = "todo"
STATUS_IN_PROGRESS = "in-progress"
STATUS_DONE = "done"

_STATUS_ALIASES = {
    "": STATUS_TODO,
    "todo": STATUS_TODO,
    "in-progress": STATUS_IN_PROGRESS,
    "in_progress": STATUS_IN_PROGRESS,
    "inprogress": STATUS_IN_PROGRESS,
    "done": STATUS_DONE,
}


def normalize_status(status: str | None) -> str:
    """Map user-supplied spellings onto a canonical status. Raises ValueError."""
    key = (status or "").strip().lower()
    if key not in _STATUS_ALIASES:
        raise ValueError(f"Invalid status {status!r}: use todo, in-progress or done")
    return _STATUS_ALIASES[key]


async def create_task(
    db: aiosqlite.Connection,
    board_id: str,
    title: str,
    description: str = "",
    status: str = "",
) -> dict:
    task_id = str(uuid.uuid4())
    await db.execute(
        """INSERT INTO tasks (id, board_id, title, description, status)
           VALUES (?, ?, ?, ?, ?)""",
        (
            task_id,
            board_id,
            validate_title(title),
            validate_description(description),
            normalize_status(status),
        ),
    )
    await db.commit()
    return await get_task(db, task_id)


async def get_task(db: aiosqlite.Connection, task_id: str) -> dict | None:
    cursor = await db.execute("SELECT * FROM tasks WHERE id = ?", (task_id,))
    row = await cursor.fetchone()
    return dict(row) if row else None


async def list_tasks(db: aiosqlite.Connection, board_id: str) -> list[dict]:
    cursor = await db.execute(
        "SELECT * FROM tasks WHERE board_id = ? ORDER BY created_at, id", (board_id,)
    )
    return [dict(r) for r in await cursor.fetchall()]


async def update_task(db: aiosqlite.Connection, task_id: str, updates: dict) -> dict | None:
    fields: list[str] = []
    values: list[str] = []
    if "title" in updates:
        fields.append("title = ?")
        values.append(validate_title(updates["title"]))
    if "description" in updates:
        fields.append("description = ?")
        values.append(validate_description(updates["description"]))
    if "status" in updates:
        fields.append("status = ?")
        values.append(normalize_status(updates["status"]))
    if fields:
        values.append(task_id)
        await db.execute(
            f"UPDATE tasks SET {', '.join(fields)}, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            values,
        )
        await db.commit()
    return await get_task(db, task_id)


async def delete_task(db: aiosqlite.Connection, task_id: str) -> bool:
    cursor = await db.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
    await db.commit()
    return cursor.rowcount > 0
