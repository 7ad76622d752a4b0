"""Task Pydantic models."""

from __future__ import annotations

from pydantic import BaseModel


class TaskCreate(BaseModel):
    board_id: str
    title: str
    description: str = ""
    status: str = ""


class TaskUpdate(BaseModel):
    title: str | None = None
    description: str | None = None
    status: str | None = None


class TaskResponse(BaseModel):
    id: str
    board_id: str
    title: str
    description: str
    status: str
    created_at: str
    updated_at: str
