"""Board Pydantic models."""

from __future__ import annotations

from pydantic import BaseModel


class BoardCreate(BaseModel):
    title: str
    description: str = ""


class BoardUpdate(BaseModel):
    title: str | None = None
    description: str | None = None


class BoardResponse(BaseModel):
    id: str
    owner_id: str
    title: str
    description: str
    created_at: str
    updated_at: str
