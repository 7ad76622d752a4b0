"""Realtime event models."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class EventKind(StrEnum):
    TASK_UPDATED = "task_updated"
    PING = "ping"


@dataclass(frozen=True)
class TaskChangeEvent:
    """Snapshot of the task fields a board subscriber needs."""

    task_id: str
    title: str
    status: str
    event_kind: EventKind = EventKind.TASK_UPDATED
