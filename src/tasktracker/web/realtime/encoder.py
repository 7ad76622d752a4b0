"""Wire encoding for outbound board events."""

from __future__ import annotations

import json

from .errors import EncodeError
from .models import EventKind, TaskChangeEvent

PING_MESSAGE = json.dumps({"event": EventKind.PING.value})


def encode_task_event(event: TaskChangeEvent) -> str:
    """Serialize ``event`` into the JSON text frame sent to subscribers.

    Raises EncodeError if a field is not JSON-serializable.
    """
    try:
        return json.dumps(
            {
                "event": str(event.event_kind),
                "task_id": event.task_id,
                "title": event.title,
                "status": event.status,
            },
            allow_nan=False,
        )
    except (TypeError, ValueError) as e:
        raise EncodeError(f"cannot encode event for task {event.task_id!r}: {e}") from e
