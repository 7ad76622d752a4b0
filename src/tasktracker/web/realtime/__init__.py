"""Real-time board updates over WebSocket."""

from .connection import Connection, WebSocketConnection
from .encoder import encode_task_event
from .errors import (
    EncodeError,
    RateLimited,
    RealtimeError,
    TransientIOError,
    UpgradeRejected,
)
from .hub import Hub
from .models import EventKind, TaskChangeEvent
from .session import ConnectionSession
from .upgrade import UpgradeAuthorizer

__all__ = [
    "Connection",
    "ConnectionSession",
    "EncodeError",
    "EventKind",
    "Hub",
    "RateLimited",
    "RealtimeError",
    "TaskChangeEvent",
    "TransientIOError",
    "UpgradeAuthorizer",
    "UpgradeRejected",
    "WebSocketConnection",
    "encode_task_event",
]
