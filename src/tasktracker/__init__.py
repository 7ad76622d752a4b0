"""tasktracker: boards, tasks and live board updates over WebSocket.

Two HTTP services share one code base:
- auth: registration, login, JWT issuance
- tasks: boards and tasks CRUD plus the ``/ws`` real-time feed

Usage:
    $ tasktracker serve --service all
    $ tasktracker serve --service auth --port 8001
"""

__version__ = "0.1.0"
