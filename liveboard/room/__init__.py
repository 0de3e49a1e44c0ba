from .fanout import FanoutRouter
from .monitor import DEFAULT_IDLE_TIMEOUT_SEC, InactivityMonitor
from .session import Connection, SessionRole
from .state import Message, RoomState

__all__ = [
    "DEFAULT_IDLE_TIMEOUT_SEC",
    "Connection",
    "FanoutRouter",
    "InactivityMonitor",
    "Message",
    "RoomState",
    "SessionRole",
]
