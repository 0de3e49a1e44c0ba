"""
Room state: the single source of truth for the board.

Holds:
- the current room token (the `/live/{token}` path segment viewers must present)
- the ordered message log (oldest first; display order is the client's concern)
- the last-activity timestamp

All mutators are synchronous so they complete atomically on the event loop.
Each mutator call notifies `on_activity` (wired to the inactivity monitor's reset).
"""

# -------------------- Standard library imports --------------------
import logging
import secrets
import time
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_BYTES = 8
# Shortest accepted token (8 hex chars).
MIN_TOKEN_BYTES = 4


@dataclass(frozen=True)
class Message:
    id: int
    text: str

    def to_dict(self) -> dict:
        return {"id": self.id, "text": self.text}


class RoomState:
    def __init__(
        self,
        *,
        token_bytes: int = DEFAULT_TOKEN_BYTES,
        on_activity: Optional[Callable[[], None]] = None,
        clock: Callable[[], float] = time.time,
    ):
        if token_bytes < MIN_TOKEN_BYTES:
            raise ValueError(f"token_bytes must be at least {MIN_TOKEN_BYTES}, got {token_bytes}")
        self._token_bytes = int(token_bytes)
        self._clock = clock
        # Every token ever handed out; a rotated-away token must never come back.
        self._issued: set[str] = set()
        self._token = self._new_token()
        self._messages: list[Message] = []
        self._last_id = 0
        self.on_activity = on_activity
        self.last_activity = clock()

    def _new_token(self) -> str:
        token = secrets.token_hex(self._token_bytes)
        while token in self._issued:
            token = secrets.token_hex(self._token_bytes)
        self._issued.add(token)
        return token

    def _next_id(self) -> int:
        # Millisecond timestamps, bumped past the previous id when the clock has not advanced.
        candidate = int(self._clock() * 1000)
        self._last_id = max(candidate, self._last_id + 1)
        return self._last_id

    def _touch(self) -> None:
        self.last_activity = self._clock()
        if self.on_activity is not None:
            self.on_activity()

    def current_token(self) -> str:
        return self._token

    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    def snapshot(self) -> list[dict]:
        """Wire-ready copy of the log (oldest first)."""
        return [m.to_dict() for m in self._messages]

    def append(self, text: str) -> Message:
        message = Message(id=self._next_id(), text=text)
        self._messages.append(message)
        self._touch()
        return message

    def delete_by_id(self, message_id: int) -> bool:
        """Remove a message by exact id. Deleting an absent id is a harmless no-op."""
        before = len(self._messages)
        self._messages = [m for m in self._messages if m.id != message_id]
        found = len(self._messages) != before
        self._touch()
        return found

    def clear_all(self) -> None:
        self._messages = []
        self._touch()

    def rotate_token(self) -> str:
        old = self._token
        self._token = self._new_token()
        logger.info("Room token rotated (%s... -> %s...)", old[:4], self._token[:4])
        self._touch()
        return self._token
