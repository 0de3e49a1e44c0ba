"""
Per-connection session.

A connection is transport-agnostic: events are queued on `outbox` (FIFO) and a writer
task owned by the transport drains it. Queueing never awaits, so a handler can mutate
room state and fan the result out without yielding to another handler in between.
"""

# -------------------- Standard library imports --------------------
import asyncio
import itertools
import logging
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_OUTBOX_LIMIT = 1000

_ids = itertools.count(1)


class SessionRole(str, Enum):
    ANONYMOUS = "anonymous"
    PRIVILEGED = "privileged"


class Connection:
    def __init__(self, *, peer: Optional[str] = None, outbox_limit: int = DEFAULT_OUTBOX_LIMIT):
        self.id = f"conn_{next(_ids)}"
        self.peer = peer
        self.role = SessionRole.ANONYMOUS
        # Token of the broadcast group this connection last joined (None = not joined).
        self.group: Optional[str] = None
        self.outbox: asyncio.Queue = asyncio.Queue(maxsize=max(int(outbox_limit), 1))
        self.closed = False
        self.overflowed = False

    def __repr__(self) -> str:
        return f"<Connection {self.id} role={self.role.value} group={'yes' if self.group else 'no'}>"

    @property
    def is_admin(self) -> bool:
        return self.role is SessionRole.PRIVILEGED

    def promote(self) -> None:
        """Tag the session as privileged. One-way: nothing ever demotes a connection."""
        self.role = SessionRole.PRIVILEGED

    def send(self, payload: dict) -> bool:
        if self.closed:
            return False
        try:
            self.outbox.put_nowait(payload)
        except asyncio.QueueFull:
            # Slow consumer: the writer closes the socket once it sees the flag.
            if not self.overflowed:
                logger.warning("Outbox full for %s, dropping slow client", self.id)
            self.overflowed = True
            return False
        return True

    def drain(self) -> list[dict]:
        """Pop everything queued so far (diagnostics and tests)."""
        items = []
        while not self.outbox.empty():
            items.append(self.outbox.get_nowait())
        return items
