"""
Fan-out router: connection registry + the broadcast group of the current room token.

- `join()` admits a viewer only when it presents the current token
- privileged connections are implicitly in the room: never checked, always reached
- `broadcast()` takes an explicit `exclude` so an actor's own echo is sent exactly once
- after a rotation the old group is invalidated; its members stay connected but hear nothing
"""

# -------------------- Standard library imports --------------------
import logging
from typing import Optional

# -------------------- Local application imports --------------------
from liveboard.room import events
from liveboard.room.session import Connection
from liveboard.room.state import RoomState

logger = logging.getLogger(__name__)


class FanoutRouter:
    def __init__(self, state: RoomState):
        self._state = state
        self._connections: set[Connection] = set()
        # token -> members; only the current token's group ever receives broadcasts.
        self._groups: dict[str, set[Connection]] = {}

    # -------------------- Registry --------------------
    def register(self, conn: Connection) -> None:
        self._connections.add(conn)

    def unregister(self, conn: Connection) -> None:
        self._connections.discard(conn)
        self._leave_group(conn)

    def _leave_group(self, conn: Connection) -> None:
        if conn.group is None:
            return
        members = self._groups.get(conn.group)
        if members is not None:
            members.discard(conn)
            if not members:
                del self._groups[conn.group]
        conn.group = None

    # -------------------- Join --------------------
    def join(self, conn: Connection, requested_token) -> bool:
        if conn.is_admin:
            return True

        current = self._state.current_token()
        if requested_token != current:
            logger.info("Join rejected for %s: invalid room", conn.id)
            conn.send(events.build_event(events.INVALID_ROOM, message=events.INVALID_ROOM_REASON))
            return False

        if conn.group != current:
            self._leave_group(conn)
            self._groups.setdefault(current, set()).add(conn)
            conn.group = current
        conn.send(events.build_event(events.INIT_MESSAGES, messages=self._state.snapshot()))
        logger.info("Viewer %s joined, total: %s", conn.id, self.group_size())
        return True

    def invalidate(self, token: str) -> int:
        """Drop a dead group. Members keep their sockets but are no longer subscribed."""
        members = self._groups.pop(token, set())
        for conn in members:
            conn.group = None
        return len(members)

    # -------------------- Delivery --------------------
    def audience(self, exclude: Optional[Connection] = None) -> list[Connection]:
        members = set(self._groups.get(self._state.current_token(), set()))
        members.update(c for c in self._connections if c.is_admin)
        members.discard(exclude)
        return sorted(members, key=lambda c: c.id)

    def broadcast(self, payload: dict, exclude: Optional[Connection] = None) -> int:
        delivered = 0
        for conn in self.audience(exclude):
            if conn.send(payload):
                delivered += 1
        logger.debug("Broadcast %s to %s connections", payload.get("type"), delivered)
        return delivered

    def broadcast_group(self, token: str, payload: dict, exclude: Optional[Connection] = None) -> int:
        """Deliver to members that joined `token` only (no implicit privileged audience)."""
        delivered = 0
        for conn in sorted(self._groups.get(token, set()), key=lambda c: c.id):
            if conn is not exclude and conn.send(payload):
                delivered += 1
        return delivered

    def broadcast_all(self, payload: dict, exclude: Optional[Connection] = None) -> int:
        delivered = 0
        for conn in list(self._connections):
            if conn is exclude:
                continue
            if conn.send(payload):
                delivered += 1
        return delivered

    # -------------------- Diagnostics --------------------
    def group_size(self) -> int:
        return len(self._groups.get(self._state.current_token(), set()))

    def connection_count(self) -> int:
        return len(self._connections)

    def privileged_count(self) -> int:
        return sum(1 for c in self._connections if c.is_admin)
