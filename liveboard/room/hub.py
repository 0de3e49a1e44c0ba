"""
Live room hub: the single-writer context that owns every piece of room state.

One `LiveRoom` is created per application (FastAPI lifespan, stored on `app.state.room`).
Transport code only calls the action methods below; each runs to completion without
awaiting, so mutations and the broadcasts they trigger are never interleaved.

Privileged actions (publish/clear/delete/rotate) silently do nothing for anonymous
connections: no error, no broadcast, no state change.
"""

# -------------------- Standard library imports --------------------
import functools
import logging
from typing import Any, Optional

# -------------------- Local application imports --------------------
from liveboard.auth.service import SessionAuthority
from liveboard.room import events
from liveboard.room.fanout import FanoutRouter
from liveboard.room.monitor import DEFAULT_IDLE_TIMEOUT_SEC, InactivityMonitor
from liveboard.room.session import Connection
from liveboard.room.state import DEFAULT_TOKEN_BYTES, Message, RoomState

logger = logging.getLogger(__name__)


def privileged(handler):
    """Drop the action unless the calling connection authenticated as admin."""

    @functools.wraps(handler)
    def wrapper(self, conn: Connection, *args, **kwargs):
        if not conn.is_admin:
            logger.debug("Ignoring %s from non-admin %s", handler.__name__, conn.id)
            return None
        return handler(self, conn, *args, **kwargs)

    return wrapper


class LiveRoom:
    def __init__(
        self,
        *,
        admin_password: str,
        idle_timeout_sec: float = DEFAULT_IDLE_TIMEOUT_SEC,
        token_bytes: int = DEFAULT_TOKEN_BYTES,
        rotate_clears_messages: bool = False,
    ):
        self.state = RoomState(token_bytes=token_bytes)
        self.monitor = InactivityMonitor(self._expire, idle_timeout_sec)
        self.state.on_activity = self.monitor.reset
        self.authority = SessionAuthority(admin_password)
        self.router = FanoutRouter(self.state)
        self.rotate_clears_messages = rotate_clears_messages

    # -------------------- Lifecycle --------------------
    def start(self) -> None:
        """Arm the first inactivity window (must run on the event loop)."""
        self.monitor.reset()

    def shutdown(self) -> None:
        self.monitor.cancel()

    def connect(self, conn: Connection) -> None:
        self.router.register(conn)
        logger.info("Client %s connected (ip=%s), total: %s", conn.id, conn.peer, self.router.connection_count())

    def disconnect(self, conn: Connection) -> None:
        conn.closed = True
        self.router.unregister(conn)
        logger.info("Client %s disconnected, remaining: %s", conn.id, self.router.connection_count())

    # -------------------- Open actions --------------------
    def join(self, conn: Connection, room_id: Any) -> bool:
        return self.router.join(conn, room_id)

    def authenticate(self, conn: Connection, password: Any) -> dict:
        return self.authority.authenticate(conn, password, self.state)

    # -------------------- Admin actions --------------------
    @privileged
    def publish(self, conn: Connection, text: str) -> Optional[Message]:
        message = self.state.append(text)
        self._fan_out(conn, events.build_event(events.NEW_MESSAGE, message=message.to_dict()))
        return message

    @privileged
    def clear_messages(self, conn: Connection) -> None:
        self.state.clear_all()
        self._fan_out(conn, events.build_event(events.MESSAGES_CLEARED))

    @privileged
    def delete_message(self, conn: Connection, message_id: int) -> bool:
        found = self.state.delete_by_id(message_id)
        if not found:
            logger.debug("Delete for absent message id %s (broadcast anyway)", message_id)
        self._fan_out(conn, events.build_event(events.MESSAGE_DELETED, id=message_id))
        return found

    @privileged
    def rotate_url(self, conn: Connection) -> str:
        old_token = self.state.current_token()
        self.router.broadcast_group(
            old_token,
            events.build_event(events.ROOM_ROTATED, message=events.ROOM_ROTATED_REASON),
            exclude=conn,
        )
        new_token = self.state.rotate_token()
        dropped = self.router.invalidate(old_token)
        logger.info("Room URL rotated by %s; %s viewers must request the new link", conn.id, dropped)

        if self.rotate_clears_messages:
            self.state.clear_all()
            self._fan_out(conn, events.build_event(events.MESSAGES_CLEARED))

        conn.send(
            events.build_event(events.URL_ROTATED, roomId=new_token, roomPath=events.room_path(new_token))
        )
        return new_token

    # -------------------- Internals --------------------
    def _fan_out(self, actor: Connection, payload: dict) -> None:
        # Everyone else in the room, then the actor itself: one copy each.
        self.router.broadcast(payload, exclude=actor)
        actor.send(payload)

    def _expire(self) -> None:
        old_token = self.state.current_token()
        self.state.clear_all()
        self.state.rotate_token()
        self.router.invalidate(old_token)
        notified = self.router.broadcast_all(
            events.build_event(events.SESSION_EXPIRED, message=events.SESSION_EXPIRED_REASON)
        )
        logger.info("Session expired after inactivity; notified %s connections", notified)
