# liveboard/api/live.py
"""
Live channel (WebSockets).

- WS `/ws`: connect without joining (presenter page before login)
- WS `/ws/{room_id}`: connect and immediately join `room_id` (viewer page `/live/{room_id}`)

Each socket gets a `Connection` whose outbox is drained by a writer task, plus a heartbeat
task (PING every interval, close when no PONG arrives within the timeout). Inbound frames
are JSON objects keyed by `type`; they are validated with pydantic and dispatched to the
`LiveRoom` hub stored on `app.state.room`. Invalid frames are ignored.
"""

# -------------------- Standard library imports --------------------
import asyncio
import json
import logging
from typing import Annotated, Any, Literal, Union

# -------------------- Third-party imports --------------------
from fastapi import APIRouter
from pydantic import BaseModel, Field, TypeAdapter, ValidationError
from starlette.websockets import WebSocket

# -------------------- Local application imports --------------------
from liveboard.config import Settings
from liveboard.room import events
from liveboard.room.hub import LiveRoom
from liveboard.room.session import Connection

logger = logging.getLogger(__name__)

router = APIRouter()

# Receive timeout; the heartbeat keeps healthy clients well inside it.
RECEIVE_TIMEOUT_SEC = 180


# -------------------- Inbound frames --------------------
class JoinRoom(BaseModel):
    type: Literal[events.JOIN_ROOM]
    roomId: Any = None


class Authenticate(BaseModel):
    type: Literal[events.AUTHENTICATE]
    password: Any = None
    ackId: Any = None


class SendMessage(BaseModel):
    type: Literal[events.SEND_MESSAGE]
    text: str


class ClearMessages(BaseModel):
    type: Literal[events.CLEAR_MESSAGES]


class RotateUrl(BaseModel):
    type: Literal[events.ROTATE_URL]


class DeleteMessage(BaseModel):
    type: Literal[events.DELETE_MESSAGE]
    id: int


class Ping(BaseModel):
    type: Literal[events.PING]
    timestamp: Any = None


class Pong(BaseModel):
    type: Literal[events.PONG]
    timestamp: Any = None


ClientFrame = Annotated[
    Union[JoinRoom, Authenticate, SendMessage, ClearMessages, RotateUrl, DeleteMessage, Ping, Pong],
    Field(discriminator="type"),
]
_frame_adapter = TypeAdapter(ClientFrame)


def parse_frame(data: Any):
    """Return the validated frame model, or None for anything malformed."""
    try:
        msg = json.loads(data) if isinstance(data, (str, bytes)) else data
    except json.JSONDecodeError:
        logger.debug("Invalid JSON on live channel")
        return None
    if not isinstance(msg, dict):
        return None
    try:
        return _frame_adapter.validate_python(msg)
    except ValidationError as exc:
        logger.debug("Ignoring invalid frame type=%s: %s", msg.get("type"), exc.error_count())
        return None


def dispatch(room: LiveRoom, conn: Connection, frame, settings: Settings, last_pong: dict) -> None:
    """Apply one inbound frame. Synchronous: the hub action and its fan-out complete together."""
    if isinstance(frame, Pong):
        last_pong["ts"] = asyncio.get_running_loop().time()
        return

    if isinstance(frame, Ping):
        conn.send(events.build_event(events.PONG, timestamp=frame.timestamp))
        return

    if isinstance(frame, JoinRoom):
        room.join(conn, frame.roomId)
        return

    if isinstance(frame, Authenticate):
        result = room.authenticate(conn, frame.password)
        conn.send(events.build_event(events.ACK, event=events.AUTHENTICATE, ackId=frame.ackId, **result))
        return

    if isinstance(frame, SendMessage):
        if conn.is_admin and (not frame.text.strip() or len(frame.text) > settings.max_message_length):
            logger.warning("Rejected message from %s: empty or longer than %s", conn.id, settings.max_message_length)
            return
        room.publish(conn, frame.text)
        return

    if isinstance(frame, ClearMessages):
        room.clear_messages(conn)
        return

    if isinstance(frame, DeleteMessage):
        room.delete_message(conn, frame.id)
        return

    if isinstance(frame, RotateUrl):
        room.rotate_url(conn)
        return


# -------------------- Background tasks per socket --------------------
async def _writer(ws: WebSocket, conn: Connection, send_timeout: float) -> None:
    """Drain the connection outbox in FIFO order; drop the client when it stalls."""
    while True:
        payload = await conn.outbox.get()
        try:
            # Timeout so a slow client cannot hold a backlog forever
            await asyncio.wait_for(
                ws.send_text(json.dumps(payload, ensure_ascii=False)), timeout=send_timeout
            )
        except asyncio.TimeoutError:
            logger.warning("WebSocket send timeout for %s, disconnecting slow client", conn.id)
            await _close_quietly(ws, code=1008, reason="Send timeout")
            break
        except Exception as e:
            logger.debug("Send error to %s: %s", conn.id, e)
            break
        if conn.overflowed:
            await _close_quietly(ws, code=1008, reason="Send backlog")
            break


async def _heartbeat(ws: WebSocket, conn: Connection, last_pong: dict[str, float], interval: float, timeout: float) -> None:
    """Send PING every `interval`; close if no PONG for `timeout`."""
    while True:
        try:
            await asyncio.sleep(interval)
            now = asyncio.get_running_loop().time()

            if now - (last_pong.get("ts") or 0.0) > timeout:
                logger.warning("Heartbeat timeout for %s, closing", conn.id)
                await _close_quietly(ws, code=1000)
                break

            conn.send(events.build_event(events.PING, timestamp=now))
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.debug("Heartbeat error for %s: %s", conn.id, e)
            break


async def _close_quietly(ws: WebSocket, code: int = 1000, reason: str | None = None) -> None:
    try:
        await ws.close(code=code, reason=reason)
    except Exception as e:
        logger.debug("Close failed: %s", e)


async def _cancel(task: asyncio.Task) -> None:
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


# -------------------- Endpoints --------------------
async def _serve(ws: WebSocket, room_id: str | None = None) -> None:
    """
    Shared connection lifecycle.

    Flow:
    - accept, register the connection with the hub
    - optional implicit join (path-addressed viewers)
    - receive loop: validate and dispatch frames until the client goes away
    - cleanup: stop writer/heartbeat, unregister
    """
    room: LiveRoom = ws.app.state.room
    settings: Settings = ws.app.state.settings
    peer = ws.client.host if ws.client else None

    await ws.accept()

    conn = Connection(peer=peer, outbox_limit=settings.outbox_limit)
    room.connect(conn)
    if room_id is not None:
        room.join(conn, room_id)

    last_pong = {"ts": asyncio.get_running_loop().time()}
    writer_task = asyncio.create_task(_writer(ws, conn, settings.send_timeout_sec))
    heartbeat_task = asyncio.create_task(
        _heartbeat(ws, conn, last_pong, settings.heartbeat_interval_sec, settings.heartbeat_timeout_sec)
    )

    try:
        while True:
            try:
                data = await asyncio.wait_for(ws.receive_text(), timeout=RECEIVE_TIMEOUT_SEC)
            except asyncio.TimeoutError:
                logger.warning("WebSocket receive timeout for %s", conn.id)
                break
            except Exception as e:
                logger.info("WebSocket closed for %s: %s", conn.id, e)
                break

            frame = parse_frame(data)
            if frame is None:
                continue
            dispatch(room, conn, frame, settings, last_pong)

    except Exception as e:
        logger.error("WebSocket error for %s: %s", conn.id, e, exc_info=True)
    finally:
        room.disconnect(conn)
        await _cancel(heartbeat_task)
        await _cancel(writer_task)
        await _close_quietly(ws)


@router.websocket("/ws")
async def live_websocket(ws: WebSocket):
    await _serve(ws)


@router.websocket("/ws/{room_id}")
async def live_room_websocket(ws: WebSocket, room_id: str):
    await _serve(ws, room_id)
