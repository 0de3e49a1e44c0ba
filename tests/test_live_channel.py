"""
Test suite for liveboard.api.live internals (writer, heartbeat, frame parsing)
Run: pytest tests/test_live_channel.py -v
"""
import asyncio
import json
import unittest

from liveboard.api.live import _heartbeat, _writer, parse_frame
from liveboard.room import events
from liveboard.room.session import Connection


class FakeWebSocket:
    """Records frames and close calls; `stall=True` makes every send hang."""

    def __init__(self, stall: bool = False):
        self.stall = stall
        self.sent = []
        self.closed_with = []

    async def send_text(self, data: str) -> None:
        if self.stall:
            await asyncio.Event().wait()
        self.sent.append(json.loads(data))

    async def close(self, code: int = 1000, reason=None) -> None:
        self.closed_with.append((code, reason))


class WriterTest(unittest.TestCase):
    def test_writer_delivers_in_order(self):
        async def scenario():
            ws, conn = FakeWebSocket(), Connection()
            task = asyncio.create_task(_writer(ws, conn, send_timeout=1))
            for i in range(3):
                conn.send({"type": "n", "i": i})
            await asyncio.sleep(0.05)
            task.cancel()
            return ws

        ws = asyncio.run(scenario())
        self.assertEqual([f["i"] for f in ws.sent], [0, 1, 2])
        self.assertEqual(ws.closed_with, [])

    def test_stalled_send_closes_with_policy_code(self):
        async def scenario():
            ws, conn = FakeWebSocket(stall=True), Connection()
            conn.send({"type": "n"})
            await asyncio.wait_for(_writer(ws, conn, send_timeout=0.05), timeout=2)
            return ws

        ws = asyncio.run(scenario())
        self.assertEqual(ws.sent, [])
        self.assertEqual(ws.closed_with, [(1008, "Send timeout")])

    def test_backlog_overflow_closes_with_policy_code(self):
        async def scenario():
            ws, conn = FakeWebSocket(), Connection(outbox_limit=1)
            conn.send({"type": "first"})
            conn.send({"type": "dropped"})
            await asyncio.wait_for(_writer(ws, conn, send_timeout=1), timeout=2)
            return ws, conn

        ws, conn = asyncio.run(scenario())
        self.assertTrue(conn.overflowed)
        self.assertEqual([f["type"] for f in ws.sent], ["first"])
        self.assertEqual(ws.closed_with, [(1008, "Send backlog")])


class HeartbeatTest(unittest.TestCase):
    def test_missing_pong_closes_socket(self):
        async def scenario():
            ws, conn = FakeWebSocket(), Connection()
            last_pong = {"ts": asyncio.get_running_loop().time() - 10}
            await asyncio.wait_for(_heartbeat(ws, conn, last_pong, interval=0.01, timeout=0.05), timeout=2)
            return ws, conn.drain()

        ws, queued = asyncio.run(scenario())
        self.assertEqual(ws.closed_with, [(1000, None)])
        self.assertEqual(queued, [])

    def test_fresh_pong_keeps_pinging(self):
        async def scenario():
            ws, conn = FakeWebSocket(), Connection()
            last_pong = {"ts": asyncio.get_running_loop().time()}
            task = asyncio.create_task(_heartbeat(ws, conn, last_pong, interval=0.01, timeout=10))
            await asyncio.sleep(0.05)
            task.cancel()
            return ws, conn.drain()

        ws, queued = asyncio.run(scenario())
        self.assertEqual(ws.closed_with, [])
        self.assertGreaterEqual(len(queued), 1)
        self.assertEqual({f["type"] for f in queued}, {events.PING})


class ParseFrameTest(unittest.TestCase):
    def test_every_client_event_name_is_accepted(self):
        frames = {
            events.JOIN_ROOM: {"roomId": "abc"},
            events.AUTHENTICATE: {"password": "x", "ackId": 1},
            events.SEND_MESSAGE: {"text": "hi"},
            events.CLEAR_MESSAGES: {},
            events.ROTATE_URL: {},
            events.DELETE_MESSAGE: {"id": 5},
            events.PING: {},
            events.PONG: {},
        }
        for event_type, fields in frames.items():
            frame = parse_frame(json.dumps({"type": event_type, **fields}))
            self.assertIsNotNone(frame, event_type)
            self.assertEqual(frame.type, event_type)

    def test_unknown_or_ill_typed_frames_are_dropped(self):
        self.assertIsNone(parse_frame("{"))
        self.assertIsNone(parse_frame(json.dumps({"type": "nope"})))
        self.assertIsNone(parse_frame(json.dumps({"type": events.DELETE_MESSAGE, "id": "abc"})))


if __name__ == "__main__":
    unittest.main()
