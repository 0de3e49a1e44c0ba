"""
Test suite for liveboard.room.monitor (re-armable idle deadline)
Run: pytest tests/test_inactivity.py -v
"""
import asyncio
import time
import unittest

from liveboard.room.monitor import DEFAULT_IDLE_TIMEOUT_SEC, InactivityMonitor


class InactivityMonitorTest(unittest.TestCase):
    def test_default_period_is_six_hours(self):
        self.assertEqual(DEFAULT_IDLE_TIMEOUT_SEC, 21600)

    def test_fires_after_period(self):
        fired = []

        async def scenario():
            monitor = InactivityMonitor(lambda: fired.append(time.monotonic()), 0.05)
            monitor.reset()
            await asyncio.sleep(0.15)
            monitor.cancel()

        asyncio.run(scenario())
        self.assertGreaterEqual(len(fired), 1)

    def test_reset_postpones_deadline(self):
        fired = []

        async def scenario():
            monitor = InactivityMonitor(lambda: fired.append(True), 0.5)
            monitor.reset()
            for _ in range(4):
                await asyncio.sleep(0.1)
                monitor.reset()
            monitor.cancel()

        asyncio.run(scenario())
        self.assertEqual(fired, [])

    def test_rearms_after_firing(self):
        fired = []

        async def scenario():
            monitor = InactivityMonitor(lambda: fired.append(True), 0.05)
            monitor.reset()
            await asyncio.sleep(0.08)
            pending_after_fire = monitor.pending
            monitor.cancel()
            return pending_after_fire

        pending = asyncio.run(scenario())
        self.assertGreaterEqual(len(fired), 1)
        self.assertTrue(pending)

    def test_reset_from_expiry_callback_keeps_window_armed(self):
        calls = []

        async def scenario():
            monitor = InactivityMonitor(lambda: (calls.append(True), monitor.reset()), 0.05)
            monitor.reset()
            await asyncio.sleep(0.08)
            expires_at = monitor.expires_at
            monitor.cancel()
            return expires_at

        expires_at = asyncio.run(scenario())
        self.assertGreaterEqual(len(calls), 1)
        self.assertIsNotNone(expires_at)

    def test_cancel_stops_timer(self):
        fired = []

        async def scenario():
            monitor = InactivityMonitor(lambda: fired.append(True), 0.05)
            monitor.reset()
            monitor.cancel()
            await asyncio.sleep(0.1)
            return monitor.pending, monitor.expires_at

        pending, expires_at = asyncio.run(scenario())
        self.assertEqual(fired, [])
        self.assertFalse(pending)
        self.assertIsNone(expires_at)

    def test_failing_expiry_still_rearms(self):
        def boom():
            raise RuntimeError("boom")

        async def scenario():
            monitor = InactivityMonitor(boom, 0.05)
            monitor.reset()
            await asyncio.sleep(0.08)
            pending = monitor.pending
            monitor.cancel()
            return pending

        self.assertTrue(asyncio.run(scenario()))

    def test_expires_at_is_wall_clock(self):
        async def scenario():
            monitor = InactivityMonitor(lambda: None, 60)
            before = time.time()
            monitor.reset()
            expires_at = monitor.expires_at
            monitor.cancel()
            return before, expires_at

        before, expires_at = asyncio.run(scenario())
        self.assertAlmostEqual(expires_at - before, 60, delta=1)

    def test_reset_requires_running_loop(self):
        monitor = InactivityMonitor(lambda: None, 1)
        with self.assertRaises(RuntimeError):
            monitor.reset()


if __name__ == "__main__":
    unittest.main()
