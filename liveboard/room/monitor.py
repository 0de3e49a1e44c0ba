"""
Inactivity monitor: a single re-armable deadline on the running event loop.

`reset()` replaces any pending deadline with a fresh one. When the deadline passes
the expiry callback runs on the loop (same context as every other mutation), and the
monitor makes sure a new window is armed afterwards.
"""

# -------------------- Standard library imports --------------------
import asyncio
import logging
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)

# 6 hours
DEFAULT_IDLE_TIMEOUT_SEC = 6 * 60 * 60


class InactivityMonitor:
    def __init__(
        self,
        on_expire: Callable[[], None],
        period_sec: float = DEFAULT_IDLE_TIMEOUT_SEC,
    ):
        self.period_sec = float(period_sec)
        self._on_expire = on_expire
        self._handle: Optional[asyncio.TimerHandle] = None
        self._expires_at: Optional[float] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    @property
    def expires_at(self) -> Optional[float]:
        """Wall-clock epoch seconds of the pending deadline (None when idle)."""
        return self._expires_at

    def reset(self) -> None:
        loop = asyncio.get_running_loop()
        if self._handle is not None:
            self._handle.cancel()
        self._handle = loop.call_later(self.period_sec, self._fire)
        self._expires_at = time.time() + self.period_sec

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._expires_at = None

    def _fire(self) -> None:
        self._handle = None
        self._expires_at = None
        logger.info("Room inactive for %.0fs; resetting session", self.period_sec)
        try:
            self._on_expire()
        except Exception as exc:
            logger.error("Inactivity expiry failed: %s", exc, exc_info=True)
        # The expiry path normally re-arms through the state mutators; keep a window either way.
        if self._handle is None:
            self.reset()
