# liveboard/api/health.py
"""Health check endpoints for monitoring and reverse-proxy probes."""

# This module intentionally exposes lightweight, read-only diagnostics.
# The room token is never included: knowing it is what grants viewer access.

# -------------------- Standard library imports --------------------
import logging
from datetime import datetime, timezone

# -------------------- Third-party imports --------------------
from fastapi import APIRouter, Request

logger = logging.getLogger(__name__)
# Router is mounted at the root in `liveboard/main.py`.
router = APIRouter(tags=["health"])


def _iso(ts: float | None) -> str | None:
    if ts is None:
        return None
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


@router.get("/health")
async def health_check(request: Request):
    """
    Health check endpoint for monitoring.

    Returns:
        - status: "ok" if healthy
        - connections: open live-channel sockets
        - viewers: sockets joined to the current room
        - admins: authenticated presenter sockets
        - messages: size of the current message log
        - last_activity / expires_at: inactivity window (UTC)
        - timestamp: current server time (UTC)
    """
    room = request.app.state.room
    return {
        "status": "ok",
        "connections": room.router.connection_count(),
        "viewers": room.router.group_size(),
        "admins": room.router.privileged_count(),
        "messages": len(room.state.messages()),
        "last_activity": _iso(room.state.last_activity),
        "expires_at": _iso(room.monitor.expires_at),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/health/ready")
async def readiness_check(request: Request):
    """
    Readiness probe - the room exists and its inactivity timer is armed.
    """
    room = getattr(request.app.state, "room", None)
    if room is None or not room.monitor.pending:
        logger.error("Readiness check failed: room not started")
        return {"status": "not_ready"}
    return {"status": "ready"}


@router.get("/health/live")
async def liveness_check():
    """
    Liveness probe - basic check that the service is running.
    """
    return {"status": "alive"}
