"""
Liveboard entrypoint (FastAPI).

This module wires together:
- App startup/shutdown (lifespan): create the live room + arm/cancel its inactivity timer
- Global middleware: request logging + CORS
- Router registration: live channel, health, entry pages, static assets
"""

# -------------------- Standard library imports --------------------
import logging
import sys
from contextlib import asynccontextmanager
from time import time

# -------------------- Third-party imports --------------------
import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

# -------------------- Local application imports --------------------
from liveboard.api.health import router as health_router
from liveboard.api.live import router as live_router
from liveboard.api.pages import router as pages_router
from liveboard.auth.service import is_weak_admin_password
from liveboard.config import load_settings
from liveboard.room.events import room_path
from liveboard.room.hub import LiveRoom

# -------------------- Environment configuration --------------------
# Load `.env` early because logging, CORS and static paths are read at import time.
load_dotenv()
settings = load_settings()

# -------------------- Logging --------------------
# Log to stdout (for containers/terminal) and, unless LOG_FILE is empty, to a local file.
_handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
if settings.log_file:
    _handlers.append(logging.FileHandler(settings.log_file))
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=_handlers,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown events for the FastAPI application."""

    # -------------------- Startup --------------------
    # Re-read settings so each app start (and each test client) gets the current env.
    current = load_settings()
    room = LiveRoom(
        admin_password=current.admin_password,
        idle_timeout_sec=current.idle_timeout_sec,
        token_bytes=current.room_token_bytes,
        rotate_clears_messages=current.rotate_clears_messages,
    )
    room.start()
    app.state.settings = current
    app.state.room = room

    logger.info("Liveboard starting up on port %s", current.port)
    logger.info("Current live URL path: %s", room_path(room.state.current_token()))
    if is_weak_admin_password(current.admin_password):
        logger.warning(
            "ADMIN_PASSWORD is missing or uses the default value; set a strong ADMIN_PASSWORD before deploying."
        )

    yield

    # -------------------- Shutdown --------------------
    # Cancel the inactivity timer so the loop can exit once connections are drained.
    logger.info("Liveboard shutting down...")
    room.shutdown()


# -------------------- FastAPI app --------------------
app = FastAPI(
    title="Liveboard",
    lifespan=lifespan,
)

# -------------------- CORS --------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins,
    allow_credentials=False,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request, call_next):
    # Access log with timing; /health probes are not logged.
    path = request.url.path
    client = request.client.host if request.client else "-"
    started = time()

    try:
        response = await call_next(request)
    except Exception as exc:
        logger.error(
            "%s %s from %s failed after %.3fs: %s",
            request.method,
            path,
            client,
            time() - started,
            exc,
            exc_info=True,
        )
        raise

    if not path.startswith("/health"):
        logger.info(
            "%s %s from %s -> %s (%.3fs)",
            request.method,
            path,
            client,
            response.status_code,
            time() - started,
        )
    return response


# -------------------- Router registration --------------------
app.include_router(live_router)
app.include_router(health_router)
app.include_router(pages_router)

# Static assets last so explicit routes win.
app.mount("/", StaticFiles(directory=settings.static_dir, check_dir=False), name="static")


def run() -> None:
    logger.info("Starting Liveboard server on %s:%s", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
