"""
Entry document for presenters and viewers.

`/` and `/live/{room_id}` return the same page whatever the token is: room validity is
only checked over the live channel after the socket connects.
"""

import logging
from pathlib import Path

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import FileResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pages"])

INDEX_FILE = "index.html"


def _index_response(request: Request) -> FileResponse:
    index = Path(request.app.state.settings.static_dir) / INDEX_FILE
    if not index.is_file():
        logger.error("Entry document missing: %s", index)
        raise HTTPException(status_code=404, detail="index_missing")
    return FileResponse(index, media_type="text/html")


@router.get("/")
async def index_page(request: Request):
    return _index_response(request)


@router.get("/live/{room_id}")
async def live_page(room_id: str, request: Request):
    return _index_response(request)
