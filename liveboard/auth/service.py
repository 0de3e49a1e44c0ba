"""
Session authority: the single shared admin secret.

- The configured password is kept only as a PBKDF2 hash (passlib)
- Verification is an exact match of the supplied string (digest comparison is constant-time)
- A successful attempt promotes the calling connection to privileged for its lifetime

There is no lockout or rate limiting; a wrong password simply gets `success: false`.
"""

# -------------------- Standard library imports --------------------
import logging
from typing import Any, Dict, Optional

# -------------------- Third-party imports --------------------
from passlib.hash import pbkdf2_sha256

# -------------------- Local application imports --------------------
from liveboard.config import DEFAULT_ADMIN_PASSWORD
from liveboard.room import events
from liveboard.room.session import Connection
from liveboard.room.state import RoomState

logger = logging.getLogger(__name__)


def is_weak_admin_password(value: Optional[str]) -> bool:
    return not value or value == DEFAULT_ADMIN_PASSWORD


def hash_password(raw_password: str) -> str:
    """Hash a raw password for in-memory storage."""
    return pbkdf2_sha256.hash(raw_password)


def verify_password(raw_password: Any, password_hash: str) -> bool:
    """Verify a supplied password against the stored hash (non-strings never match)."""
    if not isinstance(raw_password, str):
        return False
    return pbkdf2_sha256.verify(raw_password, password_hash)


class SessionAuthority:
    def __init__(self, admin_password: str):
        self._password_hash = hash_password(admin_password)

    def authenticate(self, conn: Connection, supplied: Any, state: RoomState) -> Dict[str, Any]:
        """
        Check `supplied` against the admin secret.

        Returns the acknowledgment body:
        - success: `{"success": True, "currentRoomPath": token, "currentMessages": [...]}`
        - failure: `{"success": False, "message": ...}`
        """
        if not verify_password(supplied, self._password_hash):
            logger.warning("Admin authentication failed for %s (ip=%s)", conn.id, conn.peer)
            return {"success": False, "message": events.AUTH_FAILED_REASON}

        conn.promote()
        logger.info("Connection %s authenticated as admin (ip=%s)", conn.id, conn.peer)
        return {
            "success": True,
            "currentRoomPath": state.current_token(),
            "currentMessages": state.snapshot(),
        }
