# Event names exchanged over the live channel (JSON frames keyed by "type").

# -------------------- Client -> server --------------------
JOIN_ROOM = "joinRoom"
AUTHENTICATE = "authenticate"
SEND_MESSAGE = "sendMessage"
CLEAR_MESSAGES = "clearMessages"
ROTATE_URL = "rotateUrl"
DELETE_MESSAGE = "deleteMessage"

# -------------------- Server -> client --------------------
INVALID_ROOM = "invalidRoom"
INIT_MESSAGES = "initMessages"
NEW_MESSAGE = "newMessage"
MESSAGES_CLEARED = "messagesCleared"
MESSAGE_DELETED = "messageDeleted"
ROOM_ROTATED = "roomRotated"
SESSION_EXPIRED = "sessionExpired"
URL_ROTATED = "urlRotated"
ACK = "ack"

# -------------------- Heartbeat (both directions) --------------------
PING = "PING"
PONG = "PONG"

# Human-readable reasons shown by viewers before they stop listening.
INVALID_ROOM_REASON = "This link is invalid or the session has expired. Ask the presenter for a new link."
ROOM_ROTATED_REASON = "The presenter changed the room address. Ask the presenter for the new link."
SESSION_EXPIRED_REASON = "The session was reset after a long period of inactivity."
AUTH_FAILED_REASON = "Incorrect password."


def build_event(event_type: str, **fields) -> dict:
    return {"type": event_type, **fields}


def room_path(token: str) -> str:
    return f"/live/{token}"
