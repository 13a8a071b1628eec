import os

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 3000))
RELOAD = os.getenv("RELOAD", "").lower() in ("1", "true", "yes")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", None)

HEALTH_RESPONSE = "hi!"

# Client-facing error strings, sent as {"error": ...}
ERROR_PROCESSING_MESSAGE = "Error processing message"
ERROR_INVALID_ACTION = "Invalid action"
ERROR_INVALID_SUBSCRIBE = "Invalid partyId or roomId"
ERROR_ALREADY_SUBSCRIBED = "Already subscribed"
ERROR_INVALID_MESSAGE = "Invalid partyId, roomId, toPartyId or msg"
ERROR_RECIPIENT_NOT_SUBSCRIBED = "toPartyId not subscribed"
ERROR_ROOM_NOT_FOUND = "roomId not found"
ERROR_NOT_IN_ROOM = "partyId not in roomId"
ERROR_PARTY_MISMATCH = "partyId does not match"
