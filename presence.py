from backend import ConnectionRegistry, RoomRegistry
from logging_config import get_logger
from schemas.messages import PresencePayload

logger = get_logger(__name__)


class PresenceNotifier:
    """Tells the other members of a party's room that it went online or offline."""

    def __init__(self, connections: ConnectionRegistry, rooms: RoomRegistry):
        self._connections = connections
        self._rooms = rooms

    def announce(self, party_id: str, online: bool) -> int:
        """Send a presence payload for party_id to every other member of its room.

        Members without a bound connection are skipped. Returns the number of
        connections the payload was handed to.
        """
        room_id = self._rooms.room_of(party_id)
        if room_id is None:
            return 0
        members = self._rooms.members_of(room_id)
        if not members:
            return 0

        text = PresencePayload(fromPartyId=party_id, roomId=room_id, online=online).model_dump_json()
        sent = 0
        for member_id in members:
            if member_id == party_id:
                continue
            connection = self._connections.lookup(member_id)
            if connection is None:
                continue
            connection.send(text)
            sent += 1

        logger.debug(f"Presence {party_id} online={online} in room {room_id} sent to {sent} members")
        return sent
