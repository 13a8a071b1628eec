from typing import Dict, Optional, Protocol, Tuple

from errors import AlreadyBoundError, AlreadyInRoomError
from logging_config import get_logger

logger = get_logger(__name__)


class Connection(Protocol):
    """What the core needs from a transport connection: a way to hand it text.

    Implementations must be hashable; they are used as registry keys.
    """

    def send(self, text: str) -> None: ...


class ConnectionRegistry:
    """Bidirectional mapping between live connections and party ids.

    A connection is bound to at most one party and a party to at most one
    connection. Connections are held by reference only.
    """

    def __init__(self):
        self._party_to_connection: Dict[str, Connection] = {}
        self._connection_to_party: Dict[Connection, str] = {}

    def bind(self, connection: Connection, party_id: str) -> None:
        if connection in self._connection_to_party:
            raise AlreadyBoundError()
        if party_id in self._party_to_connection:
            raise AlreadyBoundError()
        self._party_to_connection[party_id] = connection
        self._connection_to_party[connection] = party_id
        logger.debug(f"Bound party {party_id} ({len(self)} bound connections)")

    def unbind(self, connection: Connection) -> Optional[str]:
        """Remove the binding for a connection. Returns the freed party id, if any."""
        party_id = self._connection_to_party.pop(connection, None)
        if party_id is None:
            return None
        self._party_to_connection.pop(party_id, None)
        logger.debug(f"Unbound party {party_id} ({len(self)} bound connections)")
        return party_id

    def lookup(self, party_id: str) -> Optional[Connection]:
        return self._party_to_connection.get(party_id)

    def lookup_party(self, connection: Connection) -> Optional[str]:
        return self._connection_to_party.get(connection)

    def __len__(self) -> int:
        return len(self._connection_to_party)


class RoomRegistry:
    """Room membership: room id -> member party ids, and party id -> its one room.

    Rooms are created on first join and deleted as soon as they are empty.
    Members are kept in join order.
    """

    def __init__(self):
        self._rooms: Dict[str, Dict[str, None]] = {}
        self._party_to_room: Dict[str, str] = {}

    def join(self, party_id: str, room_id: str) -> Tuple[str, ...]:
        """Add a party to a room, creating the room if needed.

        Returns the room's members after insertion, in join order. A party
        may only belong to one room; joining a second room raises
        AlreadyInRoomError, joining the same room again is a no-op.
        """
        current = self._party_to_room.get(party_id)
        if current is not None and current != room_id:
            logger.warning(f"Party {party_id} is in room {current}, refusing join to {room_id}")
            raise AlreadyInRoomError()

        members = self._rooms.get(room_id)
        if members is None:
            members = {}
            self._rooms[room_id] = members
            logger.info(f"Created room {room_id}")
        members.setdefault(party_id, None)
        self._party_to_room[party_id] = room_id
        logger.debug(f"Party {party_id} joined room {room_id} ({len(members)} members)")
        return tuple(members)

    def leave(self, party_id: str) -> Optional[str]:
        """Remove a party from its room. Returns the room id it left, if any."""
        room_id = self._party_to_room.pop(party_id, None)
        if room_id is None:
            return None
        members = self._rooms.get(room_id)
        if members is not None:
            members.pop(party_id, None)
            if not members:
                del self._rooms[room_id]
                logger.info(f"Room {room_id} is empty, deleted")
        logger.debug(f"Party {party_id} left room {room_id}")
        return room_id

    def members_of(self, room_id: str) -> Optional[Tuple[str, ...]]:
        members = self._rooms.get(room_id)
        if members is None:
            return None
        return tuple(members)

    def room_of(self, party_id: str) -> Optional[str]:
        return self._party_to_room.get(party_id)

    def __contains__(self, room_id: str) -> bool:
        return room_id in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)
