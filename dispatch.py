"""Message routing for the relay server.

MessageRouter owns all relay state (party bindings and room membership) and is
the only place that mutates it. The transport calls ``connect`` when a socket
opens, ``handle`` for every inbound frame and ``disconnect`` once the socket is
gone. None of these await, so each event is applied completely before the next
one starts.
"""

import json
from typing import Any, Dict, Set, Union

from pydantic import ValidationError

from backend import Connection, ConnectionRegistry, RoomRegistry
from constants import (
    ERROR_INVALID_ACTION,
    ERROR_INVALID_MESSAGE,
    ERROR_INVALID_SUBSCRIBE,
    ERROR_NOT_IN_ROOM,
    ERROR_PROCESSING_MESSAGE,
    ERROR_RECIPIENT_NOT_SUBSCRIBED,
    ERROR_ROOM_NOT_FOUND,
)
from errors import (
    IdentityMismatchError,
    InvalidFieldsError,
    NotFoundError,
    ProtocolError,
    RelayError,
)
from logging_config import get_logger
from presence import PresenceNotifier
from schemas.messages import ErrorPayload, RelayedMessage, RelayRequest, SubscribeRequest

logger = get_logger(__name__)


class MessageRouter:

    def __init__(self):
        self._open_connections: Set[Connection] = set()
        self._connections = ConnectionRegistry()
        self._rooms = RoomRegistry()
        self._presence = PresenceNotifier(self._connections, self._rooms)

    @property
    def connections(self) -> ConnectionRegistry:
        return self._connections

    @property
    def rooms(self) -> RoomRegistry:
        return self._rooms

    @property
    def open_connections(self) -> int:
        return len(self._open_connections)

    def connect(self, connection: Connection) -> None:
        self._open_connections.add(connection)
        logger.info(f"Connection opened ({self.open_connections} open)")

    def handle(self, connection: Connection, raw: Union[str, bytes]) -> None:
        """Process one inbound frame from connection.

        Any rejection is reported to the originating connection only, as a
        single error payload, and leaves the registries untouched.
        """
        try:
            data = self._parse(raw)
            action = data.get("action")
            if action == "subscribe":
                self._subscribe(connection, data)
            elif action == "message":
                self._relay(connection, data)
            else:
                raise ProtocolError(ERROR_INVALID_ACTION)
        except RelayError as e:
            logger.info(f"Rejected message from party {self._connections.lookup_party(connection)}: {e.message}")
            self._send_error(connection, e.message)
        except Exception as e:
            logger.error(f"Error processing message: {e}", exc_info=True)
            self._send_error(connection, ERROR_PROCESSING_MESSAGE)

    def disconnect(self, connection: Connection) -> None:
        """Release everything held for a closed connection.

        The offline presence goes out while the party is still a room member,
        so the remaining members hear about it before the membership is gone.
        """
        self._open_connections.discard(connection)
        party_id = self._connections.unbind(connection)
        if party_id is None:
            logger.info(f"Connection closed without subscribing ({self.open_connections} open)")
            return

        self._presence.announce(party_id, False)
        room_id = self._rooms.leave(party_id)
        logger.info(f"Party {party_id} left room {room_id} ({self.open_connections} open)")

    def _parse(self, raw: Union[str, bytes]) -> Dict[str, Any]:
        try:
            data = json.loads(raw)
        except (ValueError, TypeError) as e:
            raise ProtocolError(ERROR_PROCESSING_MESSAGE) from e
        if not isinstance(data, dict):
            raise ProtocolError(ERROR_PROCESSING_MESSAGE)
        return data

    def _subscribe(self, connection: Connection, data: Dict[str, Any]) -> None:
        try:
            request = SubscribeRequest.model_validate(data)
        except ValidationError as e:
            raise InvalidFieldsError(ERROR_INVALID_SUBSCRIBE) from e

        # Raises AlreadyBoundError when either side is taken; a connection
        # keeps one identity for its whole life
        self._connections.bind(connection, request.partyId)
        members = self._rooms.join(request.partyId, request.roomId)
        logger.info(f"Party {request.partyId} subscribed to room {request.roomId} ({len(members)} members)")

        # Re-announce every member in join order, not only the newcomer
        for member_id in members:
            self._presence.announce(member_id, True)

    def _relay(self, connection: Connection, data: Dict[str, Any]) -> None:
        try:
            request = RelayRequest.model_validate(data)
        except ValidationError as e:
            raise InvalidFieldsError(ERROR_INVALID_MESSAGE) from e

        to_connection = self._connections.lookup(request.toPartyId)
        if to_connection is None:
            raise NotFoundError(ERROR_RECIPIENT_NOT_SUBSCRIBED)

        members = self._rooms.members_of(request.roomId)
        if members is None:
            raise NotFoundError(ERROR_ROOM_NOT_FOUND)

        if request.partyId not in members:
            raise NotFoundError(ERROR_NOT_IN_ROOM)

        from_party_id = self._connections.lookup_party(connection)
        if from_party_id != request.partyId:
            raise IdentityMismatchError()

        message = RelayedMessage(fromPartyId=from_party_id, roomId=request.roomId, msg=request.msg)
        to_connection.send(message.model_dump_json())
        logger.debug(f"Relayed message from {from_party_id} to {request.toPartyId} in room {request.roomId}")

    def _send_error(self, connection: Connection, error: str) -> None:
        connection.send(ErrorPayload(error=error).model_dump_json())
