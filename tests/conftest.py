import json

import pytest

from dispatch import MessageRouter


class FakeConnection:
    """Stands in for a transport connection; records everything sent to it."""

    def __init__(self, name: str = "conn"):
        self.name = name
        self.sent = []

    def send(self, text: str) -> None:
        self.sent.append(text)

    @property
    def payloads(self):
        return [json.loads(text) for text in self.sent]

    def take(self):
        """Return and forget the payloads received so far."""
        payloads = self.payloads
        self.sent.clear()
        return payloads

    def __repr__(self):
        return f"FakeConnection({self.name})"


@pytest.fixture
def message_router():
    return MessageRouter()


@pytest.fixture
def make_connection(message_router):
    def _make(name: str = "conn") -> FakeConnection:
        connection = FakeConnection(name)
        message_router.connect(connection)
        return connection

    return _make


def subscribe(message_router, connection, party_id, room_id):
    message_router.handle(
        connection,
        json.dumps({"action": "subscribe", "partyId": party_id, "roomId": room_id}),
    )


def relay(message_router, connection, party_id, room_id, to_party_id, msg):
    message_router.handle(
        connection,
        json.dumps(
            {
                "action": "message",
                "partyId": party_id,
                "roomId": room_id,
                "toPartyId": to_party_id,
                "msg": msg,
            }
        ),
    )
