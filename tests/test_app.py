import json

import pytest
from fastapi.testclient import TestClient

from app import create_app


@pytest.fixture
def relay_app():
    return create_app()


@pytest.fixture
def client(relay_app):
    with TestClient(relay_app) as test_client:
        yield test_client


def subscribe_msg(party_id, room_id):
    return {"action": "subscribe", "partyId": party_id, "roomId": room_id}


@pytest.mark.parametrize("path", ["/", "/health", "/some/deep/path"])
def test_health_check(client, path):
    response = client.get(path)

    assert response.status_code == 200
    assert response.text == "hi!"


def test_relay_scenario(client, relay_app):
    message_router = relay_app.state.message_router

    with client.websocket_connect("/") as c1:
        c1.send_json(subscribe_msg("p1", "r1"))

        with client.websocket_connect("/") as c2:
            c2.send_json(subscribe_msg("p2", "r1"))

            assert c1.receive_json() == {"action": "presence", "fromPartyId": "p2", "roomId": "r1", "online": True}
            assert c2.receive_json() == {"action": "presence", "fromPartyId": "p1", "roomId": "r1", "online": True}

            c1.send_json({"action": "message", "partyId": "p1", "roomId": "r1", "toPartyId": "p2", "msg": "hello"})
            assert c2.receive_json() == {"action": "message", "fromPartyId": "p1", "roomId": "r1", "msg": "hello"}

        assert c1.receive_json() == {"action": "presence", "fromPartyId": "p2", "roomId": "r1", "online": False}
        assert message_router.rooms.members_of("r1") == ("p1",)
        assert message_router.connections.lookup("p2") is None


def test_errors_go_back_to_sender(client):
    with client.websocket_connect("/") as ws:
        ws.send_text("this is not json")
        assert ws.receive_json() == {"error": "Error processing message"}

        ws.send_json({"action": "dance"})
        assert ws.receive_json() == {"error": "Invalid action"}

        ws.send_json({"action": "subscribe", "partyId": "p1"})
        assert ws.receive_json() == {"error": "Invalid partyId or roomId"}

        ws.send_json({"action": "message", "partyId": "p1", "roomId": "r1", "toPartyId": "p2", "msg": "hi"})
        assert ws.receive_json() == {"error": "toPartyId not subscribed"}


def test_duplicate_party_is_rejected(client, relay_app):
    with client.websocket_connect("/") as c1, client.websocket_connect("/other") as c2:
        c1.send_json(subscribe_msg("p1", "r1"))
        # Round trip so the first subscribe has been applied
        c1.send_json({"action": "ping"})
        assert c1.receive_json() == {"error": "Invalid action"}

        c2.send_json(subscribe_msg("p1", "r1"))
        assert c2.receive_json() == {"error": "Already subscribed"}

        message_router = relay_app.state.message_router
        assert message_router.open_connections == 2
        assert len(message_router.connections) == 1


def test_binary_frames_are_accepted(client):
    with client.websocket_connect("/") as c1, client.websocket_connect("/") as c2:
        c1.send_bytes(json.dumps(subscribe_msg("p1", "r1")).encode())
        c1.send_bytes(b'{"action": "ping"}')
        assert c1.receive_json() == {"error": "Invalid action"}

        c2.send_bytes(json.dumps(subscribe_msg("p2", "r1")).encode())
        assert c1.receive_json() == {"action": "presence", "fromPartyId": "p2", "roomId": "r1", "online": True}


def test_apps_do_not_share_state():
    first, second = create_app(), create_app()

    assert first.state.message_router is not second.state.message_router
