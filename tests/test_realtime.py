"""Tests for the WebSocket change feeds"""

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from app.main import app
from app.api.auth import create_access_token


def _auth(user) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user)}"}


def _order(client: TestClient, user, customer_info) -> dict:
    response = client.post(
        "/orders/custom-request",
        json={
            "customer": customer_info,
            "package_name": "Custom Haihuwa",
            "custom_request": "Baby shower hamper",
        },
        headers=_auth(user),
    )
    assert response.status_code == 201
    return response.json()


def _wait_until_listening(websocket):
    """A pong means the backlog is sent and the socket is registered"""
    websocket.send_text("ping")
    assert websocket.receive_json() == {"event": "pong"}


@pytest.fixture
def live_client(app_overrides):
    with TestClient(app) as client:
        yield client


def test_feed_rejects_bad_token(live_client: TestClient, test_customer, customer_info):
    order = _order(live_client, test_customer, customer_info)

    with pytest.raises(WebSocketDisconnect) as rejected:
        with live_client.websocket_connect(f"/ws/orders/{order['id']}/messages?token=not-a-token"):
            pass
    assert rejected.value.code == 1008

    with pytest.raises(WebSocketDisconnect) as anonymous:
        with live_client.websocket_connect("/ws/chat"):
            pass
    assert anonymous.value.code == 1008


def test_feed_rejects_other_customers_order(
    live_client: TestClient, test_customer, other_customer, test_admin_user, customer_info
):
    order = _order(live_client, test_customer, customer_info)
    url = f"/ws/orders/{order['id']}/messages"

    with pytest.raises(WebSocketDisconnect) as rejected:
        with live_client.websocket_connect(f"{url}?token={create_access_token(other_customer)}"):
            pass
    assert rejected.value.code == 1008

    with live_client.websocket_connect(f"{url}?token={create_access_token(test_admin_user)}") as websocket:
        _wait_until_listening(websocket)


def test_feed_replays_only_newer_messages(
    live_client: TestClient, test_customer, test_admin_user, customer_info
):
    order = _order(live_client, test_customer, customer_info)
    url = f"/orders/{order['id']}/messages"
    first = live_client.post(url, json={"message": "Can you add a card?"}, headers=_auth(test_customer))
    reply = live_client.post(url, json={"message": "Yes, no extra charge."}, headers=_auth(test_admin_user))

    token = create_access_token(test_customer)
    feed = f"/ws/orders/{order['id']}/messages?token={token}&after={first.json()['id']}"
    with live_client.websocket_connect(feed) as websocket:
        event = websocket.receive_json()
        assert event["event"] == "insert"
        assert event["table"] == "order_messages"
        assert event["record"]["id"] == reply.json()["id"]

        # Nothing else is replayed before the pong
        _wait_until_listening(websocket)


def test_feed_delivers_live_changes(
    live_client: TestClient, test_db, test_customer, test_admin_user, customer_info
):
    order = _order(live_client, test_customer, customer_info)
    url = f"/orders/{order['id']}/messages"

    feed = f"/ws/orders/{order['id']}/messages?token={create_access_token(test_customer)}"
    with live_client.websocket_connect(feed) as websocket:
        _wait_until_listening(websocket)

        # The session is released while the socket is open
        assert not test_db.in_transaction()

        reply = live_client.post(url, json={"message": "Your hamper ships today"}, headers=_auth(test_admin_user))
        assert reply.status_code == 201

        inserted = websocket.receive_json()
        assert inserted["event"] == "insert"
        assert inserted["record"]["message"] == "Your hamper ships today"
        assert inserted["record"]["sender_role"] == "admin"
        assert inserted["record"]["is_read"] is False

        live_client.post(f"{url}/read", headers=_auth(test_customer))

        updated = websocket.receive_json()
        assert updated["event"] == "update"
        assert updated["record"]["id"] == reply.json()["id"]
        assert updated["record"]["is_read"] is True


def test_chat_feed_reaches_customer_and_back_office(
    live_client: TestClient, test_db, test_customer, test_admin_user
):
    customer_feed = f"/ws/chat?token={create_access_token(test_customer)}"
    admin_feed = f"/ws/chat?token={create_access_token(test_admin_user)}"

    with live_client.websocket_connect(customer_feed) as customer_ws:
        with live_client.websocket_connect(admin_feed) as admin_ws:
            _wait_until_listening(customer_ws)
            _wait_until_listening(admin_ws)
            assert not test_db.in_transaction()

            question = live_client.post(
                "/chat/messages",
                json={"message": "Do you deliver to Kano?"},
                headers=_auth(test_customer),
            )
            assert question.status_code == 201

            for websocket in (customer_ws, admin_ws):
                event = websocket.receive_json()
                assert event["table"] == "chat_messages"
                assert event["record"]["id"] == question.json()["id"]

            live_client.post(
                "/chat/messages",
                json={"user_id": str(test_customer.id), "message": "Yes, within 3 days."},
                headers=_auth(test_admin_user),
            )

            answer = customer_ws.receive_json()
            assert answer["event"] == "insert"
            assert answer["record"]["sender_role"] == "admin"
            assert answer["record"]["message"] == "Yes, within 3 days."
