"""Tests for order chat, account chat, notifications and the socket fan-out"""

import pytest
from httpx import AsyncClient

from app.services.realtime import ConnectionManager, change_event


async def _order(client: AsyncClient, customer_info) -> dict:
    response = await client.post(
        "/orders/custom-request",
        json={
            "customer": customer_info,
            "package_name": "Custom Haihuwa",
            "custom_request": "Baby shower hamper",
        },
    )
    assert response.status_code == 201
    return response.json()


class FakeWebSocket:
    def __init__(self, fail=False):
        self.sent = []
        self.accepted = False
        self.fail = fail

    async def accept(self):
        self.accepted = True

    async def send_json(self, data):
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(data)


@pytest.mark.asyncio
async def test_order_conversation(customer_client: AsyncClient, admin_client: AsyncClient, customer_info):
    order = await _order(customer_client, customer_info)
    url = f"/orders/{order['id']}/messages"

    first = await customer_client.post(url, json={"message": "  Can you add a card?  "})
    reply = await admin_client.post(url, json={"message": "Yes, no extra charge."})

    assert first.status_code == 201
    assert first.json()["message"] == "Can you add a card?"
    assert first.json()["sender_role"] == "customer"
    assert reply.json()["sender_role"] == "admin"

    thread = await customer_client.get(url)
    assert [m["message"] for m in thread.json()] == ["Can you add a card?", "Yes, no extra charge."]

    newer = await customer_client.get(url, params={"after": first.json()["id"]})
    assert [m["id"] for m in newer.json()] == [reply.json()["id"]]


@pytest.mark.asyncio
async def test_message_needs_text_or_image(customer_client: AsyncClient, customer_info):
    order = await _order(customer_client, customer_info)
    url = f"/orders/{order['id']}/messages"

    blank = await customer_client.post(url, json={"message": "   "})
    image = await customer_client.post(url, json={"image_url": "https://cdn.mabba.ng/chat/card.png"})

    assert blank.status_code == 422
    assert image.status_code == 201


@pytest.mark.asyncio
async def test_mark_read_skips_own_messages(customer_client: AsyncClient, admin_client: AsyncClient, customer_info):
    order = await _order(customer_client, customer_info)
    url = f"/orders/{order['id']}/messages"
    await customer_client.post(url, json={"message": "Hello"})
    reply = await admin_client.post(url, json={"message": "Hi Ada"})

    response = await customer_client.post(f"{url}/read")

    assert response.json() == {"marked": 1, "ids": [reply.json()["id"]]}

    thread = (await customer_client.get(url)).json()
    assert [m["is_read"] for m in thread] == [False, True]

    again = await customer_client.post(f"{url}/read")
    assert again.json()["marked"] == 0


@pytest.mark.asyncio
async def test_order_chat_is_private(
    customer_client: AsyncClient, other_customer_client: AsyncClient, customer_info
):
    order = await _order(customer_client, customer_info)
    url = f"/orders/{order['id']}/messages"

    read = await other_customer_client.get(url)
    write = await other_customer_client.post(url, json={"message": "hi"})

    assert read.status_code == 404
    assert write.status_code == 404


@pytest.mark.asyncio
async def test_order_message_notifies_other_side(
    customer_client: AsyncClient, admin_client: AsyncClient, customer_info
):
    order = await _order(customer_client, customer_info)
    url = f"/orders/{order['id']}/messages"

    await customer_client.post(url, json={"message": "Any update?"})
    await admin_client.post(url, json={"message": "Pricing shortly"})

    admin_titles = [n["title"] for n in (await admin_client.get("/notifications")).json()]
    customer_titles = [n["title"] for n in (await customer_client.get("/notifications")).json()]
    assert "New Customer Message" in admin_titles
    assert "New Message" in customer_titles


@pytest.mark.asyncio
async def test_account_chat(customer_client: AsyncClient, admin_client: AsyncClient, test_customer):
    await customer_client.post("/chat/messages", json={"message": "Do you deliver to Kano?"})
    await customer_client.post("/chat/messages", json={"message": "For a wedding next month"})

    threads = (await admin_client.get("/chat/threads")).json()
    assert len(threads) == 1
    assert threads[0]["user_id"] == str(test_customer.id)
    assert threads[0]["unread_count"] == 2
    assert (await admin_client.get("/chat/unread-count")).json() == {"unread": 2}

    reply = await admin_client.post(
        "/chat/messages",
        json={"user_id": str(test_customer.id), "message": "Yes, anywhere in the north."},
    )
    assert reply.status_code == 201
    assert reply.json()["user_id"] == str(test_customer.id)

    assert (await customer_client.get("/chat/unread-count")).json() == {"unread": 1}
    thread = (await customer_client.get("/chat/messages")).json()
    assert len(thread) == 3

    marked = await admin_client.post("/chat/messages/read", params={"user_id": str(test_customer.id)})
    assert marked.json()["marked"] == 2
    threads = (await admin_client.get("/chat/threads")).json()
    assert threads[0]["unread_count"] == 0


@pytest.mark.asyncio
async def test_admin_chat_requires_thread_owner(admin_client: AsyncClient):
    listing = await admin_client.get("/chat/messages")
    sending = await admin_client.post("/chat/messages", json={"message": "Hello"})

    assert listing.status_code == 400
    assert sending.status_code == 400


@pytest.mark.asyncio
async def test_customers_cannot_list_threads(customer_client: AsyncClient):
    response = await customer_client.get("/chat/threads")

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_chat_attachment_upload(customer_client: AsyncClient):
    response = await customer_client.post(
        "/chat/attachments",
        files={"file": ("inspo.jpg", b"\xff\xd8\xff fake jpeg", "image/jpeg")},
    )

    assert response.status_code == 201
    assert response.json()["media_type"] == "image"


@pytest.mark.asyncio
async def test_notifications(customer_client: AsyncClient, admin_client: AsyncClient, test_customer):
    await admin_client.post("/chat/messages", json={"user_id": str(test_customer.id), "message": "Welcome"})
    await admin_client.post("/chat/messages", json={"user_id": str(test_customer.id), "message": "Still there?"})

    assert (await customer_client.get("/notifications/unread-count")).json() == {"unread": 2}

    notifications = (await customer_client.get("/notifications")).json()
    first = await customer_client.post(f"/notifications/{notifications[0]['id']}/read")
    assert first.json()["is_read"] is True
    assert (await customer_client.get("/notifications", params={"unread_only": True})).json()[0]["id"] == notifications[1]["id"]

    rest = await customer_client.post("/notifications/read-all")
    assert rest.json()["marked"] == 1
    assert (await customer_client.get("/notifications/unread-count")).json() == {"unread": 0}


@pytest.mark.asyncio
async def test_notifications_are_private(customer_client: AsyncClient, admin_client: AsyncClient, test_customer):
    await admin_client.post("/chat/messages", json={"user_id": str(test_customer.id), "message": "Welcome"})
    notification = (await customer_client.get("/notifications")).json()[0]

    response = await admin_client.post(f"/notifications/{notification['id']}/read")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_connection_manager_fans_out_and_drops_dead_sockets():
    manager = ConnectionManager()
    alive, dead, elsewhere = FakeWebSocket(), FakeWebSocket(fail=True), FakeWebSocket()
    await manager.connect("order:1", alive)
    await manager.connect("order:1", dead)
    await manager.connect("order:2", elsewhere)

    event = change_event("insert", "order_messages", {"id": 1})
    await manager.broadcast("order:1", event)

    assert alive.accepted
    assert alive.sent == [event]
    assert elsewhere.sent == []
    assert manager.active("order:1") == 1

    manager.disconnect("order:1", alive)
    assert manager.active("order:1") == 0
