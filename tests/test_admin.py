"""Tests for the back office: order responses, deliveries, staff and audit log"""

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from app.models.notification import Notification


async def _custom_request(client: AsyncClient, customer_info) -> dict:
    response = await client.post(
        "/orders/custom-request",
        json={
            "customer": customer_info,
            "package_name": "Custom Lefe",
            "custom_request": "Three boxes, gold and cream",
        },
    )
    assert response.status_code == 201
    return response.json()


async def _bank_transfer_order(client: AsyncClient, package, customer_info) -> dict:
    response = await client.post(
        "/orders/checkout",
        json={
            "customer": customer_info,
            "items": [{"package_id": str(package.id)}],
            "payment_method": "bank_transfer",
        },
    )
    assert response.status_code == 201
    return response.json()["orders"][0]


@pytest.mark.asyncio
async def test_admin_prices_custom_request(
    customer_client: AsyncClient, admin_client: AsyncClient, test_db, test_customer, customer_info
):
    order = await _custom_request(customer_client, customer_info)

    response = await admin_client.put(
        f"/admin/orders/{order['id']}/response",
        json={"admin_set_price": 750000, "admin_response": "Boxes confirmed."},
    )

    assert response.status_code == 200
    updated = response.json()
    assert updated["admin_set_price"] == 750000
    assert updated["final_price"] == 750000
    assert updated["amount_due"] == 750000
    assert updated["status"] == "price_sent"
    assert updated["payment_status"] == "pending_payment"
    assert updated["admin_response"] == "Boxes confirmed."

    result = await test_db.execute(
        select(Notification).where(Notification.user_id == test_customer.id)
    )
    notifications = result.scalars().all()
    assert len(notifications) == 1
    assert notifications[0].title == "Price Ready"
    assert "750,000" in notifications[0].message

    # The customer sees the same price
    mine = await customer_client.get(f"/orders/{order['id']}")
    assert mine.json()["amount_due"] == 750000


@pytest.mark.asyncio
async def test_last_admin_write_wins(customer_client: AsyncClient, admin_client: AsyncClient, customer_info):
    """No version check: two saves on the same order both succeed"""
    order = await _custom_request(customer_client, customer_info)

    first = await admin_client.put(f"/admin/orders/{order['id']}/response", json={"admin_set_price": 600000})
    second = await admin_client.put(f"/admin/orders/{order['id']}/response", json={"admin_set_price": 650000})

    assert first.status_code == 200
    assert second.status_code == 200

    result = await admin_client.get(f"/admin/orders/{order['id']}")
    assert result.json()["amount_due"] == 650000


@pytest.mark.asyncio
async def test_conflicting_status_saves(customer_client: AsyncClient, admin_client: AsyncClient, customer_info):
    """Two tabs save different statuses: the later legal one wins, an illegal one is refused"""
    order = await _custom_request(customer_client, customer_info)
    url = f"/admin/orders/{order['id']}/response"
    await admin_client.put(url, json={"admin_set_price": 600000})

    processing = await admin_client.put(url, json={"status": "processing"})
    cancelled = await admin_client.put(url, json={"status": "cancelled"})

    assert processing.status_code == 200
    assert cancelled.status_code == 200
    assert cancelled.json()["status"] == "cancelled"

    stale = await admin_client.put(url, json={"status": "processing"})

    assert stale.status_code == 400
    assert stale.json()["detail"] == "Cannot change status from cancelled to processing"
    result = await admin_client.get(f"/admin/orders/{order['id']}")
    assert result.json()["status"] == "cancelled"


@pytest.mark.asyncio
async def test_illegal_transition_is_rejected(customer_client: AsyncClient, admin_client: AsyncClient, customer_info):
    order = await _custom_request(customer_client, customer_info)

    response = await admin_client.put(f"/admin/orders/{order['id']}/response", json={"status": "delivered"})

    assert response.status_code == 400
    result = await admin_client.get(f"/admin/orders/{order['id']}")
    assert result.json()["status"] == "waiting_for_price"


@pytest.mark.asyncio
async def test_processing_creates_delivery_once(
    customer_client: AsyncClient, admin_client: AsyncClient, test_catalog, customer_info
):
    order = await _bank_transfer_order(customer_client, test_catalog["fixed"], customer_info)

    await admin_client.put(f"/admin/orders/{order['id']}/response", json={"status": "processing"})
    await admin_client.put(f"/admin/orders/{order['id']}/response", json={"admin_response": "On it"})

    response = await admin_client.get("/admin/deliveries")
    deliveries = response.json()
    assert len(deliveries) == 1
    assert deliveries[0]["order_id"] == order["id"]
    assert deliveries[0]["status"] == "scheduled"
    assert deliveries[0]["delivery_address"] is None

    update = await admin_client.put(
        f"/admin/deliveries/{deliveries[0]['id']}",
        json={"status": "in_transit", "delivery_address": "12 Ahmadu Bello Way"},
    )
    assert update.status_code == 200
    assert update.json()["status"] == "in_transit"


@pytest.mark.asyncio
async def test_manual_payment_verification(
    customer_client: AsyncClient, admin_client: AsyncClient, test_catalog, test_admin_user, customer_info
):
    order = await _bank_transfer_order(customer_client, test_catalog["fixed"], customer_info)

    response = await admin_client.post(f"/admin/orders/{order['id']}/verify-payment")

    assert response.status_code == 200
    verified = response.json()
    assert verified["status"] == "paid"
    assert verified["payment_status"] == "paid"
    assert verified["payment_verified_by"] == str(test_admin_user.id)

    again = await admin_client.post(f"/admin/orders/{order['id']}/verify-payment")
    assert again.status_code == 400


@pytest.mark.asyncio
async def test_admin_order_search_and_filter(
    customer_client: AsyncClient, admin_client: AsyncClient, test_catalog, customer_info
):
    await _bank_transfer_order(customer_client, test_catalog["fixed"], customer_info)
    await _custom_request(customer_client, customer_info)

    waiting = await admin_client.get("/admin/orders", params={"status": "waiting_for_price"})
    found = await admin_client.get("/admin/orders", params={"search": "wedding"})
    paged = await admin_client.get("/admin/orders", params={"page_size": 1})

    assert waiting.json()["total"] == 1
    assert waiting.json()["items"][0]["package_name"] == "Custom Lefe"
    assert found.json()["total"] == 1
    assert found.json()["items"][0]["package_name"] == "Wedding Celebration"
    assert paged.json()["total"] == 2
    assert len(paged.json()["items"]) == 1


@pytest.mark.asyncio
async def test_customers_cannot_use_back_office(customer_client: AsyncClient, test_customer):
    assert (await customer_client.get("/admin/orders")).status_code == 403
    assert (await customer_client.get("/admin/stats")).status_code == 403
    assert (await customer_client.get("/admin/users")).status_code == 403


@pytest.mark.asyncio
async def test_dashboard_stats_and_customers(
    customer_client: AsyncClient, admin_client: AsyncClient, test_catalog, customer_info
):
    order = await _bank_transfer_order(customer_client, test_catalog["fixed"], customer_info)
    await _custom_request(customer_client, customer_info)
    await admin_client.post(f"/admin/orders/{order['id']}/verify-payment")
    await customer_client.post("/chat/messages", json={"message": "Hello?"})

    stats = (await admin_client.get("/admin/stats")).json()
    assert stats["total_orders"] == 2
    assert stats["waiting_for_price"] == 1
    assert stats["processing"] == 1
    assert stats["unread_messages"] == 1

    customers = (await admin_client.get("/admin/customers")).json()
    assert len(customers) == 1
    assert customers[0]["order_count"] == 2
    assert customers[0]["total_spent"] == 500000


@pytest.mark.asyncio
async def test_admin_actions_are_audited(
    customer_client: AsyncClient,
    admin_client: AsyncClient,
    super_admin_client: AsyncClient,
    test_admin_user,
    customer_info,
):
    order = await _custom_request(customer_client, customer_info)
    await admin_client.put(f"/admin/orders/{order['id']}/response", json={"admin_set_price": 750000})

    response = await super_admin_client.get("/admin/audit-log", params={"action": "update_order"})

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    entry = data["items"][0]
    assert entry["actor_id"] == str(test_admin_user.id)
    assert entry["actor_email"] == "admin@mabba.ng"
    assert entry["actor_role"] == "admin"
    assert entry["target_type"] == "order"
    assert entry["target_id"] == order["id"]
    assert "price=750000" in entry["details"]


@pytest.mark.asyncio
async def test_audit_log_is_super_admin_only(admin_client: AsyncClient):
    response = await admin_client.get("/admin/audit-log")

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_staff_management(client: AsyncClient, super_admin_client: AsyncClient):
    created = await super_admin_client.post(
        "/admin/users",
        json={"email": "Helper@Mabba.ng", "password": "helper12345", "full_name": "Helper"},
    )
    assert created.status_code == 201
    helper = created.json()
    assert helper["email"] == "helper@mabba.ng"
    assert helper["role"] == "admin"

    login = await client.post("/auth/login", data={"username": "helper@mabba.ng", "password": "helper12345"})
    assert login.status_code == 200

    promoted = await super_admin_client.put(f"/admin/users/{helper['id']}/role", json={"role": "super_admin"})
    assert promoted.json()["role"] == "super_admin"

    suspended = await super_admin_client.put(f"/admin/users/{helper['id']}/suspension", json={"is_suspended": True})
    assert suspended.json()["is_suspended"] is True

    blocked = await client.post("/auth/login", data={"username": "helper@mabba.ng", "password": "helper12345"})
    assert blocked.status_code == 401


@pytest.mark.asyncio
async def test_super_admin_cannot_demote_self(super_admin_client: AsyncClient, test_super_admin):
    response = await super_admin_client.put(f"/admin/users/{test_super_admin.id}/role", json={"role": "customer"})

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_analytics(customer_client: AsyncClient, admin_client: AsyncClient, super_admin_client: AsyncClient, test_catalog, customer_info):
    order = await _bank_transfer_order(customer_client, test_catalog["fixed"], customer_info)
    await _bank_transfer_order(customer_client, test_catalog["fixed"], customer_info)
    await admin_client.post(f"/admin/orders/{order['id']}/verify-payment")

    response = await super_admin_client.get("/admin/analytics")

    assert response.status_code == 200
    data = response.json()
    assert data["revenue"] == 500000
    assert data["orders_by_status"] == {"paid": 1, "pending": 1}
    assert data["orders_by_package"] == {"Wedding Celebration": 2}
    assert data["customer_count"] == 1
