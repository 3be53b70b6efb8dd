"""
API tests for /api/orders, including the cross-tenant customer check.
"""

import pytest

from helpers import create_customer, create_order, create_tenant

pytestmark = pytest.mark.asyncio


async def test_create_and_fetch(client):
    tenant = await create_tenant(client)
    customer = await create_customer(client, tenant["id"])
    created = await create_order(client, tenant["id"], customer["id"], totalPrice="88.10", status=" completed ")
    assert created["totalPrice"] == 88.1
    assert created["status"] == "completed"
    assert created["orderDate"] == "2024-03-01T10:00:00.000Z"

    fetched = await client.get("/api/orders", params={"id": created["id"]})
    assert fetched.json() == created


async def test_customer_from_other_tenant_is_not_found(client):
    first = await create_tenant(client, domain="one.myshopify.com")
    second = await create_tenant(client, name="Two", domain="two.myshopify.com")
    outsider = await create_customer(client, second["id"])

    response = await client.post("/api/orders", json={
        "tenantId": first["id"], "shopifyOrderId": "o1", "customerId": outsider["id"],
        "totalPrice": 10, "status": "pending", "orderDate": "2024-01-01",
    })
    assert response.status_code == 404
    assert response.json()["code"] == "CUSTOMER_NOT_FOUND"

    listed = await client.get("/api/orders", params={"tenantId": first["id"]})
    assert listed.json() == []
    listed = await client.get("/api/orders", params={"tenantId": second["id"]})
    assert listed.json() == []


async def test_unknown_customer_reports_same_code(client):
    tenant = await create_tenant(client)
    response = await client.post("/api/orders", json={
        "tenantId": tenant["id"], "shopifyOrderId": "o1", "customerId": 777,
        "totalPrice": 10, "status": "pending", "orderDate": "2024-01-01",
    })
    assert response.json()["code"] == "CUSTOMER_NOT_FOUND"


async def test_unknown_tenant_is_checked_first(client):
    response = await client.post("/api/orders", json={
        "tenantId": 55, "shopifyOrderId": "o1", "customerId": 1,
        "totalPrice": 10, "status": "pending", "orderDate": "2024-01-01",
    })
    assert response.status_code == 404
    assert response.json()["code"] == "TENANT_NOT_FOUND"


@pytest.mark.parametrize("overrides, code", [
    ({"status": "shipped"}, "INVALID_STATUS"),
    ({"status": None}, "MISSING_STATUS"),
    ({"totalPrice": 0}, "INVALID_TOTAL_PRICE"),
    ({"totalPrice": None}, "MISSING_TOTAL_PRICE"),
    ({"customerId": "abc"}, "INVALID_CUSTOMER_ID"),
    ({"shopifyOrderId": None}, "MISSING_SHOPIFY_ORDER_ID"),
])
async def test_create_validation_codes(client, overrides, code):
    body = {
        "tenantId": 1, "shopifyOrderId": "o1", "customerId": 1,
        "totalPrice": 10, "status": "pending", "orderDate": "2024-01-01",
    }
    body.update(overrides)
    response = await client.post("/api/orders", json=body)
    assert response.status_code == 400
    assert response.json()["code"] == code


async def test_list_with_bogus_status(client):
    response = await client.get("/api/orders", params={"tenantId": 1, "status": "bogus"})
    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "INVALID_STATUS"
    for status in ("pending", "processing", "completed", "cancelled", "refunded"):
        assert status in body["error"]


async def test_list_filters_and_orders_by_order_date(client):
    tenant = await create_tenant(client)
    alice = await create_customer(client, tenant["id"], email="alice@shop.io")
    bob = await create_customer(client, tenant["id"], email="bob@shop.io")
    await create_order(client, tenant["id"], alice["id"], shopifyOrderId="jan", orderDate="2024-01-15", status="completed")
    await create_order(client, tenant["id"], alice["id"], shopifyOrderId="mar", orderDate="2024-03-15", status="pending")
    await create_order(client, tenant["id"], bob["id"], shopifyOrderId="feb", orderDate="2024-02-15", status="completed")

    everything = await client.get("/api/orders", params={"tenantId": tenant["id"]})
    assert [o["shopifyOrderId"] for o in everything.json()] == ["mar", "feb", "jan"]

    by_customer = await client.get("/api/orders", params={"tenantId": tenant["id"], "customerId": alice["id"]})
    assert [o["shopifyOrderId"] for o in by_customer.json()] == ["mar", "jan"]

    by_status = await client.get("/api/orders", params={"tenantId": tenant["id"], "status": "completed"})
    assert [o["shopifyOrderId"] for o in by_status.json()] == ["feb", "jan"]

    window = await client.get(
        "/api/orders", params={"tenantId": tenant["id"], "startDate": "2024-01-15", "endDate": "2024-02-15"}
    )
    assert [o["shopifyOrderId"] for o in window.json()] == ["feb", "jan"]

    bad_customer = await client.get("/api/orders", params={"tenantId": tenant["id"], "customerId": "bob"})
    assert bad_customer.json()["code"] == "INVALID_CUSTOMER_ID"


async def test_any_status_may_follow_any_other(client):
    tenant = await create_tenant(client)
    customer = await create_customer(client, tenant["id"])
    order = await create_order(client, tenant["id"], customer["id"], status="refunded")

    for status in ("pending", "completed", "cancelled", "processing"):
        response = await client.put("/api/orders", params={"id": order["id"]}, json={"status": status})
        assert response.status_code == 200
        assert response.json()["status"] == status


async def test_update_ignores_tenant_and_customer_changes(client):
    tenant = await create_tenant(client)
    customer = await create_customer(client, tenant["id"])
    order = await create_order(client, tenant["id"], customer["id"])

    response = await client.put(
        "/api/orders", params={"id": order["id"]}, json={"tenantId": 999, "customerId": 999, "totalPrice": 5}
    )
    updated = response.json()
    assert updated["totalPrice"] == 5.0
    assert updated["tenantId"] == tenant["id"]
    assert updated["customerId"] == customer["id"]


async def test_delete_order(client):
    tenant = await create_tenant(client)
    customer = await create_customer(client, tenant["id"])
    order = await create_order(client, tenant["id"], customer["id"])

    response = await client.delete("/api/orders", params={"id": order["id"]})
    assert response.json() == {"message": "Order deleted successfully", "order": order}

    again = await client.delete("/api/orders", params={"id": order["id"]})
    assert again.status_code == 404
    assert again.json()["code"] == "ORDER_NOT_FOUND"
