"""
API tests for /api/products.
"""

import pytest

from helpers import create_product, create_tenant, insert_product

pytestmark = pytest.mark.asyncio


async def test_create_and_fetch(client):
    tenant = await create_tenant(client)
    created = await create_product(client, tenant["id"], price="24.50", inventory="7")
    assert created["price"] == 24.5
    assert created["inventory"] == 7

    fetched = await client.get("/api/products", params={"id": created["id"], "tenantId": tenant["id"]})
    assert fetched.json() == created


@pytest.mark.parametrize("overrides, code", [
    ({"price": 0}, "INVALID_PRICE"),
    ({"price": "free"}, "INVALID_PRICE"),
    ({"price": None}, "MISSING_PRICE"),
    ({"title": "  "}, "MISSING_TITLE"),
    ({"inventory": -1}, "INVALID_INVENTORY"),
    ({"inventory": 1.5}, "INVALID_INVENTORY"),
    ({"shopifyProductId": ""}, "MISSING_SHOPIFY_PRODUCT_ID"),
])
async def test_create_validation_codes(client, overrides, code):
    tenant = await create_tenant(client)
    body = {"tenantId": tenant["id"], "shopifyProductId": "p1", "title": "Tee", "price": 10}
    body.update(overrides)
    response = await client.post("/api/products", json=body)
    assert response.status_code == 400
    assert response.json()["code"] == code


async def test_update_nonexistent_product(client):
    response = await client.put("/api/products", params={"id": 999}, json={"title": "anything"})
    assert response.status_code == 404
    assert response.json()["code"] == "PRODUCT_NOT_FOUND"


async def test_update_price_and_inventory(client):
    tenant = await create_tenant(client)
    created = await create_product(client, tenant["id"])
    response = await client.put("/api/products", params={"id": created["id"]}, json={"price": "30", "inventory": 0})
    updated = response.json()
    assert updated["price"] == 30.0
    assert updated["inventory"] == 0
    assert updated["title"] == created["title"]

    rejected = await client.put("/api/products", params={"id": created["id"]}, json={"price": -3})
    assert rejected.json()["code"] == "INVALID_PRICE"


async def test_price_range_is_inclusive(client, db_manager):
    tenant = await create_tenant(client)
    await insert_product(db_manager, tenant["id"], "ten", 10.0, "2024-01-01T00:00:00.000Z")
    await insert_product(db_manager, tenant["id"], "twenty", 20.0, "2024-01-02T00:00:00.000Z")
    await insert_product(db_manager, tenant["id"], "thirty", 30.0, "2024-01-03T00:00:00.000Z")

    response = await client.get(
        "/api/products", params={"tenantId": tenant["id"], "minPrice": "10", "maxPrice": "20"}
    )
    assert [p["title"] for p in response.json()] == ["twenty", "ten"]


async def test_malformed_price_bound_is_ignored(client, db_manager):
    tenant = await create_tenant(client)
    await insert_product(db_manager, tenant["id"], "ten", 10.0, "2024-01-01T00:00:00.000Z")
    await insert_product(db_manager, tenant["id"], "thirty", 30.0, "2024-01-03T00:00:00.000Z")

    response = await client.get(
        "/api/products", params={"tenantId": tenant["id"], "minPrice": "cheap", "maxPrice": "15"}
    )
    assert response.status_code == 200
    assert [p["title"] for p in response.json()] == ["ten"]


async def test_title_search(client, db_manager):
    tenant = await create_tenant(client)
    await insert_product(db_manager, tenant["id"], "Wool Scarf", 10.0, "2024-01-01T00:00:00.000Z")
    await insert_product(db_manager, tenant["id"], "Desk Lamp", 30.0, "2024-01-03T00:00:00.000Z")

    response = await client.get("/api/products", params={"tenantId": tenant["id"], "search": "Scarf"})
    assert [p["title"] for p in response.json()] == ["Wool Scarf"]


async def test_delete_confirmation(client):
    tenant = await create_tenant(client)
    created = await create_product(client, tenant["id"])
    response = await client.delete("/api/products", params={"id": created["id"]})
    assert response.json() == {"message": "Product deleted successfully", "product": created}


async def test_id_beyond_store_integer_is_invalid(client):
    response = await client.get("/api/products", params={"id": "99999999999999999999"})
    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_ID"

    response = await client.delete("/api/products", params={"id": "-99999999999999999999"})
    assert response.json()["code"] == "INVALID_ID"
