"""Request helpers that create entities through the API and assert success."""

from datetime import timedelta

from shopdash.models.tables import Customer, Product
from shopdash.utils import to_iso


async def create_tenant(client, name="Acme", domain="acme.myshopify.com", token="tok"):
    response = await client.post(
        "/api/tenants",
        json={"name": name, "shopifyDomain": domain, "shopifyAccessToken": token},
    )
    assert response.status_code == 201, response.text
    return response.json()


async def create_customer(client, tenant_id, **overrides):
    body = {
        "tenantId": tenant_id,
        "shopifyCustomerId": "cust_1",
        "email": "jane@example.com",
        "firstName": "Jane",
        "lastName": "Doe",
    }
    body.update(overrides)
    response = await client.post("/api/customers", json=body)
    assert response.status_code == 201, response.text
    return response.json()


async def create_product(client, tenant_id, **overrides):
    body = {"tenantId": tenant_id, "shopifyProductId": "prod_1", "title": "Classic Tee", "price": 19.99}
    body.update(overrides)
    response = await client.post("/api/products", json=body)
    assert response.status_code == 201, response.text
    return response.json()


async def create_order(client, tenant_id, customer_id, **overrides):
    body = {
        "tenantId": tenant_id,
        "shopifyOrderId": "order_1",
        "customerId": customer_id,
        "totalPrice": 120.5,
        "status": "pending",
        "orderDate": "2024-03-01T10:00:00.000Z",
    }
    body.update(overrides)
    response = await client.post("/api/orders", json=body)
    assert response.status_code == 201, response.text
    return response.json()


async def insert_customers(db_manager, tenant_id, count, start):
    """Insert `count` customers directly with strictly increasing created_at."""
    async with db_manager.transaction() as session:
        for n in range(count):
            stamp = to_iso(start + timedelta(seconds=n))
            session.add(Customer(
                tenant_id=tenant_id,
                shopify_customer_id=f"cust_{n}",
                email=f"user{n}@example.com",
                first_name="User",
                last_name=str(n),
                total_spent=0.0,
                orders_count=0,
                created_at=stamp,
                updated_at=stamp,
            ))


async def insert_product(db_manager, tenant_id, title, price, created_at):
    async with db_manager.transaction() as session:
        session.add(Product(
            tenant_id=tenant_id,
            shopify_product_id=f"prod_{title}",
            title=title,
            price=price,
            inventory=0,
            created_at=created_at,
            updated_at=created_at,
        ))
