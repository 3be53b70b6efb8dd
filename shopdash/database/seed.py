"""Sample data for local development and dashboard demos.

Creates three tenants, each with its own customers, products and a year of
orders. Every order's customer belongs to the order's tenant. Statuses are
drawn independently of the order date, except that orders still pending or
processing are dated within the last few days. Customer
aggregates (`total_spent`, `orders_count`) are filled in from the generated
orders once, here; the API never recomputes them.

Usage: python -m shopdash.database.seed
"""

import asyncio
import logging
import random
from datetime import datetime, timedelta, timezone

from sqlalchemy import func, select

from get_env_values import LOG_LEVEL
from shopdash.database.database import DatabaseManager
from shopdash.models.tables import Customer, Order, Product, Tenant
from shopdash.utils import to_iso


SAMPLE_TENANTS = [
    ("Acme Store", "acme-store.myshopify.com", "shpat_abc123def456ghi789jkl012mno345pqr678", "2023-08-15", "2024-02-10"),
    ("Fashion Boutique", "fashion-boutique.myshopify.com", "shpat_xyz789uvw456rst123opq890lmn567ijk234", "2023-09-20", "2024-02-15"),
    ("Tech Gadgets", "tech-gadgets.myshopify.com", "shpat_qwe321rty654uio987asd210fgh543jkl876", "2023-10-05", "2024-02-20"),
]

FIRST_NAMES = ["Olivia", "Liam", "Emma", "Noah", "Ava", "Elijah", "Sophia", "James", "Mia", "Lucas"]
LAST_NAMES = ["Smith", "Johnson", "Garcia", "Brown", "Miller", "Davis", "Lopez", "Wilson", "Moore", "Clark"]
PRODUCT_NAMES = ["Classic Tee", "Canvas Tote", "Wireless Earbuds", "Leather Wallet", "Desk Lamp",
                 "Running Shoes", "Phone Case", "Wool Scarf", "Water Bottle", "Travel Mug"]

# (months ago, months spanned, share of a tenant's orders)
ORDER_PERIODS = [(0, 3, 0.40), (3, 5, 0.35), (8, 4, 0.25)]

# (upper bound of the cumulative draw, low price, high price)
PRICE_BANDS = [(0.40, 20, 100), (0.75, 100, 300), (0.95, 300, 500), (1.0, 500, 800)]

# (upper bound of the cumulative draw, status)
STATUS_BANDS = [(0.65, "completed"), (0.80, "processing"), (0.90, "pending"), (0.97, "cancelled"), (1.0, "refunded")]

# Open orders are recent: placed within this many days
OPEN_WINDOW_DAYS = {"processing": 7, "pending": 3}

UNSETTLED_STATUSES = ("cancelled", "refunded")


def order_status(draw):
    """
    Status for a uniform draw in [0, 1): 65% completed, 15% processing,
    10% pending, 7% cancelled, 3% refunded.
    """
    return next(status for ceiling, status in STATUS_BANDS if draw < ceiling)


def order_price(rng):
    draw = rng.random()
    for ceiling, low, high in PRICE_BANDS:
        if draw < ceiling:
            break
    return round(low + rng.random() * (high - low), 2)


def sample_customers(rng, tenant, count, now):
    customers = []
    for n in range(count):
        first, last = rng.choice(FIRST_NAMES), rng.choice(LAST_NAMES)
        stamp = to_iso(now - timedelta(days=365 + rng.randrange(60)))
        customers.append(Customer(
            tenant_id=tenant.id,
            shopify_customer_id=f"cust_{rng.randrange(10 ** 12):012d}",
            email=f"{first}.{last}{tenant.id}{n}@example.com".lower(),
            first_name=first,
            last_name=last,
            total_spent=0.0,
            orders_count=0,
            created_at=stamp,
            updated_at=stamp,
        ))
    return customers


def sample_products(rng, tenant, count, now):
    products = []
    for n in range(count):
        stamp = to_iso(now - timedelta(days=rng.randrange(400)))
        products.append(Product(
            tenant_id=tenant.id,
            shopify_product_id=f"prod_{rng.randrange(10 ** 12):012d}",
            title=f"{rng.choice(PRODUCT_NAMES)} #{n + 1}",
            price=round(5 + rng.random() * 495, 2),
            inventory=rng.randrange(0, 500),
            created_at=stamp,
            updated_at=stamp,
        ))
    return products


def sample_orders(rng, tenant, customers, count, now):
    orders = []
    for index, (months_ago, span, share) in enumerate(ORDER_PERIODS):
        # The last period takes whatever rounding left over
        period_count = count - len(orders) if index == len(ORDER_PERIODS) - 1 else round(count * share)
        for _ in range(period_count):
            status = order_status(rng.random())
            age_days = 30 * (months_ago + rng.randrange(span)) + rng.randrange(30)
            if status in OPEN_WINDOW_DAYS:
                age_days = rng.randrange(OPEN_WINDOW_DAYS[status])
            placed = now - timedelta(days=age_days)
            updated = placed
            if status in OPEN_WINDOW_DAYS:
                updated = min(now, placed + timedelta(seconds=rng.random() * 2 * 24 * 60 * 60))
            orders.append(Order(
                tenant_id=tenant.id,
                shopify_order_id=f"order_{rng.randrange(10 ** 16):016d}",
                customer_id=rng.choice(customers).id,
                total_price=order_price(rng),
                status=status,
                order_date=to_iso(placed),
                created_at=to_iso(placed),
                updated_at=to_iso(updated),
            ))
    return orders


def apply_customer_totals(customers, orders):
    by_id = {customer.id: customer for customer in customers}
    for order in orders:
        customer = by_id[order.customer_id]
        customer.orders_count += 1
        if order.status not in UNSETTLED_STATUSES:
            customer.total_spent = round(customer.total_spent + order.total_price, 2)


async def seed(db_manager, rng_seed=42, customers_per_tenant=50, products_per_tenant=20,
               orders_per_tenant=200, now=None):
    """
    Insert the sample data in one transaction. Returns row counts per table,
    or None when tenants already exist.
    """
    rng = random.Random(rng_seed)
    now = now or datetime.now(timezone.utc)
    async with db_manager.transaction() as session:
        existing = await session.scalar(select(func.count()).select_from(Tenant))
        if existing:
            logging.warning(f"Store already holds {existing} tenants, skipping seed")
            return None

        tenants = [
            Tenant(
                name=name,
                shopify_domain=domain,
                shopify_access_token=token,
                created_at=to_iso(datetime.fromisoformat(created).replace(tzinfo=timezone.utc)),
                updated_at=to_iso(datetime.fromisoformat(updated).replace(tzinfo=timezone.utc)),
            )
            for name, domain, token, created, updated in SAMPLE_TENANTS
        ]
        session.add_all(tenants)
        await session.flush()

        counts = {"tenants": len(tenants), "customers": 0, "products": 0, "orders": 0}
        for tenant in tenants:
            customers = sample_customers(rng, tenant, customers_per_tenant, now)
            products = sample_products(rng, tenant, products_per_tenant, now)
            session.add_all(customers + products)
            await session.flush()
            orders = sample_orders(rng, tenant, customers, orders_per_tenant, now) if customers else []
            apply_customer_totals(customers, orders)
            session.add_all(orders)
            await session.flush()
            counts["customers"] += len(customers)
            counts["products"] += len(products)
            counts["orders"] += len(orders)

    logging.info(f"Seed completed: {counts}")
    return counts


async def main():
    db_manager = DatabaseManager()
    await db_manager.init_db()
    try:
        await seed(db_manager)
    finally:
        await db_manager.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=LOG_LEVEL, format='%(asctime)s - %(levelname)s - %(message)s')
    asyncio.run(main())
