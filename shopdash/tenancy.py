"""
Tenant isolation checks shared by the resource routers.

Policy, per operation on a tenant-scoped resource:

- list: a `tenantId` is mandatory and always becomes a predicate; there is
  no cross-tenant listing.
- read by id: `tenantId` is optional; when given the lookup is
  `id AND tenant_id`, otherwise `id` alone (admin lookups).
- create: the tenant must exist; an order's customer must exist *within*
  that tenant. A customer in another tenant is reported exactly like a
  missing one so callers cannot probe other tenants' ids.
- update / delete: looked up by `id` alone, without a tenant re-check.
"""

import logging
from typing import Any, Optional

from sqlalchemy import and_, select

from shopdash.errors import InvalidInput, NotFound
from shopdash.models.tables import Customer, Tenant
from shopdash.validation import is_missing, parse_optional_reference


def require_list_tenant(raw: Any) -> int:
    if is_missing(raw):
        raise InvalidInput("TENANT_ID_REQUIRED", "tenantId is required for multi-tenant isolation")
    return parse_optional_reference(raw, "tenantId", "INVALID_TENANT_ID")


def optional_tenant(raw: Any) -> Optional[int]:
    return parse_optional_reference(raw, "tenantId", "INVALID_TENANT_ID")


def scoped_lookup(model, record_id: int, tenant_id: Optional[int] = None):
    """Predicate for a single-record read, narrowed to a tenant when one is given."""
    if tenant_id is None:
        return model.id == record_id
    return and_(model.id == record_id, model.tenant_id == tenant_id)


async def fetch_one(session, model, predicate, code: str, label: str):
    result = await session.execute(select(model).where(predicate).limit(1))
    row = result.scalars().first()
    if row is None:
        raise NotFound(code, f"{label} not found")
    return row


async def fetch_for_mutation(session, model, record_id: int, code: str, label: str):
    # Mutations resolve by id alone; see module docstring
    return await fetch_one(session, model, model.id == record_id, code, label)


async def ensure_tenant_exists(session, tenant_id: int) -> Tenant:
    return await fetch_one(session, Tenant, Tenant.id == tenant_id, "TENANT_NOT_FOUND", "Tenant")


async def ensure_customer_in_tenant(session, customer_id: int, tenant_id: int) -> Customer:
    result = await session.execute(
        select(Customer)
        .where(and_(Customer.id == customer_id, Customer.tenant_id == tenant_id))
        .limit(1)
    )
    customer = result.scalars().first()
    if customer is None:
        logging.warning(f"Customer {customer_id} not found in tenant {tenant_id}")
        raise NotFound(
            "CUSTOMER_NOT_FOUND",
            "Customer not found or does not belong to the specified tenant",
        )
    return customer
