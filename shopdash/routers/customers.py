from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from shopdash.database.database import DatabaseManager, get_db_manager
from shopdash.models.base_model import Customer, CustomerCreate, CustomerUpdate
from shopdash.models.tables import Customer as CustomerORM
from shopdash.query import ListQuery
from shopdash.tenancy import (
    ensure_tenant_exists,
    fetch_for_mutation,
    fetch_one,
    optional_tenant,
    require_list_tenant,
    scoped_lookup,
)
from shopdash.utils import error_response, now_iso, read_json_body
from shopdash.validation import parse_id, parse_page
import logging

router = APIRouter(prefix="/api/customers", tags=["customers"])


@router.get("")
async def get_customers(
    record_id: Optional[str] = Query(None, alias="id"),
    tenant_id: Optional[str] = Query(None, alias="tenantId"),
    limit: Optional[str] = Query(None),
    offset: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    db_manager: DatabaseManager = Depends(get_db_manager),
):
    """
    Fetch one customer by `id` (narrowed to `tenantId` when given), or list a
    tenant's customers with an optional search over email, first and last name.
    """
    try:
        if record_id:
            customer_id = parse_id(record_id)
            scope = optional_tenant(tenant_id)
            async with db_manager.transaction() as session:
                customer = await fetch_one(
                    session,
                    CustomerORM,
                    scoped_lookup(CustomerORM, customer_id, scope),
                    "CUSTOMER_NOT_FOUND",
                    "Customer",
                )
                return JSONResponse(content=Customer.dump(customer))

        scope = require_list_tenant(tenant_id)
        page = parse_page(limit, offset)
        query = (
            ListQuery(CustomerORM, CustomerORM.created_at)
            .equals(CustomerORM.tenant_id, scope)
            .search(search, CustomerORM.email, CustomerORM.first_name, CustomerORM.last_name)
        )
        async with db_manager.transaction() as session:
            customers = await query.all(session, page)
        return JSONResponse(content=[Customer.dump(customer) for customer in customers])
    except Exception as e:
        return error_response(e)


@router.post("")
async def create_customer(request: Request, db_manager: DatabaseManager = Depends(get_db_manager)):
    try:
        payload = CustomerCreate.from_body(await read_json_body(request))
        async with db_manager.transaction() as session:
            await ensure_tenant_exists(session, payload.tenant_id)
            now = now_iso()
            customer = CustomerORM(**payload.model_dump(), created_at=now, updated_at=now)
            session.add(customer)
            await session.flush()
            created = Customer.dump(customer)
        logging.info(f"Customer created: ID={created['id']}, Tenant={created['tenantId']}")
        return JSONResponse(content=created, status_code=201)
    except Exception as e:
        return error_response(e)


@router.put("")
async def update_customer(
    request: Request,
    record_id: Optional[str] = Query(None, alias="id"),
    db_manager: DatabaseManager = Depends(get_db_manager),
):
    """
    Partial update. `totalSpent` and `ordersCount` are stored as sent; they
    are never recomputed from orders.
    """
    try:
        customer_id = parse_id(record_id)
        async with db_manager.transaction() as session:
            customer = await fetch_for_mutation(
                session, CustomerORM, customer_id, "CUSTOMER_NOT_FOUND", "Customer"
            )
            changes = CustomerUpdate.from_body(await read_json_body(request)).model_dump(exclude_unset=True)
            for field, value in changes.items():
                setattr(customer, field, value)
            customer.updated_at = now_iso()
            await session.flush()
            updated = Customer.dump(customer)
        logging.info(f"Customer updated: ID={customer_id}, Fields={sorted(changes)}")
        return JSONResponse(content=updated)
    except Exception as e:
        return error_response(e)


@router.delete("")
async def delete_customer(
    record_id: Optional[str] = Query(None, alias="id"),
    db_manager: DatabaseManager = Depends(get_db_manager),
):
    try:
        customer_id = parse_id(record_id)
        async with db_manager.transaction() as session:
            customer = await fetch_for_mutation(
                session, CustomerORM, customer_id, "CUSTOMER_NOT_FOUND", "Customer"
            )
            deleted = Customer.dump(customer)
            await session.delete(customer)
            await session.flush()
        logging.info(f"Customer deleted: ID={customer_id}")
        return JSONResponse(content={"message": "Customer deleted successfully", "customer": deleted})
    except Exception as e:
        return error_response(e)


customers_router = router
