"""Order endpoints.

Orders carry two tenant-scoped references: the order's own tenant and its
customer, who must belong to that same tenant at creation time. `status` is a
flat classification; any valid value may replace any other.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from shopdash.database.database import DatabaseManager, get_db_manager
from shopdash.models.base_model import Order, OrderCreate, OrderUpdate
from shopdash.models.tables import Order as OrderORM
from shopdash.query import ListQuery
from shopdash.tenancy import (
    ensure_customer_in_tenant,
    ensure_tenant_exists,
    fetch_for_mutation,
    fetch_one,
    optional_tenant,
    require_list_tenant,
    scoped_lookup,
)
from shopdash.utils import error_response, now_iso, read_json_body
from shopdash.validation import (
    is_missing,
    parse_date_bound,
    parse_id,
    parse_optional_reference,
    parse_page,
    parse_status,
)
import logging

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.get("")
async def get_orders(
    record_id: Optional[str] = Query(None, alias="id"),
    tenant_id: Optional[str] = Query(None, alias="tenantId"),
    customer_id: Optional[str] = Query(None, alias="customerId"),
    status: Optional[str] = Query(None),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    limit: Optional[str] = Query(None),
    offset: Optional[str] = Query(None),
    db_manager: DatabaseManager = Depends(get_db_manager),
):
    """
    Fetch one order by `id`, or list a tenant's orders by most recent
    `orderDate`, filtered by customer, status and an inclusive date window.
    """
    try:
        if record_id:
            order_id = parse_id(record_id)
            scope = optional_tenant(tenant_id)
            async with db_manager.transaction() as session:
                order = await fetch_one(
                    session, OrderORM, scoped_lookup(OrderORM, order_id, scope), "ORDER_NOT_FOUND", "Order"
                )
                return JSONResponse(content=Order.dump(order))

        scope = require_list_tenant(tenant_id)
        customer_filter = parse_optional_reference(customer_id, "customerId", "INVALID_CUSTOMER_ID")
        status_filter = None if is_missing(status) else parse_status(status)
        page = parse_page(limit, offset)
        query = (
            ListQuery(OrderORM, OrderORM.order_date)
            .equals(OrderORM.tenant_id, scope)
            .equals(OrderORM.customer_id, customer_filter)
            .equals(OrderORM.status, status_filter)
            # ISO strings compare lexically in date order
            .between(OrderORM.order_date, parse_date_bound(start_date), parse_date_bound(end_date))
        )
        async with db_manager.transaction() as session:
            orders = await query.all(session, page)
        return JSONResponse(content=[Order.dump(order) for order in orders])
    except Exception as e:
        return error_response(e)


@router.post("")
async def create_order(request: Request, db_manager: DatabaseManager = Depends(get_db_manager)):
    try:
        payload = OrderCreate.from_body(await read_json_body(request))
        async with db_manager.transaction() as session:
            await ensure_tenant_exists(session, payload.tenant_id)
            await ensure_customer_in_tenant(session, payload.customer_id, payload.tenant_id)
            now = now_iso()
            order = OrderORM(**payload.model_dump(), created_at=now, updated_at=now)
            session.add(order)
            await session.flush()
            created = Order.dump(order)
        logging.info(
            f"Order created: ID={created['id']}, Tenant={created['tenantId']}, Customer={created['customerId']}"
        )
        return JSONResponse(content=created, status_code=201)
    except Exception as e:
        return error_response(e)


@router.put("")
async def update_order(
    request: Request,
    record_id: Optional[str] = Query(None, alias="id"),
    db_manager: DatabaseManager = Depends(get_db_manager),
):
    try:
        order_id = parse_id(record_id)
        async with db_manager.transaction() as session:
            order = await fetch_for_mutation(session, OrderORM, order_id, "ORDER_NOT_FOUND", "Order")
            changes = OrderUpdate.from_body(await read_json_body(request)).model_dump(exclude_unset=True)
            for field, value in changes.items():
                setattr(order, field, value)
            order.updated_at = now_iso()
            await session.flush()
            updated = Order.dump(order)
        logging.info(f"Order updated: ID={order_id}, Fields={sorted(changes)}")
        return JSONResponse(content=updated)
    except Exception as e:
        return error_response(e)


@router.delete("")
async def delete_order(
    record_id: Optional[str] = Query(None, alias="id"),
    db_manager: DatabaseManager = Depends(get_db_manager),
):
    try:
        order_id = parse_id(record_id)
        async with db_manager.transaction() as session:
            order = await fetch_for_mutation(session, OrderORM, order_id, "ORDER_NOT_FOUND", "Order")
            deleted = Order.dump(order)
            await session.delete(order)
            await session.flush()
        logging.info(f"Order deleted: ID={order_id}")
        return JSONResponse(content={"message": "Order deleted successfully", "order": deleted})
    except Exception as e:
        return error_response(e)


orders_router = router
