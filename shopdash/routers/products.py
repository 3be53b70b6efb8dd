from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from shopdash.database.database import DatabaseManager, get_db_manager
from shopdash.models.base_model import Product, ProductCreate, ProductUpdate
from shopdash.models.tables import Product as ProductORM
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
from shopdash.validation import parse_bound, parse_id, parse_page
import logging

router = APIRouter(prefix="/api/products", tags=["products"])


@router.get("")
async def get_products(
    record_id: Optional[str] = Query(None, alias="id"),
    tenant_id: Optional[str] = Query(None, alias="tenantId"),
    limit: Optional[str] = Query(None),
    offset: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    min_price: Optional[str] = Query(None, alias="minPrice"),
    max_price: Optional[str] = Query(None, alias="maxPrice"),
    db_manager: DatabaseManager = Depends(get_db_manager),
):
    """
    Fetch one product by `id`, or list a tenant's products filtered by title
    substring and an inclusive price range. Unparsable price bounds are ignored.
    """
    try:
        if record_id:
            product_id = parse_id(record_id)
            scope = optional_tenant(tenant_id)
            async with db_manager.transaction() as session:
                product = await fetch_one(
                    session,
                    ProductORM,
                    scoped_lookup(ProductORM, product_id, scope),
                    "PRODUCT_NOT_FOUND",
                    "Product",
                )
                return JSONResponse(content=Product.dump(product))

        scope = require_list_tenant(tenant_id)
        page = parse_page(limit, offset)
        query = (
            ListQuery(ProductORM, ProductORM.created_at)
            .equals(ProductORM.tenant_id, scope)
            .search(search, ProductORM.title)
            .between(ProductORM.price, parse_bound(min_price), parse_bound(max_price))
        )
        async with db_manager.transaction() as session:
            products = await query.all(session, page)
        return JSONResponse(content=[Product.dump(product) for product in products])
    except Exception as e:
        return error_response(e)


@router.post("")
async def create_product(request: Request, db_manager: DatabaseManager = Depends(get_db_manager)):
    try:
        payload = ProductCreate.from_body(await read_json_body(request))
        async with db_manager.transaction() as session:
            await ensure_tenant_exists(session, payload.tenant_id)
            now = now_iso()
            product = ProductORM(**payload.model_dump(), created_at=now, updated_at=now)
            session.add(product)
            await session.flush()
            created = Product.dump(product)
        logging.info(f"Product created: ID={created['id']}, Tenant={created['tenantId']}")
        return JSONResponse(content=created, status_code=201)
    except Exception as e:
        return error_response(e)


@router.put("")
async def update_product(
    request: Request,
    record_id: Optional[str] = Query(None, alias="id"),
    db_manager: DatabaseManager = Depends(get_db_manager),
):
    try:
        product_id = parse_id(record_id)
        async with db_manager.transaction() as session:
            product = await fetch_for_mutation(session, ProductORM, product_id, "PRODUCT_NOT_FOUND", "Product")
            changes = ProductUpdate.from_body(await read_json_body(request)).model_dump(exclude_unset=True)
            for field, value in changes.items():
                setattr(product, field, value)
            product.updated_at = now_iso()
            await session.flush()
            updated = Product.dump(product)
        logging.info(f"Product updated: ID={product_id}, Fields={sorted(changes)}")
        return JSONResponse(content=updated)
    except Exception as e:
        return error_response(e)


@router.delete("")
async def delete_product(
    record_id: Optional[str] = Query(None, alias="id"),
    db_manager: DatabaseManager = Depends(get_db_manager),
):
    try:
        product_id = parse_id(record_id)
        async with db_manager.transaction() as session:
            product = await fetch_for_mutation(session, ProductORM, product_id, "PRODUCT_NOT_FOUND", "Product")
            deleted = Product.dump(product)
            await session.delete(product)
            await session.flush()
        logging.info(f"Product deleted: ID={product_id}")
        return JSONResponse(content={"message": "Product deleted successfully", "product": deleted})
    except Exception as e:
        return error_response(e)


products_router = router
