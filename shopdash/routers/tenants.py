from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy import func, select
from shopdash.database.database import DatabaseManager, get_db_manager
from shopdash.errors import DuplicateEntity
from shopdash.models.base_model import Tenant, TenantCreate, TenantUpdate
from shopdash.models.tables import Tenant as TenantORM
from shopdash.query import ListQuery
from shopdash.tenancy import fetch_for_mutation, fetch_one, scoped_lookup
from shopdash.utils import error_response, now_iso, read_json_body
from shopdash.validation import parse_id, parse_page
import logging

router = APIRouter(prefix="/api/tenants", tags=["tenants"])


async def ensure_domain_available(session, domain: str, exclude_id: Optional[int] = None):
    """
    Reject a Shopify domain already used by another tenant. Domains are stored
    lowercased, so the comparison is case-insensitive.
    """
    result = await session.execute(
        select(TenantORM).where(func.lower(TenantORM.shopify_domain) == domain.lower()).limit(1)
    )
    existing = result.scalars().first()
    if existing is not None and existing.id != exclude_id:
        raise DuplicateEntity("DUPLICATE_SHOPIFY_DOMAIN", "Shopify domain already exists")


@router.get("")
async def get_tenants(
    record_id: Optional[str] = Query(None, alias="id"),
    limit: Optional[str] = Query(None),
    offset: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    db_manager: DatabaseManager = Depends(get_db_manager),
):
    """
    Fetch one tenant when `id` is given, otherwise list tenants newest first,
    optionally filtered by a substring of the name or Shopify domain.
    """
    try:
        if record_id:
            tenant_id = parse_id(record_id)
            async with db_manager.transaction() as session:
                tenant = await fetch_one(
                    session, TenantORM, scoped_lookup(TenantORM, tenant_id), "TENANT_NOT_FOUND", "Tenant"
                )
                return JSONResponse(content=Tenant.dump(tenant))

        page = parse_page(limit, offset)
        query = ListQuery(TenantORM, TenantORM.created_at).search(
            search, TenantORM.name, TenantORM.shopify_domain
        )
        async with db_manager.transaction() as session:
            tenants = await query.all(session, page)
        return JSONResponse(content=[Tenant.dump(tenant) for tenant in tenants])
    except Exception as e:
        return error_response(e)


@router.post("")
async def create_tenant(request: Request, db_manager: DatabaseManager = Depends(get_db_manager)):
    try:
        payload = TenantCreate.from_body(await read_json_body(request))
        async with db_manager.transaction() as session:
            await ensure_domain_available(session, payload.shopify_domain)
            now = now_iso()
            tenant = TenantORM(**payload.model_dump(), created_at=now, updated_at=now)
            session.add(tenant)
            await session.flush()
            created = Tenant.dump(tenant)
        logging.info(f"Tenant created: ID={created['id']}, Domain={created['shopifyDomain']}")
        return JSONResponse(content=created, status_code=201)
    except Exception as e:
        return error_response(e)


@router.put("")
async def update_tenant(
    request: Request,
    record_id: Optional[str] = Query(None, alias="id"),
    db_manager: DatabaseManager = Depends(get_db_manager),
):
    """
    Partial update. A changed Shopify domain is re-checked for uniqueness,
    ignoring the tenant being updated.
    """
    try:
        tenant_id = parse_id(record_id)
        async with db_manager.transaction() as session:
            tenant = await fetch_for_mutation(session, TenantORM, tenant_id, "TENANT_NOT_FOUND", "Tenant")
            changes = TenantUpdate.from_body(await read_json_body(request)).model_dump(exclude_unset=True)
            if "shopify_domain" in changes:
                await ensure_domain_available(session, changes["shopify_domain"], exclude_id=tenant.id)
            for field, value in changes.items():
                setattr(tenant, field, value)
            tenant.updated_at = now_iso()
            await session.flush()
            updated = Tenant.dump(tenant)
        logging.info(f"Tenant updated: ID={tenant_id}, Fields={sorted(changes)}")
        return JSONResponse(content=updated)
    except Exception as e:
        return error_response(e)


@router.delete("")
async def delete_tenant(
    record_id: Optional[str] = Query(None, alias="id"),
    db_manager: DatabaseManager = Depends(get_db_manager),
):
    # No cascade: a tenant that still owns rows is refused by the store's foreign keys
    try:
        tenant_id = parse_id(record_id)
        async with db_manager.transaction() as session:
            tenant = await fetch_for_mutation(session, TenantORM, tenant_id, "TENANT_NOT_FOUND", "Tenant")
            deleted = Tenant.dump(tenant)
            await session.delete(tenant)
            await session.flush()
        logging.info(f"Tenant deleted: ID={tenant_id}")
        return JSONResponse(content={"message": "Tenant deleted successfully", "tenant": deleted})
    except Exception as e:
        return error_response(e)


tenants_router = router
