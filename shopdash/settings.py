from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from get_env_values import ALLOWED_ORIGINS
from shopdash.routers.customers import customers_router
from shopdash.routers.orders import orders_router
from shopdash.routers.products import products_router
from shopdash.routers.tenants import tenants_router

# Project-wide configuration
ALLOWED_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
ALLOWED_HEADERS = ["*"]
ALLOWED_CREDENTIALS = True
ALLOWED_MAX_AGE = 86400


def configure_app(app: FastAPI):
    """
    Apply all middleware, routers, and project-wide settings to the FastAPI app.
    """
    # Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=ALLOWED_CREDENTIALS,
        allow_methods=ALLOWED_METHODS,
        allow_headers=ALLOWED_HEADERS,
        max_age=ALLOWED_MAX_AGE,
    )
    # Routers
    app.include_router(tenants_router)
    app.include_router(customers_router)
    app.include_router(products_router)
    app.include_router(orders_router)
