"""Storefront FastAPI application.

Web server that processes commands synchronously via HTTP. Every request
runs inside the storefront domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay:
#   - "test"       → in-memory adapters, testing flag on
#   - "production" → PostgreSQL through DATABASE_URL
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.domain import storefront
from storefront.utils.logging import configure_logging

configure_logging()
storefront.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront API",
    description="Carts, points ledger, inventory reservation, checkout and orders",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the storefront domain context for each request."""
    with storefront.domain_context():
        response = await call_next(request)
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from storefront.api import (  # noqa: E402
    balance_router,
    bind_request_context,
    cart_router,
    checkout_router,
    maintenance_router,
    order_router,
    product_router,
    register_error_handlers,
)

app.include_router(cart_router)
app.include_router(checkout_router)
app.include_router(order_router)
app.include_router(balance_router)
app.include_router(product_router)
app.include_router(maintenance_router)
register_error_handlers(app)
app.middleware("http")(bind_request_context)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": {"name": storefront.name}})
