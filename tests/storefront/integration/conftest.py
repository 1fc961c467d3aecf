import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from storefront.api import (
    balance_router,
    bind_request_context,
    cart_router,
    checkout_router,
    maintenance_router,
    order_router,
    product_router,
    register_error_handlers,
)


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(cart_router)
    app.include_router(checkout_router)
    app.include_router(order_router)
    app.include_router(balance_router)
    app.include_router(product_router)
    app.include_router(maintenance_router)
    register_error_handlers(app)
    app.middleware("http")(bind_request_context)
    return TestClient(app)
