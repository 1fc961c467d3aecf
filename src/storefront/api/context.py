"""Per-request log context.

Every log line written while a request is handled carries its request id,
method and path, and the shopper's cart id when the cart cookie is set.
"""

from uuid import uuid4

from fastapi import Request

from storefront import config
from storefront.utils.logging import add_context, clear_context

REQUEST_ID_HEADER = "X-Request-ID"


async def bind_request_context(request: Request, call_next):
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
    clear_context()
    add_context(request_id=request_id, method=request.method, path=request.url.path)

    cart_id = request.cookies.get(config.CART_COOKIE_NAME)
    if cart_id:
        add_context(cart_id=cart_id)

    try:
        response = await call_next(request)
    finally:
        clear_context()

    response.headers[REQUEST_ID_HEADER] = request_id
    return response
