"""Request-ID middleware for SearchBlocker.

Assigns every request a ULID, binds it into the structlog context for the
duration of the request (so application and search log lines correlate), and
returns it in the ``X-SearchBlocker-Request-ID`` response header.
"""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from searchblocker.constants import REQUEST_ID_HEADER
from searchblocker.utils.logger import clear_request_id, set_request_id
from searchblocker.utils.ulid import generate_ulid


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Registration (in create_app()):
        application.add_middleware(RequestIdMiddleware)
    """

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        request_id = generate_ulid()
        request.state.request_id = request_id
        set_request_id(request_id)
        try:
            response = await call_next(request)
        finally:
            clear_request_id()
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
