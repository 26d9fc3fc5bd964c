"""Frontend catalog search adapter.

  GET /catalogsearch/result?q=<term>  — storefront search results
  GET /noroute                        — safe landing page for blocked searches

Blocked terms redirect (302) to the policy's redirect path, or ``/noroute``
when none is configured, with the verdict message as a flash cookie. The
landing page shows the message once and clears the cookie.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, Response

from searchblocker.adapters.deps import (
    get_search_backend,
    get_validator,
    record_verdict,
    require_ready,
)
from searchblocker.constants import (
    DEFAULT_REDIRECT_PATH,
    FLASH_MESSAGE_COOKIE,
    FRONTEND_QUERY_PARAM,
)
from searchblocker.models.block import build_frontend_redirect
from searchblocker.models.verdict import Channel
from searchblocker.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["frontend"])


@router.get("/catalogsearch/result", dependencies=[Depends(require_ready)])
async def catalog_search(
    request: Request,
    term: str = Query(default="", alias=FRONTEND_QUERY_PARAM),
) -> Any:
    """Validate the query term and either redirect or run the catalog search."""
    decision = get_validator(request).decide(Channel.FRONTEND, term)
    record_verdict(request, decision)

    verdict = decision.verdict
    if verdict.is_blocked:
        return build_frontend_redirect(verdict, decision.policy.redirect_path())

    products = await get_search_backend(request).search(term)
    return {
        "query": term,
        "total_count": len(products),
        "items": [{"sku": p.sku, "name": p.name} for p in products],
    }


@router.get(DEFAULT_REDIRECT_PATH)
async def no_route(request: Request) -> Response:
    """404 landing page; displays and clears any pending flash message."""
    message = request.cookies.get(FLASH_MESSAGE_COOKIE)
    response = JSONResponse(
        status_code=404,
        content={
            "error": "Page not found",
            "messages": [message] if message else [],
        },
    )
    if message:
        response.delete_cookie(FLASH_MESSAGE_COOKIE)
    return response
