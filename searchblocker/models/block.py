"""Per-channel rejection builders for BLOCK verdicts.

Each channel turns a blocked Verdict into its own failure signal:

  build_frontend_redirect():
      HTTP 302 to the configured redirect path (or ``/noroute``) with the
      verdict message set as a one-shot flash cookie. Shoppers get a soft
      landing, never an error page from the search engine.

  build_rest_block_response():
      HTTP 400 with ``{"message": ..., "reason": ...}`` and
      ``X-SearchBlocker-Block: true``.

  build_graphql_error():
      GraphQLError carrying the verdict message; raised from the resolver so
      it surfaces as a field-level error in the ``errors`` list.

The bodies never echo the submitted term back to the client.
"""

from __future__ import annotations

from typing import Optional

from fastapi.responses import JSONResponse, RedirectResponse
from graphql import GraphQLError

from searchblocker.constants import DEFAULT_REDIRECT_PATH, FLASH_MESSAGE_COOKIE
from searchblocker.models.verdict import Verdict


def build_frontend_redirect(verdict: Verdict, redirect_path: Optional[str]) -> RedirectResponse:
    """Redirect a blocked frontend search to a safe page with a flash message.

    Args:
        verdict:       Verdict with action == BLOCK.
        redirect_path: Configured redirect target; None means ``/noroute``.
    """
    response = RedirectResponse(url=redirect_path or DEFAULT_REDIRECT_PATH, status_code=302)
    response.set_cookie(
        FLASH_MESSAGE_COOKIE,
        verdict.message or "",
        httponly=True,
        samesite="lax",
    )
    return response


def build_rest_block_response(verdict: Verdict) -> JSONResponse:
    """Build the HTTP 400 response for a blocked REST search.

    Body:

    .. code-block:: json

        {"message": "Suspicious search term detected.", "reason": "SuspiciousPattern"}
    """
    response = JSONResponse(
        status_code=400,
        content={
            "message": verdict.message,
            "reason": verdict.reason.value if verdict.reason else None,
        },
    )
    response.headers["X-SearchBlocker-Block"] = "true"
    return response


def build_graphql_error(verdict: Verdict) -> GraphQLError:
    """Build the field-level GraphQL error for a blocked search."""
    return GraphQLError(
        verdict.message or "",
        extensions={
            "category": "graphql-input",
            "reason": verdict.reason.value if verdict.reason else None,
        },
    )
