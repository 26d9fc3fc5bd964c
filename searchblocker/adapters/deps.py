"""FastAPI dependencies shared by the channel adapters.

Everything an adapter needs lives on ``app.state`` (installed by the lifespan
in searchblocker/main.py):

  app.state.validator       — SearchValidator
  app.state.search_log      — SearchLog
  app.state.search_backend  — SearchBackend
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from searchblocker.adapters.backend import SearchBackend
from searchblocker.audit.search_log import SearchLog
from searchblocker.scanner.validator import Decision, SearchValidator


async def require_ready(request: Request) -> None:
    """FastAPI dependency: raises HTTP 503 if app.state.ready is not True."""
    if not getattr(request.app.state, "ready", False):
        raise HTTPException(
            status_code=503,
            detail={
                "status": "starting",
                "message": "SearchBlocker is starting up.",
            },
        )


def get_validator(request: Request) -> SearchValidator:
    return request.app.state.validator


def get_search_log(request: Request) -> SearchLog:
    return request.app.state.search_log


def get_search_backend(request: Request) -> SearchBackend:
    return request.app.state.search_backend


def record_verdict(request: Request, decision: Decision) -> None:
    """Write the verdict to the search log, gated by the snapshot it was decided on."""
    get_search_log(request).record(decision.verdict, decision.policy)
