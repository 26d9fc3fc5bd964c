"""SearchBlocker FastAPI application factory + lifespan lifecycle.

This module implements:
  - create_app() — testable application factory
  - lifespan — @asynccontextmanager startup/shutdown sequence
  - /        route  — service discovery root
  - app = create_app() — module-level instance for uvicorn

Startup sequence:
  1. load_config()           → app.state.config
  2. PolicyLoader.load()     → app.state.policy_store (unless injected)
  3. SearchValidator()       → app.state.validator
  4. SearchLog.open()        → app.state.search_log
  5. Policy file watcher     → asyncio task (when the policy file exists)
  6. app.state.ready = True

Shutdown sequence (reverse):
  app.state.ready = False → stop watcher → close search log
"""

from __future__ import annotations

import asyncio
import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from fastapi.routing import APIRouter

from searchblocker.adapters.backend import InMemorySearchBackend, SearchBackend
from searchblocker.adapters.frontend import router as frontend_router
from searchblocker.adapters.graphql import create_graphql_router
from searchblocker.adapters.rest import router as rest_router
from searchblocker.audit.search_log import SearchLog
from searchblocker.config import Config, load_config
from searchblocker.health import router as health_router
from searchblocker.middleware import RequestIdMiddleware
from searchblocker.policy.loader import PolicyLoader
from searchblocker.policy.store import PolicyStore
from searchblocker.scanner.validator import SearchValidator
from searchblocker.utils.logger import configure_logging, get_logger

# ─── Logging Setup ────────────────────────────────────────────────────────────
# Configure logging at module import time (before any other imports that may log).
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO" if not DEBUG else "DEBUG")
JSON_LOGS = os.getenv("JSON_LOGS", "true").lower() == "true"

configure_logging(log_level=LOG_LEVEL, json_output=JSON_LOGS)
logger = get_logger(__name__)

root_router = APIRouter(tags=["root"])


@root_router.get("/")
async def root() -> dict[str, str]:
    """Root endpoint — service identity / discovery."""
    return {
        "service": "SearchBlocker",
        "health": "/health",
        "frontend": "/catalogsearch/result",
        "rest": "/rest/V1/search",
        "graphql": "/graphql",
    }


# ─── Lifespan ─────────────────────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan — startup and shutdown sequence."""
    logger.info("SearchBlocker starting up...")

    # ── Step 1: Load configuration ────────────────────────────────────────────
    # load_config() raises SystemExit on parse error or missing version field.
    config: Config = load_config()
    app.state.config = config

    # ── Step 2: Policy store ──────────────────────────────────────────────────
    # An injected store (create_app(policy_store=...)) wins over the policy file.
    policy_store: Optional[PolicyStore] = getattr(app.state, "policy_store", None)
    watch_path: Optional[str] = None
    if policy_store is None:
        loader = PolicyLoader()
        loader.load(config.policy.path)
        policy_store = loader
        if config.policy.watch and os.path.isfile(config.policy.path):
            watch_path = config.policy.path
    app.state.policy_store = policy_store

    # ── Step 3: Validator ─────────────────────────────────────────────────────
    app.state.validator = SearchValidator(policy_store)

    # ── Step 4: Search log ────────────────────────────────────────────────────
    # A log file that cannot be opened falls back to the application log
    # stream; it never prevents startup.
    search_log = SearchLog(config.search_log.path)
    try:
        search_log.open()
    except OSError as exc:
        logger.error(
            "Search log could not be opened — writing records to application log",
            path=config.search_log.path,
            error=str(exc),
        )
        search_log = SearchLog(None)
    app.state.search_log = search_log

    # ── Step 5: Policy file watcher ───────────────────────────────────────────
    watcher_task: Optional[asyncio.Task[None]] = None
    watcher_stop = asyncio.Event()
    if watch_path is not None and isinstance(policy_store, PolicyLoader):
        watcher_task = asyncio.create_task(
            policy_store.start_watcher(watch_path, stop_event=watcher_stop)
        )
    else:
        logger.debug("Policy file watcher disabled")

    # ── Step 6: Mark as ready ─────────────────────────────────────────────────
    app.state.ready = True
    logger.info("SearchBlocker ready")

    yield

    # ── Shutdown (reverse order) ──────────────────────────────────────────────
    logger.info("SearchBlocker shutting down...")
    app.state.ready = False

    if watcher_task is not None and not watcher_task.done():
        watcher_stop.set()
        await watcher_task

    search_log.close()
    logger.info("SearchBlocker shutdown complete")


# ─── Application Factory ──────────────────────────────────────────────────────


def create_app(
    policy_store: Optional[PolicyStore] = None,
    search_backend: Optional[SearchBackend] = None,
) -> FastAPI:
    """Create and configure the SearchBlocker FastAPI application.

    Call this function directly in tests to get an isolated app instance:
        app = create_app(policy_store=StaticPolicyStore(snapshot))

    Args:
        policy_store:   Policy source; None loads the policy file from config.
        search_backend: Downstream search; None installs an empty in-memory catalog.
    """
    application = FastAPI(
        title="SearchBlocker",
        description="Search-term validation for storefront, REST and GraphQL search",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if DEBUG else None,
        redoc_url="/redoc" if DEBUG else None,
        openapi_url="/openapi.json" if DEBUG else None,
    )

    # /health returns 503 until the lifespan sets ready.
    application.state.ready = False
    application.state.policy_store = policy_store
    application.state.search_backend = (
        search_backend if search_backend is not None else InMemorySearchBackend()
    )

    application.add_middleware(RequestIdMiddleware)

    application.include_router(root_router)
    application.include_router(health_router)
    application.include_router(frontend_router)
    application.include_router(rest_router)
    application.include_router(create_graphql_router())

    @application.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request, exc: HTTPException
    ) -> JSONResponse:
        logger.warning(
            "HTTP exception",
            status_code=exc.status_code,
            detail=exc.detail,
            path=str(request.url.path),
        )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    return application


# ─── Module-Level App (for uvicorn) ───────────────────────────────────────────

app = create_app()
