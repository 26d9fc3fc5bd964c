"""Health endpoint for SearchBlocker.

  GET /health — 503 before ``app.state.ready``, 200 with a status body after.

Reports the effective policy switches so operators can tell "blocking is
off" apart from "blocking is on and letting this term through".
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Request

from searchblocker.models.verdict import Channel

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request) -> dict[str, Any]:
    """Primary health check endpoint.

    Response body (200):
        {
          "status": "ok",
          "policy": {
            "enabled": true,
            "channels": {"frontend": true, "rest": true, "graphql": false},
            "regex_filter": true,
            "blacklist_size": 3,
            "logging": false
          },
          "search_log_path": "var/log/search_blocker.log" | null
        }
    """
    if not getattr(request.app.state, "ready", False):
        raise HTTPException(
            status_code=503,
            detail={
                "status": "starting",
                "message": "SearchBlocker is starting up.",
            },
        )

    policy = request.app.state.validator.policy_store.snapshot()
    search_log = request.app.state.search_log
    return {
        "status": "ok",
        "policy": {
            "enabled": policy.is_global_enabled(),
            "channels": {c.value: policy.is_channel_enabled(c) for c in Channel},
            "regex_filter": policy.is_regex_filter_enabled(),
            "blacklist_size": len(policy.blacklist_terms()),
            "logging": policy.is_logging_enabled(),
        },
        "search_log_path": search_log.path,
    }
