"""Integration tests for the application factory, lifespan and /health.

Covers:
  - create_app() has no startup side effects; ready is False before lifespan
  - /health: 503 before ready, policy summary after
  - Policy file from config is loaded when no store is injected
  - Missing policy file → blocking disabled, service still starts
  - Unopenable search log falls back to the application log stream
  - Shutdown resets ready
"""

from __future__ import annotations

import pathlib

import pytest
import yaml
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from searchblocker.main import create_app
from searchblocker.models.verdict import Channel
from searchblocker.scanner.validator import SearchValidator

_POLICY = {
    "general": {
        "enabled": "1",
        "enable_controller": "1",
        "enable_rest": "1",
        "enable_graphql": "0",
        "terms": "casino, poker",
        "redirect_path": "/search-help",
        "enable_regex_filter": "1",
    },
    "logging": {"enable_logging": "1", "log_channels": "controller,rest"},
}


def _write_policy(tmp_path: pathlib.Path) -> str:
    path = tmp_path / "policy.yaml"
    path.write_text(yaml.safe_dump(_POLICY))
    return str(path)


class TestCreateApp:
    def test_returns_independent_instances(self) -> None:
        app1, app2 = create_app(), create_app()
        assert isinstance(app1, FastAPI)
        assert app1 is not app2

    def test_ready_false_before_lifespan(self) -> None:
        assert create_app().state.ready is False

    def test_root_route(self, make_client, policy_factory) -> None:
        body = make_client(policy_factory()).get("/").json()
        assert body["service"] == "SearchBlocker"
        assert body["graphql"] == "/graphql"


class TestHealth:
    @pytest.mark.asyncio
    async def test_503_before_ready(self) -> None:
        transport = ASGITransport(app=create_app())  # type: ignore[arg-type]
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/health")
        assert response.status_code == 503
        assert response.json()["error"]["status"] == "starting"

    def test_ok_after_ready(self, make_client, policy_factory, search_log_path) -> None:
        client = make_client(policy_factory(blacklist=("a", "b")))
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {
            "status": "ok",
            "policy": {
                "enabled": True,
                "channels": {"frontend": True, "rest": True, "graphql": True},
                "regex_filter": True,
                "blacklist_size": 2,
                "logging": False,
            },
            "search_log_path": str(search_log_path),
        }


class TestPolicyFile:
    def test_policy_loaded_from_config_path(
        self, make_client, tmp_path: pathlib.Path, search_log_records
    ) -> None:
        client = make_client(policy_file=_write_policy(tmp_path))

        policy = client.get("/health").json()["policy"]
        assert policy["enabled"] is True
        assert policy["channels"] == {"frontend": True, "rest": True, "graphql": False}
        assert policy["blacklist_size"] == 2
        assert policy["logging"] is True

        response = client.get(
            "/catalogsearch/result", params={"q": "poker night"}, follow_redirects=False
        )
        assert response.status_code == 302
        assert response.headers["location"] == "/search-help"

        (record,) = search_log_records()
        assert record["reason"] == "Blacklisted"
        assert record["channel"] == Channel.FRONTEND.value

    def test_missing_policy_file_disables_blocking(
        self, make_client, tmp_path: pathlib.Path
    ) -> None:
        client = make_client(policy_file=str(tmp_path / "absent.yaml"))
        assert client.get("/health").json()["policy"]["enabled"] is False
        response = client.get(
            "/catalogsearch/result", params={"q": "union select"}, follow_redirects=False
        )
        assert response.status_code == 200

    def test_validator_installed(self, make_client, policy_factory) -> None:
        client = make_client(policy_factory())
        assert isinstance(client.app.state.validator, SearchValidator)  # type: ignore[attr-defined]


class TestSearchLogFallback:
    def test_unopenable_log_falls_back(
        self, make_client, policy_factory, tmp_path: pathlib.Path
    ) -> None:
        client = make_client(policy_factory(), search_log=str(tmp_path))
        assert client.get("/health").json()["search_log_path"] is None
        response = client.get("/catalogsearch/result", params={"q": "red shirt"})
        assert response.status_code == 200


class TestShutdown:
    def test_ready_reset_on_shutdown(self, make_client, policy_factory) -> None:
        client = make_client(policy_factory())
        application = client.app
        assert application.state.ready is True  # type: ignore[attr-defined]
        client.__exit__(None, None, None)
        assert application.state.ready is False  # type: ignore[attr-defined]
