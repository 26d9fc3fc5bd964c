"""Integration fixtures: a fully started SearchBlocker app per test.

``make_client`` builds an app with create_app(), points the service config at
``tmp_path`` (policy file and search log), injects either a fixed policy or
a ready-made store, and enters the TestClient context so the lifespan runs. httpx.ASGITransport does not run the lifespan; use it
only for the not-ready (503) paths.
"""

from __future__ import annotations

import json
import pathlib
from typing import Any, Callable, Iterator, Optional

import pytest
from starlette.testclient import TestClient

from searchblocker.adapters.backend import InMemorySearchBackend, Product
from searchblocker.config import Config
from searchblocker.main import create_app
from searchblocker.policy.store import PolicySnapshot, PolicyStore, StaticPolicyStore

CATALOG = [
    Product(sku="MS-RED-01", name="Red Shirt"),
    Product(sku="MS-BLU-02", name="Blue Jeans"),
    Product(sku="24-MB01", name="Sleeping Bag"),
]


@pytest.fixture
def search_log_path(tmp_path: pathlib.Path) -> pathlib.Path:
    return tmp_path / "var" / "log" / "search_blocker.log"


@pytest.fixture
def make_client(
    tmp_path: pathlib.Path,
    search_log_path: pathlib.Path,
    monkeypatch: pytest.MonkeyPatch,
) -> Iterator[Callable[..., TestClient]]:
    clients: list[TestClient] = []

    def _make(
        policy: Optional[PolicySnapshot] = None,
        policy_file: Optional[str] = None,
        search_log: Optional[str] = None,
        store: Optional[PolicyStore] = None,
    ) -> TestClient:
        config = Config.defaults()
        config.policy.path = policy_file or str(tmp_path / "policy.yaml")
        config.policy.watch = False
        config.search_log.path = search_log or str(search_log_path)
        monkeypatch.setattr("searchblocker.main.load_config", lambda: config)

        if store is None and policy is not None:
            store = StaticPolicyStore(policy)
        application = create_app(
            policy_store=store,
            search_backend=InMemorySearchBackend(CATALOG),
        )
        client = TestClient(application)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


def read_search_log(path: pathlib.Path) -> list[dict[str, Any]]:
    if not path.exists():
        return []
    return [json.loads(line) for line in path.read_text().splitlines() if line.strip()]


@pytest.fixture
def search_log_records(search_log_path: pathlib.Path) -> Callable[[], list[dict[str, Any]]]:
    return lambda: read_search_log(search_log_path)
