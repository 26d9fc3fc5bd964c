"""Root test configuration for SearchBlocker.

Clears the SEARCHBLOCKER_* environment overrides so a developer's shell
settings never leak into config tests, and provides the shared policy
builder used across unit and integration tests.
"""

from __future__ import annotations

from typing import Any

import pytest

from searchblocker.models.verdict import Channel
from searchblocker.policy.store import PolicySnapshot


@pytest.fixture(autouse=True)
def clean_searchblocker_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SEARCHBLOCKER_CONFIG", raising=False)
    monkeypatch.delenv("SEARCHBLOCKER_PORT", raising=False)


def make_policy(**overrides: Any) -> PolicySnapshot:
    """Fully-enabled policy (all channels, regex on, logging off) with overrides."""
    fields: dict[str, Any] = {
        "global_enabled": True,
        "channel_enabled": {channel: True for channel in Channel},
        "blacklist": (),
        "regex_filter_enabled": True,
        "redirect": None,
        "logging_enabled": False,
        "logging_channels": frozenset(),
    }
    fields.update(overrides)
    return PolicySnapshot(**fields)


@pytest.fixture
def policy_factory():
    return make_policy
