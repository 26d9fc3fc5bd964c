"""SearchBlocker policy store.

Public API:
    PolicyStore          — read-only configuration capability (Protocol)
    PolicySnapshot       — immutable settings for one validation call
    StaticPolicyStore    — store over a fixed snapshot
    PolicyLoader         — YAML-backed store with hot-reload
    log_channel_options  — selectable log channels for an admin surface
"""
from searchblocker.policy.loader import PolicyLoader
from searchblocker.policy.store import (
    PolicySnapshot,
    PolicyStore,
    StaticPolicyStore,
    log_channel_options,
)

__all__ = [
    "PolicyLoader",
    "PolicySnapshot",
    "PolicyStore",
    "StaticPolicyStore",
    "log_channel_options",
]
