"""PolicyStore Protocol + PolicySnapshot.

The validator consults configuration only through the read-only
``PolicyStore`` capability. ``PolicySnapshot`` is the immutable value a store
hands out per validation call; it satisfies the same read contract, so a
validator can run against a snapshot, a static store, or the hot-reloading
``PolicyLoader`` without change.

Settings shape (as stored by the admin surface):

    general:
      enabled: "1"
      enable_frontend: "1"        # alias: enable_controller
      enable_rest: "1"
      enable_graphql: "1"
      terms: "casino, viagra"
      redirect_path: ""
      enable_regex_filter: "1"
    logging:
      enable_logging: "1"
      log_channels: "frontend,rest,graphql"
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, Sequence, runtime_checkable

from searchblocker.models.verdict import Channel
from searchblocker.utils.logger import get_logger

logger = get_logger(__name__)

# String flag forms accepted as "on". Everything else is "off".
_TRUE_FLAGS = frozenset({"1", "true", "yes", "on"})

# Per-channel enable keys. First key present wins.
_CHANNEL_ENABLE_KEYS: dict[Channel, tuple[str, ...]] = {
    Channel.FRONTEND: ("enable_frontend", "enable_controller"),
    Channel.REST: ("enable_rest",),
    Channel.GRAPHQL: ("enable_graphql",),
}


# ─── PolicyStore Protocol ────────────────────────────────────────────────────


@runtime_checkable
class PolicyStore(Protocol):
    """Read-only configuration capability consumed by the validator.

    Implementations must never raise from these methods; an unreadable
    configuration maps to the disabled defaults.
    """

    def is_global_enabled(self) -> bool:
        ...

    def is_channel_enabled(self, channel: Channel) -> bool:
        ...

    def is_regex_filter_enabled(self) -> bool:
        ...

    def blacklist_terms(self) -> Sequence[str]:
        """Lowercase, trimmed, non-empty terms in configured order."""
        ...

    def redirect_path(self) -> Optional[str]:
        ...

    def is_logging_enabled(self, channel: Optional[Channel] = None) -> bool:
        """Global gate with no channel; gate AND channel membership otherwise."""
        ...

    def snapshot(self) -> "PolicySnapshot":
        """Atomic view of all settings for one validation call."""
        ...


# ─── PolicySnapshot ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class PolicySnapshot:
    """Immutable configuration visible to one validation call.

    The default instance is the safe, fully-disabled policy.
    """

    global_enabled: bool = False
    channel_enabled: dict[Channel, bool] = field(default_factory=dict)
    blacklist: tuple[str, ...] = ()
    regex_filter_enabled: bool = False
    redirect: Optional[str] = None
    logging_enabled: bool = False
    logging_channels: frozenset[Channel] = frozenset()

    # ── PolicyStore read contract ─────────────────────────────────────────────

    def is_global_enabled(self) -> bool:
        return self.global_enabled

    def is_channel_enabled(self, channel: Channel) -> bool:
        return self.channel_enabled.get(channel, False)

    def is_regex_filter_enabled(self) -> bool:
        return self.regex_filter_enabled

    def blacklist_terms(self) -> Sequence[str]:
        return self.blacklist

    def redirect_path(self) -> Optional[str]:
        return self.redirect

    def is_logging_enabled(self, channel: Optional[Channel] = None) -> bool:
        if not self.logging_enabled:
            return False
        if channel is None:
            return True
        return channel in self.logging_channels

    def snapshot(self) -> "PolicySnapshot":
        return self

    # ── Construction ──────────────────────────────────────────────────────────

    @classmethod
    def disabled(cls) -> "PolicySnapshot":
        """The safe default: every switch off, empty blacklist."""
        return cls()

    @classmethod
    def from_settings(cls, raw: Any) -> "PolicySnapshot":
        """Build a snapshot from the stored settings mapping.

        Missing keys default to off/empty. Non-mapping input (or non-mapping
        sections) are treated as empty. Never raises on malformed values.
        """
        if not isinstance(raw, dict):
            return cls.disabled()

        general = _section(raw, "general")
        logging_section = _section(raw, "logging")

        channel_enabled = {
            channel: _flag(_first_present(general, keys))
            for channel, keys in _CHANNEL_ENABLE_KEYS.items()
        }

        return cls(
            global_enabled=_flag(general.get("enabled")),
            channel_enabled=channel_enabled,
            blacklist=parse_terms(general.get("terms")),
            regex_filter_enabled=_flag(general.get("enable_regex_filter")),
            redirect=_redirect(general.get("redirect_path")),
            logging_enabled=_flag(logging_section.get("enable_logging")),
            logging_channels=parse_channels(logging_section.get("log_channels")),
        )


# ─── StaticPolicyStore ───────────────────────────────────────────────────────


class StaticPolicyStore:
    """PolicyStore over a fixed snapshot. Used for embedding and in tests."""

    def __init__(self, snapshot: Optional[PolicySnapshot] = None) -> None:
        self._snapshot = snapshot if snapshot is not None else PolicySnapshot.disabled()

    def is_global_enabled(self) -> bool:
        return self._snapshot.is_global_enabled()

    def is_channel_enabled(self, channel: Channel) -> bool:
        return self._snapshot.is_channel_enabled(channel)

    def is_regex_filter_enabled(self) -> bool:
        return self._snapshot.is_regex_filter_enabled()

    def blacklist_terms(self) -> Sequence[str]:
        return self._snapshot.blacklist_terms()

    def redirect_path(self) -> Optional[str]:
        return self._snapshot.redirect_path()

    def is_logging_enabled(self, channel: Optional[Channel] = None) -> bool:
        return self._snapshot.is_logging_enabled(channel)

    def snapshot(self) -> PolicySnapshot:
        return self._snapshot


# ─── Parsing helpers ─────────────────────────────────────────────────────────


def parse_terms(value: Any) -> tuple[str, ...]:
    """Parse the blacklist setting into lowercase, trimmed, non-empty terms.

    Accepts the stored comma-separated string or a YAML list. Order is kept;
    duplicates are harmless and kept as-is.
    """
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        items = [str(v) for v in value if v is not None]
    else:
        items = str(value).split(",")
    return tuple(t for t in (item.strip().lower() for item in items) if t)


def parse_channels(value: Any) -> frozenset[Channel]:
    """Parse the log channel multi-select (comma-joined identifiers or a list)."""
    if value is None:
        return frozenset()
    if isinstance(value, (list, tuple)):
        items = [str(v) for v in value if v is not None]
    else:
        items = str(value).split(",")

    channels: set[Channel] = set()
    for item in items:
        if not item.strip():
            continue
        channel = Channel.parse(item)
        if channel is None:
            logger.warning("Unknown log channel — ignoring", channel=item.strip())
            continue
        channels.add(channel)
    return frozenset(channels)


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_FLAGS
    return False


def _redirect(value: Any) -> Optional[str]:
    if value is None:
        return None
    path = str(value).strip()
    return path or None


def _section(raw: dict, key: str) -> dict:
    section = raw.get(key)
    if section is None:
        return {}
    if not isinstance(section, dict):
        logger.warning(
            "Policy section is not a mapping — treating as empty",
            section=key,
            actual_type=type(section).__name__,
        )
        return {}
    return section


def _first_present(section: dict, keys: tuple[str, ...]) -> Any:
    for key in keys:
        if key in section:
            return section[key]
    return None


def log_channel_options() -> list[dict[str, str]]:
    """Selectable log channels for an admin multi-select."""
    return [
        {"value": Channel.FRONTEND.value, "label": "Frontend Controller"},
        {"value": Channel.REST.value, "label": "REST API"},
        {"value": Channel.GRAPHQL.value, "label": "GraphQL"},
    ]
