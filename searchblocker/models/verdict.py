"""Verdict contract shared by the validator and the channel adapters.

  - ``Channel``     — the entry point a search term arrived through
  - ``ReasonKind``  — why a term was blocked
  - ``Verdict``     — the Allow/Block decision for one input

A Verdict is created and consumed within a single request. It is never
persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from searchblocker.constants import BLACKLISTED_MESSAGE, SUSPICIOUS_PATTERN_MESSAGE


class Channel(str, Enum):
    """Calling context. Drives pattern selection and the enable/log gates."""

    FRONTEND = "frontend"
    REST = "rest"
    GRAPHQL = "graphql"

    @property
    def label(self) -> str:
        """Human-readable label used in search log messages."""
        return _CHANNEL_LABELS[self]

    @classmethod
    def parse(cls, value: str) -> Optional["Channel"]:
        """Resolve a configured identifier to a Channel.

        Case-insensitive and whitespace-tolerant. ``controller`` is accepted as
        an alias of ``frontend``. Returns None for unknown identifiers.
        """
        key = value.strip().lower()
        if key in _CHANNEL_ALIASES:
            return _CHANNEL_ALIASES[key]
        try:
            return cls(key)
        except ValueError:
            return None


_CHANNEL_LABELS: dict[Channel, str] = {
    Channel.FRONTEND: "frontend",
    Channel.REST: "REST",
    Channel.GRAPHQL: "GraphQL",
}

_CHANNEL_ALIASES: dict[str, Channel] = {
    "controller": Channel.FRONTEND,
}


class Action(str, Enum):
    ALLOW = "ALLOW"
    BLOCK = "BLOCK"


class ReasonKind(str, Enum):
    """Why a term was blocked."""

    SUSPICIOUS_PATTERN = "SuspiciousPattern"
    BLACKLISTED = "Blacklisted"

    @property
    def message(self) -> str:
        return _REASON_MESSAGES[self]


_REASON_MESSAGES: dict[ReasonKind, str] = {
    ReasonKind.SUSPICIOUS_PATTERN: SUSPICIOUS_PATTERN_MESSAGE,
    ReasonKind.BLACKLISTED: BLACKLISTED_MESSAGE,
}


@dataclass(frozen=True)
class Verdict:
    """Decision produced by ``SearchValidator.validate()``.

    Fields:
        action:    ALLOW or BLOCK.
        channel:   Channel the term arrived through.
        term:      Normalized (trimmed, lowercased) term.
        reason:    ReasonKind on BLOCK, None on ALLOW.
        message:   User-facing message on BLOCK, None on ALLOW.
        evaluated: False when the pipeline was bypassed (feature disabled,
                   empty term, or unreadable policy). Bypassed verdicts are
                   never written to the search log.
    """

    action: Action
    channel: Channel
    term: str = ""
    reason: Optional[ReasonKind] = None
    message: Optional[str] = None
    evaluated: bool = True

    @property
    def is_blocked(self) -> bool:
        return self.action == Action.BLOCK

    @classmethod
    def allowed(cls, channel: Channel, term: str = "", evaluated: bool = True) -> "Verdict":
        return cls(action=Action.ALLOW, channel=channel, term=term, evaluated=evaluated)

    @classmethod
    def blocked(cls, channel: Channel, term: str, reason: ReasonKind) -> "Verdict":
        return cls(
            action=Action.BLOCK,
            channel=channel,
            term=term,
            reason=reason,
            message=reason.message,
        )
