"""Search validator — the decision engine.

Provides:
  - ``normalize_term()``:  trim + lowercase of the raw search input.
  - ``evaluate()``:        pure pipeline over one PolicySnapshot.
  - ``Decision``:          a Verdict plus the snapshot it was decided on.
  - ``SearchValidator``:   binds a PolicyStore; ``validate()`` and ``decide()``.

Pipeline (sequential, first decision wins):
  1. Global or channel switch off  → ALLOW (bypassed)
  2. Normalize
  3. Empty term                    → ALLOW (bypassed)
  4. Regex filter on + channel pattern matches → BLOCK SuspiciousPattern
  5. Blacklist term is a substring → BLOCK Blacklisted (blacklist order)
  6.                               → ALLOW

Blacklist matching is substring-based on purpose: "banned" blocks
"unbannedword" as well as "this is banned now".

IMPORT RULES:
  - ``import re2`` ONLY — ``import re`` is PROHIBITED in this file.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from searchblocker.models.verdict import Channel, ReasonKind, Verdict
from searchblocker.policy.store import PolicySnapshot, PolicyStore
from searchblocker.scanner.definitions import pattern_for
from searchblocker.utils.logger import get_logger

logger = get_logger(__name__)

_TRIM_CHARS = " \t\n\r\0\x0b"


def normalize_term(raw_term: Optional[str]) -> str:
    """Trim and lowercase the raw term. ``None`` normalizes to ``""``.

    Only ASCII whitespace and NUL are trimmed; a leading or trailing
    non-breaking space is part of the term.
    """
    if raw_term is None:
        return ""
    return str(raw_term).lower().strip(_TRIM_CHARS)


def evaluate(policy: PolicySnapshot, channel: Channel, raw_term: Optional[str]) -> Verdict:
    """Run the validation pipeline against a single policy snapshot.

    Pure: identical inputs always produce an identical Verdict.
    """
    if not policy.is_global_enabled() or not policy.is_channel_enabled(channel):
        return Verdict.allowed(channel, evaluated=False)

    term = normalize_term(raw_term)
    if term == "":
        return Verdict.allowed(channel, term, evaluated=False)

    if policy.is_regex_filter_enabled() and pattern_for(channel).pattern.search(term):
        return Verdict.blocked(channel, term, ReasonKind.SUSPICIOUS_PATTERN)

    for blocked_term in policy.blacklist_terms():
        if blocked_term and blocked_term in term:
            return Verdict.blocked(channel, term, ReasonKind.BLACKLISTED)

    return Verdict.allowed(channel, term)


@dataclass(frozen=True)
class Decision:
    """A Verdict together with the policy snapshot that produced it.

    Adapters read the redirect path and the logging gate from ``policy`` so
    that one request never mixes two policy versions.
    """

    verdict: Verdict
    policy: PolicySnapshot


class SearchValidator:
    """Validates search terms for all channels against a PolicyStore.

    Holds no mutable state. Safe to share across concurrent requests.
    """

    def __init__(self, policy_store: PolicyStore) -> None:
        self._policy_store = policy_store

    @property
    def policy_store(self) -> PolicyStore:
        return self._policy_store

    def validate(self, channel: Channel, raw_term: Optional[str]) -> Verdict:
        """Return the Verdict for ``raw_term`` arriving through ``channel``."""
        return self.decide(channel, raw_term).verdict

    def decide(self, channel: Channel, raw_term: Optional[str]) -> Decision:
        """Validate against a single snapshot and return both.

        INVARIANT: NEVER raises. If the policy cannot be read, the term is
        allowed against the disabled snapshot (fail open on infrastructure
        errors); only a content match ever blocks.
        """
        try:
            policy = self._policy_store.snapshot()
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "Policy unreadable — allowing search term",
                channel=channel.value,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return Decision(
                verdict=Verdict.allowed(channel, normalize_term(raw_term), evaluated=False),
                policy=PolicySnapshot.disabled(),
            )

        verdict = evaluate(policy, channel, raw_term)
        if verdict.is_blocked:
            logger.debug(
                "Search term blocked",
                channel=channel.value,
                reason=verdict.reason.value if verdict.reason else None,
                pattern=pattern_for(channel).slug
                if verdict.reason == ReasonKind.SUSPICIOUS_PATTERN
                else None,
            )
        return Decision(verdict=verdict, policy=policy)
