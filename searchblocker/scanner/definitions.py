"""SQL-injection pattern definitions for the search validator.

All patterns are pre-compiled at module load time using google-re2.
NO pattern compilation happens per-request, per-call, or lazily.

IMPORT RULES:
  - ``import re2`` ONLY — ``import re`` is PROHIBITED in this file and any
    searchblocker/scanner/ file (enforced by tests/security/test_redos_gate.py).

Two patterns exist, one per strictness level:

  FRONTEND_PATTERN:
      Broad. Keywords match anywhere, including inside longer words
      ("selectable" matches "select"), plus quote characters, comment
      sequences and URL-encoded quotes/terminators. Frontend shoppers get a
      soft redirect, so false positives are cheap. The ``or``/``and``
      separators include vertical tab, which re2's ``\s`` does not cover.

  API_PATTERN:
      Strict. Keywords match as whole words only, plus a narrow set of
      comment and statement-terminator sequences. REST and GraphQL clients
      get a hard error, so false positives are expensive.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import re2  # google-re2, NOT stdlib re

from searchblocker.models.verdict import Channel


@dataclass(frozen=True)
class PatternEntry:
    """A compiled injection pattern with metadata.

    Fields:
        pattern: Pre-compiled re2 pattern object.
        source:  Pattern source text (for docs, benchmarks and the ReDoS gate).
        slug:    Kebab-case identifier used in log fields.
    """
    pattern: Any           # re2._Regexp, pre-compiled at module load
    source: str
    slug: str


def _entry(source: str, slug: str) -> PatternEntry:
    return PatternEntry(pattern=re2.compile(source), source=source, slug=slug)


FRONTEND_PATTERN = _entry(
    r"(?i)(union|select|insert|delete|update|drop|sleep|benchmark|waitfor|concat"
    r"|information_schema|%27|%22|'|--|%23|%3B|%3D"
    r"|[\s\v]or[\s\v]|[\s\v]and[\s\v]|%C0%A7|%C0%A2)",
    slug="sql-injection-broad",
)

API_PATTERN = _entry(
    r"(?i)\b(union|select|insert|delete|update|drop|sleep|benchmark|waitfor|information_schema)\b"
    r"|(--|#|/\*|\*/|;)",
    slug="sql-injection-strict",
)

CHANNEL_PATTERNS: dict[Channel, PatternEntry] = {
    Channel.FRONTEND: FRONTEND_PATTERN,
    Channel.REST: API_PATTERN,
    Channel.GRAPHQL: API_PATTERN,
}

ALL_PATTERNS: list[PatternEntry] = [FRONTEND_PATTERN, API_PATTERN]


def pattern_for(channel: Channel) -> PatternEntry:
    """Return the injection pattern that applies to ``channel``."""
    return CHANNEL_PATTERNS[channel]
