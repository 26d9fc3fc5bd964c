"""Dedicated search log — allowed/blocked term records.

Records are JSON lines appended to ``var/log/search_blocker.log`` (path set by
``search_log.path`` in the service config). Each record has an ISO timestamp,
a level (``info`` for allowed terms, ``warning`` for blocked terms), a
free-text message naming the channel and the normalized term, and the same
data as structured fields:

    {"event": "Blocked REST search term \\"union select\\" (Suspicious search term detected.)",
     "channel": "rest", "term": "union select", "reason": "SuspiciousPattern",
     "level": "warning", "timestamp": "2026-10-17T09:12:44.120Z"}

A record is written only when the policy's logging gate is open for the
verdict's channel, and only for verdicts the pipeline actually evaluated.
Write failures and gate errors are reported on the application logger and
swallowed. The search log never fails a search request.
"""

from __future__ import annotations

import os
from typing import IO, Any, Optional, Protocol

import structlog

from searchblocker.models.verdict import Verdict
from searchblocker.utils.logger import file_processors, get_logger

logger = get_logger(__name__)


class LoggingGate(Protocol):
    def is_logging_enabled(self, channel: Any = None) -> bool:
        ...


def format_allowed_message(verdict: Verdict) -> str:
    return f'Allowed {verdict.channel.label} search term: "{verdict.term}"'


def format_blocked_message(verdict: Verdict) -> str:
    return f'Blocked {verdict.channel.label} search term "{verdict.term}" ({verdict.message})'


class SearchLog:
    """Append-only sink for search verdict records.

    Usage:
        search_log = SearchLog("var/log/search_blocker.log")
        search_log.open()
        search_log.record(verdict, policy_snapshot)
        search_log.close()

    With ``path=None`` records go to the application log stream instead of a
    dedicated file.
    """

    def __init__(self, path: Optional[str] = None) -> None:
        self._path: Optional[str] = os.path.expanduser(path) if path else None
        self._fh: Optional[IO[str]] = None
        self._logger: Any = get_logger("search_blocker")

    @property
    def path(self) -> Optional[str]:
        return self._path

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def open(self) -> None:
        """Open the log file for appending, creating parent directories."""
        if self._path is None or self._fh is not None:
            return
        directory = os.path.dirname(self._path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        self._fh = open(self._path, "a", encoding="utf-8")
        self._logger = structlog.wrap_logger(
            structlog.WriteLogger(file=self._fh),
            processors=file_processors(),
            wrapper_class=structlog.BoundLogger,
        )
        logger.info("Search log opened", path=self._path)

    def close(self) -> None:
        if self._fh is None:
            return
        self._fh.close()
        self._fh = None
        self._logger = get_logger("search_blocker")
        logger.debug("Search log closed", path=self._path)

    # ── Recording ─────────────────────────────────────────────────────────────

    def record(self, verdict: Verdict, gate: LoggingGate) -> bool:
        """Write the record for ``verdict`` if the channel's logging gate is open.

        Returns True if a record was written.
        """
        if not verdict.evaluated:
            return False

        try:
            if not gate.is_logging_enabled(verdict.channel):
                return False
            if verdict.is_blocked:
                self._logger.warning(
                    format_blocked_message(verdict),
                    channel=verdict.channel.value,
                    term=verdict.term,
                    reason=verdict.reason.value if verdict.reason else None,
                )
            else:
                self._logger.info(
                    format_allowed_message(verdict),
                    channel=verdict.channel.value,
                    term=verdict.term,
                )
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "Search log write failed (non-fatal)",
                path=self._path,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return False
        return True
