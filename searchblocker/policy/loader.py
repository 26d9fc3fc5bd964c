"""Policy file loader for SearchBlocker.

Loads ``.searchblocker/policy.yaml`` (path set by ``policy.path`` in the
service config) into a ``PolicySnapshot`` and serves it through the
``PolicyStore`` contract. Provides async watchfiles hot-reload; admin changes
apply within about a second of file save without restarting the service.

Failure policy: a policy that cannot be read or parsed maps to the disabled
snapshot (every switch off). Validation then lets every term through, so a
configuration outage never turns into a user-facing error.
"""

from __future__ import annotations

import asyncio
import threading
from typing import Optional, Sequence

import yaml

from searchblocker.models.verdict import Channel
from searchblocker.policy.store import PolicySnapshot
from searchblocker.utils.logger import get_logger

logger = get_logger(__name__)


class PolicyLoader:
    """Thread-safe, async-compatible PolicyStore with watchfiles hot-reload.

    Usage (in lifespan):
        loader = PolicyLoader()
        loader.load("/path/to/policy.yaml")
        app.state.policy_store = loader
        stop = asyncio.Event()
        asyncio.create_task(loader.start_watcher("/path/to/policy.yaml", stop))

    Thread-safety:
        snapshot() and load() share a threading.Lock. Snapshots are immutable,
        so readers only hold the lock long enough to copy a reference.
    """

    def __init__(self, snapshot: Optional[PolicySnapshot] = None) -> None:
        self._snapshot = snapshot if snapshot is not None else PolicySnapshot.disabled()
        self._lock = threading.Lock()

    # ── PolicyStore read API ──────────────────────────────────────────────────

    def snapshot(self) -> PolicySnapshot:
        """Return the current policy snapshot (thread-safe, no I/O)."""
        with self._lock:
            return self._snapshot

    def is_global_enabled(self) -> bool:
        return self.snapshot().is_global_enabled()

    def is_channel_enabled(self, channel: Channel) -> bool:
        return self.snapshot().is_channel_enabled(channel)

    def is_regex_filter_enabled(self) -> bool:
        return self.snapshot().is_regex_filter_enabled()

    def blacklist_terms(self) -> Sequence[str]:
        return self.snapshot().blacklist_terms()

    def redirect_path(self) -> Optional[str]:
        return self.snapshot().redirect_path()

    def is_logging_enabled(self, channel: Optional[Channel] = None) -> bool:
        return self.snapshot().is_logging_enabled(channel)

    # ── Load from file ────────────────────────────────────────────────────────

    def load(self, path: str) -> bool:
        """Load the policy from a YAML file.

        Returns True when the file was read and parsed, False when the
        disabled snapshot was installed instead (missing file, YAML error,
        unreadable file, non-mapping root).

        Never raises.
        """
        try:
            with open(path) as fh:
                raw = yaml.safe_load(fh)
        except FileNotFoundError:
            logger.info("Policy file not found — search blocking disabled", path=path)
            self._install(PolicySnapshot.disabled())
            return False
        except yaml.YAMLError as exc:
            logger.error(
                "Policy load failed: YAML parse error — search blocking disabled",
                path=path,
                error=str(exc),
            )
            self._install(PolicySnapshot.disabled())
            return False
        except OSError as exc:
            logger.error(
                "Policy load failed: could not read file — search blocking disabled",
                path=path,
                error=str(exc),
            )
            self._install(PolicySnapshot.disabled())
            return False

        if raw is not None and not isinstance(raw, dict):
            logger.error(
                "Policy YAML root is not a mapping — search blocking disabled",
                path=path,
                actual_type=type(raw).__name__,
            )
            self._install(PolicySnapshot.disabled())
            return False

        snapshot = PolicySnapshot.from_settings(raw or {})
        self._install(snapshot)
        logger.info(
            "Policy loaded",
            path=path,
            enabled=snapshot.global_enabled,
            channels=sorted(c.value for c, on in snapshot.channel_enabled.items() if on),
            blacklist_size=len(snapshot.blacklist),
            regex_filter=snapshot.regex_filter_enabled,
            logging=snapshot.logging_enabled,
        )
        return True

    def _install(self, snapshot: PolicySnapshot) -> None:
        with self._lock:
            self._snapshot = snapshot

    # ── Hot-reload watcher ────────────────────────────────────────────────────

    async def start_watcher(
        self, path: str, stop_event: Optional[asyncio.Event] = None
    ) -> None:
        """Async watchfiles watcher — reloads the policy on file change.

        Runs as an asyncio.Task owned by the application lifespan. Setting
        ``stop_event`` ends the watch promptly; cancellation also works but
        waits for the current watchfiles poll to time out. Handler errors are
        logged and the watcher keeps running.
        """
        try:
            import watchfiles

            logger.info("Policy file watcher started", path=path)
            async for _ in watchfiles.awatch(path, stop_event=stop_event):
                try:
                    if self.load(path):
                        logger.info("Policy hot-reloaded", path=path)
                except asyncio.CancelledError:
                    raise
                except Exception as exc:  # noqa: BLE001
                    logger.error(
                        "Hot-reload handler error (non-fatal)",
                        error=str(exc),
                        path=path,
                    )
            logger.info("Policy file watcher stopped", path=path)
        except asyncio.CancelledError:
            logger.debug("Policy file watcher cancelled", path=path)
            raise
        except FileNotFoundError:
            logger.warning(
                "Policy file does not exist — hot-reload disabled until restart",
                path=path,
            )
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "Policy file watcher error (watcher stopped)",
                error=str(exc),
                path=path,
            )
