"""Service config loading for SearchBlocker.

Reads `.searchblocker/config.yaml` (or `~/.searchblocker/config.yaml`).
Raises SystemExit on parse errors or missing `version` field.
If no config file is found, returns default values (safe to run without config).

The service config covers how the service runs (bind address, where the
policy file and the search log live). The blocking policy itself is a
separate, hot-reloaded file — see searchblocker/policy/loader.py.

Config search order:
  1. `config_path` argument (if provided — for testing or explicit override)
  2. SEARCHBLOCKER_CONFIG environment variable (if set)
  3. `.searchblocker/config.yaml` (working directory — for development)
  4. `~/.searchblocker/config.yaml` (home directory — for production deployments)

Environment variable overrides:
  SEARCHBLOCKER_PORT   — overrides server.port
  SEARCHBLOCKER_CONFIG — sets an explicit config file path to try first
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from typing import Optional

import yaml

from searchblocker.constants import DEFAULT_POLICY_PATH, DEFAULT_SEARCH_LOG_PATH
from searchblocker.utils.logger import get_logger

logger = get_logger(__name__)

# ─── Version constants ────────────────────────────────────────────────────────

SUPPORTED_CONFIG_VERSION = 1

SUPPORTED_VERSIONS: frozenset[int] = frozenset({1})

# Default config search paths (SEARCHBLOCKER_CONFIG env var prepended at runtime)
DEFAULT_CONFIG_PATHS = [
    ".searchblocker/config.yaml",
    os.path.expanduser("~/.searchblocker/config.yaml"),
]


# ─── Dataclasses ─────────────────────────────────────────────────────────────


@dataclass
class ServerConfig:
    """HTTP binding configuration."""

    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class PolicyConfig:
    """Location of the hot-reloaded blocking policy file."""

    path: str = DEFAULT_POLICY_PATH
    watch: bool = True


@dataclass
class SearchLogConfig:
    """Dedicated search log sink.

    path: Append-only JSON-lines file. ``None`` (YAML ``null``) routes records
          to the application log stream instead.
    """

    path: Optional[str] = DEFAULT_SEARCH_LOG_PATH


@dataclass
class Config:
    """Root configuration object populated from .searchblocker/config.yaml.

    All fields have safe defaults — SearchBlocker can start without any config file.
    """

    version: int = SUPPORTED_CONFIG_VERSION
    server: ServerConfig = field(default_factory=ServerConfig)
    policy: PolicyConfig = field(default_factory=PolicyConfig)
    search_log: SearchLogConfig = field(default_factory=SearchLogConfig)
    path: Optional[str] = None  # Path to the loaded config file

    @classmethod
    def defaults(cls) -> "Config":
        """Return a fully-default Config (no file required)."""
        return cls()

    @classmethod
    def from_dict(cls, raw: dict, path: Optional[str] = None) -> "Config":
        """Construct Config from a parsed YAML dict.

        Merges user-supplied values onto defaults; unknown keys are silently ignored.

        Raises:
            SystemExit(1): On a section that is not a mapping.
        """
        server_raw = _mapping_section(raw, "server", path)
        server = ServerConfig(
            host=server_raw.get("host", "127.0.0.1"),
            port=server_raw.get("port", 8080),
        )

        policy_raw = _mapping_section(raw, "policy", path)
        policy = PolicyConfig(
            path=policy_raw.get("path", DEFAULT_POLICY_PATH),
            watch=bool(policy_raw.get("watch", True)),
        )

        search_log_raw = _mapping_section(raw, "search_log", path)
        search_log = SearchLogConfig(
            path=search_log_raw.get("path", DEFAULT_SEARCH_LOG_PATH),
        )

        return cls(
            version=raw.get("version", SUPPORTED_CONFIG_VERSION),
            server=server,
            policy=policy,
            search_log=search_log,
            path=path,
        )


# ─── Config loading ───────────────────────────────────────────────────────────


def load_config(config_path: Optional[str] = None) -> Config:
    """Load and validate SearchBlocker service configuration.

    If no file is found at any search path, returns default Config (not an error).
    If a file is found but invalid, writes error to stderr and raises SystemExit(1).

    After loading (or defaulting), ``SEARCHBLOCKER_PORT`` is applied as an override
    to ``config.server.port`` regardless of whether a config file was found.

    Raises:
        SystemExit(1): On YAML parse error, missing ``version`` field, unsupported
                       version, non-mapping sections, or invalid ``SEARCHBLOCKER_PORT``.
    """
    search_paths: list[str] = []
    if config_path:
        search_paths.append(config_path)
    env_config = os.environ.get("SEARCHBLOCKER_CONFIG")
    if env_config:
        search_paths.append(env_config)
    search_paths.extend(DEFAULT_CONFIG_PATHS)

    found_path: Optional[str] = None
    for candidate in search_paths:
        expanded = os.path.expanduser(candidate)
        if os.path.isfile(expanded):
            found_path = expanded
            break

    # ── No config file found ─────────────────────────────────────────────────
    if found_path is None:
        logger.info("No config file found — using defaults", searched=search_paths)
        config = Config.defaults()
        _apply_env_overrides(config)
        return config

    # ── Parse config file ─────────────────────────────────────────────────────
    logger.info("Loading config", path=found_path)

    try:
        with open(found_path) as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        msg = (
            f"CONFIG ERROR: Failed to parse {found_path}: {exc}\n"
            "SearchBlocker refuses to start with an invalid config. "
            "Check the YAML syntax and try again."
        )
        print(msg, file=sys.stderr)
        raise SystemExit(1)
    except OSError as exc:
        msg = f"CONFIG ERROR: Could not read {found_path}: {exc}"
        print(msg, file=sys.stderr)
        raise SystemExit(1)

    if not isinstance(raw, dict):
        if raw is None:
            msg = (
                f"CONFIG ERROR: {found_path} is missing the required 'version' field.\n"
                "Add 'version: 1' to the top of your config file."
            )
        else:
            msg = (
                f"CONFIG ERROR: {found_path} is not a valid YAML mapping.\n"
                "The config file must be a YAML dictionary at the top level."
            )
        print(msg, file=sys.stderr)
        raise SystemExit(1)

    # ── Version validation ────────────────────────────────────────────────────
    version = raw.get("version")
    if version is None:
        msg = (
            f"CONFIG ERROR: {found_path} is missing the required 'version' field.\n"
            "Add 'version: 1' to the top of your config file."
        )
        print(msg, file=sys.stderr)
        raise SystemExit(1)

    if version not in SUPPORTED_VERSIONS:
        msg = (
            f"CONFIG ERROR: Unsupported config version: {version}. "
            f"Supported versions: {sorted(SUPPORTED_VERSIONS)}."
        )
        print(msg, file=sys.stderr)
        raise SystemExit(1)

    config = Config.from_dict(raw, path=found_path)
    _apply_env_overrides(config)

    if config.server.host == "0.0.0.0":
        logger.warning(
            "SearchBlocker is configured to bind on 0.0.0.0 (all interfaces). "
            "Recommended: put it behind the storefront's reverse proxy and bind to 127.0.0.1."
        )

    logger.info(
        "Config loaded",
        path=found_path,
        version=config.version,
        policy_path=config.policy.path,
        search_log_path=config.search_log.path,
    )
    return config


def _mapping_section(raw: dict, key: str, path: Optional[str]) -> dict:
    """Return ``raw[key]`` as a dict; missing/null means empty.

    Raises:
        SystemExit(1): If the section is present but not a mapping.
    """
    section = raw.get(key)
    if section is None:
        return {}
    if not isinstance(section, dict):
        msg = (
            f"CONFIG ERROR: '{key}' in {path or 'config'} must be a mapping, "
            f"got {type(section).__name__}."
        )
        print(msg, file=sys.stderr)
        raise SystemExit(1)
    return section


def _apply_env_overrides(config: Config) -> None:
    """Apply environment variable overrides to a Config object in-place.

    Currently handles:
      SEARCHBLOCKER_PORT — overrides config.server.port (integer; SystemExit(1) if invalid)
    """
    env_port = os.environ.get("SEARCHBLOCKER_PORT")
    if env_port is not None:
        try:
            config.server.port = int(env_port)
        except ValueError:
            msg = (
                f"CONFIG ERROR: SEARCHBLOCKER_PORT environment variable is not a valid "
                f"integer: '{env_port}'"
            )
            print(msg, file=sys.stderr)
            raise SystemExit(1)
