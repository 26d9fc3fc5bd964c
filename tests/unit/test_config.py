"""Unit tests for service config loading (searchblocker/config.py).

Covers:
  - Missing config file → Config.defaults(), no exception
  - Missing/unsupported version, invalid YAML, non-mapping root → SystemExit(1)
  - Non-mapping section → SystemExit(1)
  - Section values merged onto defaults
  - SEARCHBLOCKER_CONFIG and SEARCHBLOCKER_PORT environment overrides
"""

from __future__ import annotations

import pathlib
import textwrap

import pytest

from searchblocker.config import (
    SUPPORTED_VERSIONS,
    Config,
    PolicyConfig,
    SearchLogConfig,
    ServerConfig,
    load_config,
)
from searchblocker.constants import DEFAULT_POLICY_PATH, DEFAULT_SEARCH_LOG_PATH

# ─── Helpers ──────────────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def no_default_config_paths(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's .searchblocker/config.yaml out of these tests."""
    monkeypatch.setattr("searchblocker.config.DEFAULT_CONFIG_PATHS", [])


def _write(tmp_path: pathlib.Path, body: str) -> str:
    path = tmp_path / "config.yaml"
    path.write_text(textwrap.dedent(body))
    return str(path)


# ─── Missing file ─────────────────────────────────────────────────────────────


class TestMissingConfigFile:
    def test_nonexistent_path_returns_defaults(self, tmp_path: pathlib.Path) -> None:
        config = load_config(str(tmp_path / "absent.yaml"))
        assert config == Config.defaults()
        assert config.path is None

    def test_defaults(self) -> None:
        config = Config.defaults()
        assert config.server == ServerConfig(host="127.0.0.1", port=8080)
        assert config.policy == PolicyConfig(path=DEFAULT_POLICY_PATH, watch=True)
        assert config.search_log == SearchLogConfig(path=DEFAULT_SEARCH_LOG_PATH)


# ─── Startup refusal ──────────────────────────────────────────────────────────


class TestInvalidConfig:
    def test_missing_version(self, tmp_path: pathlib.Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = _write(tmp_path, "server:\n  port: 9000\n")
        with pytest.raises(SystemExit) as exc_info:
            load_config(path)
        assert exc_info.value.code == 1
        assert "version" in capsys.readouterr().err

    def test_empty_file(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(SystemExit):
            load_config(_write(tmp_path, ""))

    @pytest.mark.parametrize("version", [0, 2, 99])
    def test_unsupported_version(
        self, tmp_path: pathlib.Path, version: int, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with pytest.raises(SystemExit):
            load_config(_write(tmp_path, f"version: {version}\n"))
        assert "Unsupported config version" in capsys.readouterr().err

    def test_invalid_yaml(self, tmp_path: pathlib.Path, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit):
            load_config(_write(tmp_path, "version: 1\nserver: [unclosed\n"))
        assert "Failed to parse" in capsys.readouterr().err

    def test_non_mapping_root(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(SystemExit):
            load_config(_write(tmp_path, "- version\n- 1\n"))

    def test_non_mapping_section(self, tmp_path: pathlib.Path, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit):
            load_config(_write(tmp_path, "version: 1\npolicy: just-a-string\n"))
        assert "'policy'" in capsys.readouterr().err

    def test_supported_versions_constant(self) -> None:
        assert SUPPORTED_VERSIONS == frozenset({1})


# ─── Valid file ───────────────────────────────────────────────────────────────


class TestValidConfig:
    def test_version_only_gives_defaults(self, tmp_path: pathlib.Path) -> None:
        path = _write(tmp_path, "version: 1\n")
        config = load_config(path)
        assert config.server.port == 8080
        assert config.policy.path == DEFAULT_POLICY_PATH
        assert config.path == path

    def test_sections_merged(self, tmp_path: pathlib.Path) -> None:
        path = _write(
            tmp_path,
            """\
            version: 1
            server:
              host: 0.0.0.0
              port: 9100
            policy:
              path: /etc/searchblocker/policy.yaml
              watch: false
            search_log:
              path: null
            """,
        )
        config = load_config(path)
        assert config.server == ServerConfig(host="0.0.0.0", port=9100)
        assert config.policy == PolicyConfig(path="/etc/searchblocker/policy.yaml", watch=False)
        assert config.search_log.path is None

    def test_unknown_keys_ignored(self, tmp_path: pathlib.Path) -> None:
        config = load_config(_write(tmp_path, "version: 1\nextra: true\nserver:\n  colour: red\n"))
        assert config.server.host == "127.0.0.1"


# ─── Environment overrides ────────────────────────────────────────────────────


class TestEnvironmentOverrides:
    def test_searchblocker_config_env(
        self, tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        path = _write(tmp_path, "version: 1\nserver:\n  port: 9200\n")
        monkeypatch.setenv("SEARCHBLOCKER_CONFIG", path)
        assert load_config().server.port == 9200

    def test_argument_wins_over_env(
        self, tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        env_dir = tmp_path / "env"
        env_dir.mkdir()
        monkeypatch.setenv("SEARCHBLOCKER_CONFIG", _write(env_dir, "version: 1\nserver:\n  port: 1\n"))
        arg_path = _write(tmp_path, "version: 1\nserver:\n  port: 2\n")
        assert load_config(arg_path).server.port == 2

    def test_port_override_with_file(
        self, tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("SEARCHBLOCKER_PORT", "5000")
        path = _write(tmp_path, "version: 1\nserver:\n  port: 9100\n")
        assert load_config(path).server.port == 5000

    def test_port_override_without_file(
        self, tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("SEARCHBLOCKER_PORT", "5001")
        assert load_config(str(tmp_path / "absent.yaml")).server.port == 5001

    def test_invalid_port_override(
        self, tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setenv("SEARCHBLOCKER_PORT", "eighty")
        with pytest.raises(SystemExit):
            load_config(str(tmp_path / "absent.yaml"))
        assert "SEARCHBLOCKER_PORT" in capsys.readouterr().err
