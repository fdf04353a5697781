"""Tests for locale_sync.config_loader -- hierarchical config loading."""

import textwrap

import pytest

from locale_sync.config_loader import (
    _interpolate_recursive,
    discover_config_files,
    interpolate_env_vars,
    load_hierarchical_config,
)

# -------------------------------------------------------------------------
# Env var interpolation
# -------------------------------------------------------------------------


class TestInterpolateEnvVars:
    """Tests for ${VAR} and ${VAR:-default} substitution."""

    def test_replaces_set_var(self, monkeypatch):
        monkeypatch.setenv("MY_KEY", "secret")
        assert interpolate_env_vars("${MY_KEY}") == "secret"

    def test_unset_var_replaced_with_empty(self, monkeypatch):
        monkeypatch.delenv("UNSET_VAR_XYZ", raising=False)
        assert interpolate_env_vars("${UNSET_VAR_XYZ}") == ""

    def test_default_used_when_unset(self, monkeypatch):
        monkeypatch.delenv("UNSET_VAR_XYZ", raising=False)
        assert interpolate_env_vars("${UNSET_VAR_XYZ:-latest}") == "latest"

    def test_empty_env_var_uses_default(self, monkeypatch):
        monkeypatch.setenv("EMPTY_VAR", "")
        assert interpolate_env_vars("${EMPTY_VAR:-fallback}") == "fallback"

    def test_literal_dollar_brace_no_closing(self):
        assert interpolate_env_vars("${NO_CLOSE") == "${NO_CLOSE"

    def test_nested_structures(self, monkeypatch):
        monkeypatch.setenv("PROJECT", "proj")
        data = {"project": {"id": "${PROJECT}", "delay": 5}, "tags": ["${PROJECT}", 1]}
        assert _interpolate_recursive(data) == {
            "project": {"id": "proj", "delay": 5},
            "tags": ["proj", 1],
        }


# -------------------------------------------------------------------------
# Discovery and merge
# -------------------------------------------------------------------------


@pytest.fixture
def isolated_cwd(tmp_path, monkeypatch):
    """Run with an empty CWD and HOME so no real config files are found."""
    home = tmp_path / "home"
    home.mkdir()
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(work)
    return work


class TestDiscoverConfigFiles:
    def test_none_found(self, isolated_cwd):
        assert discover_config_files() == []

    def test_project_config(self, isolated_cwd):
        config = isolated_cwd / ".locale_sync" / "config.yml"
        config.parent.mkdir()
        config.write_text("project:\n  id: proj\n")

        assert discover_config_files() == [config]

    def test_env_path_first(self, isolated_cwd, tmp_path, monkeypatch):
        explicit = tmp_path / "explicit.yml"
        explicit.write_text("{}\n")
        project = isolated_cwd / ".locale_sync" / "config.yaml"
        project.parent.mkdir()
        project.write_text("{}\n")
        monkeypatch.setenv("LOCALE_SYNC_CONFIG", str(explicit))

        assert discover_config_files() == [explicit.resolve(), project]


class TestLoadHierarchicalConfig:
    def test_zero_config(self, isolated_cwd):
        assert load_hierarchical_config() == {}

    def test_project_wins_per_section(self, isolated_cwd, tmp_path, monkeypatch):
        global_config = tmp_path / "home" / ".config" / "locale_sync" / "config.yml"
        global_config.parent.mkdir(parents=True)
        global_config.write_text(
            textwrap.dedent(
                """\
                project:
                  id: global-proj
                logging:
                  level: DEBUG
                """
            )
        )
        project = isolated_cwd / ".locale_sync" / "config.yml"
        project.parent.mkdir()
        project.write_text(
            textwrap.dedent(
                """\
                project:
                  id: ${PROJECT_ID:-local-proj}
                """
            )
        )
        monkeypatch.delenv("PROJECT_ID", raising=False)

        merged = load_hierarchical_config()

        assert merged == {
            "project": {"id": "local-proj"},
            "logging": {"level": "DEBUG"},
        }

    def test_non_dict_root_skipped(self, isolated_cwd, caplog):
        config = isolated_cwd / ".locale_sync" / "config.yml"
        config.parent.mkdir()
        config.write_text("- just\n- a list\n")

        assert load_hierarchical_config() == {}
        assert "non-dict root" in caplog.text

    def test_invalid_yaml_raises(self, isolated_cwd):
        config = isolated_cwd / ".locale_sync" / "config.yml"
        config.parent.mkdir()
        config.write_text("project: [unclosed\n")

        with pytest.raises(Exception):
            load_hierarchical_config()
