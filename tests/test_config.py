"""Unit tests for the editor settings module."""

# pylint: disable=missing-class-docstring,missing-function-docstring

import pytest
from pydantic import ValidationError

from mdsync.config import DEFAULT_PLACEHOLDER, ROOT, EditorSettings

ENV_VARS = ("MDSYNC_PLACEHOLDER", "MDSYNC_TABLE_ROWS", "MDSYNC_TABLE_COLUMNS", "MDSYNC_STRICT_PLACEHOLDERS")


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestEditorSettings:

    def test_defaults(self):
        settings = EditorSettings()
        assert settings.placeholder == DEFAULT_PLACEHOLDER == "<!--TABLE_PLACEHOLDER-->"
        assert (settings.table_rows, settings.table_columns) == (3, 3)
        assert settings.strict_placeholders is True

    def test_zero_rows_rejected(self):
        with pytest.raises(ValidationError):
            EditorSettings(table_rows=0)

    def test_empty_placeholder_rejected(self):
        with pytest.raises(ValidationError):
            EditorSettings(placeholder="")

    def test_root_is_project_root(self):
        """ROOT should point to the project root (contains pyproject.toml)."""
        assert (ROOT / "pyproject.toml").exists()


class TestFromEnv:

    def test_unset_env_gives_defaults(self, clean_env):
        assert EditorSettings.from_env() == EditorSettings()

    def test_values_read(self, clean_env):
        clean_env.setenv("MDSYNC_PLACEHOLDER", "<!--T-->")
        clean_env.setenv("MDSYNC_TABLE_ROWS", "5")
        clean_env.setenv("MDSYNC_TABLE_COLUMNS", "2")
        settings = EditorSettings.from_env()
        assert settings.placeholder == "<!--T-->"
        assert (settings.table_rows, settings.table_columns) == (5, 2)

    @pytest.mark.parametrize("value,expected", [("no", False), ("0", False), ("TRUE", True), (" on ", True)])
    def test_strict_flag(self, clean_env, value, expected):
        clean_env.setenv("MDSYNC_STRICT_PLACEHOLDERS", value)
        assert EditorSettings.from_env().strict_placeholders is expected

    def test_invalid_size_rejected(self, clean_env):
        clean_env.setenv("MDSYNC_TABLE_COLUMNS", "0")
        with pytest.raises(ValidationError):
            EditorSettings.from_env()
