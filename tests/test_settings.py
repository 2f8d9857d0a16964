"""Tests for StoreSettings and settings files."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest
from pydantic import ValidationError

from scriptconf.errors import SettingsError
from scriptconf.settings import DEFAULT_ROOT_TABLE, StoreSettings
from scriptconf.store import ConfigStore


class TestDefaults:
    def test_defaults(self) -> None:
        settings = StoreSettings()
        assert settings.root_table == DEFAULT_ROOT_TABLE == "Config"
        assert settings.base_dir == Path(".")
        assert settings.sandboxed is True
        assert settings.encoding == "utf-8"

    @pytest.mark.parametrize("root", ["", "A.B"])
    def test_invalid_root_table(self, root: str) -> None:
        with pytest.raises(ValidationError):
            StoreSettings(root_table=root)

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(ValidationError):
            StoreSettings(root="Config")

    def test_store_overrides(self, tmp_path: Path) -> None:
        store = ConfigStore(StoreSettings(root_table="Game"), base_dir=tmp_path)
        assert store.settings.root_table == "Game"
        assert store.settings.base_dir == tmp_path


class TestFromYaml:
    def test_top_level_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.yaml"
        path.write_text(
            textwrap.dedent(
                """
                root_table: Game
                base_dir: /etc/game
                sandboxed: false
                """
            )
        )
        settings = StoreSettings.from_yaml(path)
        assert settings.root_table == "Game"
        assert settings.base_dir == Path("/etc/game")
        assert settings.sandboxed is False

    def test_nested_section(self, tmp_path: Path) -> None:
        path = tmp_path / "app.yaml"
        path.write_text("scriptconf:\n  root_table: Settings\n")
        assert StoreSettings.from_yaml(path).root_table == "Settings"

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert StoreSettings.from_yaml(path) == StoreSettings()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(SettingsError, match="not found"):
            StoreSettings.from_yaml(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("root_table: [unclosed\n")
        with pytest.raises(SettingsError, match="Invalid YAML"):
            StoreSettings.from_yaml(path)

    def test_non_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(SettingsError, match="mapping"):
            StoreSettings.from_yaml(path)

    def test_invalid_values(self, tmp_path: Path) -> None:
        path = tmp_path / "values.yaml"
        path.write_text("root_table: ''\n")
        with pytest.raises(SettingsError) as exc_info:
            StoreSettings.from_yaml(path)
        assert isinstance(exc_info.value.cause, ValidationError)


class TestEncoding:
    def test_unknown_encoding_rejected(self) -> None:
        with pytest.raises(ValidationError, match="unknown encoding"):
            StoreSettings(encoding="no-such-codec")

    def test_alternate_encoding_accepted(self) -> None:
        assert StoreSettings(encoding="latin-1").encoding == "latin-1"

    def test_store_override_with_unknown_encoding(self, tmp_path: Path) -> None:
        with pytest.raises(SettingsError, match="unknown encoding"):
            ConfigStore(base_dir=tmp_path, encoding="no-such-codec")


class TestStoreOverrides:
    def test_unknown_override_raises_settings_error(self) -> None:
        with pytest.raises(SettingsError) as exc_info:
            ConfigStore(root="Config")
        assert isinstance(exc_info.value.cause, ValidationError)

    def test_override_values_are_validated(self, tmp_path: Path) -> None:
        store = ConfigStore(base_dir=str(tmp_path))
        assert store.settings.base_dir == tmp_path
