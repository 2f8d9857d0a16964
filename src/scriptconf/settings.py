"""Settings that control how a ConfigStore creates its runtime and finds files."""

from __future__ import annotations

import codecs
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from scriptconf.errors import SettingsError

__all__ = ["StoreSettings", "DEFAULT_ROOT_TABLE"]

DEFAULT_ROOT_TABLE = "Config"


class StoreSettings(BaseModel):
    """Store-level settings.

    Attributes:
        root_table: Name of the global table every dotted path starts from.
        base_dir: Directory that relative config filenames are resolved against.
        sandboxed: Hide file, OS and module-loading libraries from scripts.
        encoding: Encoding used to decode Lua strings into Python ``str``.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    root_table: str = DEFAULT_ROOT_TABLE
    base_dir: Path = Field(default_factory=lambda: Path("."))
    sandboxed: bool = True
    encoding: str = "utf-8"

    @field_validator("root_table")
    @classmethod
    def _check_root_table(cls, v: str) -> str:
        if not v:
            raise ValueError("root_table must not be empty")
        if "." in v:
            raise ValueError(f"root_table must be a single name, got '{v}'")
        return v

    @field_validator("encoding")
    @classmethod
    def _check_encoding(cls, v: str) -> str:
        try:
            codecs.lookup(v)
        except LookupError as e:
            raise ValueError(f"unknown encoding '{v}'") from e
        return v

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> StoreSettings:
        """Load settings from a YAML file.

        The document may hold the settings at the top level or nested under a
        ``scriptconf`` key.

        Raises:
            SettingsError: If the file is missing, is not valid YAML, or holds
                invalid settings.
        """
        if not os.path.isfile(yaml_path):
            raise SettingsError(f"Settings file not found: {yaml_path}")

        with open(yaml_path) as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise SettingsError(f"Invalid YAML in {yaml_path}: {e}", cause=e) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise SettingsError(f"Settings file must be a mapping, got {type(data).__name__}")

        section: Any = data.get("scriptconf", data)
        if not isinstance(section, dict):
            raise SettingsError(f"'scriptconf' must be a mapping, got {type(section).__name__}")

        try:
            return cls.model_validate(section)
        except ValidationError as e:
            raise SettingsError(f"Invalid settings in {yaml_path}: {e}", cause=e) from e
