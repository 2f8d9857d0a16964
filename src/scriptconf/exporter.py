"""ConfigExporter -- renders a loaded config tree as plain data, YAML or JSON."""

from __future__ import annotations

import json
from enum import Enum
from typing import TYPE_CHECKING, Any

import yaml

from scriptconf.errors import ConfigNotLoadedError
from scriptconf.values import Table

if TYPE_CHECKING:
    from scriptconf.store import ConfigStore

__all__ = ["ConfigExporter", "ExportFormat"]


class ExportFormat(str, Enum):
    """Output format for ConfigExporter."""

    DICT = "dict"
    YAML = "yaml"
    JSON = "json"


class ConfigExporter:
    """Stateless transformer from a store's root table to an export format."""

    def export(self, store: ConfigStore, fmt: ExportFormat = ExportFormat.DICT, path: str | None = None) -> Any:
        """Export the root table, or the table at ``path`` if given."""
        data = self.export_dict(store, path)
        if fmt != ExportFormat.DICT:
            data = _stringify_keys(data)
        if fmt == ExportFormat.YAML:
            return yaml.safe_dump(data, default_flow_style=False, sort_keys=True)
        if fmt == ExportFormat.JSON:
            return json.dumps(data, indent=2, sort_keys=True)
        return data

    def export_dict(self, store: ConfigStore, path: str | None = None) -> dict[Any, Any] | list[Any]:
        """Copy the root table (or a sub-table) into plain Python containers.

        Raises:
            ConfigNotLoadedError: If the store has no loaded config, or
                ``path`` does not name a table.
        """
        table = store.root() if path is None else store.resolve(path)
        if not isinstance(table, Table):
            if path is None:
                raise ConfigNotLoadedError()
            raise ConfigNotLoadedError(f"Config path '{path}' does not name a table")
        return table.to_python()

    def export_yaml(self, store: ConfigStore, path: str | None = None) -> str:
        return self.export(store, ExportFormat.YAML, path)

    def export_json(self, store: ConfigStore, path: str | None = None) -> str:
        return self.export(store, ExportFormat.JSON, path)


def _stringify_keys(data: Any) -> Any:
    # Lua tables may mix integer and string keys.
    if isinstance(data, dict):
        return {str(k): _stringify_keys(v) for k, v in data.items()}
    if isinstance(data, list):
        return [_stringify_keys(v) for v in data]
    return data
