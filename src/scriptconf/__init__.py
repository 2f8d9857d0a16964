"""scriptconf - Lua-scripted configuration with dotted-path lookups."""

from __future__ import annotations

# Core
from scriptconf.store import ConfigStore
from scriptconf.runtime import ScriptContext

# Values
from scriptconf.values import ABSENT, Absent, Resolved, Scalar, Table

# Settings
from scriptconf.settings import DEFAULT_ROOT_TABLE, StoreSettings

# Export
from scriptconf.exporter import ConfigExporter, ExportFormat

# Errors
from scriptconf.errors import (
    ConfigNotLoadedError,
    ConfigValueError,
    ErrorCodes,
    EvaluationError,
    MissingRootTableError,
    RuntimeInitError,
    ScriptConfError,
    SettingsError,
    StaleReferenceError,
)

__version__ = "0.1.0"

__all__ = [
    # Core
    "ConfigStore",
    "ScriptContext",
    # Values
    "ABSENT",
    "Absent",
    "Scalar",
    "Table",
    "Resolved",
    # Settings
    "StoreSettings",
    "DEFAULT_ROOT_TABLE",
    # Export
    "ConfigExporter",
    "ExportFormat",
    # Errors
    "ErrorCodes",
    "ScriptConfError",
    "RuntimeInitError",
    "EvaluationError",
    "MissingRootTableError",
    "ConfigNotLoadedError",
    "StaleReferenceError",
    "ConfigValueError",
    "SettingsError",
]
