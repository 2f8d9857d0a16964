"""Error hierarchy for the scriptconf library."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

__all__ = [
    "ScriptConfError",
    "RuntimeInitError",
    "EvaluationError",
    "MissingRootTableError",
    "ConfigNotLoadedError",
    "StaleReferenceError",
    "ConfigValueError",
    "SettingsError",
    "ErrorCodes",
]


class ScriptConfError(Exception):
    """Base error for all scriptconf errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details: dict[str, Any] = details or {}
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc).isoformat()

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class RuntimeInitError(ScriptConfError):
    """Raised when the embedded Lua runtime cannot be created."""

    def __init__(self, lua_error: str, **kwargs: Any) -> None:
        super().__init__(
            code="RUNTIME_INIT_FAILED",
            message=f"Could not create the Lua runtime: {lua_error}",
            details={"lua_error": lua_error},
            **kwargs,
        )


class EvaluationError(ScriptConfError):
    """Raised when a config script fails to parse or execute."""

    def __init__(self, filename: str, lua_error: str, **kwargs: Any) -> None:
        super().__init__(
            code="EVALUATION_FAILED",
            message=f"Failed to evaluate config file {filename}: {lua_error}",
            details={"filename": filename, "lua_error": lua_error},
            **kwargs,
        )

    @property
    def filename(self) -> str:
        """The config file that failed to evaluate."""
        return self.details["filename"]

    @property
    def lua_error(self) -> str:
        """The diagnostic reported by the Lua runtime."""
        return self.details["lua_error"]


class MissingRootTableError(ScriptConfError):
    """Raised when a script evaluates but defines no root table."""

    def __init__(self, filename: str, root_table: str = "Config", **kwargs: Any) -> None:
        super().__init__(
            code="MISSING_ROOT_TABLE",
            message=f'Config file {filename} does not define a "{root_table}" table',
            details={"filename": filename, "root_table": root_table},
            **kwargs,
        )

    @property
    def filename(self) -> str:
        """The config file missing its root table."""
        return self.details["filename"]

    @property
    def root_table(self) -> str:
        """The name of the expected root table."""
        return self.details["root_table"]


class ConfigNotLoadedError(ScriptConfError):
    """Raised when an operation needs a loaded config but none is present."""

    def __init__(self, message: str = "No config is loaded", **kwargs: Any) -> None:
        super().__init__(code="CONFIG_NOT_LOADED", message=message, **kwargs)


class StaleReferenceError(ScriptConfError):
    """Raised when a table reference outlives the context that produced it."""

    def __init__(self, generation: int, **kwargs: Any) -> None:
        super().__init__(
            code="STALE_REFERENCE",
            message=f"Table reference from context generation {generation} is no longer valid",
            details={"generation": generation},
            **kwargs,
        )


class ConfigValueError(ScriptConfError):
    """Raised when a config value cannot be converted to the requested shape."""

    def __init__(self, message: str, path: str | None = None, **kwargs: Any) -> None:
        super().__init__(
            code="CONFIG_VALUE_INVALID",
            message=message,
            details={"path": path},
            **kwargs,
        )


class SettingsError(ScriptConfError):
    """Raised when store settings are invalid."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(code="SETTINGS_INVALID", message=message, **kwargs)


class ErrorCodes:
    """All scriptconf error codes as constants.

    Example:
        if store.last_error.code == ErrorCodes.MISSING_ROOT_TABLE:
            use_defaults()
    """

    RUNTIME_INIT_FAILED = "RUNTIME_INIT_FAILED"
    EVALUATION_FAILED = "EVALUATION_FAILED"
    MISSING_ROOT_TABLE = "MISSING_ROOT_TABLE"
    CONFIG_NOT_LOADED = "CONFIG_NOT_LOADED"
    STALE_REFERENCE = "STALE_REFERENCE"
    CONFIG_VALUE_INVALID = "CONFIG_VALUE_INVALID"
    SETTINGS_INVALID = "SETTINGS_INVALID"
