"""ConfigStore -- loads a Lua config script and answers dotted-path lookups."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, TypeVar

from lupa import LuaError
from pydantic import BaseModel, ValidationError

from scriptconf.errors import (
    ConfigNotLoadedError,
    ConfigValueError,
    EvaluationError,
    MissingRootTableError,
    RuntimeInitError,
    ScriptConfError,
    SettingsError,
)
from scriptconf.runtime import ScriptContext, is_table
from scriptconf.settings import StoreSettings
from scriptconf.values import ABSENT, Resolved, Scalar, Table, walk

__all__ = ["ConfigStore"]

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _load_error(filename: str) -> str:
    return f'Failed to load a config from "{filename}" file!'


class ConfigStore:
    """Owns one Lua context and resolves dotted paths against its root table.

    Lifecycle: construct, ``load`` (which initializes), ``resolve`` as often
    as needed, then ``cleanup``. Every failed ``initialize`` or ``load``
    leaves the store uninitialized. Values returned by ``resolve`` are tied
    to the context that produced them: the next ``initialize``, ``load`` or
    ``cleanup`` invalidates any :class:`~scriptconf.values.Table` handed out
    before it.

    Not thread-safe. Use one store per thread or serialize access.
    """

    def __init__(self, settings: StoreSettings | None = None, **overrides: Any) -> None:
        base = settings or StoreSettings()
        if overrides:
            try:
                base = StoreSettings.model_validate({**base.model_dump(), **overrides})
            except ValidationError as e:
                raise SettingsError(f"Invalid store settings: {e}", cause=e) from e
        self._settings: StoreSettings = base
        self._context: ScriptContext | None = None
        self._initialized: bool = False
        self._loaded_file: Path | None = None
        self._last_error: ScriptConfError | None = None

    def __del__(self) -> None:
        if getattr(self, "_initialized", False):
            self.cleanup()

    def __enter__(self) -> ConfigStore:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.cleanup()

    @property
    def settings(self) -> StoreSettings:
        return self._settings

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def loaded_file(self) -> Path | None:
        """Path of the currently loaded document, or None."""
        return self._loaded_file

    @property
    def last_error(self) -> ScriptConfError | None:
        """The error behind the most recent failed ``initialize`` or ``load``."""
        return self._last_error

    @property
    def generation(self) -> int | None:
        """Generation of the live context, or None when uninitialized."""
        return self._context.generation if self._context is not None else None

    # -- Lifecycle --

    def initialize(self) -> bool:
        """Create a fresh Lua context, discarding any existing one.

        Returns:
            True on success, False if the runtime could not be created.
        """
        if self._initialized or self._context is not None:
            self.cleanup()

        try:
            self._context = ScriptContext(
                sandboxed=self._settings.sandboxed,
                encoding=self._settings.encoding,
            )
        except (LuaError, MemoryError, LookupError) as e:
            logger.error("Failed to initialize a config instance! An exception occurred.")
            logger.error(f"Lua error: {e}")
            self._last_error = RuntimeInitError(lua_error=str(e), cause=e)
            self.cleanup()
            return False

        self._initialized = True
        self._last_error = None
        return True

    def cleanup(self) -> None:
        """Discard the context and reset to uninitialized. Idempotent."""
        if self._context is not None:
            self._context.close()
        self._context = None
        self._loaded_file = None
        self._initialized = False

    def close(self) -> None:
        self.cleanup()

    # -- Loading --

    def load(self, filename: str | Path, base_dir: str | Path | None = None) -> bool:
        """Evaluate a config script and check that it defines the root table.

        A root binding that exists but is not a table (``Config = 5``) is
        rejected like a missing one, since no path could be walked from it.

        Args:
            filename: Script path, relative to ``base_dir``.
            base_dir: Directory to resolve ``filename`` against. Defaults to
                ``settings.base_dir``.

        Returns:
            True if the script ran and defined the root table. On False the
            store is uninitialized and ``last_error`` holds the cause.
        """
        name = str(filename)
        if not self.initialize():
            logger.error(f"{_load_error(name)} Couldn't initialize the instance.")
            return False

        context = self._context
        success = False
        try:
            success = context is not None and self._evaluate(context, name, base_dir)
        finally:
            if not success:
                self.cleanup()
        if not success:
            return False

        logger.info(f'Loaded a config from "{name}" file.')
        return True

    def load_or_raise(self, filename: str | Path, base_dir: str | Path | None = None) -> None:
        """Like :meth:`load`, but raise the recorded error on failure."""
        if not self.load(filename, base_dir):
            raise self._last_error or ConfigNotLoadedError(f"Could not load config file {filename}")

    def _evaluate(self, context: ScriptContext, filename: str, base_dir: str | Path | None) -> bool:
        root = Path(base_dir) if base_dir is not None else self._settings.base_dir
        path = root / filename

        try:
            context.evaluate_file(path)
        except (LuaError, UnicodeDecodeError) as e:
            logger.error(f"{_load_error(filename)} An exception occurred.")
            logger.error(f"Lua error: {e}")
            self._last_error = EvaluationError(filename=filename, lua_error=str(e), cause=e)
            return False

        root_name = self._settings.root_table
        if not is_table(context.get_global(root_name)):
            logger.error(f'{_load_error(filename)} Missing "{root_name}" table.')
            self._last_error = MissingRootTableError(filename=filename, root_table=root_name)
            return False

        self._loaded_file = path
        return True

    # -- Resolution --

    def root(self) -> Resolved:
        """The root table itself, or ``ABSENT`` when nothing is loaded."""
        if not self._initialized or self._context is None:
            return ABSENT
        table = self._context.get_global(self._settings.root_table)
        return Table(table, self._context) if is_table(table) else ABSENT

    def resolve(self, name: str) -> Resolved:
        """Resolve a dotted path such as ``"Graphics.Window.Width"``.

        Returns ``ABSENT`` when the store is uninitialized, the path is empty
        or has an empty segment, or any field along the path is missing.
        Never raises.
        """
        if not self._initialized or self._context is None:
            return ABSENT
        if not name:
            return ABSENT

        token = self._context.get_global(self._settings.root_table)
        return walk(self._context, token, name)

    def has(self, name: str) -> bool:
        return self.resolve(name) is not ABSENT

    # -- Typed lookups --

    def get(self, name: str, default: Any = None) -> Any:
        """Get the plain Python value at a dotted path.

        Tables are copied into dicts or lists.
        """
        value = self.resolve(name)
        if value is ABSENT:
            return default
        return value.to_python()

    def get_int(self, name: str, default: int | None = None) -> int | None:
        return self._get_scalar(name, (int,), default)

    def get_float(self, name: str, default: float | None = None) -> float | None:
        value = self._get_scalar(name, (int, float), None)
        return float(value) if value is not None else default

    def get_str(self, name: str, default: str | None = None) -> str | None:
        return self._get_scalar(name, (str,), default)

    def get_bool(self, name: str, default: bool | None = None) -> bool | None:
        return self._get_scalar(name, (bool,), default)

    def _get_scalar(self, name: str, types: tuple[type, ...], default: Any) -> Any:
        value = self.resolve(name)
        if not isinstance(value, Scalar):
            return default
        payload = value.value
        # bool is an int subclass, but Lua booleans are never numbers.
        if isinstance(payload, bool) and bool not in types:
            return default
        if not isinstance(payload, types):
            return default
        return payload

    def get_model(self, name: str, model: type[ModelT]) -> ModelT:
        """Validate the table at ``name`` into a pydantic model.

        Raises:
            ConfigValueError: If the path is absent, is not a table, or the
                table does not validate against ``model``.
        """
        value = self.resolve(name)
        if not isinstance(value, Table):
            raise ConfigValueError(f"Config path '{name}' is not a table", path=name)
        try:
            return model.model_validate(value.to_python())
        except ValidationError as e:
            raise ConfigValueError(
                f"Config table '{name}' does not match {model.__name__}: {e}",
                path=name,
                cause=e,
            ) from e
