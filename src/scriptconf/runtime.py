"""Embedded Lua evaluation context used by ConfigStore."""

from __future__ import annotations

import codecs
import itertools
import logging
import os
from pathlib import Path
from typing import Any

from lupa import LuaError, LuaRuntime, lua_type

__all__ = ["ScriptContext", "SANDBOX_HIDDEN_GLOBALS", "is_table"]

logger = logging.getLogger(__name__)

# Globals removed from a sandboxed context so config scripts cannot touch the
# filesystem, the process, or load further code.
SANDBOX_HIDDEN_GLOBALS: tuple[str, ...] = (
    "io",
    "os",
    "package",
    "require",
    "debug",
    "dofile",
    "loadfile",
    "load",
    "loadstring",
    "python",
)

_generations = itertools.count(1)


def is_table(value: Any) -> bool:
    """Return True if ``value`` is a live Lua table proxy."""
    return lua_type(value) == "table"


class ScriptContext:
    """A single Lua interpreter session.

    Lua strings are byte strings. The runtime hands them over undecoded and
    this class decodes every string value and key with ``encoding``,
    replacing undecodable bytes, so lookups never fail on string content.

    Each context gets a process-unique ``generation`` so that values handed
    out by one context can be told apart from values of a later one.

    Creating the context raises ``LuaError`` (or ``MemoryError``) when the
    runtime cannot be constructed, and ``LookupError`` for an unknown
    encoding; callers own that failure.
    """

    def __init__(self, sandboxed: bool = True, encoding: str = "utf-8") -> None:
        self._encoding = codecs.lookup(encoding).name
        self._runtime: LuaRuntime | None = LuaRuntime(
            encoding=None,
            register_eval=not sandboxed,
            register_builtins=not sandboxed,
        )
        self._sandboxed = sandboxed
        self._generation: int = next(_generations)

        lua_globals = self._runtime.globals()
        # Host-side loader, kept even when scripts cannot see it.
        self._dofile: Any = lua_globals[b"dofile"]
        self._rawequal: Any = lua_globals[b"rawequal"]
        # Called through lupa, so metamethod errors surface as LuaError.
        self._index: Any = self._runtime.eval(b"function(t, k) return t[k] end")
        if sandboxed:
            for name in SANDBOX_HIDDEN_GLOBALS:
                lua_globals[name.encode("ascii")] = None

        logger.debug(f"Created Lua context generation {self._generation} (sandboxed={sandboxed})")

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def sandboxed(self) -> bool:
        return self._sandboxed

    @property
    def encoding(self) -> str:
        return self._encoding

    @property
    def closed(self) -> bool:
        return self._runtime is None

    def evaluate_file(self, path: str | Path) -> None:
        """Parse and run a Lua file in this context.

        Raises:
            LuaError: On a syntax error, a runtime error raised by the script,
                or when the file cannot be opened.
            RuntimeError: If the context has been closed.
        """
        if self._runtime is None:
            raise RuntimeError("Lua context is closed")
        self._dofile(os.fsencode(path))

    def get_global(self, name: str) -> Any:
        """Return the global bound to ``name``, or None when it is unset."""
        if self._runtime is None:
            return None
        return self.index(self._runtime.globals(), name)

    def index(self, value: Any, key: str) -> Any:
        """Index a table-like value by field name.

        Returns None when the field is unset, when ``value`` is not a table,
        or when a metamethod fails while looking the field up.
        """
        if self._runtime is None or not is_table(value):
            return None
        try:
            raw_key = key.encode(self._encoding)
        except UnicodeEncodeError:
            return None
        try:
            return self.decode(self._index(value, raw_key))
        except LuaError as e:
            logger.debug(f"Indexing field '{key}' raised a Lua error: {e}")
            return None

    def items(self, value: Any) -> list[tuple[Any, Any]]:
        """Return the raw (key, value) pairs of a table, strings decoded."""
        if self._runtime is None or not is_table(value):
            return []
        return [(self.decode(k), self.decode(v)) for k, v in value.items()]

    def decode(self, value: Any) -> Any:
        """Decode a Lua byte string; other values pass through unchanged."""
        if isinstance(value, bytes):
            return value.decode(self._encoding, errors="replace")
        return value

    def same_table(self, a: Any, b: Any) -> bool:
        """Return True if both values are the same Lua table."""
        if self._runtime is None or not (is_table(a) and is_table(b)):
            return False
        return bool(self._rawequal(a, b))

    def close(self) -> None:
        """Drop the interpreter state. Safe to call more than once."""
        if self._runtime is not None:
            logger.debug(f"Closing Lua context generation {self._generation}")
        self._runtime = None
        self._dofile = None
        self._rawequal = None
        self._index = None
