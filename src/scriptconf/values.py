"""Resolved config values.

Every value handed out by a ConfigStore is one of three shapes:

* ``ABSENT`` -- the field, binding, or path does not exist.
* :class:`Scalar` -- a string, number, boolean (or other non-table Lua value).
* :class:`Table` -- a view onto a Lua table inside a live context.

Raw Lua values are only ever converted in :func:`wrap`. A ``Table`` stays
bound to the context that produced it and raises
:class:`~scriptconf.errors.StaleReferenceError` once that context has been
replaced or cleaned up. Scalars are plain Python copies and never go stale.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Union

from lupa import lua_type

from scriptconf.errors import ConfigValueError, StaleReferenceError
from scriptconf.runtime import is_table

if TYPE_CHECKING:
    from scriptconf.runtime import ScriptContext

__all__ = ["ABSENT", "Absent", "Scalar", "Table", "Resolved", "wrap", "walk"]


class Absent:
    """Marker for a value that does not exist. Use the ``ABSENT`` singleton."""

    _instance: Absent | None = None

    def __new__(cls) -> Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"

    def to_python(self) -> None:
        return None


ABSENT = Absent()


@dataclass(frozen=True)
class Scalar:
    """A non-table value copied out of the Lua context."""

    value: Any

    @property
    def kind(self) -> str:
        """Lua type name of the value: string, integer, number, boolean, ..."""
        if isinstance(self.value, bool):
            return "boolean"
        if isinstance(self.value, int):
            return "integer"
        if isinstance(self.value, float):
            return "number"
        if isinstance(self.value, (str, bytes)):
            return "string"
        return lua_type(self.value) or type(self.value).__name__

    def to_python(self) -> Any:
        return self.value


class Table:
    """Generation-checked view onto a Lua table."""

    __slots__ = ("_handle", "_context", "_generation")

    def __init__(self, handle: Any, context: ScriptContext) -> None:
        self._handle = handle
        self._context = context
        self._generation = context.generation

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_live(self) -> bool:
        """True while the producing context is still open."""
        return not self._context.closed

    def _live_handle(self) -> Any:
        if self._context.closed:
            raise StaleReferenceError(generation=self._generation)
        return self._handle

    def get(self, key: str) -> Resolved:
        """Return the field ``key`` of this table, or ``ABSENT``."""
        return wrap(self._context.index(self._live_handle(), key), self._context)

    def __getitem__(self, key: str) -> Resolved:
        return self.get(key)

    def resolve(self, name: str) -> Resolved:
        """Resolve a dotted path relative to this table."""
        return walk(self._context, self._live_handle(), name)

    def keys(self) -> list[Any]:
        return [k for k, _ in self._context.items(self._live_handle())]

    def items(self) -> list[tuple[Any, Resolved]]:
        return [(k, wrap(v, self._context)) for k, v in self._context.items(self._live_handle())]

    def __iter__(self) -> Iterator[Any]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self.keys())

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        return self.get(key) is not ABSENT

    def to_python(self) -> dict[Any, Any] | list[Any]:
        """Recursively copy this table into plain Python containers.

        Tables whose keys are exactly ``1..n`` become lists, every other
        table becomes a dict. Functions and other non-data values become
        their ``repr``.

        Raises:
            ConfigValueError: If the table contains a reference cycle.
            StaleReferenceError: If the producing context is gone.
        """
        return _to_python(self._context, self._live_handle(), [])

    def __repr__(self) -> str:
        state = "live" if self.is_live else "stale"
        return f"Table(generation={self._generation}, {state})"


Resolved = Union[Absent, Scalar, Table]


def wrap(raw: Any, context: ScriptContext) -> Resolved:
    """Convert a raw Lua value into a resolved value."""
    if raw is None:
        return ABSENT
    if is_table(raw):
        return Table(raw, context)
    return Scalar(raw)


def walk(context: ScriptContext, root: Any, name: str) -> Resolved:
    """Walk a dotted path from ``root`` through nested tables.

    Empty segments (leading, trailing or doubled dots) and any missing
    field along the way give ``ABSENT``. Never raises.
    """
    if not name:
        return ABSENT

    token = root
    begin = 0
    while True:
        end = name.find(".", begin)
        if end == -1:
            end = len(name)

        if begin == end:
            return ABSENT

        token = context.index(token, name[begin:end])
        if token is None:
            return ABSENT

        if end == len(name):
            break
        begin = end + 1

    return wrap(token, context)


def _to_python(context: ScriptContext, handle: Any, ancestors: list[Any]) -> dict[Any, Any] | list[Any]:
    if any(context.same_table(handle, a) for a in ancestors):
        raise ConfigValueError("Config table contains a reference cycle")
    ancestors.append(handle)
    converted = [(k, _convert(context, v, ancestors)) for k, v in context.items(handle)]
    ancestors.pop()

    keys = [k for k, _ in converted]
    if keys and all(type(k) is int for k in keys) and sorted(keys) == list(range(1, len(keys) + 1)):
        return [v for _, v in sorted(converted, key=lambda kv: kv[0])]

    return {(k if isinstance(k, (str, int, float, bool)) else repr(k)): v for k, v in converted}


def _convert(context: ScriptContext, value: Any, ancestors: list[Any]) -> Any:
    if is_table(value):
        return _to_python(context, value, ancestors)
    if isinstance(value, (str, int, float, bool, bytes)):
        return value
    return repr(value)
