# File: src/mstair/litdump/dumper/zero_cache.py
"""
Zero-value literals per type, shared by every dump in the process.

Function values render a body that returns the zero value of their declared
return type. The literal for builtin primitives comes from a fixed table; for
any other type the zero value is constructed with `zero_value_of()` and dumped
through the engine once, then memoized.
"""

from __future__ import annotations

import collections.abc as abc
import ctypes
import dataclasses
import threading
import types
import typing
from collections.abc import Callable, Hashable
from enum import Enum
from typing import Annotated, Any, Final, Literal, Union

from mstair.litdump.base.constants import NONE_LITERAL
from mstair.litdump.base.types import is_hashable
from mstair.litdump.dumper.kind import CTYPES_POINTER, CTYPES_SIMPLE
from mstair.litdump.xlogging.logger_factory import create_logger


__all__ = [
    "ZERO_VALUE_CACHE",
    "ZeroValueCache",
    "zero_value_of",
]

_LOG = create_logger(__name__)


PRESEEDED_LITERALS: Final[dict[Any, str]] = {
    bool: "False",
    int: "0",
    float: "0.000000",
    complex: "complex(0.000000, 0.000000)",
    str: '""',
    bytes: "b''",
    types.NoneType: "None",
    None: "None",
}

_ABSTRACT_FACTORIES: Final[dict[Any, type]] = {
    abc.Iterable: list,
    abc.Collection: list,
    abc.Sequence: list,
    abc.MutableSequence: list,
    abc.Mapping: dict,
    abc.MutableMapping: dict,
    abc.Set: set,
    abc.MutableSet: set,
}


def zero_value_of(tp: Any, _building: frozenset[int] = frozenset()) -> Any:
    """
    Construct the zero value of a type or type annotation.

    :param tp: A class, a generic alias, or a typing construct.
    :return Any: The zero value, or None when no zero can be built.
    """
    if tp is None or tp is types.NoneType or tp is Any or isinstance(tp, (str, typing.ForwardRef)):
        return None
    if id(tp) in _building:
        return None
    origin = typing.get_origin(tp)
    args = typing.get_args(tp)
    if origin is Annotated:
        return zero_value_of(args[0], _building)
    if origin is Literal:
        return args[0] if args else None
    if origin is Union or origin is types.UnionType:
        return None
    if origin is tuple:
        if not args or args[-1] is Ellipsis or args == ((),):
            return ()
        return tuple(zero_value_of(arg, _building) for arg in args)
    if origin is not None:
        tp = origin
    if is_hashable(tp) and tp in _ABSTRACT_FACTORIES:
        return _ABSTRACT_FACTORIES[tp]()
    if not isinstance(tp, type):
        return None

    building = _building | {id(tp)}
    if issubclass(tp, Enum):
        return next(iter(tp), None)
    if dataclasses.is_dataclass(tp):
        return _zero_dataclass(tp, building)
    if issubclass(tp, tuple) and hasattr(tp, "_fields"):
        return _zero_namedtuple(tp, building)
    if not _is_inert(tp):
        _LOG.debug("not constructing %s for a zero value", tp)
        return None
    try:
        return tp()
    except Exception as exc:
        _LOG.debug("no zero value for %s: %s", tp, exc)
        return None


_INERT_MODULES: Final[frozenset[str]] = frozenset({"builtins", "collections", "array", "decimal", "fractions"})


def _is_inert(tp: type) -> bool:
    """Whether calling `tp()` only allocates (no I/O, no user code)."""
    if issubclass(tp, (CTYPES_SIMPLE, CTYPES_POINTER, ctypes.Structure, ctypes.Union, ctypes.Array)):
        return True
    return getattr(tp, "__module__", None) in _INERT_MODULES


def _type_hints(tp: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(tp, include_extras=True)
    except Exception:
        return dict(getattr(tp, "__annotations__", {}))


def _zero_dataclass(tp: type, building: frozenset[int]) -> Any:
    hints = _type_hints(tp)
    kwargs: dict[str, Any] = {}
    for f in dataclasses.fields(tp):
        if not f.init:
            continue
        if f.default is not dataclasses.MISSING:
            kwargs[f.name] = f.default
        elif f.default_factory is not dataclasses.MISSING:
            kwargs[f.name] = f.default_factory()
        else:
            kwargs[f.name] = zero_value_of(hints.get(f.name, f.type), building)
    try:
        return tp(**kwargs)
    except Exception as exc:
        _LOG.debug("no zero value for dataclass %s: %s", tp.__qualname__, exc)
        return None


def _zero_namedtuple(tp: type, building: frozenset[int]) -> Any:
    hints = _type_hints(tp)
    defaults: dict[str, Any] = getattr(tp, "_field_defaults", {})
    values = [
        defaults[name] if name in defaults else zero_value_of(hints.get(name), building)
        for name in tp._fields  # pyright: ignore[reportAttributeAccessIssue]
    ]
    return tp(*values)


class ZeroValueCache:
    """
    Lock-guarded memo of zero literals.

    Entries are keyed by type plus the layout options that shape the literal.
    Two dumps racing on one missing entry both render it; the texts are equal
    and the last insert wins. A literal requested again while it is still
    being rendered on the same thread (a zero value holding a function that
    returns its own type) is `None`.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._literals: dict[Hashable, str] = {}
        self._tls = threading.local()

    def _rendering(self) -> set[Hashable]:
        try:
            return self._tls.keys
        except AttributeError:
            self._tls.keys = set()
            return self._tls.keys

    def _render_once(self, marker: Hashable, tp: Any, render: Callable[[Any], str]) -> str | None:
        """Render the zero value of `tp`, or return None when `marker` is already rendering."""
        rendering = self._rendering()
        if marker in rendering:
            _LOG.debug("zero literal of %r requested while rendering it", tp)
            return None
        rendering.add(marker)
        try:
            return render(zero_value_of(tp))
        finally:
            rendering.discard(marker)

    def __len__(self) -> int:
        with self._lock:
            return len(self._literals)

    def literal_of(
        self,
        tp: Any,
        render: Callable[[Any], str],
        *,
        layout: tuple[Hashable, ...] = (),
    ) -> str:
        """
        Return the zero literal of `tp`.

        :param tp: A class or type annotation.
        :param render: Dumps a zero value to text with the caller's layout options.
        :param layout: Option values that change the rendered text; part of the key.
        :return str: The literal text, rendered at depth 0.
        """
        if is_hashable(tp) and tp in PRESEEDED_LITERALS:
            return PRESEEDED_LITERALS[tp]
        key = (tp, *layout)
        if not is_hashable(key):
            text = self._render_once((id(tp),), tp, render)
            return NONE_LITERAL if text is None else text
        with self._lock:
            cached = self._literals.get(key)
        if cached is not None:
            return cached
        _LOG.debug("zero literal cache miss: %r", tp)
        text = self._render_once(key, tp, render)
        if text is None:
            return NONE_LITERAL
        with self._lock:
            self._literals[key] = text
        return text

    def clear(self) -> None:
        with self._lock:
            self._literals.clear()


ZERO_VALUE_CACHE: Final[ZeroValueCache] = ZeroValueCache()


# End of file: src/mstair/litdump/dumper/zero_cache.py
