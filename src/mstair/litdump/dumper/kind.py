# File: src/mstair/litdump/dumper/kind.py
"""
Structural classification of runtime values.

Every value reaching the traversal engine is routed by its Kind. The Kind set is
closed; anything the classifier does not recognise is OTHER, which always has a
rendering, so classification never fails.
"""

from __future__ import annotations

import array
import asyncio
import collections
import ctypes
import dataclasses
import functools
import queue
import types
import weakref
from collections.abc import Mapping, Sequence, Set
from enum import Enum
from functools import total_ordering
from typing import Any, ClassVar, Final, Self


__all__ = [
    "CTYPES_SIMPLE",
    "CTYPES_POINTER",
    "Kind",
    "KindT",
    "has_custom_repr",
    "is_complex",
    "is_float",
    "is_int",
    "is_number",
    "is_primitive",
    "is_uint",
    "kind_of",
]


CTYPES_SIMPLE: Final[type] = ctypes._SimpleCData  # pyright: ignore[reportPrivateUsage]
CTYPES_POINTER: Final[type] = ctypes._Pointer  # pyright: ignore[reportPrivateUsage]
CTYPES_FUNCPTR: Final[type] = ctypes._CFuncPtr  # pyright: ignore[reportPrivateUsage]


@total_ordering
class KindT:
    """A structural category; instances are ordered by declaration."""

    _order: int
    """Unique identifier used for sorting and comparison."""

    name: str
    """Name of the kind, used for debugging and display."""

    NUM_INSTANCES: ClassVar[int] = 0

    def __init__(self, name: str) -> None:
        self.name = name
        KindT.NUM_INSTANCES += 1
        self._order = KindT.NUM_INSTANCES

    def __lt__(self, other: Self) -> bool:
        return self._order < other._order

    def __eq__(self, other: object) -> bool:
        return isinstance(other, KindT) and self._order == other._order

    def __hash__(self) -> int:
        return hash(self._order)

    def __format__(self, format_spec: str) -> str:
        return format(self.name, format_spec)

    def __repr__(self) -> str:
        return self.name

    def __str__(self) -> str:
        return self.name


class Kind:
    """Static namespace for all defined KindT categories."""

    INVALID = KindT("INVALID")
    BOOL = KindT("BOOL")
    INT = KindT("INT")
    UINT = KindT("UINT")
    FLOAT = KindT("FLOAT")
    COMPLEX = KindT("COMPLEX")
    STRING = KindT("STRING")
    BYTES = KindT("BYTES")
    ARRAY = KindT("ARRAY")
    SLICE = KindT("SLICE")
    SET = KindT("SET")
    MAP = KindT("MAP")
    STRUCT = KindT("STRUCT")
    POINTER = KindT("POINTER")
    CHAN = KindT("CHAN")
    FUNC = KindT("FUNC")
    INTERFACE = KindT("INTERFACE")
    UNSAFE_POINTER = KindT("UNSAFE_POINTER")
    OTHER = KindT("OTHER")

    @classmethod
    def all(cls) -> list[KindT]:
        """
        Return all KindT constants defined on the class, in declaration order.
        """
        return [
            v
            for k, v in vars(cls).items()
            if isinstance(v, KindT) and not k.startswith("_") and k.isupper()
        ]


_PRIMITIVE_KINDS: Final[frozenset[KindT]] = frozenset(
    {Kind.BOOL, Kind.INT, Kind.UINT, Kind.FLOAT, Kind.COMPLEX, Kind.STRING, Kind.BYTES}
)
_NUMBER_KINDS: Final[frozenset[KindT]] = frozenset(
    {Kind.INT, Kind.UINT, Kind.FLOAT, Kind.COMPLEX}
)


def is_primitive(kind: KindT) -> bool:
    return kind in _PRIMITIVE_KINDS


def is_number(kind: KindT) -> bool:
    return kind in _NUMBER_KINDS


def is_int(kind: KindT) -> bool:
    return kind == Kind.INT


def is_uint(kind: KindT) -> bool:
    return kind == Kind.UINT


def is_float(kind: KindT) -> bool:
    return kind == Kind.FLOAT


def is_complex(kind: KindT) -> bool:
    return kind == Kind.COMPLEX


# ctypes `_type_` codes of simple data types
_CODE_KINDS: Final[dict[str, KindT]] = {
    "?": Kind.BOOL,
    **dict.fromkeys("bhilq", Kind.INT),
    **dict.fromkeys("BHILQ", Kind.UINT),
    **dict.fromkeys("fdg", Kind.FLOAT),
    **dict.fromkeys("cz", Kind.BYTES),
    **dict.fromkeys("uZ", Kind.STRING),
    "P": Kind.UNSAFE_POINTER,
    "O": Kind.INTERFACE,
}

_FUNC_TYPES: Final[tuple[type, ...]] = (
    types.FunctionType,
    types.MethodType,
    types.BuiltinFunctionType,
    functools.partial,
    CTYPES_FUNCPTR,
)

_CHAN_TYPES: Final[tuple[type, ...]] = (
    queue.Queue,
    queue.SimpleQueue,
    asyncio.Queue,
    types.GeneratorType,
    types.CoroutineType,
    types.AsyncGeneratorType,
)


def has_custom_repr(obj: object) -> bool:
    """True when the type of `obj` overrides object.__repr__."""
    return type(obj).__repr__ is not object.__repr__


def _ctype_code(ctype: Any) -> str | None:
    code = getattr(ctype, "_type_", None)
    return code if isinstance(code, str) else None


def kind_of(obj: Any, ctype: Any = None) -> KindT:
    """
    Classify `obj`, optionally declared with the ctypes scalar type `ctype`.

    A declared type only matters for plain Python scalars read out of ctypes
    fields and array elements, where it restores signedness and width.

    :param obj: The runtime value.
    :param ctype: A ctypes simple data type, or None.
    :return KindT: The structural category of the value.
    """
    if ctype is not None and isinstance(ctype, type) and issubclass(ctype, CTYPES_SIMPLE):
        code = _ctype_code(ctype)
        hinted = _CODE_KINDS.get(code or "")
        if hinted is Kind.UNSAFE_POINTER:
            return hinted
        if hinted is not None and hinted is not Kind.INTERFACE and obj is not None:
            return hinted

    if obj is None:
        return Kind.INVALID
    if isinstance(obj, Enum):
        return Kind.OTHER
    if isinstance(obj, bool):
        return Kind.BOOL
    if isinstance(obj, CTYPES_SIMPLE):
        return _CODE_KINDS.get(_ctype_code(type(obj)) or "", Kind.OTHER)
    if isinstance(obj, int):
        return Kind.INT
    if isinstance(obj, float):
        return Kind.FLOAT
    if isinstance(obj, complex):
        return Kind.COMPLEX
    if isinstance(obj, str):
        return Kind.STRING
    if isinstance(obj, (bytes, bytearray)):
        return Kind.BYTES
    if isinstance(obj, CTYPES_POINTER):
        return Kind.POINTER
    if isinstance(obj, ctypes.Array):
        return Kind.ARRAY
    if isinstance(obj, (ctypes.Structure, ctypes.Union)):
        return Kind.STRUCT
    if isinstance(obj, weakref.ref):
        return Kind.INTERFACE
    if isinstance(obj, type):
        return Kind.OTHER
    if isinstance(obj, _FUNC_TYPES):
        return Kind.FUNC
    if isinstance(obj, _CHAN_TYPES):
        return Kind.CHAN
    if isinstance(obj, tuple):
        return Kind.STRUCT if hasattr(type(obj), "_fields") else Kind.ARRAY
    if isinstance(obj, Mapping):
        return Kind.MAP
    if isinstance(obj, Set):
        return Kind.SET
    if isinstance(obj, (list, collections.deque, array.array)):
        return Kind.SLICE
    if isinstance(obj, Sequence) and not isinstance(obj, (range, memoryview)):
        return Kind.SLICE
    if isinstance(obj, BaseException):
        return Kind.STRUCT
    if dataclasses.is_dataclass(obj):
        return Kind.STRUCT
    if has_custom_repr(obj):
        return Kind.OTHER
    if hasattr(obj, "__dict__") or getattr(type(obj), "__slots__", None):
        return Kind.STRUCT
    return Kind.OTHER


# End of file: src/mstair/litdump/dumper/kind.py
