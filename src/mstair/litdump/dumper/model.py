# File: src/mstair/litdump/dumper/model.py
"""
Value handles, container punctuation, type naming and address stubs.
"""

from __future__ import annotations

import array
import builtins
import collections
import ctypes
import re
import sys
import types
from collections.abc import Mapping, Set
from typing import Any, Final

from mstair.litdump.dumper.kind import CTYPES_POINTER, KindT, kind_of


__all__ = [
    "ADDRESS_RE",
    "Delimiters",
    "Value",
    "address_stub",
    "normalize_addresses",
    "pointer_stub",
    "quote_string",
    "type_name",
]


class Value:
    """A runtime datum plus the ctypes type it was declared with, if any."""

    __slots__ = ("ctype", "obj")

    obj: Any
    """The value itself."""

    ctype: Any
    """Declared ctypes scalar type for values read from ctypes fields/elements, else None."""

    def __init__(self, obj: Any, ctype: Any = None) -> None:
        self.obj = obj
        self.ctype = ctype

    @property
    def kind(self) -> KindT:
        return kind_of(self.obj, self.ctype)

    def __repr__(self) -> str:
        hint = f", ctype={type_name(self.ctype)}" if self.ctype is not None else ""
        return f"Value({type_name(type(self.obj))}{hint})"


class Delimiters:
    """Punctuation for rendering one composite literal."""

    open: str
    close: str
    kvsep: str
    empty: str

    def __init__(
        self,
        open: str,
        close: str,
        kvsep: str = ": ",
        empty: str | None = None,
    ) -> None:
        self.open = open
        self.close = close
        self.kvsep = kvsep
        self.empty = open + close if empty is None else empty

    def __repr__(self) -> str:
        tup: tuple[str, str, str, str] = (
            self.open,
            self.close,
            self.kvsep,
            self.empty,
        )
        p = f"{tup=}"[4:]  # Skip the "tup=" prefix
        return p

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Delimiters):
            return NotImplemented
        return repr(self) == repr(other)

    def __hash__(self) -> int:
        return hash(repr(self))

    @classmethod
    def wrapping(cls, name: str, open: str, close: str, kvsep: str = ": ") -> Delimiters:
        """Delimiters for `name(<literal>)`, empty form `name()`."""
        return cls(f"{name}({open}", f"{close})", kvsep=kvsep, empty=f"{name}()")

    @classmethod
    def for_struct(cls, tp: type) -> Delimiters:
        name = type_name(tp)
        return cls(f"{name}(", ")", kvsep="=", empty=f"{name}()")

    @classmethod
    def for_object(cls, obj: Any) -> Delimiters:
        """
        Return the Delimiters for a container value.

        Builtin literal types use literal syntax, a few stdlib containers keep
        their constructor arguments, and anything else wraps the closest literal
        in a call to its type name.

        :param obj: A sequence, set, mapping or ctypes array.
        :return Delimiters: The punctuation for `obj`.
        """
        tp = type(obj)
        if isinstance(obj, ctypes.Array):
            name = f"({type_name(tp._type_)} * {tp._length_})"
            return cls(f"{name}(", ")", empty=f"{name}()")
        if tp is list:
            return cls("[", "]")
        if tp is tuple:
            return cls("(", ")")
        if tp is dict:
            return cls("{", "}")
        if tp is set:
            return cls("{", "}", empty="set()")
        if tp is frozenset:
            return cls.wrapping("frozenset", "{", "}")
        if tp is collections.defaultdict:
            factory = getattr(obj, "default_factory", None)
            head = "collections.defaultdict(" + _factory_name(factory)
            return cls(head + ", {", "})", empty=head + ")")
        if tp is array.array:
            head = f'array.array("{obj.typecode}"'
            return cls(head + ", [", "])", empty=head + ")")
        name = type_name(tp)
        if isinstance(obj, Mapping):
            return cls.wrapping(name, "{", "}")
        if isinstance(obj, Set):
            return cls.wrapping(name, "{", "}")
        if isinstance(obj, tuple):
            return cls.wrapping(name, "(", ")")
        return cls.wrapping(name, "[", "]")


def _factory_name(factory: Any) -> str:
    if factory is None:
        return "None"
    if isinstance(factory, type):
        return type_name(factory)
    qualname = getattr(factory, "__qualname__", None)
    if isinstance(qualname, str) and "<" not in qualname:
        return qualname
    return "None"


def _types_module_names() -> dict[type, str]:
    names: dict[type, str] = {}
    for attr, val in vars(types).items():
        if isinstance(val, type) and not attr.startswith("_"):
            names.setdefault(val, f"types.{attr}")
    return names


_TYPES_MODULE_NAMES: Final[dict[type, str]] = _types_module_names()


def type_name(tp: Any) -> str:
    """
    Return an importable-looking name for `tp`.

    - builtins: bare name (`int`, `list`)
    - members of the `types` module: `types.FunctionType`
    - ctypes pointer and array types: `ctypes.POINTER(X)`, `(X * n)`
    - stdlib types re-exported by their top-level module: `collections.OrderedDict`
    - anything else: qualified name, with `<locals>.` segments dropped
    """
    if not isinstance(tp, type):
        return repr(tp)
    if tp in _TYPES_MODULE_NAMES:
        return _TYPES_MODULE_NAMES[tp]
    if issubclass(tp, CTYPES_POINTER):
        return f"ctypes.POINTER({type_name(tp._type_)})"  # pyright: ignore[reportAttributeAccessIssue]
    if issubclass(tp, ctypes.Array) and tp is not ctypes.Array:
        return f"({type_name(tp._type_)} * {tp._length_})"
    module = getattr(tp, "__module__", "") or ""
    qualname = getattr(tp, "__qualname__", tp.__name__).replace("<locals>.", "")
    if module == "builtins" and getattr(builtins, tp.__name__, None) is tp:
        return qualname
    top = module.split(".")[0]
    if top in sys.stdlib_module_names:
        top_module = sys.modules.get(top)
        if getattr(top_module, tp.__name__, None) is tp:
            return f"{top}.{qualname}"
        return f"{module}.{qualname}"
    return qualname


_SIMPLE_ESCAPES: Final[dict[str, str]] = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def quote_string(text: str, *, escape_unicode: bool = False) -> str:
    """
    Return `text` as a double-quoted Python string literal.

    Control characters, non-printable characters and lone surrogates are always
    escaped; other non-ASCII characters only with `escape_unicode`. Escapes use
    the shortest Python form (`\\x`, `\\u`, `\\U`), so code points above U+FFFF
    stay a single character when read back.
    """
    parts = ['"']
    for ch in text:
        code = ord(ch)
        if ch in _SIMPLE_ESCAPES:
            parts.append(_SIMPLE_ESCAPES[ch])
        elif 0x20 <= code < 0x7F:
            parts.append(ch)
        elif code < 0x80 or (code <= 0xFF and not ch.isprintable()):
            parts.append("\\x%02x" % code)
        elif 0xD800 <= code <= 0xDFFF or escape_unicode or not ch.isprintable():
            parts.append("\\u%04x" % code if code <= 0xFFFF else "\\U%08x" % code)
        else:
            parts.append(ch)
    parts.append('"')
    return "".join(parts)


def address_stub(obj: Any) -> str:
    """Render `obj` as a typed reference to its runtime address."""
    return f"typing.cast({type_name(type(obj))}, ctypes.cast(0x{id(obj):x}, ctypes.py_object).value)"


def pointer_stub(address: int, target_type: Any) -> str:
    """Render a ctypes pointer as a cast of its raw address."""
    return f"ctypes.cast(0x{address:x}, ctypes.POINTER({type_name(target_type)}))"


ADDRESS_RE: Final[re.Pattern[str]] = re.compile(r"\b(cast|c_void_p)\(0x[0-9a-f]+")
"""Matches the runtime addresses embedded in stubs."""


def normalize_addresses(text: str) -> str:
    """Replace runtime addresses in `text` with `0x0` so dumps compare stably."""
    return ADDRESS_RE.sub(r"\1(0x0", text)


# End of file: src/mstair/litdump/dumper/model.py
