# File: src/mstair/litdump/dumper/traversal.py
"""
Value traversal engine.

A Dumper renders one value into its own StructuredWriter. Nested values are
rendered by clones that share the options, identity tracker and zero cache of
the root but own a writer positioned at the parent's current depth; the parent
then splices the clone's text in as an element, entry or field.

Dispatch order for every node:

1. a custom formatter registered for the exact type of the value
2. the rule for the value's Kind
"""

from __future__ import annotations

import ctypes
import dataclasses
import inspect
import itertools
import keyword
import math
import types
import weakref
from collections.abc import Callable, Iterator, Mapping
from enum import Enum
from typing import Any

from mstair.litdump.base.constants import FALSE_LITERAL, FUNC_BODY_PLACEHOLDER, NONE_LITERAL, TRUE_LITERAL
from mstair.litdump.base.types import MISSING
from mstair.litdump.dumper.identity_tracker import IdentityTracker
from mstair.litdump.dumper.key_sort import sorted_keys
from mstair.litdump.dumper.kind import (
    CTYPES_POINTER,
    CTYPES_SIMPLE,
    Kind,
    KindT,
    has_custom_repr,
    is_complex,
    is_float,
    is_int,
    is_number,
    is_primitive,
    is_uint,
)
from mstair.litdump.dumper.model import Delimiters, Value, address_stub, pointer_stub, quote_string, type_name
from mstair.litdump.dumper.options import CustomFormatter, Options, UnsignedDisplay
from mstair.litdump.dumper.structured_writer import StructuredWriter, WriterAdapter
from mstair.litdump.dumper.zero_cache import ZeroValueCache
from mstair.litdump.xlogging.logger_factory import create_logger


__all__ = [
    "Dumper",
    "TraversalContext",
]

_LOG = create_logger(__name__)


class TraversalContext:
    """Per-node traversal state; everything but `value` and `depth` is shared with children."""

    __slots__ = ("depth", "options", "tracker", "value", "zero_cache")

    value: Value
    depth: int
    options: Options
    tracker: IdentityTracker
    zero_cache: ZeroValueCache

    def __init__(
        self,
        value: Value,
        *,
        depth: int = 0,
        options: Options,
        tracker: IdentityTracker,
        zero_cache: ZeroValueCache,
    ) -> None:
        self.value = value
        self.depth = depth
        self.options = options
        self.tracker = tracker
        self.zero_cache = zero_cache

    def child(self, value: Value, depth: int) -> TraversalContext:
        return TraversalContext(
            value,
            depth=depth,
            options=self.options,
            tracker=self.tracker,
            zero_cache=self.zero_cache,
        )


def _format_float(x: float) -> str:
    if math.isnan(x):
        return 'float("nan")'
    if math.isinf(x):
        return 'float("inf")' if x > 0 else '-float("inf")'
    return "%f" % x


def _is_keyword_name(name: str) -> bool:
    return name.isidentifier() and not keyword.iskeyword(name)


def _is_tracked(obj: Any, kind: KindT) -> bool:
    """Whether a value of `kind` can take part in a reference cycle."""
    if kind in (Kind.SLICE, Kind.MAP, Kind.FUNC, Kind.CHAN):
        return True
    if kind is Kind.SET:
        return not isinstance(obj, frozenset)
    if kind is Kind.STRUCT:
        return not isinstance(obj, (tuple, ctypes.Structure, ctypes.Union))
    return False


class Dumper:
    """Renders the value of a TraversalContext."""

    context: TraversalContext
    writer: StructuredWriter

    def __init__(self, context: TraversalContext) -> None:
        self.context = context
        self.writer = StructuredWriter(
            context.options.indent_size,
            depth=context.depth,
            align=context.options.align_fields,
        )
        self._rules: dict[KindT, Callable[[Value], None]] = {
            Kind.INVALID: self._dump_invalid,
            Kind.BOOL: self._dump_scalar,
            Kind.INT: self._dump_scalar,
            Kind.UINT: self._dump_scalar,
            Kind.FLOAT: self._dump_scalar,
            Kind.COMPLEX: self._dump_scalar,
            Kind.STRING: self._dump_scalar,
            Kind.BYTES: self._dump_scalar,
            Kind.ARRAY: self._dump_sequence,
            Kind.SLICE: self._dump_sequence,
            Kind.SET: self._dump_set,
            Kind.MAP: self._dump_mapping,
            Kind.STRUCT: self._dump_struct,
            Kind.POINTER: self._dump_pointer,
            Kind.CHAN: self._dump_chan,
            Kind.FUNC: self._dump_func,
            Kind.INTERFACE: self._dump_interface,
            Kind.UNSAFE_POINTER: self._dump_unsafe_pointer,
            Kind.OTHER: self._dump_other,
        }

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.context.value!r} depth={self.context.depth}>"

    def __str__(self) -> str:
        return self.writer.getvalue()

    @property
    def options(self) -> Options:
        return self.context.options

    def getvalue(self) -> str:
        return self.writer.getvalue()

    def clone(self, value: Value) -> Dumper:
        """A Dumper for `value` positioned at this dumper's current depth."""
        return Dumper(self.context.child(value, self.writer.depth))

    def dump_child(self, obj: Any, ctype: Any = None) -> str:
        return self.clone(Value(obj, ctype)).build().getvalue()

    def build(self) -> Dumper:
        """Render the context value and return self."""
        value = self.context.value
        formatter = self.options.formatter_for(type(value.obj))
        if formatter is not None and self._run_custom_formatter(formatter, value.obj):
            return self
        kind = value.kind
        rule = self._rules.get(kind)
        if rule is None:
            raise AssertionError(f"No rendering rule for kind {kind}")
        rule(value)
        return self

    def _run_custom_formatter(self, formatter: CustomFormatter, obj: Any) -> bool:
        """Render `obj` with `formatter`; on failure log and report False so the built-in rule runs."""
        scratch = StructuredWriter(self.options.indent_size, depth=self.writer.depth)
        try:
            formatter(obj, WriterAdapter(scratch))
        except Exception:
            _LOG.exception(
                "Custom formatter %s failed for %s; using built-in rendering",
                getattr(formatter, "__qualname__", repr(formatter)),
                type_name(type(obj)),
            )
            return False
        self.writer.write(scratch.getvalue())
        return True

    def _visit(self, identity: int, obj: Any) -> bool:
        first = self.context.tracker.visit(identity, obj)
        if not first:
            _LOG.debug("Repeated reference to %s at depth %d", type_name(type(obj)), self.writer.depth)
        return first

    # Scalars

    def _dump_invalid(self, value: Value) -> None:
        self.writer.write(NONE_LITERAL)

    def _dump_scalar(self, value: Value) -> None:
        obj = value.obj
        kind = value.kind
        if isinstance(obj, CTYPES_SIMPLE):
            # Unhinted ctypes instances keep their constructor
            text = self._scalar_text(obj.value, kind, type(obj))  # pyright: ignore[reportAttributeAccessIssue]
            self.writer.write_format("%s(%s)", type_name(type(obj)), text)
            return
        self.writer.write(self._scalar_text(obj, kind, value.ctype))

    def _scalar_text(self, raw: Any, kind: KindT, ctype: Any) -> str:
        if not is_primitive(kind):
            raise AssertionError(f"No scalar rendering rule for kind {kind}")
        if raw is None:
            return NONE_LITERAL
        if kind is Kind.BOOL:
            return TRUE_LITERAL if raw else FALSE_LITERAL
        if is_number(kind):
            return self._number_text(raw, kind, ctype)
        if kind is Kind.STRING:
            return quote_string(str(raw), escape_unicode=self.options.escape_unicode)
        if type(raw) in (bytes, bytearray):
            return repr(raw)
        return f"{type_name(type(raw))}({bytes(raw)!r})"

    def _number_text(self, raw: Any, kind: KindT, ctype: Any) -> str:
        if is_int(kind):
            return str(int(raw))
        if is_uint(kind):
            return self._uint_text(int(raw), ctype)
        if is_float(kind):
            return _format_float(float(raw))
        if is_complex(kind):
            return f"complex({_format_float(raw.real)}, {_format_float(raw.imag)})"
        raise AssertionError(f"No numeric rendering rule for kind {kind}")

    def _uint_text(self, n: int, ctype: Any) -> str:
        bits = ctypes.sizeof(ctype) * 8 if ctype is not None else 64
        display = self.options.unsigned_display
        if display is UnsignedDisplay.BINARY:
            return "0b%0*b" % (bits, n)
        if display is UnsignedDisplay.HEX:
            return "0x%0*x" % (bits // 4, n)
        return str(n)

    # Composites

    def _write_items(self, items: list[Value], delimiters: Delimiters, group: int) -> None:
        with self.writer.block(delimiters.open, delimiters.close):
            if group > 1:
                for chunk in itertools.batched(items, group):
                    self.writer.write_group([self.dump_child(v.obj, v.ctype) for v in chunk])
            else:
                for v in items:
                    self.writer.write_item(self.dump_child(v.obj, v.ctype))

    def _dump_sequence(self, value: Value) -> None:
        obj = value.obj
        delimiters = Delimiters.for_object(obj)
        if isinstance(obj, ctypes.Array):
            elem_type = type(obj)._type_
            hint = elem_type if issubclass(elem_type, CTYPES_SIMPLE) else None
            items = [Value(item, hint) for item in obj]
        else:
            items = [Value(item) for item in obj]
            elem_types = {type(v.obj) for v in items}
            elem_type = elem_types.pop() if len(elem_types) == 1 else None
        if not items:
            self.writer.write(delimiters.empty)
            return
        if _is_tracked(obj, value.kind) and not self._visit(id(obj), obj):
            self.writer.write(address_stub(obj))
            return
        self._write_items(items, delimiters, self.options.group_size_for(elem_type))

    def _dump_set(self, value: Value) -> None:
        obj = value.obj
        delimiters = Delimiters.for_object(obj)
        if not obj:
            self.writer.write(delimiters.empty)
            return
        if _is_tracked(obj, value.kind) and not self._visit(id(obj), obj):
            self.writer.write(address_stub(obj))
            return
        self._write_items([Value(item) for item in sorted_keys(obj)], delimiters, 1)

    def _dump_mapping(self, value: Value) -> None:
        obj: Mapping[Any, Any] = value.obj
        delimiters = Delimiters.for_object(obj)
        if not obj:
            self.writer.write(delimiters.empty)
            return
        if not self._visit(id(obj), obj):
            self.writer.write(address_stub(obj))
            return
        with self.writer.block(delimiters.open, delimiters.close):
            for key in sorted_keys(obj.keys()):
                self.writer.write_entry(self.dump_child(key), delimiters.kvsep, self.dump_child(obj[key]))

    def _dump_struct(self, value: Value) -> None:
        obj = value.obj
        fields = list(self._struct_fields(obj))
        if self.options.exported_only:
            fields = [(name, v) for name, v in fields if name is None or not name.startswith("_")]
        delimiters = Delimiters.for_struct(type(obj))
        if not fields:
            self.writer.write(delimiters.empty)
            return
        if _is_tracked(obj, value.kind) and not self._visit(id(obj), obj):
            self.writer.write(address_stub(obj))
            return
        # Names that cannot be keyword arguments go into a trailing **{...}
        extras = [(name, v) for name, v in fields if name is not None and not _is_keyword_name(name)]
        with self.writer.block(delimiters.open, delimiters.close):
            for name, v in fields:
                if name is None:
                    self.writer.write_item(self.dump_child(v.obj, v.ctype))
                elif _is_keyword_name(name):
                    self.writer.write_entry(name, delimiters.kvsep, self.dump_child(v.obj, v.ctype))
            if extras:
                with self.writer.block(self.writer.indentation + "**{", "}"):
                    for name, v in extras:
                        self.writer.write_entry(quote_string(name), ": ", self.dump_child(v.obj, v.ctype))
                self.writer.write(",\n")

    def _struct_fields(self, obj: Any) -> Iterator[tuple[str | None, Value]]:
        """
        Yield `(name, value)` per field in declaration order; positional
        exception arguments have no name.
        """
        if isinstance(obj, tuple):
            for name in type(obj)._fields:
                yield name, Value(getattr(obj, name))
            return
        if dataclasses.is_dataclass(obj):
            for f in dataclasses.fields(obj):
                if not f.repr:
                    continue
                if not hasattr(obj, f.name):
                    _LOG.warning("Skipping uninitialized field: %s.%s", type(obj).__qualname__, f.name)
                    continue
                yield f.name, Value(getattr(obj, f.name))
            return
        if isinstance(obj, (ctypes.Structure, ctypes.Union)):
            for klass in reversed(type(obj).__mro__):
                for entry in vars(klass).get("_fields_", ()):
                    name, ctype = entry[0], entry[1]
                    hint = ctype if isinstance(ctype, type) and issubclass(ctype, CTYPES_SIMPLE) else None
                    yield name, Value(getattr(obj, name), hint)
            return
        if isinstance(obj, BaseException):
            for arg in obj.args:
                yield None, Value(arg)
        yield from self._attribute_fields(obj)

    @staticmethod
    def _attribute_fields(obj: Any) -> Iterator[tuple[str | None, Value]]:
        seen: set[str] = set()
        for klass in reversed(type(obj).__mro__):
            slots = vars(klass).get("__slots__", ())
            for name in (slots,) if isinstance(slots, str) else slots:
                if name in ("__dict__", "__weakref__") or name in seen:
                    continue
                seen.add(name)
                attr = getattr(obj, name, MISSING)
                if attr is MISSING:
                    continue  # unset slot
                yield name, Value(attr)
        for name, attr in getattr(obj, "__dict__", {}).items():
            if name not in seen:
                yield name, Value(attr)

    # References

    def _dump_pointer(self, value: Value) -> None:
        ptr = value.obj
        target_type = type(ptr)._type_
        if not ptr:
            self.writer.write_format("%s()", type_name(type(ptr)))
            return
        target = ptr.contents
        address = ctypes.addressof(target)
        if issubclass(target_type, (CTYPES_SIMPLE, CTYPES_POINTER)):
            self.writer.write(pointer_stub(address, target_type))
            return
        formatter = self.options.formatter_for(target_type)
        if formatter is not None and self._run_custom_formatter(formatter, ptr):
            return
        if not self._visit(address, ptr):
            self.writer.write(pointer_stub(address, target_type))
            return
        self.writer.write_format("ctypes.pointer(%s)", self.dump_child(target))

    def _dump_unsafe_pointer(self, value: Value) -> None:
        obj = value.obj
        address = obj.value if isinstance(obj, ctypes.c_void_p) else obj
        if address is None:
            self.writer.write("ctypes.c_void_p(None)")
        else:
            self.writer.write_format("ctypes.c_void_p(0x%x)", address)

    def _dump_chan(self, value: Value) -> None:
        obj = value.obj
        self._visit(id(obj), obj)
        self.writer.write(address_stub(obj))

    def _dump_func(self, value: Value) -> None:
        fn = value.obj
        if not self._visit(id(fn), fn):
            self.writer.write(address_stub(fn))
            return
        signature = _signature(fn)
        if signature is None:
            head = "lambda *args, **kwargs: ("
            zero = NONE_LITERAL
        else:
            params = self._lambda_params(signature)
            head = f"lambda {params}: (" if params else "lambda: ("
            zero = self._zero_literal(signature.return_annotation)
        with self.writer.block(head, ")"):
            self.writer.write_line(FUNC_BODY_PLACEHOLDER)
            self.writer.write_indent()
            self.writer.write_reindented(zero)
            self.writer.write("\n")

    def _lambda_params(self, signature: inspect.Signature) -> str:
        parts: list[str] = []
        star_written = False
        previous: inspect._ParameterKind | None = None  # pyright: ignore[reportPrivateUsage]
        for param in signature.parameters.values():
            if previous is inspect.Parameter.POSITIONAL_ONLY and param.kind is not inspect.Parameter.POSITIONAL_ONLY:
                parts.append("/")
            if param.kind is inspect.Parameter.VAR_POSITIONAL:
                parts.append(f"*{param.name}")
                star_written = True
            elif param.kind is inspect.Parameter.VAR_KEYWORD:
                parts.append(f"**{param.name}")
            else:
                if param.kind is inspect.Parameter.KEYWORD_ONLY and not star_written:
                    parts.append("*")
                    star_written = True
                if param.default is inspect.Parameter.empty:
                    parts.append(param.name)
                else:
                    parts.append(f"{param.name}={self.dump_child(param.default)}")
            previous = param.kind
        if previous is inspect.Parameter.POSITIONAL_ONLY:
            parts.append("/")
        return ", ".join(parts)

    def _zero_literal(self, annotation: Any) -> str:
        if annotation is inspect.Signature.empty or annotation is None:
            return NONE_LITERAL
        options = self.options
        return self.context.zero_cache.literal_of(
            annotation,
            self._render_zero,
            layout=(options.indent_size, options.exported_only, options.unsigned_display),
        )

    def _render_zero(self, zero: Any) -> str:
        options = Options(
            indent_size=self.options.indent_size,
            exported_only=self.options.exported_only,
            unsigned_display=self.options.unsigned_display,
        )
        context = TraversalContext(
            Value(zero),
            options=options,
            tracker=IdentityTracker(),
            zero_cache=self.context.zero_cache,
        )
        return Dumper(context).build().getvalue()

    def _dump_interface(self, value: Value) -> None:
        box = value.obj
        inner: Any
        if isinstance(box, weakref.ref):
            inner = box()
        else:
            try:
                inner = box.value
            except ValueError:
                inner = None  # NULL py_object
        self.writer.write(self.dump_child(inner))

    # Fallback

    def _dump_other(self, value: Value) -> None:
        obj = value.obj
        if isinstance(obj, Enum):
            self._dump_enum(obj)
        elif isinstance(obj, type):
            self.writer.write(type_name(obj))
        elif isinstance(obj, types.ModuleType):
            self.writer.write(obj.__name__)
        else:
            text = _safe_repr(obj) if has_custom_repr(obj) else None
            if text is None or (text.startswith("<") and text.endswith(">")):
                self.writer.write(address_stub(obj))
            else:
                self.writer.write_reindented(text)

    def _dump_enum(self, member: Enum) -> None:
        name = member.name
        if name and name.isidentifier():
            self.writer.write_format("%s.%s", type_name(type(member)), name)
        else:
            # Composite flag values have no single member name
            self.writer.write_format("%s(%s)", type_name(type(member)), self.dump_child(member.value))


def _signature(fn: Any) -> inspect.Signature | None:
    """Signature of `fn` with string annotations resolved where possible, None when unavailable."""
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        return None
    try:
        return inspect.signature(fn, eval_str=True)
    except Exception as exc:
        _LOG.debug("Unresolved annotations on %s: %s", getattr(fn, "__qualname__", fn), exc)
        return signature


def _safe_repr(obj: Any) -> str | None:
    try:
        return repr(obj)
    except Exception as exc:
        _LOG.debug("repr() failed for %s: %s", type_name(type(obj)), exc)
        return None


# End of file: src/mstair/litdump/dumper/traversal.py
