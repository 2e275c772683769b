# File: src/mstair/litdump/dumper/test_dump_api.py
"""
Rendering stories for dump(): one test per behaviour.

Covers:

- Primitive and ctypes scalar literals, including unsigned display modes
- Containers, sorted keys and members, element grouping
- Structs (dataclasses, namedtuples, exceptions, plain and ctypes objects)
- Pointers, functions, queues and other stub renderings
- Cycle breaking and shared references
- Custom formatters, including through ctypes pointers
- Determinism, parseability and concurrent use
"""

from __future__ import annotations

import array
import ast
import ctypes
import dataclasses
import json
import logging
import queue
import weakref
from collections import OrderedDict, defaultdict, deque
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal
from enum import Enum, Flag
from typing import Any, NamedTuple

import pytest

from mstair.litdump.base.constants import ENV_INDENT_SIZE
from mstair.litdump.dumper.dump_api import dump
from mstair.litdump.dumper.model import normalize_addresses
from mstair.litdump.dumper.options import (
    with_aligned_fields,
    with_custom_formatter,
    with_escaped_unicode,
    with_exported_only,
    with_indent,
    with_list_group_size,
    with_unsigned_display,
)
from mstair.litdump.dumper.structured_writer import Writer


# == Fixtures ==


@dataclasses.dataclass
class Point:
    x: int
    y: int


@dataclasses.dataclass
class Account:
    name: str
    _secret: str


@dataclasses.dataclass
class Hidden:
    _token: str


@dataclasses.dataclass
class Partial:
    x: int
    y: int = dataclasses.field(init=False)


class Pair(NamedTuple):
    a: int
    b: str


class Plain:
    def __init__(self) -> None:
        self.a = 1
        self._b = [2]


class Slotted:
    __slots__ = ("x", "y")

    def __init__(self) -> None:
        self.x = 1


class SelfRef:
    def __init__(self) -> None:
        self.me: SelfRef | None = None


class Color(Enum):
    RED = 1
    GREEN = 2


class Perm(Flag):
    R = 1
    W = 2


class Opaque:
    def __repr__(self) -> str:
        return "<opaque thing>"


class Money:
    def __init__(self, amount: int) -> None:
        self.amount = amount


class Inner(ctypes.Structure):
    _fields_ = [("flag", ctypes.c_uint8), ("ratio", ctypes.c_double)]


class Link(ctypes.Structure):
    pass


Link._fields_ = [("value", ctypes.c_int), ("next", ctypes.POINTER(Link))]


def add(a: int, b: int = 2, *rest: int, scale: float = 1.0, **extra: str) -> int:
    return a


def positional(a, /, b, *, c):  # type: ignore[no-untyped-def]
    return a


def make_list() -> list[int]:
    return []


def make_point() -> Point:
    return Point(0, 0)


def make_handler() -> Handler:
    return Handler()


@dataclasses.dataclass
class Handler:
    factory: Callable[[], Handler] = make_handler


class Recorder:
    created: list[int] = []

    def __init__(self) -> None:
        Recorder.created.append(1)


def make_recorder() -> Recorder:
    return Recorder()


class Weird:
    def __init__(self) -> None:
        self.a = 1
        setattr(self, "my-attr", 2)
        setattr(self, "class", 3)


def _money_formatter(value: Money, writer: Writer) -> None:
    writer.write("Money")
    writer.write_block(str(value.amount))


def _assert_parses(text: str) -> None:
    ast.parse(text, mode="eval")


STUB = "typing.cast({}, ctypes.cast(0x0, ctypes.py_object).value)"


# == Primitives ==


@pytest.mark.unit
@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, "None"),
        (True, "True"),
        (False, "False"),
        (42, "42"),
        (-7, "-7"),
        (1.5, "1.500000"),
        (float("inf"), 'float("inf")'),
        (float("-inf"), '-float("inf")'),
        (float("nan"), 'float("nan")'),
        (1 + 2j, "complex(1.000000, 2.000000)"),
        ("hi\n", '"hi\\n"'),
        ("é", '"é"'),
        ("bad\udc80name", '"bad\\udc80name"'),
        ("\u200b", '"\\u200b"'),
        (b"ab", "b'ab'"),
        (bytearray(b"x"), "bytearray(b'x')"),
    ],
)
def test_primitives(value: Any, expected: str) -> None:
    assert dump(value) == expected


@pytest.mark.unit
def test_escaped_unicode() -> None:
    assert dump("é", with_escaped_unicode()) == '"\\u00e9"'
    text = dump("\U0001f600", with_escaped_unicode())
    assert text == '"\\U0001f600"'
    assert ast.literal_eval(text) == "\U0001f600"


@pytest.mark.unit
@pytest.mark.parametrize("value", [0, -3, 2.5, "s", True, None])
def test_primitives_render_the_same_when_boxed(value: Any) -> None:
    assert dump(ctypes.py_object(value)) == dump(value)


@pytest.mark.unit
def test_empty_py_object_renders_none() -> None:
    assert dump(ctypes.py_object()) == "None"


@pytest.mark.unit
@pytest.mark.parametrize(
    ("value", "mode", "expected"),
    [
        (ctypes.c_uint8(255), "decimal", "ctypes.c_ubyte(255)"),
        (ctypes.c_uint8(255), "hex", "ctypes.c_ubyte(0xff)"),
        (ctypes.c_uint8(5), "binary", "ctypes.c_ubyte(0b00000101)"),
        (ctypes.c_uint16(1), "hex", "ctypes.c_ushort(0x0001)"),
        (ctypes.c_int(-5), "hex", "ctypes.c_int(-5)"),
        (ctypes.c_bool(True), "decimal", "ctypes.c_bool(True)"),
        (ctypes.c_double(0.5), "decimal", "ctypes.c_double(0.500000)"),
        (ctypes.c_char_p(b"hi"), "decimal", "ctypes.c_char_p(b'hi')"),
        (ctypes.c_void_p(None), "decimal", "ctypes.c_void_p(None)"),
        (ctypes.c_void_p(16), "decimal", "ctypes.c_void_p(0x10)"),
    ],
)
def test_ctypes_scalars(value: Any, mode: str, expected: str) -> None:
    assert dump(value, with_unsigned_display(mode)) == expected


# == Containers ==


@pytest.mark.unit
def test_map_entries_in_sorted_key_order() -> None:
    assert dump({"b": 2, "a": 1, "c": 3}) == '{\n  "a": 1,\n  "b": 2,\n  "c": 3,\n}'


@pytest.mark.unit
def test_mixed_keys_are_ordered_by_rank() -> None:
    assert dump({"a": 1, 2: "b", None: 0}) == '{\n  None: 0,\n  2: "b",\n  "a": 1,\n}'


@pytest.mark.unit
@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ([], "[]"),
        ((), "()"),
        ({}, "{}"),
        (set(), "set()"),
        (frozenset(), "frozenset()"),
        (deque(), "collections.deque()"),
        ([1, 2, 3], "[\n  1,\n  2,\n  3,\n]"),
        ((1,), "(\n  1,\n)"),
        ({3, 1, 2}, "{\n  1,\n  2,\n  3,\n}"),
        (frozenset({2, 1}), "frozenset({\n  1,\n  2,\n})"),
        (deque([1]), "collections.deque([\n  1,\n])"),
        (array.array("i", [1, 2]), 'array.array("i", [\n  1,\n  2,\n])'),
        (OrderedDict(b=1, a=2), 'collections.OrderedDict({\n  "a": 2,\n  "b": 1,\n})'),
        (
            defaultdict(list, {"k": [1]}),
            'collections.defaultdict(list, {\n  "k": [\n    1,\n  ],\n})',
        ),
        ((ctypes.c_int * 2)(7, 8), "(ctypes.c_int * 2)(\n  7,\n  8,\n)"),
    ],
)
def test_containers(value: Any, expected: str) -> None:
    assert dump(value) == expected


@pytest.mark.unit
def test_nested_indentation() -> None:
    assert dump({"a": [1, {"b": None}]}) == (
        '{\n  "a": [\n    1,\n    {\n      "b": None,\n    },\n  ],\n}'
    )


@pytest.mark.unit
@pytest.mark.parametrize(
    ("indent", "expected"),
    [(4, "[\n    1,\n]"), (0, "[\n1,\n]")],
)
def test_indent_option(indent: int, expected: str) -> None:
    assert dump([1], with_indent(indent)) == expected


@pytest.mark.unit
def test_indent_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(ENV_INDENT_SIZE, "3")
    assert dump([1]) == "[\n   1,\n]"


@pytest.mark.unit
def test_aligned_fields() -> None:
    assert dump({"a": 1, "bbb": 2}, with_aligned_fields()) == '{\n  "a":   1,\n  "bbb": 2,\n}'


# == Grouping ==


@pytest.mark.unit
def test_list_grouping_packs_elements_per_line() -> None:
    assert dump([1, 2, 3, 4], with_list_group_size(int, 2)) == "[\n  1, 2,\n  3, 4,\n]"
    assert dump([1, 2, 3, 4, 5], with_list_group_size(int, 2)) == "[\n  1, 2,\n  3, 4,\n  5,\n]"


@pytest.mark.unit
def test_grouping_needs_a_common_element_type() -> None:
    assert dump([1, "a"], with_list_group_size(int, 2)) == '[\n  1,\n  "a",\n]'
    assert dump([1, 2], with_list_group_size(int, 1)) == "[\n  1,\n  2,\n]"


@pytest.mark.unit
def test_grouping_of_ctypes_arrays_uses_declared_element_type() -> None:
    value = (ctypes.c_uint16 * 3)(1, 2, 3)
    text = dump(value, with_list_group_size(ctypes.c_uint16, 2), with_unsigned_display("hex"))
    assert text == "(ctypes.c_ushort * 3)(\n  0x0001, 0x0002,\n  0x0003,\n)"


# == Structs ==


@pytest.mark.unit
def test_dataclass() -> None:
    assert dump(Point(1, 2)) == "Point(\n  x=1,\n  y=2,\n)"
    assert dump([Point(1, 2)]) == "[\n  Point(\n    x=1,\n    y=2,\n  ),\n]"


@pytest.mark.unit
def test_exported_only_filtering() -> None:
    value = Account("a", "s")
    assert dump(value) == 'Account(\n  name="a",\n  _secret="s",\n)'
    assert dump(value, with_exported_only()) == 'Account(\n  name="a",\n)'
    assert dump(Hidden("t"), with_exported_only()) == "Hidden()"


@pytest.mark.unit
def test_uninitialized_dataclass_field_is_skipped(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        assert dump(Partial(x=42)) == "Partial(\n  x=42,\n)"
    assert any("Skipping uninitialized field" in r.getMessage() for r in caplog.records)


@pytest.mark.unit
def test_namedtuple_exception_and_plain_objects() -> None:
    assert dump(Pair(1, "x")) == 'Pair(\n  a=1,\n  b="x",\n)'
    assert dump(ValueError("bad", 3)) == 'ValueError(\n  "bad",\n  3,\n)'
    assert dump(KeyError()) == "KeyError()"
    assert dump(Plain()) == "Plain(\n  a=1,\n  _b=[\n    2,\n  ],\n)"
    assert dump(Slotted()) == "Slotted(\n  x=1,\n)"


@pytest.mark.unit
def test_non_identifier_fields_go_into_a_keyword_mapping() -> None:
    text = dump(Weird())
    assert text == 'Weird(\n  a=1,\n  **{\n    "my-attr": 2,\n    "class": 3,\n  },\n)'
    _assert_parses(text)
    _assert_parses(dump(Weird(), with_aligned_fields()))


@pytest.mark.unit
def test_ctypes_structure_fields_keep_declared_types() -> None:
    value = Inner(255, 0.5)
    assert dump(value) == "Inner(\n  flag=255,\n  ratio=0.500000,\n)"
    assert dump(value, with_unsigned_display("hex")) == "Inner(\n  flag=0xff,\n  ratio=0.500000,\n)"
    assert dump(value, with_unsigned_display("binary")) == (
        "Inner(\n  flag=0b11111111,\n  ratio=0.500000,\n)"
    )


# == Pointers and stubs ==


@pytest.mark.unit
def test_pointers() -> None:
    inner = Inner(1, 0.0)
    assert dump(ctypes.pointer(inner)) == "ctypes.pointer(Inner(\n  flag=1,\n  ratio=0.000000,\n))"
    assert dump(ctypes.POINTER(Inner)()) == "ctypes.POINTER(Inner)()"


@pytest.mark.unit
def test_pointer_to_scalar_or_pointer_is_an_address_stub() -> None:
    number = ctypes.c_int(5)
    ptr = ctypes.pointer(number)
    assert normalize_addresses(dump(ptr)) == "ctypes.cast(0x0, ctypes.POINTER(ctypes.c_int))"
    assert normalize_addresses(dump(ctypes.pointer(ptr))) == (
        "ctypes.cast(0x0, ctypes.POINTER(ctypes.POINTER(ctypes.c_int)))"
    )


@pytest.mark.unit
def test_functions_render_a_placeholder_body() -> None:
    assert dump(add) == "lambda a, b=2, *rest, scale=1.000000, **extra: (\n  # ...\n  0\n)"
    assert dump(positional) == "lambda a, /, b, *, c: (\n  # ...\n  None\n)"
    assert dump(make_list) == "lambda: (\n  # ...\n  []\n)"
    assert dump([make_point]) == (
        "[\n  lambda: (\n    # ...\n    Point(\n      x=0,\n      y=0,\n    )\n  ),\n]"
    )
    _assert_parses(dump(print))


@pytest.mark.unit
def test_zero_value_that_refers_back_to_itself_renders_none() -> None:
    text = dump(make_handler)
    assert text == (
        "lambda: (\n  # ...\n  Handler(\n    factory=lambda: (\n      # ...\n      None\n    ),\n  )\n)"
    )
    _assert_parses(text)


@pytest.mark.unit
def test_zero_value_of_arbitrary_class_is_not_constructed() -> None:
    Recorder.created.clear()
    assert dump(make_recorder) == "lambda: (\n  # ...\n  None\n)"
    assert Recorder.created == []


@pytest.mark.unit
def test_queues_and_generators_are_stubs() -> None:
    assert normalize_addresses(dump(queue.Queue())) == STUB.format("queue.Queue")
    gen = (i for i in range(2))
    assert normalize_addresses(dump(gen)) == STUB.format("types.GeneratorType")


@pytest.mark.unit
def test_weakref_is_unwrapped() -> None:
    point = Point(1, 2)
    assert dump(weakref.ref(point)) == dump(point)


@pytest.mark.unit
@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (Color.RED, "Color.RED"),
        (Perm.R | Perm.W, "Perm(3)"),
        (int, "int"),
        (OrderedDict, "collections.OrderedDict"),
        (json, "json"),
        (Decimal("1.5"), "Decimal('1.5')"),
        (range(3), "range(0, 3)"),
    ],
)
def test_other_values(value: Any, expected: str) -> None:
    assert dump(value) == expected


@pytest.mark.unit
def test_unreconstructible_objects_fall_back_to_stub() -> None:
    assert normalize_addresses(dump(object())) == STUB.format("object")
    assert normalize_addresses(dump(Opaque())) == STUB.format("Opaque")


# == Cycles ==


@pytest.mark.unit
def test_list_containing_itself() -> None:
    value: list[Any] = [1]
    value.append(value)
    text = normalize_addresses(dump(value))
    assert text == "[\n  1,\n  " + STUB.format("list") + ",\n]"
    _assert_parses(text)


@pytest.mark.unit
def test_dict_containing_itself() -> None:
    value: dict[str, Any] = {"k": 1}
    value["self"] = value
    text = normalize_addresses(dump(value))
    assert text == '{\n  "k": 1,\n  "self": ' + STUB.format("dict") + ",\n}"
    _assert_parses(text)


@pytest.mark.unit
def test_object_referencing_itself() -> None:
    value = SelfRef()
    value.me = value
    text = normalize_addresses(dump(value))
    assert text == "SelfRef(\n  me=" + STUB.format("SelfRef") + ",\n)"
    assert text.count("typing.cast(") == 1


@pytest.mark.unit
def test_ctypes_linked_cycle() -> None:
    node = Link(1)
    node.next = ctypes.pointer(node)
    text = normalize_addresses(dump(ctypes.pointer(node)))
    assert text == "ctypes.pointer(Link(\n  value=1,\n  next=ctypes.cast(0x0, ctypes.POINTER(Link)),\n))"


@pytest.mark.unit
def test_shared_references_collapse_after_first_expansion() -> None:
    shared = [1]
    text = normalize_addresses(dump([shared, shared]))
    assert text == "[\n  [\n    1,\n  ],\n  " + STUB.format("list") + ",\n]"


# == Custom formatters ==


@pytest.mark.unit
def test_custom_formatter_overrides_primitives() -> None:
    def as_hex(value: int, writer: Writer) -> None:
        writer.write(hex(value))

    assert dump([1, True], with_custom_formatter(int, as_hex)) == "[\n  0x1,\n  True,\n]"


@pytest.mark.unit
def test_custom_formatter_block_is_indented_in_place() -> None:
    text = dump([Money(12)], with_custom_formatter(Money, _money_formatter))
    assert text == "[\n  Money(\n    12\n  ),\n]"


@pytest.mark.unit
def test_custom_formatter_runs_for_pointer_to_type() -> None:
    seen: list[Any] = []

    def fmt(value: Any, writer: Writer) -> None:
        seen.append(value)
        writer.write("custom_inner()")

    inner = Inner(1, 0.0)
    assert dump(inner, with_custom_formatter(Inner, fmt)) == "custom_inner()"
    assert dump(ctypes.pointer(inner), with_custom_formatter(Inner, fmt)) == "custom_inner()"
    assert type(seen[0]) is Inner
    assert type(seen[1]) is ctypes.POINTER(Inner)


@pytest.mark.unit
def test_failing_custom_formatter_falls_back(caplog: pytest.LogCaptureFixture) -> None:
    def boom(value: Any, writer: Writer) -> None:
        writer.write("partial")
        raise RuntimeError("boom")

    with caplog.at_level(logging.ERROR):
        assert dump(Point(1, 2), with_custom_formatter(Point, boom)) == "Point(\n  x=1,\n  y=2,\n)"
    assert any(r.levelno == logging.ERROR and r.exc_info for r in caplog.records)


# == Properties ==


SAMPLES: list[Any] = [
    {"b": [1, 2.5, "x"], "a": {"n": None, "t": (True, b"\x00")}},
    Point(1, 2),
    Pair(3, "y"),
    {frozenset({1, 2}): OrderedDict(z=1), (1, "k"): deque([Color.GREEN])},
    defaultdict(set, {"s": {3, 1}}),
    [add, positional, make_point],
    Inner(7, 1.25),
    (ctypes.c_uint32 * 2)(1, 2),
    ValueError("x", [1]),
    Plain(),
    1e300,
    -0.0,
]


@pytest.mark.unit
@pytest.mark.parametrize("value", SAMPLES)
def test_output_parses_as_an_expression(value: Any) -> None:
    _assert_parses(dump(value))
    _assert_parses(dump(value, with_unsigned_display("binary"), with_indent(4), with_aligned_fields()))


@pytest.mark.unit
@pytest.mark.parametrize("value", SAMPLES)
def test_output_is_deterministic(value: Any) -> None:
    assert dump(value) == dump(value)


@pytest.mark.unit
def test_set_order_does_not_depend_on_construction_order() -> None:
    words = ["pear", "apple", "fig", "kiwi"]
    assert dump(set(words)) == dump(set(reversed(words)))


@pytest.mark.unit
def test_concurrent_dumps_are_independent() -> None:
    shared = [1, 2]
    value = {"f": make_point, "a": shared, "b": shared}

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: normalize_addresses(dump(value)), range(32)))
    assert len(set(results)) == 1
    assert results[0].count("typing.cast(") == 1
