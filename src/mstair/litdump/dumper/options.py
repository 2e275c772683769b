# File: src/mstair/litdump/dumper/options.py
"""
Per-dump configuration, built by folding mutators over the defaults.

```
text = dump(value, with_indent(4), with_unsigned_display("hex"))
```

Each mutator is a pure `Options -> Options` function. Mutators do not see
each other's effect except that the last write to the same key wins.
"""

from __future__ import annotations

import dataclasses
import functools
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, TypeAlias

from mstair.litdump.base.config import default_indent_size
from mstair.litdump.dumper.structured_writer import Writer


__all__ = [
    "CustomFormatter",
    "OptionMutator",
    "Options",
    "UnsignedDisplay",
    "resolve_options",
    "with_aligned_fields",
    "with_custom_formatter",
    "with_escaped_unicode",
    "with_exported_only",
    "with_indent",
    "with_list_group_size",
    "with_unsigned_display",
]


CustomFormatter: TypeAlias = Callable[[Any, Writer], None]
"""
Renders one value of an exact type through a Writer, replacing the built-in rule.

:param value: The value being dumped (a ctypes pointer when reached by pointer).
:param writer: Write surface positioned where the value's text belongs.
"""


class UnsignedDisplay(Enum):
    """How unsigned ctypes integers are rendered."""

    DECIMAL = "decimal"
    BINARY = "binary"
    HEX = "hex"


def _frozen_map() -> Mapping[Any, Any]:
    return MappingProxyType({})


@dataclass(frozen=True, kw_only=True)
class Options:
    """Resolved configuration of one dump. Never mutated once built."""

    exported_only: bool = False
    """Skip struct fields whose names start with an underscore."""

    indent_size: int = field(default_factory=default_indent_size)
    """Spaces per nesting level."""

    unsigned_display: UnsignedDisplay = UnsignedDisplay.DECIMAL

    custom_formatters: Mapping[type, CustomFormatter] = field(default_factory=_frozen_map)
    """Exact type -> formatter, consulted before any built-in rule."""

    list_group_sizes: Mapping[type, int] = field(default_factory=_frozen_map)
    """Element type -> elements per line for arrays and lists."""

    align_fields: bool = False
    """Pad entry values of a block to a common column."""

    escape_unicode: bool = False
    """Escape non-ASCII characters in strings."""

    def formatter_for(self, tp: type) -> CustomFormatter | None:
        return self.custom_formatters.get(tp)

    def group_size_for(self, tp: type | None) -> int:
        if tp is None:
            return 1
        return self.list_group_sizes.get(tp, 1)


OptionMutator: TypeAlias = Callable[[Options], Options]


def resolve_options(*mutators: OptionMutator) -> Options:
    """Apply `mutators` in order to the default Options."""
    return functools.reduce(lambda options, mutate: mutate(options), mutators, Options())


def with_exported_only() -> OptionMutator:
    """Skip struct fields whose names start with `_`."""

    def _mutate(options: Options) -> Options:
        return dataclasses.replace(options, exported_only=True)

    return _mutate


def with_indent(n: int) -> OptionMutator:
    """
    Use `n` spaces per nesting level.

    :raises ValueError: If `n` is negative.
    """
    if isinstance(n, bool) or not isinstance(n, int):
        raise TypeError(f"indent must be an int, got {type(n).__name__}")
    if n < 0:
        raise ValueError(f"indent must be >= 0, got {n}")

    def _mutate(options: Options) -> Options:
        return dataclasses.replace(options, indent_size=n)

    return _mutate


def with_unsigned_display(mode: UnsignedDisplay | str) -> OptionMutator:
    """
    Render unsigned integers as decimal, binary or hex.

    :param mode: An UnsignedDisplay member or its value ("decimal", "binary", "hex").
    :raises ValueError: If `mode` names no display mode.
    """
    display = mode if isinstance(mode, UnsignedDisplay) else UnsignedDisplay(mode)

    def _mutate(options: Options) -> Options:
        return dataclasses.replace(options, unsigned_display=display)

    return _mutate


def with_list_group_size(elem_type: type, n: int) -> OptionMutator:
    """Pack `n` elements per line for arrays and lists whose elements are all `elem_type`; n < 2 means one per line."""
    if not isinstance(elem_type, type):
        raise TypeError(f"element type must be a type, got {elem_type!r}")
    size = max(1, n)

    def _mutate(options: Options) -> Options:
        return dataclasses.replace(
            options,
            list_group_sizes=MappingProxyType({**options.list_group_sizes, elem_type: size}),
        )

    return _mutate


def with_custom_formatter(exact_type: type, formatter: CustomFormatter) -> OptionMutator:
    """Render values whose exact type is `exact_type` with `formatter`."""
    if not isinstance(exact_type, type):
        raise TypeError(f"formatter target must be a type, got {exact_type!r}")
    if not callable(formatter):
        raise TypeError(f"formatter must be callable, got {type(formatter).__name__}")

    def _mutate(options: Options) -> Options:
        return dataclasses.replace(
            options,
            custom_formatters=MappingProxyType({**options.custom_formatters, exact_type: formatter}),
        )

    return _mutate


def with_aligned_fields() -> OptionMutator:
    def _mutate(options: Options) -> Options:
        return dataclasses.replace(options, align_fields=True)

    return _mutate


def with_escaped_unicode() -> OptionMutator:
    def _mutate(options: Options) -> Options:
        return dataclasses.replace(options, escape_unicode=True)

    return _mutate


# End of file: src/mstair/litdump/dumper/options.py
