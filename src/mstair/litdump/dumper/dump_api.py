# File: src/mstair/litdump/dumper/dump_api.py
"""
Literal-syntax dumps of arbitrary Python values.

`dump()` renders any value, including user-defined classes, ctypes data and
cyclic graphs, as text that parses as a single Python expression:

```
>>> print(dump({"b": 2, "a": 1}))
{
  "a": 1,
  "b": 2,
}
```

Mapping keys and set members are sorted, so equal inputs give identical text.
Values that cannot be written as literals (functions, queues, raw pointers,
repeated references) are rendered as typed stubs instead of failing.
"""

from __future__ import annotations

from typing import Any

from mstair.litdump.dumper.identity_tracker import IdentityTracker
from mstair.litdump.dumper.model import Value
from mstair.litdump.dumper.options import OptionMutator, resolve_options
from mstair.litdump.dumper.traversal import Dumper, TraversalContext
from mstair.litdump.dumper.zero_cache import ZERO_VALUE_CACHE


__all__ = [
    "dump",
]


def dump(value: Any, *mutators: OptionMutator) -> str:
    """
    Render `value` as Python literal syntax.

    Args:
        value: The object to render.
        *mutators: Option mutators such as `with_indent(4)`, applied in order.

    Returns:
        str: The dump text. Never raises for unsupported values; only internal
        invariant violations (AssertionError) and RecursionError propagate.
    """
    context = TraversalContext(
        Value(value),
        options=resolve_options(*mutators),
        tracker=IdentityTracker(),
        zero_cache=ZERO_VALUE_CACHE,
    )
    return Dumper(context).build().getvalue()


# End of file: src/mstair/litdump/dumper/dump_api.py
