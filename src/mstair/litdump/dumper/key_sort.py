# File: src/mstair/litdump/dumper/key_sort.py
"""
Deterministic ordering for mapping keys and set members.

Keys of mixed types are grouped by rank (None, bool, numbers, str, bytes,
tuples, enums, frozensets, types, everything else) and ordered naturally within
their group, so the order never depends on hash or insertion order.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal
from enum import Enum
from fractions import Fraction
from typing import Any

from mstair.litdump.dumper.model import type_name


__all__ = ["sort_key", "sorted_keys"]


_RANK_NONE = 0
_RANK_BOOL = 1
_RANK_NUMBER = 2
_RANK_STR = 3
_RANK_BYTES = 4
_RANK_TUPLE = 5
_RANK_ENUM = 6
_RANK_FROZENSET = 7
_RANK_TYPE = 8
_RANK_OTHER = 9


def _safe_repr(obj: object) -> str:
    try:
        return repr(obj)
    except Exception:
        return f"<{type_name(type(obj))}>"


def sort_key(obj: Any) -> tuple[int, tuple[Any, ...], str]:
    """
    Return a key comparable with the key of any other hashable value.

    :param obj: A mapping key or set member.
    :return tuple: `(rank, payload, text)`; payloads share one shape per rank.
    """
    if obj is None:
        return (_RANK_NONE, (), "")
    if isinstance(obj, Enum):
        return (_RANK_ENUM, (type_name(type(obj)), sort_key(obj.value)), "")
    if isinstance(obj, bool):
        return (_RANK_BOOL, (int(obj),), "")
    if isinstance(obj, (int, float, Fraction, Decimal)):
        if obj != obj:  # NaN sorts after every number
            return (_RANK_NUMBER, (1, 0, 0), "")
        return (_RANK_NUMBER, (0, obj, 0), "")
    if isinstance(obj, complex):
        return (_RANK_NUMBER, (0, obj.real, obj.imag), "")
    if isinstance(obj, str):
        return (_RANK_STR, (str(obj),), "")
    if isinstance(obj, (bytes, bytearray)):
        return (_RANK_BYTES, (bytes(obj),), "")
    if isinstance(obj, tuple):
        return (_RANK_TUPLE, tuple(sort_key(item) for item in obj), "")
    if isinstance(obj, frozenset):
        return (_RANK_FROZENSET, tuple(sorted(sort_key(item) for item in obj)), "")
    if isinstance(obj, type):
        return (_RANK_TYPE, (type_name(obj),), "")
    return (_RANK_OTHER, (type_name(type(obj)),), _safe_repr(obj))


def sorted_keys(keys: Iterable[Any]) -> list[Any]:
    """Return `keys` in deterministic order."""
    return sorted(keys, key=sort_key)


# End of file: src/mstair/litdump/dumper/key_sort.py
