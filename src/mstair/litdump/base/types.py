# File: src/mstair/litdump/base/types.py
"""
Small value helpers shared across the package.
"""

from typing import Any, Final, Self


def is_hashable(value: Any) -> bool:
    """True when `value` can be used as a dict key (types and annotations included)."""
    try:
        hash(value)
    except TypeError:
        return False
    return True


class Missing:
    """
    Marker for "no value at all", distinct from None.

    Falsy, compares equal only to itself and survives copy/pickle as the one
    instance, so `attr is MISSING` stays reliable.
    """

    __slots__ = ()

    _instance: "Missing | None" = None

    def __new__(cls) -> Self:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance  # type: ignore[return-value]

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> str:
        return "MISSING"

    def __copy__(self) -> Self:
        return self

    def __deepcopy__(self, _memo: dict[int, object]) -> Self:
        return self


MISSING: Final[Missing] = Missing()


def int_from_string(value: str | None, default: int = 0) -> int:
    """
    Parse `value` as an int.

    :param value: Text such as an environment variable's value.
    :param default: Returned when `value` is None, blank or not an integer.
    :return int: The parsed integer or `default`.
    """
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        return default


# End of file: src/mstair/litdump/base/types.py
