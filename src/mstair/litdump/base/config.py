# File: src/mstair/litdump/base/config.py
"""
Environment and execution context detection utilities.

This module answers two questions for the rest of the package:
whether output is headed for an interactive display (so log lines may be
coloured), and what process-wide defaults the environment supplies. Flags
live in thread-local storage so overrides made by one test or thread do not
leak into another.

Exports:
- in_test_mode(): check or override whether code is in test mode.
- in_desktop_mode(): check or override whether code is in desktop mode.
- env_int(): read an integer environment variable with a fallback.
- default_indent_size(): the indent width new Options start from.
"""

from __future__ import annotations

import os
import sys
import threading
from dataclasses import dataclass
from typing import Literal

from mstair.litdump.base.constants import DEFAULT_INDENT, ENV_INDENT_SIZE
from mstair.litdump.base.types import int_from_string


_tls = threading.local()

_TEST_ENV_VARS = ("PYTEST_CURRENT_TEST", "PYTEST_RUNNING", "UNITTEST_RUNNING")


@dataclass
class TLSAttrs:
    """Thread-local flag overrides; None means "detect"."""

    test_mode: bool | None = None
    desktop_mode: bool | None = None


def _get_tls() -> TLSAttrs:
    """Return the current thread's TLSAttrs instance, initializing if needed."""
    try:
        return _tls.state
    except AttributeError:
        _tls.state = TLSAttrs()
        return _tls.state


def _override(
    flag: Literal["test_mode", "desktop_mode"],
    unset_override: bool,
    override: bool | None,
) -> bool | None:
    """Apply an unset/set request to `flag` and return the override in effect, if any."""
    tls = _get_tls()
    if unset_override:
        setattr(tls, flag, None)
    if override is not None:
        setattr(tls, flag, override)
    return getattr(tls, flag)


def in_test_mode(
    *,
    unset_override: bool = False,
    override: bool | None = None,
) -> bool:
    """
    Check if running under a test runner, with optional override.

    Detection order:
      1. Explicit override (thread-local).
      2. pytest or unittest imported.
      3. Test runner environment variables, or CI=true.

    :param unset_override: If True, clears any prior override for this thread.
    :param override: If True or False, sets the override for this thread.
    :return: True if test mode is active, False otherwise.
    """
    forced = _override("test_mode", unset_override, override)
    if forced is not None:
        return forced
    if "pytest" in sys.modules or "unittest" in sys.modules:
        return True
    return any(os.environ.get(k) for k in _TEST_ENV_VARS) or os.environ.get("CI") == "true"


def in_desktop_mode(
    *,
    unset_override: bool = False,
    override: bool | None = None,
) -> bool:
    """
    Determine if output should be formatted for interactive display.

    Rules:
      - Explicit override wins.
      - Returns False in test mode, so captured logs carry no colour codes.
      - Otherwise True when stderr is a terminal.

    :param unset_override: If True, clears any prior override for this thread.
    :param override: If True or False, sets the override for this thread.
    :return: True if desktop mode is active, False otherwise.
    """
    forced = _override("desktop_mode", unset_override, override)
    if forced is not None:
        return forced
    if in_test_mode():
        return False
    isatty = getattr(sys.stderr, "isatty", None)
    return bool(isatty is not None and isatty())


def env_int(name: str, default: int) -> int:
    """
    Read an integer from the environment.

    :param name: Environment variable name.
    :param default: Value used when the variable is unset, blank or not an integer.
    :return int: The parsed value or `default`.
    """
    return int_from_string(os.environ.get(name), default=default)


def default_indent_size() -> int:
    """Return the indent width new Options start from (never negative)."""
    return max(0, env_int(ENV_INDENT_SIZE, DEFAULT_INDENT))


# End of file: src/mstair/litdump/base/config.py
