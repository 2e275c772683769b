from __future__ import annotations

from typing import Final


DEFAULT_INDENT: Final[int] = 2
"""Spaces per nesting level in a dump unless overridden."""

# Environment variable names

ENV_INDENT_SIZE: Final[str] = "LITDUMP_INDENT_SIZE"
ENV_LOG_LEVEL: Final[str] = "LOG_LEVEL"
ENV_LOG_FORMAT: Final[str] = "LOG_FORMAT"
ENV_LOG_DATEFMT: Final[str] = "LOG_DATEFMT"
ENV_LOG_TZ: Final[str] = "LOG_TZ"

# Text fragments shared by renderers

NONE_LITERAL: Final[str] = "None"
TRUE_LITERAL: Final[str] = "True"
FALSE_LITERAL: Final[str] = "False"
FUNC_BODY_PLACEHOLDER: Final[str] = "# ..."
