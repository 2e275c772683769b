# File: src/mstair/litdump/xlogging/logger_formatter.py

import logging
import os
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Literal

import pytz
from colorama import Fore

import mstair.litdump.base.config as cfg
from mstair.litdump.base.constants import ENV_LOG_DATEFMT, ENV_LOG_FORMAT, ENV_LOG_TZ
from mstair.litdump.xlogging.logger_constants import K_COLOR, initialize_logger_constants


__all__ = ["CoreFormatter", "get_color_code", "initialize_root", "rgb_code"]


FormatStyle = Literal["%", "{", "$"]

DEFAULT_FORMAT = "%(asctime)s %(levelName)s %(name)s %(fileAndLine)s: %(message)s"
DEFAULT_DATEFMT = "%H:%M:%S"


def rgb_code(r: int, g: int, b: int) -> str:
    """
    Convert RGB values to ANSI escape code for terminal color output.

    :param r: Red component (0-255)
    :param g: Green component (0-255)
    :param b: Blue component (0-255)
    :return str: ANSI escape code for the specified RGB color.
    """
    return f"\033[38;2;{max(0, min(255, r))};{max(0, min(255, g))};{max(0, min(255, b))}m"


RGB_CALLER = rgb_code(4 << 4, 8 << 4, 10 << 4)
COLOR_MAP = {
    "fileAndLine": RGB_CALLER,
    "TRACE": rgb_code(96, 0, 64),
    "DEBUG": rgb_code(128, 128, 128),
    "INFO": rgb_code(184, 184, 216),
    "WARNING": rgb_code(192, 176, 0),
    "ERROR": rgb_code(224, 128, 0),
    "CRITICAL": rgb_code(255, 64, 64),
    None: Fore.RESET,
}


def get_color_code(key: Any = None) -> str:
    # No colour codes outside an interactive terminal
    if not cfg.in_desktop_mode():
        return ""

    if key in {"", "RESET"} or key is None:
        return Fore.RESET

    if key in COLOR_MAP:
        return COLOR_MAP[key]

    if isinstance(key, str) and key.startswith("#") and len(key) == 7:
        return rgb_code(*[int(key[i : i + 2], 16) for i in (1, 3, 5)])

    clean_key = str(key).upper().replace("BRIGHT", "LIGHT")
    if "LIGHT" in clean_key and not clean_key.endswith("_EX"):
        clean_key += "_EX"
    return getattr(Fore, clean_key, Fore.RESET)


class CoreFormatter(logging.Formatter):
    """
    Formatter that adds a `fileAndLine` field, colour-coded level names and
    timezone-aware timestamps.
    """

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        style: FormatStyle = "%",
        validate: bool = True,
        *,
        defaults: dict[str, Any] | None = None,
        tz: str | None = None,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt, style=style, validate=validate, defaults=defaults)
        self.tz = pytz.timezone(tz or os.environ.get(ENV_LOG_TZ) or "UTC")

    def format(self, record: logging.LogRecord) -> str:
        record.fileAndLine = self.format_fileAndLine(record.pathname, record.lineno)
        record.levelName = get_color_code(record.levelname) + record.levelname + get_color_code()
        try:
            message = super().format(record)
        except Exception as exc:
            return format_logging_error(record, exc)
        color_key = getattr(record, K_COLOR, record.levelname)
        return get_color_code(color_key) + message + get_color_code()

    @staticmethod
    def format_file(file: str) -> str:
        """Return `file` relative to the working directory when it lies below it."""
        if not file:
            return "<unknown file>"
        path = Path(file)
        try:
            return path.absolute().relative_to(Path.cwd()).as_posix()
        except ValueError:
            return path.as_posix()

    def format_fileAndLine(self, file: str, lineno: int) -> str:
        fileAndLine = f"{self.format_file(file)}:{lineno}"
        return get_color_code("fileAndLine") + fileAndLine + get_color_code()

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        stamp = datetime.fromtimestamp(record.created, self.tz)
        result = ""
        if datefmt:
            try:
                result = stamp.strftime(datefmt.replace(r"%-", "%"))
            except ValueError as e:
                print(f"{type(e).__name__}: {e}: '{datefmt}'", file=sys.stderr)
        return result or stamp.isoformat()


def format_logging_error(record: logging.LogRecord, exc: Exception) -> str:
    """
    Generate a formatted error message when log record formatting fails.

    :param record: The LogRecord that failed to format
    :param exc: The exception that occurred during formatting
    :return: Formatted error message string
    """
    from mstair.litdump.dumper.dump_api import dump

    posix_path = Path(getattr(record, "pathname", "<unknown>")).as_posix()
    line = getattr(record, "lineno", "?")
    message_lines = [
        "Internal error: Failed to format log record",
        f"{posix_path}:{line}",
        f"{type(exc).__name__}: {exc}",
        f"record.msg: {dump(getattr(record, 'msg', None))}",
        f"record.args: {dump(getattr(record, 'args', None))}",
        "",
    ]
    message_lines.extend(traceback.format_exc().splitlines())
    message_lines.append(".")
    return "\n>> " + "\n>> ".join(message_lines) + "\n\n"


def initialize_root(
    fmt: str | None = None,
    datefmt: str | None = None,
    level: int | str | None = None,
    *,
    force: bool = False,
) -> logging.Logger:
    """
    Install a single stderr handler using CoreFormatter on the root logger.

    Nothing in the package calls this on import; applications opt in.

    :param fmt: Format string, defaults to LOG_FORMAT or DEFAULT_FORMAT.
    :param datefmt: Date format, defaults to LOG_DATEFMT or DEFAULT_DATEFMT.
    :param level: Root level; left unchanged when None.
    :param force: Replace handlers already installed on the root logger.
    :return logging.Logger: The root logger.
    """
    initialize_logger_constants()
    root = logging.getLogger()
    if root.handlers and not force:
        return root
    for handler in list(root.handlers):
        root.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        CoreFormatter(
            fmt=fmt or os.environ.get(ENV_LOG_FORMAT) or DEFAULT_FORMAT,
            datefmt=datefmt or os.environ.get(ENV_LOG_DATEFMT) or DEFAULT_DATEFMT,
        )
    )
    root.addHandler(handler)
    if level is not None:
        root.setLevel(level)
    return root


# End of file: src/mstair/litdump/xlogging/logger_formatter.py
