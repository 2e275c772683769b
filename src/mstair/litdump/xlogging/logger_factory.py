# File: src/mstair/litdump/xlogging/logger_factory.py
"""
Logger factory for creating and configuring CoreLogger instances.

Loggers are plain members of the stdlib logging hierarchy (so caplog and host
application handlers keep working) with one extra level, TRACE. Their level
is resolved from the environment:

- `LOG_LEVEL_<NAME>` where NAME is the dotted logger name upper-cased with dots
  replaced by underscores, e.g. `LOG_LEVEL_MSTAIR_LITDUMP_DUMPER_TRAVERSAL`
- otherwise `LOG_LEVEL_<PREFIX>` for the nearest dotted ancestor
- otherwise `LOG_LEVEL`
- otherwise the level is left unset and inherited from the parent logger.
"""

import logging
import os
from typing import Any

from mstair.litdump.base.constants import ENV_LOG_LEVEL
from mstair.litdump.xlogging.logger_constants import TRACE, initialize_logger_constants


__all__ = [
    "CoreLogger",
    "create_logger",
    "level_from_environment",
]


class CoreLogger(logging.Logger):
    """A logging.Logger with a TRACE level below DEBUG."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name} ({logging.getLevelName(self.getEffectiveLevel())})>"

    def trace(self, msg: object, *args: Any, **kwargs: Any) -> None:
        if self.isEnabledFor(TRACE):
            kwargs.setdefault("stacklevel", 2)
            self._log(TRACE, msg, args, **kwargs)


def create_logger(
    name: str,
    *,
    level: int | str | None = None,
) -> CoreLogger:
    """
    Return a CoreLogger named `name`, creating it through logging.getLogger().

    An explicit `level` wins over the environment.

    :param name: Logger name, normally `__name__`.
    :param level: Optional level (int or name).
    :return CoreLogger: The configured logger.
    :raises TypeError: If a plain logging.Logger already holds `name`.
    """
    if not name:
        raise ValueError("Logger name must be a non-empty string")

    initialize_logger_constants()
    existing = logging.Logger.manager.loggerDict.get(name)
    if isinstance(existing, CoreLogger):
        logger = existing
    else:
        logger = _get_core_logger_from_logging(name)

    resolved = level if level is not None else level_from_environment(name)
    if resolved is not None:
        logger.setLevel(resolved)
    return logger


def _get_core_logger_from_logging(name: str) -> CoreLogger:
    """
    Create or retrieve a CoreLogger through logging.getLogger().

    Temporarily sets CoreLogger as the logger class to ensure proper integration
    with Python's logging hierarchy (parent relationships, propagation). Without
    this, manually created loggers would have parent=None and break caplog.

    :param name: Logger name.
    :return: CoreLogger instance.
    :raises TypeError: If getLogger() returns wrong type.
    """
    logging_class = logging.getLoggerClass()
    if logging_class is not CoreLogger:
        logging.setLoggerClass(CoreLogger)
    try:
        logger = logging.getLogger(name)
    finally:
        if logging_class is not CoreLogger:
            logging.setLoggerClass(logging_class)
    if not isinstance(logger, CoreLogger):
        raise TypeError(f"Failed to create CoreLogger: {logger!r}")
    return logger


def level_from_environment(name: str) -> int | None:
    """
    Resolve a log level for `name` from LOG_LEVEL_* variables.

    :param name: Dotted logger name.
    :return int | None: The level, or None when nothing applies.
    """
    parts = name.split(".")
    for end in range(len(parts), 0, -1):
        var = f"{ENV_LOG_LEVEL}_" + "_".join(parts[:end]).upper()
        level = _level_from_text(os.environ.get(var, ""))
        if level is not None:
            return level
    return _level_from_text(os.environ.get(ENV_LOG_LEVEL, ""))


def _level_from_text(text: str) -> int | None:
    text = text.strip()
    if not text:
        return None
    if text.isdigit():
        return int(text)
    return logging.getLevelNamesMapping().get(text.upper())


# End of file: src/mstair/litdump/xlogging/logger_factory.py
