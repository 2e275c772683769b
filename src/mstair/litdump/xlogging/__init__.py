"""
package: mstair.litdump.xlogging
"""

# <AUTOGEN_INIT>
from mstair.litdump.xlogging import (
    logger_constants,
    logger_factory,
    logger_formatter,
)


__all__ = [
    "logger_constants",
    "logger_factory",
    "logger_formatter",
]
# </AUTOGEN_INIT>
