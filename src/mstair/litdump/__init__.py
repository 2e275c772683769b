"""
package: mstair.litdump
"""

# <AUTOGEN_INIT>
from mstair.litdump import (
    base,
    dumper,
    xlogging,
)


__all__ = [
    "base",
    "dumper",
    "xlogging",
]
# </AUTOGEN_INIT>

__version__ = "0.1.0"
