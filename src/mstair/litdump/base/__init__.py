"""
package: mstair.litdump.base
"""

# <AUTOGEN_INIT>
from mstair.litdump.base import (
    config,
    constants,
    types,
)


__all__ = [
    "config",
    "constants",
    "types",
]
# </AUTOGEN_INIT>
