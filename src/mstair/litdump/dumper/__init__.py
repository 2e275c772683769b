"""
package: mstair.litdump.dumper
"""

# <AUTOGEN_INIT>
from mstair.litdump.dumper import (
    dump_api,
    identity_tracker,
    key_sort,
    kind,
    model,
    options,
    structured_writer,
    traversal,
    zero_cache,
)


__all__ = [
    "dump_api",
    "identity_tracker",
    "key_sort",
    "kind",
    "model",
    "options",
    "structured_writer",
    "traversal",
    "zero_cache",
]
# </AUTOGEN_INIT>
