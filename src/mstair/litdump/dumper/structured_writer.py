# File: src/mstair/litdump/dumper/structured_writer.py
"""
Depth-aware text buffer used by the traversal engine.

Indentation is absolute: a writer created at depth `d` indents every line it
starts with `d * indent_size` spaces, so text produced by a child writer can be
appended to its parent verbatim. The first line of any produced text starts at
the caller's cursor and is never indented by the writer itself.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from typing import Protocol, runtime_checkable

from mstair.litdump.base.constants import DEFAULT_INDENT


__all__ = [
    "StructuredWriter",
    "Writer",
    "WriterAdapter",
]


class StructuredWriter:
    """Accumulates dump text with block structure and optional entry alignment."""

    indent_size: int
    """Spaces per depth level."""

    depth: int
    """Current nesting depth."""

    align: bool
    """Pad entry values of one block to a common column."""

    def __init__(self, indent_size: int = DEFAULT_INDENT, *, depth: int = 0, align: bool = False) -> None:
        self.indent_size = indent_size
        self.depth = depth
        self.align = align
        self._chunks: list[str] = []
        self._entries: list[tuple[str, str]] = []

    def __repr__(self) -> str:
        return f"<{type(self).__name__} depth={self.depth} chunks={len(self._chunks)}>"

    def _emit(self, text: str) -> None:
        if text:
            self._chunks.append(text)

    def _flush_entries(self) -> None:
        if not self._entries:
            return
        entries, self._entries = self._entries, []
        width = max((len(head) for head, _ in entries if "\n" not in head), default=0)
        for head, value in entries:
            pad = " " * (width - len(head)) if "\n" not in head else ""
            self.write_indent()
            self._emit(head + pad + value + ",\n")

    @property
    def indentation(self) -> str:
        return " " * (self.indent_size * self.depth)

    def write(self, text: str) -> None:
        """Append raw text at the cursor."""
        self._flush_entries()
        self._emit(text)

    def write_format(self, fmt: str, *args: object) -> None:
        self.write(fmt % args)

    def write_indent(self) -> None:
        self._emit(self.indentation)

    def write_line(self, text: str) -> None:
        """Write `text` as a full line at the current depth."""
        self._flush_entries()
        self.write_indent()
        self._emit(text + "\n")

    @contextmanager
    def block(self, open: str = "{", close: str = "}") -> Iterator[StructuredWriter]:
        """
        Write `open` and a newline, then the body one level deeper, then `close`
        on its own line at the original depth.
        """
        self.write(open + "\n")
        self.depth += 1
        try:
            yield self
        finally:
            self._flush_entries()
            self.depth -= 1
        self.write_indent()
        self._emit(close)

    def write_block(self, body: Callable[[], object], open: str = "{", close: str = "}") -> None:
        with self.block(open, close):
            body()

    def write_item(self, text: str, sep: str = ",") -> None:
        """One element on its own line, followed by `sep`."""
        self.write_line(text + sep)

    def write_group(self, texts: Iterable[str], sep: str = ",") -> None:
        """Several elements on one line, each followed by `sep`."""
        self.write_line(" ".join(text + sep for text in texts))

    def write_entry(self, key: str, sep: str, value: str) -> None:
        """One `key<sep>value,` line; buffered until the block closes when aligning."""
        if self.align:
            self._entries.append((key + sep, value))
            return
        self.write_line(key + sep + value + ",")

    def write_reindented(self, text: str) -> None:
        """Write multi-line `text` produced at depth 0 so its later lines follow the current depth."""
        first, *rest = text.split("\n")
        self.write(first)
        for line in rest:
            self._emit("\n")
            if line:
                self.write_indent()
            self._emit(line)

    def getvalue(self) -> str:
        self._flush_entries()
        text = "".join(self._chunks)
        self._chunks = [text] if text else []
        return text

    def __str__(self) -> str:
        return self.getvalue()


@runtime_checkable
class Writer(Protocol):
    """The surface a custom formatter may write through."""

    def write(self, text: str) -> None: ...

    def write_block(self, text: str, open: str = "(", close: str = ")") -> None: ...


class WriterAdapter:
    """
    Restricts a StructuredWriter to `write()` and `write_block()` for custom formatters.

    `write_block()` puts each line of `text` on its own line one level deeper than
    the current depth, between `open` and `close`.
    """

    __slots__ = ("_writer",)

    def __init__(self, writer: StructuredWriter) -> None:
        self._writer = writer

    def write(self, text: str) -> None:
        self._writer.write(text)

    def write_block(self, text: str, open: str = "(", close: str = ")") -> None:
        with self._writer.block(open, close) as w:
            for line in text.split("\n"):
                w.write_line(line)


# End of file: src/mstair/litdump/dumper/structured_writer.py
