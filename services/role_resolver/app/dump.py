from __future__ import annotations

import io
from typing import Protocol, TextIO


class IndentingWriter:
    """Text sink that prefixes every line with the current indent."""

    def __init__(self, out: TextIO, single_indent: str = "  ") -> None:
        self._out = out
        self._single_indent = single_indent
        self._indent = ""
        self._at_line_start = True

    def increase_indent(self) -> IndentingWriter:
        self._indent += self._single_indent
        return self

    def decrease_indent(self) -> IndentingWriter:
        self._indent = self._indent[: max(0, len(self._indent) - len(self._single_indent))]
        return self

    def write(self, value: object = "") -> None:
        text = str(value)
        if not text:
            return
        lines = text.split("\n")
        for idx, line in enumerate(lines):
            if idx > 0:
                self._out.write("\n")
                self._at_line_start = True
            if line:
                if self._at_line_start:
                    self._out.write(self._indent)
                    self._at_line_start = False
                self._out.write(line)

    def write_line(self, value: object = "") -> None:
        self.write(value)
        self._out.write("\n")
        self._at_line_start = True


class Dumpable(Protocol):
    def dump(self, writer: IndentingWriter) -> None:
        ...


def render_dump(dumpable: Dumpable, indent_levels: int = 0) -> str:
    buffer = io.StringIO()
    writer = IndentingWriter(buffer)
    for _ in range(indent_levels):
        writer.increase_indent()
    dumpable.dump(writer)
    return buffer.getvalue()
