"""Position-tracked view over the input buffer.

A ``Span`` never copies the source: it is the whole buffer plus an offset,
with the line and column of that offset carried along so that every parser
result knows where it stopped.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Span:
    source: str
    offset: int = 0
    line: int = 1
    column: int = 1

    @property
    def rest(self) -> str:
        """Remaining unconsumed input."""
        return self.source[self.offset :]

    @property
    def at_end(self) -> bool:
        return self.offset >= len(self.source)

    @property
    def byte_offset(self) -> int:
        return len(self.source[: self.offset].encode("utf-8"))

    def peek(self) -> str:
        """Next character, or empty string at end of input."""
        return self.source[self.offset : self.offset + 1]

    def startswith(self, prefix: str) -> bool:
        return self.source.startswith(prefix, self.offset)

    def take(self, n: int) -> tuple["Span", str]:
        """Consume ``n`` characters, returning the advanced span and the text."""
        text = self.source[self.offset : self.offset + n]
        newlines = text.count("\n")
        if newlines:
            column = len(text) - text.rfind("\n")
        else:
            column = self.column + len(text)
        advanced = Span(self.source, self.offset + len(text), self.line + newlines, column)
        return advanced, text

    def current_line(self) -> str:
        """Full text of the line the span points into (without newline)."""
        start = self.source.rfind("\n", 0, self.offset) + 1
        end = self.source.find("\n", self.offset)
        if end == -1:
            end = len(self.source)
        return self.source[start:end].rstrip("\r")
