"""
Line indexing for source text.

Splits text into 1-based lines with UTF-8 byte offsets, the unit used by
``Edit`` and ``Finding`` ranges throughout the engine.
"""

import bisect
import re
from dataclasses import dataclass
from typing import List, Tuple


# Same set of line terminators the JavaScript grammar recognises
LINEBREAK_PATTERN = re.compile(r"\r\n|[\r\n\u2028\u2029]")


@dataclass(frozen=True)
class Line:
    """A single source line (terminator excluded)."""
    index: int
    text: str
    start_offset: int


class LineIndex:
    """
    Indexed view of a document's lines.

    ``lines`` omits the synthetic empty line that follows a final line
    terminator, so "a\\n" has one line, not two. ``raw_line_count`` keeps
    the count before that adjustment.
    """

    def __init__(self, text: str):
        self.text = text
        self.byte_length = len(text.encode('utf-8'))

        raw: List[Line] = []
        offset = 0
        last = 0
        for match in LINEBREAK_PATTERN.finditer(text):
            segment = text[last:match.start()]
            raw.append(Line(len(raw) + 1, segment, offset))
            offset += len(segment.encode('utf-8')) + len(match.group().encode('utf-8'))
            last = match.end()
        raw.append(Line(len(raw) + 1, text[last:], offset))

        self.raw_line_count = len(raw)
        self._starts = [line.start_offset for line in raw]

        if raw[-1].text == "":
            raw = raw[:-1]
        self.lines: Tuple[Line, ...] = tuple(raw)

    def __len__(self) -> int:
        return len(self.lines)

    def __iter__(self):
        return iter(self.lines)

    def line(self, index: int) -> Line:
        """Return the 1-based line ``index``."""
        if index < 1 or index > len(self.lines):
            raise IndexError(f"line {index} out of range 1..{len(self.lines)}")
        return self.lines[index - 1]

    def line_start(self, index: int) -> int:
        """
        Byte offset where line ``index`` starts.

        Indices past the last line resolve to the document length.
        """
        if index > len(self.lines):
            return self.byte_length
        return self.lines[index - 1].start_offset

    def line_at(self, byte_offset: int) -> int:
        """1-based line containing ``byte_offset``."""
        return bisect.bisect_right(self._starts, byte_offset)

    def byte_to_linecol(self, byte_offset: int) -> Tuple[int, int]:
        """Convert a byte offset to (line, column), line 1-based and column 0-based."""
        byte_offset = max(0, min(byte_offset, self.byte_length))
        line = self.line_at(byte_offset)
        start = self._starts[line - 1]
        encoded = self.text.encode('utf-8')
        col = len(encoded[start:byte_offset].decode('utf-8', errors='ignore'))
        return line, col


def count_trailing_newlines(text: str) -> Tuple[int, int]:
    """
    Scan the end of ``text`` for line feeds, each optionally preceded by a
    carriage return.

    Returns:
        (count, start) - the number of newline sequences and the character
        index where the trailing run begins (``len(text)`` when there is none)
    """
    count = 0
    pos = len(text)
    while pos > 0 and text[pos - 1] == "\n":
        pos -= 1
        if pos > 0 and text[pos - 1] == "\r":
            pos -= 1
        count += 1
    return count, pos
