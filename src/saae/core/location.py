from bisect import bisect_right

from saae.models import SourceLocation


class LocationConverter:
    """Map 0-based character offsets to 1-based (line, column) pairs.

    Line starts are computed once; lookups are a binary search. Instances hold
    no mutable state after construction and may be shared between threads.
    ``\\n``, ``\\r\\n`` and a lone ``\\r`` all end a line.
    """

    def __init__(self, text: str) -> None:
        self._text = text
        starts = [0]
        index = 0
        length = len(text)
        while index < length:
            char = text[index]
            if char == "\r":
                index += 2 if text.startswith("\r\n", index) else 1
                starts.append(index)
            elif char == "\n":
                index += 1
                starts.append(index)
            else:
                index += 1
        self._line_starts = tuple(starts)

    @property
    def text_length(self) -> int:
        return len(self._text)

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def in_bounds(self, offset: int) -> bool:
        return 0 <= offset <= len(self._text)

    def clamp(self, offset: int) -> int:
        return min(max(offset, 0), len(self._text))

    def location(self, offset: int) -> SourceLocation:
        if not self.in_bounds(offset):
            raise ValueError(f"Offset {offset} is outside the document (length {len(self._text)})")
        line_index = bisect_right(self._line_starts, offset) - 1
        return SourceLocation(
            line=line_index + 1,
            column=offset - self._line_starts[line_index] + 1,
            offset=offset,
        )

    def line_start(self, line: int) -> int:
        if not 1 <= line <= len(self._line_starts):
            raise ValueError(f"Line {line} is outside the document ({len(self._line_starts)} lines)")
        return self._line_starts[line - 1]

    def offset(self, line: int, column: int) -> int:
        """Inverse of :meth:`location`; the column is clamped to the line."""
        start = self.line_start(line)
        return min(start + max(column, 1) - 1, self._line_content_end(line - 1))

    def line_text(self, line: int) -> str:
        """Text of a 1-based line without its line terminator."""
        start = self.line_start(line)
        return self._text[start : self._line_content_end(line - 1)]

    def lines(self) -> list[str]:
        return [self.line_text(number) for number in range(1, len(self._line_starts) + 1)]

    def _line_content_end(self, line_index: int) -> int:
        if line_index + 1 < len(self._line_starts):
            end = self._line_starts[line_index + 1]
        else:
            return len(self._text)
        while end > self._line_starts[line_index] and self._text[end - 1] in "\r\n":
            end -= 1
        return end
