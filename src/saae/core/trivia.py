"""Lexing and classification of trivia (whitespace and comments).

The lexer understands the comment syntax shared by the C family of
languages: ``//`` and ``///`` line comments and (nestable) ``/* */`` and
``/** */`` block comments. Every line break becomes its own ``newline``
piece; text that is neither whitespace nor a comment is kept as an
``unexpected-text`` piece so that no character is ever lost.
"""

from collections.abc import Iterable, Sequence

from saae.models import Trivia, TriviaKind

_HORIZONTAL_WHITESPACE = " \t\v\f"
_ALL_WHITESPACE = _HORIZONTAL_WHITESPACE + "\r\n"


def _line_end(text: str, start: int) -> int:
    for index in range(start, len(text)):
        if text[index] in "\r\n":
            return index
    return len(text)


def _block_comment_end(text: str, start: int) -> int:
    depth = 0
    index = start
    while index < len(text):
        if text.startswith("/*", index):
            depth += 1
            index += 2
        elif text.startswith("*/", index):
            depth -= 1
            index += 2
            if depth == 0:
                return index
        else:
            index += 1
    return len(text)


def _is_comment_start(text: str, index: int) -> bool:
    return text.startswith("//", index) or text.startswith("/*", index)


def lex_trivia(text: str) -> tuple[Trivia, ...]:
    pieces: list[Trivia] = []
    index = 0
    length = len(text)
    while index < length:
        char = text[index]
        if char == "\r":
            end = index + 2 if text.startswith("\r\n", index) else index + 1
            kind = TriviaKind.NEWLINE
        elif char == "\n":
            end = index + 1
            kind = TriviaKind.NEWLINE
        elif char in _HORIZONTAL_WHITESPACE:
            end = index
            while end < length and text[end] in _HORIZONTAL_WHITESPACE:
                end += 1
            kind = TriviaKind.WHITESPACE
        elif text.startswith("//", index):
            end = _line_end(text, index)
            is_doc = text.startswith("///", index) and not text.startswith("////", index)
            kind = TriviaKind.DOC_LINE_COMMENT if is_doc else TriviaKind.LINE_COMMENT
        elif text.startswith("/*", index):
            end = _block_comment_end(text, index)
            is_doc = text.startswith("/**", index) and not (
                text.startswith("/**/", index) or text.startswith("/***", index)
            )
            kind = TriviaKind.DOC_BLOCK_COMMENT if is_doc else TriviaKind.BLOCK_COMMENT
        else:
            end = index + 1
            while end < length and text[end] not in _ALL_WHITESPACE and not _is_comment_start(text, end):
                end += 1
            kind = TriviaKind.UNEXPECTED_TEXT
        pieces.append(Trivia(kind=kind, text=text[index:end]))
        index = end
    return tuple(pieces)


def trivia_text(pieces: Iterable[Trivia]) -> str:
    return "".join(piece.text for piece in pieces)


def split_gap(pieces: Sequence[Trivia]) -> tuple[tuple[Trivia, ...], tuple[Trivia, ...]]:
    """Split the trivia between two tokens into (trailing, leading).

    Everything up to the first line break trails the previous token; the line
    break and everything after it leads the next one.
    """
    for index, piece in enumerate(pieces):
        if piece.is_newline:
            return tuple(pieces[:index]), tuple(pieces[index:])
    return tuple(pieces), ()


def indentation_of(pieces: Sequence[Trivia]) -> str:
    """Whitespace between the last line break (or the start) and the token."""
    indent: list[str] = []
    for piece in reversed(pieces):
        if not piece.is_whitespace:
            break
        indent.append(piece.text)
    return "".join(reversed(indent))


def parse_documentation(text: str) -> tuple[Trivia, ...]:
    """Turn free text into documentation comment pieces, one per line.

    A ``/** ... */`` block stays a single piece; ``///`` lines are kept,
    ``//`` lines are promoted to ``///`` and plain lines get a ``/// `` prefix.
    """
    stripped = text.strip()
    if not stripped:
        return ()
    if stripped.startswith("/**") and stripped.endswith("*/"):
        return (Trivia(kind=TriviaKind.DOC_BLOCK_COMMENT, text=stripped),)

    pieces: list[Trivia] = []
    for raw_line in stripped.splitlines():
        line = raw_line.strip()
        if line.startswith("///"):
            doc = line
        elif line.startswith("//"):
            doc = "///" + line[2:]
        elif not line:
            doc = "///"
        else:
            doc = f"/// {line}"
        pieces.append(Trivia(kind=TriviaKind.DOC_LINE_COMMENT, text=doc))
    return tuple(pieces)


def parse_header(text: str) -> tuple[Trivia, ...]:
    """Turn a file header into comment lines, each terminated by a newline."""
    pieces: list[Trivia] = []
    for raw_line in text.split("\n"):
        line = raw_line.strip()
        if line.startswith("///"):
            pieces.append(Trivia(kind=TriviaKind.DOC_LINE_COMMENT, text=line))
        elif line.startswith("//"):
            pieces.append(Trivia(kind=TriviaKind.LINE_COMMENT, text=line))
        elif line:
            pieces.append(Trivia(kind=TriviaKind.LINE_COMMENT, text=f"// {line}"))
        pieces.append(Trivia(kind=TriviaKind.NEWLINE, text="\n"))
    return tuple(pieces)
