from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class TriviaKind(str, Enum):
    WHITESPACE = "whitespace"
    NEWLINE = "newline"
    LINE_COMMENT = "line-comment"
    DOC_LINE_COMMENT = "doc-line-comment"
    BLOCK_COMMENT = "block-comment"
    DOC_BLOCK_COMMENT = "doc-block-comment"
    UNEXPECTED_TEXT = "unexpected-text"


_DOC_KINDS = frozenset({TriviaKind.DOC_LINE_COMMENT, TriviaKind.DOC_BLOCK_COMMENT})
_COMMENT_KINDS = _DOC_KINDS | {TriviaKind.LINE_COMMENT, TriviaKind.BLOCK_COMMENT}


class Trivia(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: TriviaKind
    text: str

    @property
    def is_documentation(self) -> bool:
        return self.kind in _DOC_KINDS

    @property
    def is_comment(self) -> bool:
        return self.kind in _COMMENT_KINDS

    @property
    def is_newline(self) -> bool:
        return self.kind is TriviaKind.NEWLINE

    @property
    def is_whitespace(self) -> bool:
        return self.kind is TriviaKind.WHITESPACE


class Token(BaseModel):
    """Atomic leaf: literal content plus the trivia attached on either side."""

    model_config = ConfigDict(frozen=True)

    category: Literal["token"] = "token"
    kind: str
    content: str = ""
    leading_trivia: tuple[Trivia, ...] = ()
    trailing_trivia: tuple[Trivia, ...] = ()
    is_missing: bool = False

    def render(self) -> str:
        leading = "".join(piece.text for piece in self.leading_trivia)
        trailing = "".join(piece.text for piece in self.trailing_trivia)
        return f"{leading}{self.content}{trailing}"


class Composite(BaseModel):
    """Non-leaf node; renders as the ordered concatenation of its children."""

    model_config = ConfigDict(frozen=True)

    category: Literal["composite"] = "composite"
    kind: str
    children: tuple["SyntaxNode", ...] = ()

    def render(self) -> str:
        return "".join(child.render() for child in self.children)


SyntaxNode = Annotated[Token | Composite, Field(discriminator="category")]

Composite.model_rebuild()  # necessary for recursive types


class SourceDocument(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    identity: str = "source.swift"


class SourceLocation(BaseModel):
    model_config = ConfigDict(frozen=True)

    line: int
    column: int
    offset: int

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


class SourceSpan(BaseModel):
    model_config = ConfigDict(frozen=True)

    start_line: int
    start_column: int
    end_line: int | None = None
    end_column: int | None = None


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"
    REMARK = "remark"


class ContextLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    line_number: int
    text: str


class ReplaceChange(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["replace"] = "replace"
    span: SourceSpan
    original_text: str
    new_text: str


class InsertChange(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["insert"] = "insert"
    position: SourceLocation
    new_text: str


class DeleteChange(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["delete"] = "delete"
    span: SourceSpan
    original_text: str


class GenericChange(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["generic"] = "generic"
    description: str
    details: str = ""


FixItChange = Annotated[
    ReplaceChange | InsertChange | DeleteChange | GenericChange,
    Field(discriminator="type"),
]


class FixItSuggestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str
    changes: tuple[FixItChange, ...] = ()


class Note(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str
    location: SourceLocation | None = None
    source_line_text: str | None = None


class DiagnosticRecord(BaseModel):
    """A position-verified syntax diagnostic, ready for rendering."""

    model_config = ConfigDict(frozen=True)

    message: str
    severity: Severity = Severity.ERROR
    location: SourceLocation
    span: SourceSpan
    offending_text: str | None = None
    node_location: SourceLocation | None = None
    source_line_text: str = ""
    caret_line: str = "^"
    context_lines: tuple[ContextLine, ...] = ()
    context_range: str = "0-0"
    fix_its: tuple[FixItSuggestion, ...] = ()
    notes: tuple[Note, ...] = ()
    is_approximate: bool = False
