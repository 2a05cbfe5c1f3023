"""Unit tests for Pydantic models."""

import pytest
from pydantic import ValidationError

from saae.models import (
    Composite,
    DiagnosticRecord,
    FixItSuggestion,
    InsertChange,
    SourceLocation,
    SourceSpan,
    Token,
    Trivia,
    TriviaKind,
)


class TestTrivia:
    """Tests for trivia classification."""

    def test_doc_comments_are_documentation_and_comments(self) -> None:
        piece = Trivia(kind=TriviaKind.DOC_LINE_COMMENT, text="/// doc")
        assert piece.is_documentation
        assert piece.is_comment

    def test_plain_comment_is_not_documentation(self) -> None:
        piece = Trivia(kind=TriviaKind.LINE_COMMENT, text="// note")
        assert piece.is_comment
        assert not piece.is_documentation

    def test_whitespace_and_newline_flags(self) -> None:
        assert Trivia(kind=TriviaKind.WHITESPACE, text="  ").is_whitespace
        assert Trivia(kind=TriviaKind.NEWLINE, text="\r\n").is_newline


class TestSyntaxNodes:
    """Tests for Token and Composite."""

    def test_token_renders_trivia_around_content(self) -> None:
        token = Token(
            kind="identifier",
            content="x",
            leading_trivia=(Trivia(kind=TriviaKind.WHITESPACE, text="  "),),
            trailing_trivia=(Trivia(kind=TriviaKind.LINE_COMMENT, text="// x"),),
        )
        assert token.render() == "  x// x"

    def test_composite_renders_children_in_order(self) -> None:
        node = Composite(kind="pair", children=(Token(kind="a", content="a"), Token(kind="b", content="b")))
        assert node.render() == "ab"

    def test_missing_token_renders_nothing(self) -> None:
        assert Token(kind=")", is_missing=True).render() == ""

    def test_nodes_are_frozen(self) -> None:
        token = Token(kind="identifier", content="x")
        with pytest.raises(ValidationError):
            token.content = "y"  # type: ignore[misc]

    def test_children_validate_by_category(self) -> None:
        node = Composite.model_validate(
            {
                "kind": "call_expression",
                "children": [
                    {"category": "token", "kind": "identifier", "content": "f"},
                    {"category": "composite", "kind": "arguments", "children": []},
                ],
            }
        )
        assert isinstance(node.children[0], Token)
        assert isinstance(node.children[1], Composite)

    def test_unknown_category_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Composite.model_validate({"kind": "x", "children": [{"category": "leaf", "kind": "y"}]})


class TestDiagnosticRecord:
    """Tests for the diagnostic record."""

    def test_location_formats_as_line_and_column(self) -> None:
        assert str(SourceLocation(line=3, column=7, offset=20)) == "3:7"

    def test_serializes_fix_its_with_change_type(self) -> None:
        record = DiagnosticRecord(
            message="expected ';'",
            location=SourceLocation(line=1, column=5, offset=4),
            span=SourceSpan(start_line=1, start_column=5),
            fix_its=(
                FixItSuggestion(
                    message="insert `;`",
                    changes=(InsertChange(position=SourceLocation(line=1, column=5, offset=4), new_text=";"),),
                ),
            ),
        )
        data = record.model_dump(mode="json")
        assert data["severity"] == "error"
        assert data["fix_its"][0]["changes"][0]["type"] == "insert"
        assert data["span"]["end_line"] is None
