"""Immutable syntax tree snapshot and its traversal/position helpers."""

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from functools import cached_property
from typing import TYPE_CHECKING

from saae.core.location import LocationConverter
from saae.core.trivia import lex_trivia
from saae.models import Composite, DiagnosticRecord, SourceDocument, SyntaxNode, Token

if TYPE_CHECKING:
    from saae.core.paths import AddressingDomain
    from saae.core.mutation import InsertionPosition

EOF_KIND = "eof"


@dataclass(frozen=True)
class NodeSpan:
    """Character offsets of a node inside one tree snapshot.

    ``full_*`` include the node's leading/trailing trivia, ``content_*``
    exclude it.
    """

    full_start: int
    content_start: int
    content_end: int
    full_end: int


def make_token(kind: str, content: str, leading: str = "", trailing: str = "") -> Token:
    return Token(
        kind=kind,
        content=content,
        leading_trivia=lex_trivia(leading),
        trailing_trivia=lex_trivia(trailing),
    )


def iter_tokens(node: SyntaxNode) -> Iterator[Token]:
    match node:
        case Token():
            yield node
        case Composite():
            for child in node.children:
                yield from iter_tokens(child)


def first_token(node: SyntaxNode) -> Token | None:
    return next(iter_tokens(node), None)


def last_token(node: SyntaxNode) -> Token | None:
    found: Token | None = None
    for token in iter_tokens(node):
        found = token
    return found


def walk(node: SyntaxNode, ancestors: tuple[Composite, ...] = ()) -> Iterator[tuple[SyntaxNode, tuple[Composite, ...]]]:
    """Pre-order, left-to-right traversal yielding each node with its ancestors."""
    yield node, ancestors
    if isinstance(node, Composite):
        trail = (*ancestors, node)
        for child in node.children:
            yield from walk(child, trail)


class SyntaxTree:
    """A parsed source file: a root composite over an immutable document.

    Trees are never modified. Every edit returns a new ``SyntaxTree``; paths
    computed against one snapshot are not guaranteed to address the same node
    in a tree produced by an edit.
    """

    def __init__(self, root: Composite, document: SourceDocument, language: str = "swift") -> None:
        self.root = root
        self.document = document
        self.language = language

    @classmethod
    def from_root(cls, root: Composite, identity: str = "source.swift", language: str = "swift") -> "SyntaxTree":
        return cls(root, SourceDocument(text=root.render(), identity=identity), language)

    def derive(self, root: Composite) -> "SyntaxTree":
        """A new snapshot over ``root`` that keeps this tree's identity and language."""
        return SyntaxTree.from_root(root, identity=self.document.identity, language=self.language)

    @property
    def text(self) -> str:
        return self.document.text

    @property
    def identity(self) -> str:
        return self.document.identity

    def render(self) -> str:
        return self.root.render()

    def serialize_to_code(self) -> str:
        return self.render()

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"SyntaxTree(identity={self.identity!r}, language={self.language!r}, length={len(self.text)})"

    def walk(self) -> Iterator[tuple[SyntaxNode, tuple[Composite, ...]]]:
        return walk(self.root)

    def tokens(self) -> Iterator[Token]:
        return iter_tokens(self.root)

    @cached_property
    def location_converter(self) -> LocationConverter:
        return LocationConverter(self.text)

    @cached_property
    def _spans(self) -> dict[int, NodeSpan]:
        spans: dict[int, NodeSpan] = {}
        cursor = 0

        # Returns whether the subtree holds at least one token.
        def visit(node: SyntaxNode) -> bool:
            nonlocal cursor
            match node:
                case Token():
                    full_start = cursor
                    content_start = full_start + sum(len(piece.text) for piece in node.leading_trivia)
                    content_end = content_start + len(node.content)
                    cursor = content_end + sum(len(piece.text) for piece in node.trailing_trivia)
                    spans[id(node)] = NodeSpan(full_start, content_start, content_end, cursor)
                    return True
                case Composite():
                    full_start = cursor
                    first_content: int | None = None
                    last_content = full_start
                    for child in node.children:
                        if visit(child):
                            child_span = spans[id(child)]
                            if first_content is None:
                                first_content = child_span.content_start
                            last_content = child_span.content_end
                    if first_content is None:
                        spans[id(node)] = NodeSpan(full_start, full_start, cursor, cursor)
                        return False
                    spans[id(node)] = NodeSpan(full_start, first_content, last_content, cursor)
                    return True
            return False

        visit(self.root)
        return spans

    def span_of(self, node: SyntaxNode) -> NodeSpan:
        """Offsets of ``node``, which must belong to this snapshot (matched by identity)."""
        try:
            return self._spans[id(node)]
        except KeyError:
            raise ValueError(f"Node of kind {node.kind!r} does not belong to this tree") from None

    def contains(self, node: SyntaxNode) -> bool:
        return id(node) in self._spans

    def content_text(self, node: SyntaxNode) -> str:
        """Text of ``node`` without the trivia at its outer edges."""
        span = self.span_of(node)
        return self.text[span.content_start : span.content_end]

    def ancestors_of(self, node: SyntaxNode) -> tuple[Composite, ...]:
        for candidate, ancestors in self.walk():
            if candidate is node:
                return ancestors
        raise ValueError(f"Node of kind {node.kind!r} does not belong to this tree")

    # -- diagnostics -------------------------------------------------------

    @property
    def syntax_errors(self) -> list[DiagnosticRecord]:
        from saae.core.diagnostics import DiagnosticExtractor
        from saae.core.parser import collect_raw_diagnostics

        return DiagnosticExtractor(self).extract(collect_raw_diagnostics(self))

    @property
    def has_syntax_errors(self) -> bool:
        return bool(self.syntax_errors)

    @property
    def syntax_error_count(self) -> int:
        return len(self.syntax_errors)

    def reparse(self) -> "SyntaxTree":
        """Parse the rendered text again, e.g. to refresh diagnostics after edits."""
        from saae.core.parser import parse_source

        return parse_source(self.render(), identity=self.identity, language=self.language)

    # -- editing -----------------------------------------------------------

    def replace_node(self, path: str, new_node: SyntaxNode, domain: "AddressingDomain | None" = None) -> "SyntaxTree":
        from saae.core.mutation import replace_node

        return replace_node(self, path, new_node, domain=domain)

    def delete_node(self, path: str, domain: "AddressingDomain | None" = None) -> tuple[str, "SyntaxTree"]:
        from saae.core.mutation import delete_node

        return delete_node(self, path, domain=domain)

    def insert_nodes(
        self,
        new_nodes: Sequence[SyntaxNode],
        anchor_path: str,
        position: "InsertionPosition",
        domain: "AddressingDomain | None" = None,
    ) -> "SyntaxTree":
        from saae.core.mutation import insert_nodes

        return insert_nodes(self, new_nodes, anchor_path, position, domain=domain)

    def modify_leading_trivia(self, path: str, new_text: str | None) -> "SyntaxTree":
        from saae.core.mutation import modify_leading_trivia

        return modify_leading_trivia(self, path, new_text)
