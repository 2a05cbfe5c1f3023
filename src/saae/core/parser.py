"""Build lossless syntax trees from tree-sitter parses.

tree-sitter only reports the byte ranges of its leaves; everything between
two leaves (whitespace, comments, stray characters) is lexed here and attached
to the neighbouring tokens as trivia, so rendering the tree reproduces the
source exactly. Syntax errors are read back from the converted tree: tree-sitter
marks skipped input with ``ERROR`` nodes and inserts zero-width "missing" leaves
where a required token was absent.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import cast

from tree_sitter import Node
from tree_sitter_language_pack import SupportedLanguage, get_parser

from saae.core.diagnostics import RawDiagnostic, RawFixIt, RawFixItChange, RawNote
from saae.core.languages import default_identity, normalize_language, resolve_language
from saae.core.tree import EOF_KIND, SyntaxTree, iter_tokens
from saae.core.trivia import lex_trivia, split_gap
from saae.models import Composite, SourceDocument, SyntaxNode, Token, Trivia, TriviaKind

logger = logging.getLogger(__name__)

ERROR_KIND = "ERROR"
UNKNOWN_KIND = "unknown"

# Comment nodes are dropped; their text is re-lexed as trivia from the gaps.
_COMMENT_NODE_TYPES = frozenset({"comment", "multiline_comment", "line_comment", "block_comment"})
_TOP_LEVEL_KINDS = frozenset({"source_file", "program", "translation_unit", "compilation_unit", "statements"})
_KIND_SUFFIXES = ("_declaration", "_statement", "_expression")
_NAMED_KIND = re.compile(r"[a-z]+(?:_[a-z]+)+")
_OPENERS = {")": "(", "}": "{", "]": "["}


@dataclass(eq=False)
class _PendingToken:
    kind: str
    content: str
    gap: tuple[Trivia, ...]
    is_missing: bool = False
    leading: tuple[Trivia, ...] = ()
    trailing: tuple[Trivia, ...] = ()

    def freeze(self) -> Token:
        return Token(
            kind=self.kind,
            content=self.content,
            leading_trivia=self.leading,
            trailing_trivia=self.trailing,
            is_missing=self.is_missing,
        )


@dataclass(eq=False)
class _PendingComposite:
    kind: str
    children: list["_PendingToken | _PendingComposite"] = field(default_factory=list)

    def freeze(self) -> Composite:
        return Composite(kind=self.kind, children=tuple(child.freeze() for child in self.children))


class _Converter:
    """Walks a tree-sitter tree once, collecting tokens and the trivia between them."""

    def __init__(self, source: bytes) -> None:
        self.source = source
        self.cursor = 0
        self.gap: list[Trivia] = []
        self.tokens: list[_PendingToken] = []

    def _decode(self, start: int, end: int) -> str:
        return self.source[start:end].decode("utf-8")

    def _add_token(self, parent: _PendingComposite, kind: str, content: str, is_missing: bool = False) -> None:
        token = _PendingToken(kind=kind, content=content, gap=tuple(self.gap), is_missing=is_missing)
        self.gap = []
        parent.children.append(token)
        self.tokens.append(token)

    def _absorb_gap(self, end: int, parent: _PendingComposite) -> None:
        if end <= self.cursor:
            return
        text = self._decode(self.cursor, end)
        self.cursor = end
        for piece in lex_trivia(text):
            if piece.kind is TriviaKind.UNEXPECTED_TEXT:
                self._add_token(parent, UNKNOWN_KIND, piece.text)
            else:
                self.gap.append(piece)

    def _visit(self, node: Node, parent: _PendingComposite) -> None:
        if node.type in _COMMENT_NODE_TYPES:
            return
        if node.child_count == 0:
            self._absorb_gap(node.start_byte, parent)
            start = max(node.start_byte, self.cursor)
            end = max(node.end_byte, start)
            self.cursor = end
            self._add_token(parent, node.type, self._decode(start, end), node.is_missing)
            return
        composite = _PendingComposite(kind=node.type)
        parent.children.append(composite)
        for child in node.children:
            self._visit(child, composite)

    def convert(self, root: Node) -> Composite:
        pending_root = _PendingComposite(kind=root.type)
        for child in root.children:
            self._visit(child, pending_root)
        self._absorb_gap(len(self.source), pending_root)
        self._add_token(pending_root, EOF_KIND, "")

        for index, token in enumerate(self.tokens):
            if index == 0:
                token.leading = token.gap
                continue
            self.tokens[index - 1].trailing, token.leading = split_gap(token.gap)
        return pending_root.freeze()


def parse_source(text: str, identity: str | None = None, language: str = "swift") -> SyntaxTree:
    resolved_language = normalize_language(language)
    source_bytes = text.encode("utf-8")
    parser = get_parser(cast(SupportedLanguage, resolved_language))
    ts_tree = parser.parse(source_bytes)

    converter = _Converter(source_bytes)
    root = converter.convert(ts_tree.root_node)
    document = SourceDocument(text=text, identity=identity or default_identity(resolved_language))
    logger.debug(
        "Parsed %s as %s: %d tokens, errors=%s",
        document.identity,
        resolved_language,
        len(converter.tokens),
        ts_tree.root_node.has_error,
    )
    return SyntaxTree(root, document, resolved_language)


def parse_file(path: str | Path, language: str | None = None) -> SyntaxTree:
    file_path = Path(path)
    resolved_language = resolve_language(language, file_path)

    try:
        source_bytes = file_path.read_bytes()
    except FileNotFoundError:
        raise FileNotFoundError(f"File not found: {path}") from None

    return parse_source(source_bytes.decode("utf-8"), identity=str(file_path), language=resolved_language)


# -- raw diagnostics --------------------------------------------------------


def _context_phrase(parent: Composite | None) -> str:
    if parent is None or parent.kind in _TOP_LEVEL_KINDS:
        return "at top level"
    kind = parent.kind
    for suffix in _KIND_SUFFIXES:
        if kind.endswith(suffix):
            kind = kind[: -len(suffix)]
            break
    return "in " + kind.replace("_", " ")


def _starts_body(node: SyntaxNode) -> bool:
    token = next((token for token in iter_tokens(node) if token.content), None)
    return token is not None and token.content == "{"


def _stranded_siblings(node: SyntaxNode, parent: Composite | None) -> list[SyntaxNode]:
    """Siblings after an ``ERROR`` in a declaration header, up to its ``{`` body.

    Error recovery often wraps only the first bad token; the rest of the
    header is kept as ordinary siblings. Without a body nothing is taken.
    """
    if parent is None or not parent.kind.endswith("_declaration"):
        return []
    following = list(parent.children)
    index = next(position for position, child in enumerate(following) if child is node)
    stranded: list[SyntaxNode] = []
    for sibling in following[index + 1 :]:
        if _starts_body(sibling):
            return stranded
        stranded.append(sibling)
    return []


def _unexpected_code(
    tree: SyntaxTree, node: SyntaxNode, parent: Composite | None, stranded: list[SyntaxNode]
) -> RawDiagnostic | None:
    span = tree.span_of(node)
    start = span.content_start
    end = max([span.content_end, *(tree.span_of(sibling).content_end for sibling in stranded)])
    code = tree.text[start:end]
    if not code.strip():
        return None
    # Only the first line is quoted so the message stays on one line.
    quoted = code.splitlines()[0].rstrip()
    return RawDiagnostic(
        message=f"unexpected code '{quoted}' {_context_phrase(parent)}",
        node=node,
        end_offset=end,
        fix_its=(
            RawFixIt(
                changes=(RawFixItChange(start=start, end=end),),
                message="remove unexpected code",
            ),
        ),
    )


def _matching_opener(token: Token, parent: Composite | None) -> Token | None:
    opener = _OPENERS.get(token.kind)
    if opener is None or parent is None:
        return None
    found: Token | None = None
    for sibling in parent.children:
        if sibling is token:
            return found
        if isinstance(sibling, Token) and sibling.content == opener:
            found = sibling
    return None


def _missing_token(tree: SyntaxTree, token: Token, parent: Composite | None) -> RawDiagnostic:
    offset = tree.span_of(token).content_start
    context = _context_phrase(parent)
    if _NAMED_KIND.fullmatch(token.kind):
        return RawDiagnostic(message=f"expected {token.kind.replace('_', ' ')} {context}", offset=offset)

    notes: tuple[RawNote, ...] = ()
    opener = _matching_opener(token, parent)
    if opener is not None:
        notes = (RawNote(message=f"to match this opening '{opener.content}'", node=opener),)
    return RawDiagnostic(
        message=f"expected '{token.kind}' {context}",
        offset=offset,
        fix_its=(
            RawFixIt(changes=(RawFixItChange(start=offset, end=offset, new_text=token.kind),), message=f"insert '{token.kind}'"),
        ),
        notes=notes,
    )


def collect_raw_diagnostics(tree: SyntaxTree) -> list[RawDiagnostic]:
    """Parser diagnostics for ``tree``, positioned by offsets and nodes of that tree."""
    diagnostics: list[RawDiagnostic] = []
    absorbed: list[SyntaxNode] = []
    for node, ancestors in tree.walk():
        if any(node is taken or any(ancestor is taken for ancestor in ancestors) for taken in absorbed):
            continue
        parent = ancestors[-1] if ancestors else None
        if node.kind == ERROR_KIND:
            if any(ancestor.kind == ERROR_KIND for ancestor in ancestors):
                continue
            stranded = _stranded_siblings(node, parent)
            absorbed.extend(stranded)
            diagnostic = _unexpected_code(tree, node, parent, stranded)
            if diagnostic is not None:
                diagnostics.append(diagnostic)
        elif isinstance(node, Token) and node.is_missing:
            diagnostics.append(_missing_token(tree, node, parent))
    logger.debug("Collected %d raw diagnostics for %s", len(diagnostics), tree.identity)
    return diagnostics
