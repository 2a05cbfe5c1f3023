"""Path-addressed structural edits producing new immutable trees.

Every operation resolves its path against the given snapshot, validates the
edit against the position's grammatical role, then copies only the ancestor
chain from the root down to the edited slot; untouched subtrees are shared
with the input tree. The input tree is never changed.
"""

import logging
from collections.abc import Callable, Sequence
from enum import Enum
from typing import cast

from saae.core.paths import (
    AddressingDomain,
    ResolvedNode,
    SelectionStrategy,
    Trail,
    find_tokens_at_line,
    resolve_path,
)
from saae.core.roles import insertion_problem, replacement_problem
from saae.core.tree import EOF_KIND, SyntaxTree
from saae.core.trivia import indentation_of, parse_documentation, parse_header, trivia_text
from saae.errors import (
    ASTModificationFailedError,
    InvalidInsertionPointError,
    InvalidReplacementContextError,
    NodeNotFoundError,
)
from saae.models import Composite, SyntaxNode, Token, Trivia, TriviaKind

logger = logging.getLogger(__name__)


class InsertionPosition(str, Enum):
    BEFORE = "before"
    AFTER = "after"


def _rebuild(trail: Trail, children: Sequence[SyntaxNode]) -> Composite:
    parent, _ = trail[-1]
    node = parent.model_copy(update={"children": tuple(children)})
    for ancestor, index in reversed(trail[:-1]):
        siblings = list(ancestor.children)
        siblings[index] = node
        node = ancestor.model_copy(update={"children": tuple(siblings)})
    return node


def _finish(tree: SyntaxTree, new_root: Composite, start: int, end: int, new_text: str, operation: str) -> SyntaxTree:
    """Check that exactly ``[start, end)`` changed to ``new_text``, then wrap the root."""
    expected = tree.text[:start] + new_text + tree.text[end:]
    rendered = new_root.render()
    if rendered != expected:
        raise ASTModificationFailedError(
            f"{operation} changed text outside offsets {start}-{end} of {tree.identity}"
        )
    logger.debug("%s rewrote offsets %d-%d of %s", operation, start, end, tree.identity)
    return tree.derive(new_root)


def _resolve(tree: SyntaxTree, path: str, domain: AddressingDomain | None) -> ResolvedNode:
    return resolve_path(tree.root, path, domain or AddressingDomain.TOKEN)


def _require_node(node: object, error: Callable[[str], Exception]) -> None:
    if not isinstance(node, Token | Composite):
        raise error(f"{type(node).__name__} is not a syntax node")


def _detached(node: SyntaxNode) -> SyntaxNode:
    """A private copy, so no node instance occurs twice in one tree."""
    return node.model_copy(deep=True)


def replace_node(
    tree: SyntaxTree, path: str, new_node: SyntaxNode, domain: AddressingDomain | None = None
) -> SyntaxTree:
    """Replace the node at ``path``.

    Tokens are only replaced by tokens, and keep the replaced token's
    trivia; composites must fit the grammatical role of their slot.
    """
    resolved = _resolve(tree, path, domain)
    target = resolved.node
    _require_node(new_node, InvalidReplacementContextError)

    problem = replacement_problem(target, resolved.parent, new_node)
    if problem is not None:
        raise InvalidReplacementContextError(f"path {path}: {problem}")

    if isinstance(target, Token) and isinstance(new_node, Token):
        new_node = new_node.model_copy(
            update={"leading_trivia": target.leading_trivia, "trailing_trivia": target.trailing_trivia}
        )
    else:
        new_node = _detached(new_node)

    children = list(resolved.parent.children)
    children[resolved.index_in_parent] = new_node
    span = tree.span_of(target)
    return _finish(
        tree, _rebuild(resolved.trail, children), span.full_start, span.full_end, new_node.render(), "replace"
    )


def delete_node(tree: SyntaxTree, path: str, domain: AddressingDomain | None = None) -> tuple[str, SyntaxTree]:
    """Remove the node at ``path`` and return its exact text with the new tree.

    Neighbouring trivia is left as it is.
    """
    resolved = _resolve(tree, path, domain)
    target = resolved.node
    if isinstance(target, Token) and target.kind == EOF_KIND:
        raise InvalidReplacementContextError(f"path {path}: the end-of-file token cannot be deleted")

    removed = target.render()
    children = list(resolved.parent.children)
    del children[resolved.index_in_parent]
    span = tree.span_of(target)
    new_tree = _finish(tree, _rebuild(resolved.trail, children), span.full_start, span.full_end, "", "delete")
    return removed, new_tree


def insert_nodes(
    tree: SyntaxTree,
    new_nodes: Sequence[SyntaxNode],
    anchor_path: str,
    position: InsertionPosition,
    domain: AddressingDomain | None = None,
) -> SyntaxTree:
    """Splice ``new_nodes`` into the anchor's parent, before or after the anchor."""
    resolved = _resolve(tree, anchor_path, domain)
    anchor = resolved.node
    nodes = list(new_nodes)
    for node in nodes:
        _require_node(node, InvalidInsertionPointError)

    problem = insertion_problem(anchor, resolved.parent, nodes)
    if problem is not None:
        raise InvalidInsertionPointError(f"path {anchor_path}: {problem}")
    if position is InsertionPosition.AFTER and isinstance(anchor, Token) and anchor.kind == EOF_KIND:
        raise InvalidInsertionPointError(f"path {anchor_path}: nothing can follow the end-of-file token")

    span = tree.span_of(anchor)
    if position is InsertionPosition.BEFORE:
        index, offset = resolved.index_in_parent, span.full_start
    else:
        index, offset = resolved.index_in_parent + 1, span.full_end

    children = list(resolved.parent.children)
    children[index:index] = [_detached(node) for node in nodes]
    inserted = "".join(node.render() for node in nodes)
    return _finish(tree, _rebuild(resolved.trail, children), offset, offset, inserted, "insert")


# -- trivia edits ----------------------------------------------------------


def _strip_comments(pieces: Sequence[Trivia], selects: Callable[[Trivia], bool]) -> tuple[list[Trivia], int | None]:
    """Drop selected comments together with their indentation and line break.

    Returns the retained pieces and the index at which the first dropped
    comment's line began.
    """
    retained: list[Trivia] = []
    first_removed: int | None = None
    index = 0
    while index < len(pieces):
        piece = pieces[index]
        index += 1
        if not selects(piece):
            retained.append(piece)
            continue
        while retained and retained[-1].is_whitespace:
            retained.pop()
        if first_removed is None:
            first_removed = len(retained)
        while index < len(pieces) and pieces[index].is_whitespace:
            index += 1
        if index < len(pieces) and pieces[index].is_newline:
            index += 1
    return retained, first_removed


def _newline_style(pieces: Sequence[Trivia]) -> str:
    return next((piece.text for piece in pieces if piece.is_newline), "\n")


def rewrite_documentation(pieces: Sequence[Trivia], new_text: str | None) -> tuple[Trivia, ...]:
    """Leading trivia with its documentation replaced by ``new_text``.

    Without new text the documentation is removed and everything else kept.
    New comments go where the old documentation started, or at the start of
    the token's line, indented like the token.
    """
    retained, insert_at = _strip_comments(pieces, lambda piece: piece.is_documentation)
    docs = parse_documentation(new_text or "")
    if not docs:
        return tuple(retained)

    if insert_at is None:
        insert_at = 0
        for index, piece in enumerate(retained):
            if piece.is_newline:
                insert_at = index + 1
    indent = indentation_of(retained)
    newline = _newline_style(pieces)

    block: list[Trivia] = []
    for doc in docs:
        if indent:
            block.append(Trivia(kind=TriviaKind.WHITESPACE, text=indent))
        block.append(doc)
        block.append(Trivia(kind=TriviaKind.NEWLINE, text=newline))
    return (*retained[:insert_at], *block, *retained[insert_at:])


def _replace_leading(
    tree: SyntaxTree, resolved: ResolvedNode, leading: tuple[Trivia, ...], operation: str
) -> SyntaxTree:
    token = cast(Token, resolved.node)
    new_token = token.model_copy(update={"leading_trivia": leading})
    children = list(resolved.parent.children)
    children[resolved.index_in_parent] = new_token
    span = tree.span_of(token)
    return _finish(
        tree, _rebuild(resolved.trail, children), span.full_start, span.content_start, trivia_text(leading), operation
    )


def modify_leading_trivia(
    tree: SyntaxTree, path: str, new_text: str | None, domain: AddressingDomain | None = None
) -> SyntaxTree:
    """Set (or with empty text, remove) the documentation comments of a token."""
    resolved = _resolve(tree, path, domain)
    if not isinstance(resolved.node, Token):
        raise NodeNotFoundError(path)
    leading = rewrite_documentation(resolved.node.leading_trivia, new_text)
    return _replace_leading(tree, resolved, leading, "modify leading trivia")


def modify_leading_trivia_at_line(
    tree: SyntaxTree,
    line: int,
    new_text: str | None,
    selection: SelectionStrategy = SelectionStrategy.FIRST,
    column: int | None = None,
) -> SyntaxTree:
    info = find_tokens_at_line(tree, line, selection, column)
    if info.selected is None:
        raise NodeNotFoundError(f"line {line}")
    return modify_leading_trivia(tree, info.selected.path, new_text)


def replace_file_header(tree: SyntaxTree, header: str) -> SyntaxTree:
    """Replace the comments before the first token with ``header``.

    ``///`` and ``//`` lines are kept as written, other non-empty lines become
    ``//`` comments. Whitespace around the old comments is kept.
    """
    resolved = _resolve(tree, "1", AddressingDomain.TOKEN)
    first = cast(Token, resolved.node)
    retained, _ = _strip_comments(first.leading_trivia, lambda piece: piece.is_comment)
    header_pieces = parse_header(header) if header.strip() else ()
    return _replace_leading(tree, resolved, (*header_pieces, *retained), "replace file header")
