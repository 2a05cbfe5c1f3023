"""Deterministic addressing of nodes inside one tree snapshot.

A path is a dot-separated sequence of 1-based integers produced by a
pre-order, left-to-right walk over the nodes selected by an addressing
domain. The root is never numbered. Paths are only meaningful against the
snapshot they were computed from.
"""

import logging
import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import cast

from saae.core.tree import SyntaxTree
from saae.errors import NodeNotFoundError
from saae.models import Composite, SyntaxNode, Token

logger = logging.getLogger(__name__)

_SEGMENT = re.compile(r"[1-9][0-9]*")

# Declaration-shaped kinds whose names do not follow the ``*_declaration`` rule.
_EXTRA_DECLARATION_KINDS = frozenset({"enum_entry"})


class AddressingDomain(str, Enum):
    TOKEN = "token"
    DECLARATION = "declaration"
    NODE = "node"


@dataclass(frozen=True)
class PathScheme:
    selects: Callable[[SyntaxNode], bool]
    hierarchical: bool


def is_declaration(node: SyntaxNode) -> bool:
    return isinstance(node, Composite) and (
        node.kind.endswith("_declaration") or node.kind in _EXTRA_DECLARATION_KINDS
    )


def _is_token(node: SyntaxNode) -> bool:
    return isinstance(node, Token)


def _any_node(node: SyntaxNode) -> bool:
    return True


SCHEMES: dict[AddressingDomain, PathScheme] = {
    AddressingDomain.TOKEN: PathScheme(selects=_is_token, hierarchical=False),
    AddressingDomain.DECLARATION: PathScheme(selects=is_declaration, hierarchical=True),
    AddressingDomain.NODE: PathScheme(selects=_any_node, hierarchical=True),
}

Trail = tuple[tuple[Composite, int], ...]


@dataclass(frozen=True)
class ResolvedNode:
    """A node found by path, with the (ancestor, child index) steps leading to it."""

    node: SyntaxNode
    trail: Trail
    path: str

    @property
    def parent(self) -> Composite:
        return self.trail[-1][0]

    @property
    def index_in_parent(self) -> int:
        return self.trail[-1][1]


def format_path(segments: tuple[int, ...]) -> str:
    return ".".join(str(segment) for segment in segments)


def parse_path(path: str) -> tuple[int, ...]:
    """Split a path into integers; malformed paths resolve to nothing."""
    parts = path.split(".")
    if not all(_SEGMENT.fullmatch(part) for part in parts):
        raise NodeNotFoundError(path)
    return tuple(int(part) for part in parts)


def iter_numbered(root: Composite, scheme: PathScheme) -> Iterator[tuple[tuple[int, ...], SyntaxNode, Trail]]:
    """Yield ``(segments, node, trail)`` for every selected node in pre-order."""

    def visit(
        node: SyntaxNode, trail: Trail, prefix: tuple[int, ...], counter: list[int]
    ) -> Iterator[tuple[tuple[int, ...], SyntaxNode, Trail]]:
        scope_prefix, scope_counter = prefix, counter
        if scheme.selects(node):
            counter[0] += 1
            if scheme.hierarchical:
                segments = (*prefix, counter[0])
                scope_prefix, scope_counter = segments, [0]
            else:
                segments = (counter[0],)
            yield segments, node, trail
        if isinstance(node, Composite):
            for index, child in enumerate(node.children):
                yield from visit(child, (*trail, (node, index)), scope_prefix, scope_counter)

    top_counter = [0]
    for index, child in enumerate(root.children):
        yield from visit(child, ((root, index),), (), top_counter)


def _resolve_by_child_index(root: Composite, segments: tuple[int, ...], path: str) -> ResolvedNode:
    node: SyntaxNode = root
    trail: Trail = ()
    for segment in segments:
        if not isinstance(node, Composite) or segment > len(node.children):
            raise NodeNotFoundError(path)
        trail = (*trail, (node, segment - 1))
        node = node.children[segment - 1]
    return ResolvedNode(node=node, trail=trail, path=path)


def resolve_path(root: Composite, path: str, domain: AddressingDomain = AddressingDomain.TOKEN) -> ResolvedNode:
    segments = parse_path(path)
    scheme = SCHEMES[domain]
    if not scheme.hierarchical and len(segments) != 1:
        raise NodeNotFoundError(path)

    if domain is AddressingDomain.NODE:
        resolved = _resolve_by_child_index(root, segments, path)
        logger.debug("Resolved %s path %s to %s", domain.value, path, resolved.node.kind)
        return resolved

    for candidate_segments, node, trail in iter_numbered(root, scheme):
        if candidate_segments == segments:
            logger.debug("Resolved %s path %s to %s", domain.value, path, node.kind)
            return ResolvedNode(node=node, trail=trail, path=path)
        if not scheme.hierarchical and candidate_segments[0] > segments[0]:
            break
    raise NodeNotFoundError(path)


def compute_path(root: Composite, node: SyntaxNode, domain: AddressingDomain = AddressingDomain.TOKEN) -> str | None:
    """Path of ``node`` (matched by identity), or None if the domain does not number it."""
    for segments, candidate, _ in iter_numbered(root, SCHEMES[domain]):
        if candidate is node:
            return format_path(segments)
    return None


def token_paths(root: Composite) -> Iterator[tuple[str, Token]]:
    for segments, node, _ in iter_numbered(root, SCHEMES[AddressingDomain.TOKEN]):
        yield format_path(segments), cast(Token, node)


# -- line based addressing -------------------------------------------------


class SelectionStrategy(str, Enum):
    FIRST = "first"
    LAST = "last"
    LARGEST = "largest"
    SMALLEST = "smallest"
    AT_COLUMN = "at_column"


@dataclass(frozen=True)
class LineTokenInfo:
    token: Token
    column: int
    length: int
    path: str


@dataclass(frozen=True)
class LineNodeInfo:
    line: int
    tokens: tuple[LineTokenInfo, ...]
    selected: LineTokenInfo | None
    selection: SelectionStrategy


def find_tokens_at_line(
    tree: SyntaxTree,
    line: int,
    selection: SelectionStrategy = SelectionStrategy.FIRST,
    column: int | None = None,
) -> LineNodeInfo:
    """Tokens whose content starts on ``line``, with their token paths.

    Zero-width tokens (missing tokens, end of file) are skipped.
    """
    converter = tree.location_converter
    found: list[LineTokenInfo] = []
    for path, token in token_paths(tree.root):
        if not token.content:
            continue
        location = converter.location(tree.span_of(token).content_start)
        if location.line == line:
            found.append(LineTokenInfo(token=token, column=location.column, length=len(token.content), path=path))
        elif location.line > line:
            break

    selected: LineTokenInfo | None = None
    if found:
        match selection:
            case SelectionStrategy.FIRST:
                selected = found[0]
            case SelectionStrategy.LAST:
                selected = found[-1]
            case SelectionStrategy.LARGEST:
                selected = max(found, key=lambda info: info.length)
            case SelectionStrategy.SMALLEST:
                selected = min(found, key=lambda info: info.length)
            case SelectionStrategy.AT_COLUMN:
                if column is None:
                    raise ValueError("A column is required for the at_column selection")
                selected = min(found, key=lambda info: abs(info.column - column))

    return LineNodeInfo(line=line, tokens=tuple(found), selected=selected, selection=selection)
