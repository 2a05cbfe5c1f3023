"""Grammatical roles of nodes and which roles a position accepts.

Kinds follow the tree-sitter naming conventions (``*_declaration``,
``*_statement``, ``*_expression``, ``*_type``).
"""

from enum import Enum

from saae.models import Composite, SyntaxNode, Token


class NodeRole(str, Enum):
    TOKEN = "token"
    DECLARATION = "declaration"
    STATEMENT = "statement"
    EXPRESSION = "expression"
    TYPE = "type"
    PATTERN = "pattern"
    OTHER = "other"


_CODE_BLOCK_ITEMS = frozenset({NodeRole.DECLARATION, NodeRole.STATEMENT, NodeRole.EXPRESSION})
_MEMBERS = frozenset({NodeRole.DECLARATION})

# Composite kinds holding a sequence of items rather than a fixed grammar shape.
CONTAINER_ACCEPTS: dict[str, frozenset[NodeRole]] = {
    "source_file": _CODE_BLOCK_ITEMS,
    "statements": _CODE_BLOCK_ITEMS,
    "class_body": _MEMBERS,
    "protocol_body": _MEMBERS,
    "enum_class_body": _MEMBERS,
}

_DECLARATION_KINDS = frozenset({"enum_entry"})
_STATEMENT_KINDS = frozenset({"assignment", "control_transfer_statement"})
_EXPRESSION_SUFFIXES = ("_expression", "_literal")
_TYPE_KINDS = frozenset({"user_type", "type_identifier", "type_annotation"})


def classify_role(node: SyntaxNode) -> NodeRole:
    match node:
        case Token():
            return NodeRole.TOKEN
        case Composite(kind=kind):
            if kind.endswith("_declaration") or kind in _DECLARATION_KINDS:
                return NodeRole.DECLARATION
            if kind.endswith("_statement") or kind in _STATEMENT_KINDS:
                return NodeRole.STATEMENT
            if kind.endswith(_EXPRESSION_SUFFIXES):
                return NodeRole.EXPRESSION
            if kind.endswith("_type") or kind in _TYPE_KINDS:
                return NodeRole.TYPE
            if kind == "pattern" or kind.endswith("_pattern"):
                return NodeRole.PATTERN
            return NodeRole.OTHER
    raise TypeError(f"Not a syntax node: {node!r}")


def _describe(node: SyntaxNode) -> str:
    role = classify_role(node)
    if role is NodeRole.OTHER:
        return f"'{node.kind}' node"
    return f"{role.value} ('{node.kind}')"


def replacement_problem(target: SyntaxNode, parent: Composite, replacement: SyntaxNode) -> str | None:
    """Why ``replacement`` cannot take ``target``'s slot in ``parent``, or None."""
    match target, replacement:
        case Token(), Token():
            return None
        case Token(), Composite():
            return (
                f"target is a token ('{target.kind}') but the replacement node is not a token "
                f"({_describe(replacement)}); token-level replacement requires a token"
            )
        case Composite(), Token():
            return f"target is a {_describe(target)} but the replacement node is a token ('{replacement.kind}')"
        case Composite(), Composite():
            return _composite_problem(target, parent, replacement)
    return f"unsupported node types: {type(target).__name__}, {type(replacement).__name__}"


def _composite_problem(target: Composite, parent: Composite, replacement: Composite) -> str | None:
    accepted = CONTAINER_ACCEPTS.get(parent.kind)
    role = classify_role(replacement)
    if accepted is not None:
        if role in accepted:
            return None
        allowed = ", ".join(sorted(r.value for r in accepted))
        return f"'{parent.kind}' accepts {allowed} nodes, not a {_describe(replacement)}"
    target_role = classify_role(target)
    if target_role is NodeRole.OTHER:
        if replacement.kind == target.kind:
            return None
        return f"expected a '{target.kind}' node to replace a '{target.kind}' node, got '{replacement.kind}'"
    if role is target_role:
        return None
    return f"a {_describe(target)} can only be replaced by a {target_role.value} node, got {_describe(replacement)}"


def insertion_problem(anchor: SyntaxNode, parent: Composite, new_nodes: list[SyntaxNode]) -> str | None:
    """Why ``new_nodes`` cannot be placed next to ``anchor`` inside ``parent``, or None."""
    if not new_nodes:
        return "no nodes to insert"
    accepted = CONTAINER_ACCEPTS.get(parent.kind)
    for node in new_nodes:
        role = classify_role(node)
        if accepted is not None:
            if role not in accepted:
                allowed = ", ".join(sorted(r.value for r in accepted))
                return f"'{parent.kind}' accepts {allowed} nodes, not a {_describe(node)}"
            continue
        match anchor:
            case Token():
                if role is not NodeRole.TOKEN:
                    return f"position next to token '{anchor.kind}' in '{parent.kind}' only accepts tokens, got {_describe(node)}"
            case Composite():
                anchor_role = classify_role(anchor)
                if role is NodeRole.TOKEN:
                    return f"position next to {_describe(anchor)} does not accept a token ('{node.kind}')"
                if anchor_role is NodeRole.OTHER and node.kind != anchor.kind:
                    return f"position next to {_describe(anchor)} only accepts '{anchor.kind}' nodes, got '{node.kind}'"
                if role is not anchor_role:
                    return f"position next to {_describe(anchor)} only accepts {anchor_role.value} nodes, got {_describe(node)}"
    return None
