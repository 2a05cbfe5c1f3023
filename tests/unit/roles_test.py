"""Unit tests for grammatical roles and context validation."""

import pytest

from saae.core.roles import NodeRole, classify_role, insertion_problem, replacement_problem
from saae.core.tree import make_token
from saae.models import Composite


def _node(kind: str) -> Composite:
    return Composite(kind=kind, children=(make_token("identifier", "x"),))


@pytest.mark.parametrize(
    ("kind", "role"),
    [
        ("function_declaration", NodeRole.DECLARATION),
        ("enum_entry", NodeRole.DECLARATION),
        ("if_statement", NodeRole.STATEMENT),
        ("assignment", NodeRole.STATEMENT),
        ("call_expression", NodeRole.EXPRESSION),
        ("integer_literal", NodeRole.EXPRESSION),
        ("user_type", NodeRole.TYPE),
        ("optional_type", NodeRole.TYPE),
        ("pattern", NodeRole.PATTERN),
        ("value_arguments", NodeRole.OTHER),
    ],
)
def test_classify_composites(kind: str, role: NodeRole) -> None:
    assert classify_role(_node(kind)) is role


def test_classify_token() -> None:
    assert classify_role(make_token("identifier", "x")) is NodeRole.TOKEN


class TestReplacement:
    def test_token_for_token(self) -> None:
        parent = _node("call_expression")
        assert replacement_problem(parent.children[0], parent, make_token("identifier", "y")) is None

    def test_composite_for_token_is_rejected(self) -> None:
        parent = _node("call_expression")
        problem = replacement_problem(parent.children[0], parent, _node("call_expression"))
        assert problem is not None
        assert "the replacement node is not a token" in problem

    def test_token_for_composite_is_rejected(self) -> None:
        target = _node("call_expression")
        parent = Composite(kind="value_argument", children=(target,))
        assert replacement_problem(target, parent, make_token("identifier", "y")) is not None

    def test_same_role_composite(self) -> None:
        target = _node("call_expression")
        parent = Composite(kind="value_argument", children=(target,))
        assert replacement_problem(target, parent, _node("navigation_expression")) is None
        assert replacement_problem(target, parent, _node("function_declaration")) is not None

    def test_container_accepts_its_item_roles(self) -> None:
        target = _node("property_declaration")
        parent = Composite(kind="class_body", children=(target,))
        assert replacement_problem(target, parent, _node("function_declaration")) is None
        assert replacement_problem(target, parent, _node("if_statement")) is not None

    def test_other_kinds_must_match_exactly(self) -> None:
        target = _node("value_arguments")
        parent = Composite(kind="call_suffix", children=(target,))
        assert replacement_problem(target, parent, _node("value_arguments")) is None
        assert replacement_problem(target, parent, _node("lambda_literal")) is not None


class TestInsertion:
    def test_nothing_to_insert(self) -> None:
        parent = _node("call_expression")
        assert insertion_problem(parent.children[0], parent, []) == "no nodes to insert"

    def test_top_level_accepts_statements_and_declarations(self) -> None:
        anchor = _node("function_declaration")
        parent = Composite(kind="source_file", children=(anchor,))
        assert insertion_problem(anchor, parent, [_node("if_statement"), _node("class_declaration")]) is None
        assert insertion_problem(anchor, parent, [make_token("identifier", "x")]) is not None

    def test_members_only_in_a_body(self) -> None:
        anchor = _node("property_declaration")
        parent = Composite(kind="class_body", children=(anchor,))
        assert insertion_problem(anchor, parent, [_node("call_expression")]) is not None

    def test_tokens_next_to_tokens(self) -> None:
        parent = _node("call_expression")
        anchor = parent.children[0]
        assert insertion_problem(anchor, parent, [make_token("identifier", "y")]) is None
        assert insertion_problem(anchor, parent, [_node("call_expression")]) is not None

    def test_composites_next_to_same_role(self) -> None:
        anchor = _node("call_expression")
        parent = Composite(kind="tuple_expression", children=(anchor,))
        assert insertion_problem(anchor, parent, [_node("integer_literal")]) is None
        assert insertion_problem(anchor, parent, [make_token("identifier", "y")]) is not None
