"""Unit tests for deriving parser diagnostics from ERROR and missing nodes."""

from saae.core.parser import collect_raw_diagnostics
from saae.core.tree import SyntaxTree, make_token
from saae.models import Composite, Token


def _tree(*children: Composite | Token) -> SyntaxTree:
    return SyntaxTree.from_root(Composite(kind="source_file", children=(*children, make_token("eof", ""))))


def test_error_node_becomes_unexpected_code() -> None:
    error = Composite(kind="ERROR", children=(make_token(":", ":"), make_token("identifier", "T", leading=" ")))
    function = Composite(
        kind="function_declaration",
        children=(make_token("func", "func", trailing=" "), make_token("simple_identifier", "bad"), error),
    )
    tree = _tree(function)
    [raw] = collect_raw_diagnostics(tree)
    assert raw.message == "unexpected code ': T' in function"
    assert raw.node is error
    [fix_it] = raw.fix_its
    assert [(change.start, change.end, change.new_text) for change in fix_it.changes] == [(8, 11, "")]


def test_unexpected_code_runs_to_the_declaration_body() -> None:
    """``func bad: <T>(value: T) -> T { return value }`` with only ``:`` wrapped."""
    error = Composite(kind="ERROR", children=(make_token(":", ":", trailing=" "),))
    type_parameters = Composite(
        kind="type_parameters",
        children=(make_token("<", "<"), make_token("type_identifier", "T"), make_token(">", ">")),
    )
    parameter = Composite(
        kind="ERROR",
        children=(
            make_token("simple_identifier", "value"),
            make_token(":", ":", trailing=" "),
            make_token("type_identifier", "T"),
        ),
    )
    body = Composite(
        kind="function_body",
        children=(
            make_token("{", "{", trailing=" "),
            make_token("return", "return", trailing=" "),
            make_token("simple_identifier", "value", trailing=" "),
            make_token("}", "}"),
        ),
    )
    function = Composite(
        kind="function_declaration",
        children=(
            make_token("func", "func", trailing=" "),
            make_token("simple_identifier", "bad"),
            error,
            type_parameters,
            make_token("(", "("),
            parameter,
            make_token(")", ")", trailing=" "),
            make_token("->", "->", trailing=" "),
            make_token("type_identifier", "T", trailing=" "),
            body,
        ),
    )
    tree = _tree(function)
    assert tree.render() == "func bad: <T>(value: T) -> T { return value }"

    [raw] = collect_raw_diagnostics(tree)
    assert raw.message == "unexpected code ': <T>(value: T) -> T' in function"
    assert raw.node is error
    assert raw.end_offset == 28
    [fix_it] = raw.fix_its
    assert [(change.start, change.end) for change in fix_it.changes] == [(8, 28)]


def test_without_a_body_only_the_error_is_quoted() -> None:
    error = Composite(kind="ERROR", children=(make_token(":", ":", trailing=" "),))
    function = Composite(
        kind="function_declaration",
        children=(
            make_token("func", "func", trailing=" "),
            make_token("simple_identifier", "bad"),
            error,
            make_token("type_identifier", "T"),
        ),
    )
    [raw] = collect_raw_diagnostics(_tree(function))
    assert raw.message == "unexpected code ':' in function"


def test_multi_line_error_quotes_its_first_line() -> None:
    error = Composite(
        kind="ERROR",
        children=(
            make_token("let", "let", trailing=" "),
            make_token("simple_identifier", "x", trailing=" "),
            make_token("=", "=", trailing=" "),
            make_token("func", "func", leading="\n    ", trailing=" "),
            make_token("simple_identifier", "f"),
            make_token("(", "("),
        ),
    )
    [raw] = collect_raw_diagnostics(_tree(error))
    assert raw.message == "unexpected code 'let x =' at top level"
    assert raw.end_offset == len("let x = \n    func f(")


def test_top_level_error_and_nested_errors_reported_once() -> None:
    inner = Composite(kind="ERROR", children=(make_token("unknown", "@"),))
    outer = Composite(kind="ERROR", children=(make_token("unknown", "#"), inner))
    [raw] = collect_raw_diagnostics(_tree(outer))
    assert raw.message == "unexpected code '#@' at top level"


def test_missing_closer_has_insert_fix_it_and_note() -> None:
    opener = make_token("(", "(")
    call = Composite(
        kind="call_expression",
        children=(make_token("simple_identifier", "f"), opener, Token(kind=")", is_missing=True)),
    )
    [raw] = collect_raw_diagnostics(_tree(call))
    assert raw.message == "expected ')' in call"
    assert raw.offset == 2
    assert raw.fix_its[0].changes[0].new_text == ")"
    [note] = raw.notes
    assert note.message == "to match this opening '('"
    assert note.node is opener


def test_missing_named_token() -> None:
    declaration = Composite(
        kind="property_declaration",
        children=(make_token("let", "let", trailing=" "), Token(kind="simple_identifier", is_missing=True)),
    )
    [raw] = collect_raw_diagnostics(_tree(declaration))
    assert raw.message == "expected simple identifier in property"
    assert raw.fix_its == ()


def test_clean_tree_has_no_diagnostics(point_tree: SyntaxTree) -> None:
    assert collect_raw_diagnostics(point_tree) == []
    assert not point_tree.has_syntax_errors
    assert point_tree.syntax_error_count == 0
