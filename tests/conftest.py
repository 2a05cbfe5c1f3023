"""Shared fixtures and helpers for tests."""

from collections.abc import Callable
from pathlib import Path

import pytest

from saae.core.tree import SyntaxTree, make_token
from saae.models import Composite

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Hand-built trees
# ---------------------------------------------------------------------------

POINT_SOURCE = "/// Old doc\nstruct Point {\n    let x: Int\n}\n"


def build_property(name: str, type_name: str) -> Composite:
    return Composite(
        kind="property_declaration",
        children=(
            make_token("let", "let", leading="\n    ", trailing=" "),
            make_token("simple_identifier", name),
            make_token(":", ":", trailing=" "),
            make_token("type_identifier", type_name),
        ),
    )


def build_point_root() -> Composite:
    """``POINT_SOURCE`` as a tree.

    Token paths: 1 struct, 2 Point, 3 {, 4 let, 5 x, 6 :, 7 Int, 8 }, 9 eof.
    Declaration paths: 1 struct, 1.1 property. Node paths: 1 struct,
    1.3 body, 1.3.2 property, 2 eof.
    """
    body = Composite(
        kind="class_body",
        children=(
            make_token("{", "{"),
            build_property("x", "Int"),
            make_token("}", "}", leading="\n"),
        ),
    )
    declaration = Composite(
        kind="struct_declaration",
        children=(
            make_token("struct", "struct", leading="/// Old doc\n", trailing=" "),
            make_token("type_identifier", "Point", trailing=" "),
            body,
        ),
    )
    return Composite(kind="source_file", children=(declaration, make_token("eof", "", leading="\n")))


@pytest.fixture
def point_tree() -> SyntaxTree:
    return SyntaxTree.from_root(build_point_root(), identity="Point.swift")


@pytest.fixture
def header_tree() -> SyntaxTree:
    """``// Old header\\n\\nimport Foundation\\n``"""
    root = Composite(
        kind="source_file",
        children=(
            Composite(
                kind="import_declaration",
                children=(
                    make_token("import", "import", leading="// Old header\n\n", trailing=" "),
                    make_token("identifier", "Foundation"),
                ),
            ),
            make_token("eof", "", leading="\n"),
        ),
    )
    return SyntaxTree.from_root(root, identity="Header.swift")


@pytest.fixture
def text_tree() -> Callable[[str], SyntaxTree]:
    """Factory for trees holding their text in a single token, for position-only tests."""

    def build(text: str) -> SyntaxTree:
        root = Composite(kind="source_file", children=(make_token("unknown", text), make_token("eof", "")))
        return SyntaxTree.from_root(root)

    return build
