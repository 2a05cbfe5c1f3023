from typing import Annotated

import typer
from rich.markup import escape

from saae.cli.common import console, emit_tree, load_tree, reported_errors
from saae.core.mutation import delete_node, modify_leading_trivia, replace_file_header, replace_node
from saae.core.paths import AddressingDomain, resolve_path
from saae.models import Token

_WRITE_HELP = "Write the result back to the file instead of printing it."
_LANGUAGE_HELP = "Language name (default: from the file extension)."


def delete(
    file: Annotated[str, typer.Argument(help="Path to the source file.")],
    path: Annotated[str, typer.Argument(help="Path of the node to delete.")],
    domain: Annotated[AddressingDomain, typer.Option(help="Addressing domain of the path.")] = AddressingDomain.TOKEN,
    write: Annotated[bool, typer.Option(help=_WRITE_HELP)] = False,
    language: Annotated[str | None, typer.Option(help=_LANGUAGE_HELP)] = None,
) -> None:
    """Delete the node at a path."""
    with reported_errors():
        tree = load_tree(file, language)
        removed, new_tree = delete_node(tree, path, domain)
    if write:
        console.print(f"[green]Removed[/green] {escape(removed.strip())}")
    emit_tree(new_tree, file, write)


def replace_token(
    file: Annotated[str, typer.Argument(help="Path to the source file.")],
    path: Annotated[str, typer.Argument(help="Token path of the token to replace.")],
    text: Annotated[str, typer.Argument(help="New token text.")],
    kind: Annotated[str | None, typer.Option(help="Kind of the new token (default: the old token's kind).")] = None,
    write: Annotated[bool, typer.Option(help=_WRITE_HELP)] = False,
    language: Annotated[str | None, typer.Option(help=_LANGUAGE_HELP)] = None,
) -> None:
    """Replace a token's text, keeping its surrounding whitespace and comments."""
    with reported_errors():
        tree = load_tree(file, language)
        old = resolve_path(tree.root, path, AddressingDomain.TOKEN).node
        new_tree = replace_node(tree, path, Token(kind=kind or old.kind, content=text))
    emit_tree(new_tree, file, write)


def document(
    file: Annotated[str, typer.Argument(help="Path to the source file.")],
    path: Annotated[str, typer.Argument(help="Token path of the token to document.")],
    text: Annotated[str | None, typer.Option(help="Documentation text; omit to remove the documentation.")] = None,
    write: Annotated[bool, typer.Option(help=_WRITE_HELP)] = False,
    language: Annotated[str | None, typer.Option(help=_LANGUAGE_HELP)] = None,
) -> None:
    """Set or remove the documentation comment in front of a token."""
    with reported_errors():
        tree = load_tree(file, language)
        new_tree = modify_leading_trivia(tree, path, text)
    emit_tree(new_tree, file, write)


def header(
    file: Annotated[str, typer.Argument(help="Path to the source file.")],
    text: Annotated[str, typer.Argument(help="New header; plain lines become // comments.")],
    write: Annotated[bool, typer.Option(help=_WRITE_HELP)] = False,
    language: Annotated[str | None, typer.Option(help=_LANGUAGE_HELP)] = None,
) -> None:
    """Replace the comment header at the top of a file."""
    with reported_errors():
        tree = load_tree(file, language)
        new_tree = replace_file_header(tree, text)
    emit_tree(new_tree, file, write)
