from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from saae.core.parser import parse_file
from saae.core.tree import SyntaxTree
from saae.errors import NodeOperationError

console = Console()
err_console = Console(stderr=True)


@contextmanager
def reported_errors() -> Iterator[None]:
    """Print expected failures in red and exit with status 1."""
    try:
        yield
    except (NodeOperationError, FileNotFoundError, ValueError) as exc:
        err_console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1) from None


def load_tree(file: str, language: str | None) -> SyntaxTree:
    return parse_file(file, language=language)


def emit_tree(tree: SyntaxTree, file: str, write: bool) -> None:
    """Print the edited source, or write it back over ``file``."""
    if write:
        Path(file).write_bytes(tree.render().encode("utf-8"))
        console.print(f"[green]Wrote[/green] {escape(file)}")
    else:
        typer.echo(tree.render(), nl=False)
