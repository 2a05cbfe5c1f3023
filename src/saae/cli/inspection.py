import json
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from saae.cli.common import console, load_tree, reported_errors
from saae.core.paths import AddressingDomain, SelectionStrategy, find_tokens_at_line, resolve_path
from saae.models import DiagnosticRecord


def _print_record(identity: str, record: DiagnosticRecord) -> None:
    colour = "red" if record.severity.value == "error" else "yellow"
    marker = " (approximate)" if record.is_approximate else ""
    console.print(
        f"{escape(identity)}:{record.location}: [{colour}]{record.severity.value}[/{colour}]: "
        f"{escape(record.message)}{marker}"
    )
    console.print(f"  {escape(record.source_line_text)}", highlight=False)
    console.print(f"  {record.caret_line}", highlight=False)
    for fix_it in record.fix_its:
        console.print(f"  [cyan]fix-it[/cyan]: {escape(fix_it.message)}")
    for note in record.notes:
        where = f" ({note.location})" if note.location else ""
        console.print(f"  [blue]note[/blue]{where}: {escape(note.message)}")


def check(
    file: Annotated[str, typer.Argument(help="Path to the source file.")],
    language: Annotated[str | None, typer.Option(help="Language name (default: from the file extension).")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print diagnostics as JSON.")] = False,
) -> None:
    """Report syntax errors with positions, context and fix-its."""
    with reported_errors():
        tree = load_tree(file, language)
        records = tree.syntax_errors

    if as_json:
        typer.echo(json.dumps([record.model_dump(mode="json") for record in records], indent=2))
        return
    if not records:
        console.print(f"[green]No syntax errors[/green] in {escape(tree.identity)}")
        return
    for record in records:
        _print_record(tree.identity, record)
    console.print(f"({len(records)} diagnostics)")


def tokens(
    file: Annotated[str, typer.Argument(help="Path to the source file.")],
    line: Annotated[int, typer.Option(help="1-based line number.")],
    selection: Annotated[SelectionStrategy, typer.Option(help="Which token to mark as selected.")] = SelectionStrategy.FIRST,
    column: Annotated[int | None, typer.Option(help="Column used by the at_column selection.")] = None,
    language: Annotated[str | None, typer.Option(help="Language name (default: from the file extension).")] = None,
) -> None:
    """List the tokens starting on a line with their token paths."""
    with reported_errors():
        tree = load_tree(file, language)
        info = find_tokens_at_line(tree, line, selection, column)

    table = Table(show_lines=False)
    for header in ("path", "column", "kind", "text", "selected"):
        table.add_column(header)
    for token_info in info.tokens:
        table.add_row(
            token_info.path,
            str(token_info.column),
            escape(token_info.token.kind),
            escape(token_info.token.content),
            "*" if token_info is info.selected else "",
        )
    console.print(table)
    console.print(f"({len(info.tokens)} tokens)")


def resolve(
    file: Annotated[str, typer.Argument(help="Path to the source file.")],
    path: Annotated[str, typer.Argument(help="Dot-separated node path, e.g. 3 or 1.2.")],
    domain: Annotated[AddressingDomain, typer.Option(help="Addressing domain of the path.")] = AddressingDomain.TOKEN,
    language: Annotated[str | None, typer.Option(help="Language name (default: from the file extension).")] = None,
) -> None:
    """Show the kind, position and text of the node at a path."""
    with reported_errors():
        tree = load_tree(file, language)
        resolved = resolve_path(tree.root, path, domain)

    location = tree.location_converter.location(tree.span_of(resolved.node).content_start)
    console.print(f"[bold]{escape(resolved.node.kind)}[/bold] at {location}")
    typer.echo(tree.content_text(resolved.node))
