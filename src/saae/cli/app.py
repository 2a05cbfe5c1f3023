import logging
from typing import Annotated

import typer

from saae.cli.edit import delete, document, header, replace_token
from saae.cli.inspection import check, resolve, tokens

app = typer.Typer(
    name="saae",
    help="SAAE CLI: address, diagnose and edit syntax trees.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback()
def configure(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output.")] = False,
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


app.command("check")(check)
app.command("tokens")(tokens)
app.command("resolve")(resolve)
app.command("delete")(delete)
app.command("replace-token")(replace_token)
app.command("document")(document)
app.command("header")(header)


def main() -> None:
    app()
