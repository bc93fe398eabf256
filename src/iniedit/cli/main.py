import asyncio
import logging
import pathlib
from typing import Annotated, Optional

import typer
from rich.markup import escape
from rich.table import Table

from .. import config, diagnostics as diag, encoding, parser, rewriter

from .console import console, error_console

LOG_LEVELS = [
    logging.CRITICAL,
    logging.ERROR,
    logging.WARNING,
    logging.INFO,
    logging.DEBUG,
]

FileArg = Annotated[
    pathlib.Path,
    typer.Argument(exists=True, dir_okay=False, readable=True, resolve_path=True),
]

app = typer.Typer(no_args_is_help=True)


class State:
    settings: config.Settings = config.DEFAULT


def report(diagnostics: diag.Diagnostics):
    for record in diagnostics:
        error_console.print(
            f"[yellow]warning:[/yellow] {escape(str(record))}", highlight=False
        )


@app.callback()
def common(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, min=0, max=5, help="set logging level"
        ),
    ] = 0
):
    """Read and edit INI files in place, keeping their casing and encoding."""

    if verbose == 0:
        logging.disable()
    else:
        logging.basicConfig(level=LOG_LEVELS[verbose - 1])

    State.settings = config.Settings.from_env()


@app.command()
def show(
    file: FileArg,
    section: Annotated[Optional[str], typer.Argument()] = None,
):
    """Show the sections of an INI file.
    If section is given, only sections with that name (in any case) are shown.
    """

    diagnostics = diag.Diagnostics()
    records = asyncio.run(
        parser.load_file(file, settings=State.settings, diagnostics=diagnostics)
    )
    report(diagnostics)

    for name, entries in records:
        if section is not None and name.lower() != section.lower():
            continue

        table = Table(title=escape(f"[{name}]"), title_justify="left")
        table.add_column("Key")
        table.add_column("Value")

        for key, value in entries.items():
            table.add_row(escape(key), escape(value))

        console.print(table)


@app.command()
def get(file: FileArg, section: str, key: str):
    """Print a single value. The first section with a matching name wins."""

    diagnostics = diag.Diagnostics()
    records = asyncio.run(
        parser.load_file(file, settings=State.settings, diagnostics=diagnostics)
    )
    report(diagnostics)

    for name, entries in records:
        if name.lower() == section.lower() and key.lower() in entries:
            console.print(entries[key.lower()], highlight=False, markup=False)
            return

    error_console.print(f"[{section}] {key} not found", markup=False)
    raise typer.Exit(code=1)


@app.command("set")
def set_(
    file: FileArg,
    section: str,
    key: str,
    value: str,
    quote: Annotated[
        Optional[bool],
        typer.Option(
            "--quote/--no-quote",
            help="Always or never quote the value (default: only when needed)",
            show_default=False,
        ),
    ] = None,
):
    """Set a value in place, adding the key or section if missing."""

    diagnostics = diag.Diagnostics()
    asyncio.run(
        rewriter.set_value(
            file,
            section,
            key,
            value,
            quote=quote,
            settings=State.settings,
            diagnostics=diagnostics,
        )
    )
    report(diagnostics)


@app.command("encoding")
def encoding_(file: FileArg):
    """Print the detected encoding of a file."""

    console.print(
        asyncio.run(encoding.detect_encoding(file, settings=State.settings)),
        highlight=False,
    )
