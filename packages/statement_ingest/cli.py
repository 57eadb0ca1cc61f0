"""Command-line interface for ``statement_ingest``.

Commands are thin wrappers over :mod:`statement_ingest.api`. The root
callback loads a local ``.env`` with ``python-dotenv`` (existing environment
variables win) and configures logging from ``--log-level`` / ``--log-file``
before any command runs.

Exit codes: 0 on success, 1 when the file cannot be read, 2 when the file is
read but rejected.
"""

from __future__ import annotations

import csv
import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Annotated, Any

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from typer.models import OptionInfo

from .api import (
    UNREADABLE_CSV_ERROR,
    IngestResult,
    generate_csv_template,
    parse_csv,
    read_csv_rows,
)
from .duplicates import detect_duplicates, format_duplicate_report
from .formatting import format_currency
from .headers import classify_header, header_formatting_suggestions
from .logging_setup import LOG_LEVEL_ENV, configure_logging

EXIT_READ_ERROR = 1
EXIT_INVALID_FILE = 2

console = Console()

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help="Detect bank CSV formats and normalize statements into canonical transactions.",
)

# Module-level option object (no calls in parameter defaults).
CSV_PATH_OPTION: OptionInfo = typer.Option(
    ...,
    "--csv-path",
    help="Path to a bank statement CSV export",
    dir_okay=False,
    file_okay=True,
    exists=False,  # missing files are reported by the command itself
)


def _fail(message: str, code: int) -> typer.Exit:
    print(f"Error: {message}", file=sys.stderr)
    return typer.Exit(code)


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8-sig")
    except FileNotFoundError:
        raise _fail(f"File not found: {path}", EXIT_READ_ERROR) from None
    except PermissionError:
        raise _fail(f"Permission denied: {path}", EXIT_READ_ERROR) from None
    except (OSError, UnicodeDecodeError) as e:
        raise _fail(f"Failed to read '{path}': {e}", EXIT_READ_ERROR) from e


def _result_payload(result: IngestResult) -> dict[str, Any]:
    dup = result.duplicate_result
    return {
        "bank_format": result.bank_format,
        "strategy": result.detected.strategy,
        "is_valid": result.validation.is_valid,
        "errors": list(result.validation.errors),
        "warnings": list(result.validation.warnings),
        "duplicate_count": dup.duplicate_count if dup else 0,
        "duplicate_groups": [
            {"original_index": g.original_index, "duplicate_indexes": list(g.duplicate_indexes)}
            for g in (dup.duplicate_groups if dup else ())
        ],
        "transactions": [tx.to_dict() for tx in result.transactions],
    }


def _transactions_table(result: IngestResult) -> Table:
    table = Table(title=f"{len(result.transactions)} transaction(s)")
    table.add_column("Date")
    table.add_column("Description")
    table.add_column("Amount", justify="right")
    for tx in result.transactions:
        style = "red" if tx.amount < 0 else None
        table.add_row(tx.date, tx.description, format_currency(tx.amount), style=style)
    return table


@app.command("ingest")
def ingest_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    *,
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON."),
    keep_duplicates: bool = typer.Option(
        False, "--keep-duplicates", help="Keep exact duplicate transactions in the output."
    ),
) -> None:
    """Parse a statement CSV and print its transactions."""

    result = parse_csv(_read_text(csv_path), filename=csv_path.name)

    dup = detect_duplicates(result.transactions)
    result = replace(
        result,
        transactions=result.transactions if keep_duplicates else dup.clean_transactions,
        duplicate_result=dup,
    )

    if as_json:
        typer.echo(json.dumps(_result_payload(result), indent=2))
    else:
        console.print(
            f"[cyan]Bank format:[/cyan] {result.bank_format} "
            f"[dim](strategy: {result.detected.strategy})[/dim]"
        )
        for err in result.validation.errors:
            console.print(f"[red]Error:[/red] {escape(err)}")
        for warning in result.validation.warnings:
            console.print(f"[yellow]Warning:[/yellow] {escape(warning)}")
        if result.validation.is_valid:
            console.print(format_duplicate_report(dup))
            console.print(_transactions_table(result))

    if not result.validation.is_valid:
        raise typer.Exit(EXIT_INVALID_FILE)


@app.command("headers")
def headers_cmd(csv_path: Annotated[Path, CSV_PATH_OPTION]) -> None:
    """Show how each header is classified and how the header row could improve."""

    try:
        rows = read_csv_rows(_read_text(csv_path))
    except csv.Error as e:
        raise _fail(f"{UNREADABLE_CSV_ERROR}: {e}", EXIT_INVALID_FILE) from e
    if not rows:
        raise _fail("No headers found in CSV file", EXIT_INVALID_FILE)
    headers = [h.strip() for h in rows[0]]

    table = Table(title="Header classification")
    table.add_column("Header")
    table.add_column("Field type")
    table.add_column("Confidence", justify="right")
    for header in headers:
        c = classify_header(header)
        table.add_row(escape(header), c.field_type, f"{c.confidence:.2f}")
    console.print(table)

    advice = header_formatting_suggestions(headers)
    for warning in advice.warnings:
        console.print(f"[yellow]Warning:[/yellow] {escape(warning)}")
    for suggestion in advice.suggestions:
        console.print(f"- {escape(suggestion)}")
    console.print(f"Recommended headers: {', '.join(advice.recommended_headers)}")


@app.command("template")
def template_cmd() -> None:
    """Print a CSV template with the standard headers."""

    typer.echo(generate_csv_template())


@app.callback()
def _root(
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        help=f"Log level name or number (default: ${LOG_LEVEL_ENV}, then INFO).",
    ),
    log_file: Path | None = typer.Option(
        None, "--log-file", dir_okay=False, help="Append log records to this file."
    ),
) -> None:
    """Load ``.env`` from the working directory and configure logging."""

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(log_level, log_file=log_file)


if __name__ == "__main__":  # pragma: no cover
    app()
