"""Main CLI application for the JMRL pool."""

import json
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from src.core.config import settings
from src.core.marc import MissingRequiredFieldError
from src.core.models import JMRLBib, JMRLResult
from src.core.normalizer import normalize
from src.core.query_translator import QueryError, translate

# Create Typer app
app = typer.Typer(
    name="jmrl-pool",
    help="Virgo search pool for the Jefferson-Madison Regional Library catalog",
    add_completion=False,
)

console = Console()


@app.command("translate")
def translate_query(
    query: str = typer.Argument(..., help='Pool query, e.g. \'title: {Moby Dick} AND author: {Melville}\''),
    identifier_policy: Optional[str] = typer.Option(
        None,
        "--identifier-policy",
        help="reject or barcode_or_call_number (default from settings)",
    ),
):
    """Show the JMRL query a pool query translates to."""
    policy = identifier_policy or settings.identifier_policy
    if policy not in ("reject", "barcode_or_call_number"):
        console.print(f"[red]Unknown identifier policy:[/red] {policy}")
        raise typer.Exit(2)

    try:
        translated = translate(query, identifier_policy=policy)
    except QueryError as e:
        console.print(f"[red]{type(e).__name__}:[/red] {e.message}")
        raise typer.Exit(1)

    console.print(f"[bold]JMRL query:[/bold] {translated.text}")
    console.print(f"[bold]Encoded:[/bold]    {translated.encoded}")
    if translated.filtered:
        console.print("[yellow]Query is filtered; the pool answers with no matches[/yellow]")


def _load_bibs(path: Path) -> list[JMRLBib]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict) and "entries" in data:
        return [entry.bib for entry in JMRLResult.model_validate(data).entries]
    return [JMRLBib.model_validate(data)]


@app.command("normalize")
def normalize_file(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="JMRL bib or search result JSON"),
):
    """Show the pool record fields built from a saved JMRL response."""
    try:
        bibs = _load_bibs(path)
    except (json.JSONDecodeError, ValidationError) as e:
        console.print(f"[red]Invalid JMRL response:[/red] {e}")
        raise typer.Exit(1)

    for bib in bibs:
        try:
            fields = normalize(bib, library_name=settings.library_name)
        except MissingRequiredFieldError as e:
            console.print(f"[yellow]Bib {bib.id} skipped:[/yellow] {e}")
            continue

        table = Table(title=f"Bib {bib.id}")
        table.add_column("Name", style="cyan")
        table.add_column("Label")
        table.add_column("Value")
        table.add_column("Visibility", style="dim")
        for field in fields:
            table.add_row(field.name, field.label, field.value, field.visibility or "")
        console.print(table)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Host to bind to"),
    port: Optional[int] = typer.Option(None, "--port", help="Port to bind to"),
):
    """Run the pool web service."""
    from src.server_entry import main as server_main

    argv = []
    if host:
        argv += ["--host", host]
    if port:
        argv += ["--port", str(port)]
    server_main(argv)


if __name__ == "__main__":
    app()
