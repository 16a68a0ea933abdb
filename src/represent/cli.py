"""Command-line interface for Represent using Typer."""

import asyncio
import json
from pathlib import Path
from typing import Optional

import httpx
import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from represent.config import get_settings
from represent.dataset import download_dataset, write_dataset
from represent.errors import ResolutionError
from represent.federal import CongressGovSource
from represent.logging import setup_logging
from represent.pipeline import resolve
from represent.presentation import filter_representatives
from represent.refresh import build_from_congress, repair_records

app = typer.Typer(
    name="represent",
    help="Represent: Look up the federal and state legislators for a US address",
    add_completion=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging (DEBUG level)",
    ),
) -> None:
    """
    Represent CLI - Look up elected legislators by address.
    """
    settings = get_settings()
    if verbose:
        settings.log_level = "DEBUG"
    setup_logging(settings)

    logger.debug("Verbose mode enabled")


@app.command()
def lookup(
    address: str = typer.Argument(..., help="Street address, e.g. '100 W Randolph St, Chicago, IL 60601'"),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the raw officials/offices structure as JSON",
    ),
) -> None:
    """Resolve an address to its federal and state legislators."""
    logger.info("lookup command called with address: {}", address)

    settings = get_settings()

    try:
        result = asyncio.run(resolve(address, settings))

    except ResolutionError as e:
        logger.error("Lookup failed ({}): {}", e.code, e.message)
        typer.secho(f"✗ {e.message} ({e.code})", fg=typer.colors.RED, bold=True)
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2))
        return

    representatives = filter_representatives(result)
    if not representatives:
        typer.secho("No legislators found for this address", fg=typer.colors.YELLOW)
        return

    table = Table(title=result.normalized_address or address)
    table.add_column("Office", style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Party")
    table.add_column("Phone")

    for rep in representatives:
        table.add_row(rep.office, rep.name, rep.party or "", ", ".join(rep.phones))

    Console().print(table)


@app.command()
def refresh_dataset(
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Where to write legislators-current.json (defaults to the bundled path)",
    ),
    repair: bool = typer.Option(
        False,
        "--repair",
        help="Re-read roles from Congress.gov for records with no state (needs CONGRESS_API_KEY)",
    ),
) -> None:
    """Download the congress-legislators dataset used as the federal fallback.

    When every mirror fails, the dataset is built from Congress.gov instead.
    """
    settings = get_settings()
    target = output or settings.dataset.bundled_path
    logger.info("refresh-dataset command called with output: {} repair: {}", target, repair)

    async def _refresh() -> list:
        async with httpx.AsyncClient(follow_redirects=True) as client:
            source = CongressGovSource(settings, client)
            try:
                records = await download_dataset(settings.dataset, client)
            except RuntimeError as e:
                logger.warning("{}; building from Congress.gov", str(e))
                typer.secho("All mirrors failed; building from Congress.gov", fg=typer.colors.YELLOW)
                records = await build_from_congress(source)

            if repair:
                records, fixed = await repair_records(records, source)
                typer.echo(f"Repaired {fixed} legislators")
            return records

    try:
        records = asyncio.run(_refresh())
        write_dataset(records, target)

    except RuntimeError as e:
        logger.error("Dataset refresh failed: {}", str(e))
        typer.secho(f"✗ Dataset refresh failed: {str(e)}", fg=typer.colors.RED, bold=True)
        raise typer.Exit(code=1)

    except OSError as e:
        logger.error("Could not write dataset to {}: {}", target, str(e))
        typer.secho(f"✗ Could not write {target}: {str(e)}", fg=typer.colors.RED, bold=True)
        raise typer.Exit(code=1)

    typer.secho(
        f"✓ Wrote {len(records):,} legislators to {target}",
        fg=typer.colors.GREEN,
        bold=True,
    )
