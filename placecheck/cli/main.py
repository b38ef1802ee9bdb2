"""Command-line interface for placecheck using Typer and Rich."""

import asyncio
import sys
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from placecheck import __version__
from placecheck.buildings import BuildingFactsResolver, BuildingFactsResult
from placecheck.config.api_keys import api_keys
from placecheck.config.logging import configure_logging, get_logger
from placecheck.config.settings import settings
from placecheck.factcheck import FactCheckResult, ParagraphVerifier
from placecheck.providers import BingWebSearch
from placecheck.utils.logging import configure_structured_logging

app = typer.Typer(
    help="placecheck - evidence-backed building facts and place-narrative fact checks",
    add_completion=False,
)

console = Console()

logger = get_logger("cli")

VERDICT_STYLES = {
    "true": "green",
    "false": "red",
    "mixed": "yellow",
    "uncertain": "dim",
}


@app.callback()
def main() -> None:
    """Configure logging before any command runs."""
    configure_logging()
    configure_structured_logging()


def _verdict(value: str) -> str:
    style = VERDICT_STYLES.get(value, "white")
    return f"[{style}]{value}[/{style}]"


def _print_notes(title: str, notes: Optional[list[str]]) -> None:
    if notes:
        console.print(Panel("\n".join(f"• {n}" for n in notes), title=title, border_style="yellow"))


def render_fact_check(result: FactCheckResult) -> None:
    table = Table(title="Claims", show_header=True, header_style="bold magenta")
    table.add_column("Claim", style="cyan")
    table.add_column("Verdict", width=10)
    table.add_column("Confidence", justify="right", width=10)
    table.add_column("Sources", justify="right", width=8)
    for claim in result.claims:
        table.add_row(
            claim.text,
            _verdict(claim.verdict.value),
            f"{claim.confidence:.2f}",
            str(len(claim.evidence)),
        )
    console.print(table)
    console.print(
        f"\n[bold]Overall:[/bold] {_verdict(result.verdict.value)} "
        f"(confidence {result.confidence:.2f})"
    )
    _print_notes("Gaps and caveats", result.gaps_or_caveats)


def render_building(result: BuildingFactsResult) -> None:
    canonical = result.canonical
    details = [
        f"Address: {canonical.address or '-'}",
        f"Point: {canonical.lat}, {canonical.lon}" if canonical.lat is not None else "Point: -",
        f"OSM: {canonical.osm_type}/{canonical.osm_id}" if canonical.osm_id else "OSM: -",
        f"Wikidata: {canonical.wikidata_qid or '-'}",
        f"Wikipedia: {canonical.wikipedia_title or '-'}",
    ]
    console.print(Panel("\n".join(details), title="Canonical", border_style="cyan"))

    table = Table(title="Facts", show_header=True, header_style="bold magenta")
    table.add_column("Key", style="cyan", width=22)
    table.add_column("Value")
    table.add_column("Confidence", justify="right", width=10)
    table.add_column("Sources", style="yellow")
    for fact in result.facts:
        value = fact.value
        if fact.key.value == "coordinates":
            value = f"{value.lat:.5f}, {value.lon:.5f}"
        table.add_row(
            fact.key.value,
            str(value),
            f"{fact.confidence:.3f}",
            ", ".join(e.title for e in fact.evidence),
        )
    console.print(table)

    if result.summary:
        console.print(Panel(result.summary, title="Summary", border_style="green"))
    console.print(
        f"\n[bold]Overall:[/bold] {_verdict(result.verdict.value)} "
        f"(confidence {result.confidence:.3f})"
    )
    _print_notes("Notes", result.notes)


async def _verify(paragraph: str, min_sources: Optional[int], now: Optional[str], open_pages: bool) -> FactCheckResult:
    async with BingWebSearch() as search:
        verifier = ParagraphVerifier(search=search, min_sources=min_sources, open_pages=open_pages)
        return await verifier.verify(paragraph, now=now)


async def _building(
    address: Optional[str],
    lat: Optional[float],
    lon: Optional[float],
    locale: Optional[str],
    min_sources: Optional[int],
    now: Optional[str],
) -> BuildingFactsResult:
    async with BuildingFactsResolver(min_sources=min_sources) as resolver:
        return await resolver.resolve(address=address, lat=lat, lon=lon, locale=locale, now=now)


@app.command()
def verify(
    paragraph: str = typer.Argument(..., help="Paragraph to fact-check, or '-' to read stdin"),
    min_sources: Optional[int] = typer.Option(None, "--min-sources", help="Independent sources per claim"),
    now: Optional[str] = typer.Option(None, "--now", help="Fixed ISO timestamp for access dates"),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
    open_pages: bool = typer.Option(False, "--open-pages", help="Fetch pages to fill missing snippets"),
) -> None:
    """
    Fact-check a narrative paragraph against web search results.

    Args:
        paragraph: Narrative text about a place
    """
    text = sys.stdin.read() if paragraph == "-" else paragraph
    logger.info(f"Verifying paragraph ({len(text)} chars)")
    try:
        result = asyncio.run(_verify(text, min_sources, now, open_pages))
    except Exception as e:
        console.print(f"\n[red]✗[/red] Error: {e}")
        logger.error(f"Verification failed: {e}")
        raise typer.Exit(1)

    if as_json:
        typer.echo(result.model_dump_json(indent=2, exclude_none=True))
    else:
        render_fact_check(result)


@app.command()
def building(
    address: Optional[str] = typer.Option(None, "--address", help="Street address"),
    lat: Optional[float] = typer.Option(None, "--lat", help="Latitude"),
    lon: Optional[float] = typer.Option(None, "--lon", help="Longitude"),
    locale: Optional[str] = typer.Option(None, "--locale", help="Locale tag, e.g. de-AT"),
    min_sources: Optional[int] = typer.Option(None, "--min-sources", help="Independent sources per fact"),
    now: Optional[str] = typer.Option(None, "--now", help="Fixed ISO timestamp for access dates"),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON"),
) -> None:
    """
    Resolve provenance-backed facts about a building.

    Pass either --address or both --lat and --lon.
    """
    if not address and (lat is None or lon is None):
        console.print("[red]✗[/red] Provide --address or both --lat and --lon")
        raise typer.Exit(2)

    logger.info(f"Resolving building facts for {address or f'{lat},{lon}'}")
    try:
        result = asyncio.run(_building(address, lat, lon, locale, min_sources, now))
    except Exception as e:
        console.print(f"\n[red]✗[/red] Error: {e}")
        logger.error(f"Building resolution failed: {e}")
        raise typer.Exit(1)

    if as_json:
        typer.echo(result.model_dump_json(indent=2, exclude_none=True))
    else:
        render_building(result)


@app.command()
def status() -> None:
    """Display configuration and provider status."""
    logger.info("Displaying status")

    table = Table(title="placecheck Status", show_header=True, header_style="bold magenta")
    table.add_column("Component", style="cyan", width=20)
    table.add_column("Status", style="green", width=16)
    table.add_column("Details", style="yellow")

    python_version = f"Python {sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"
    table.add_row("Environment", "✓ Ready", f"{python_version}, placecheck {__version__}")

    bing_status = "✓ Configured" if api_keys.bing_api_key else "⚠ Mock mode"
    table.add_row("Bing search", bing_status, f"market {settings.bing_market}")
    wiki_status = "✓ Configured" if api_keys.wikipedia_api_key else "✓ Public REST"
    table.add_row("Wikipedia", wiki_status, "core API with REST fallback")
    table.add_row("Nominatim", "✓ Public", settings.nominatim_url)
    table.add_row("Overpass", "✓ Public", f"{settings.overpass_endpoint} ({settings.footprint_radius_m} m)")
    table.add_row("Wikidata", "✓ Public", settings.wikidata_sparql_url)

    table.add_row(
        "Verification",
        "✓ Active",
        f"min sources {settings.min_sources}, timezone {settings.timezone}",
    )
    log_details = f"Level: {settings.log_level}, Format: {settings.log_format}"
    table.add_row("Logging", "✓ Active", log_details)

    console.print(table)


@app.command()
def version() -> None:
    """Display version information."""
    console.print("[bold]placecheck[/bold]")
    console.print(f"Version: {__version__}")


if __name__ == "__main__":
    app()
