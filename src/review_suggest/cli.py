"""CLI interface using typer + rich."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from review_suggest.categories import load_catalog
from review_suggest.config import load_config
from review_suggest.logging.usage_store import GenerationLogStore
from review_suggest.models.request import GenerationRequest, Tone
from review_suggest.service import build_service

app = typer.Typer(
    name="review-suggest",
    help="AI review suggestions with rate limiting and static fallback",
    no_args_is_help=True,
)
console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


@app.command()
def suggest(
    business: str = typer.Argument(help="Business name"),
    category: str = typer.Option("general", "--category", "-c", help="Business category or alias"),
    count: int = typer.Option(3, "--count", "-n", min=1, max=10, help="Suggestions per request"),
    tone: Tone = typer.Option(Tone.PROFESSIONAL, "--tone", help="Review tone"),
    language: str = typer.Option("English", "--language", "-l", help="Review language"),
    rounds: int = typer.Option(1, "--rounds", "-r", min=1, help="Repeat the request in one session"),
    config_path: Path = typer.Option(None, "--config", help="config.yaml path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Generate review suggestions for a business."""
    _setup_logging(verbose)
    config = load_config(config_path)
    service = build_service(config, api_key=os.getenv("ANTHROPIC_API_KEY"))
    request = GenerationRequest(
        business_name=business,
        business_category=category,
        count=count,
        tone=tone,
        language=language,
    )

    async def _run():
        return [await service.generate(request) for _ in range(rounds)]

    with console.status("Generating suggestions..."):
        results = asyncio.run(_run())

    for i, result in enumerate(results, 1):
        color = "green" if result.source.value == "live" else "yellow"
        detail = f"[{color}]{result.source.value}[/{color}]"
        if result.reason:
            detail += f" ({result.reason})"
        body = "\n".join(f"{n}. {escape(text)}" for n, text in enumerate(result.suggestions, 1))
        console.print(
            Panel(
                body,
                title=f"Round {i}: {escape(business)} ({result.category})",
                subtitle=f"{detail} | attempts: {result.attempts} | {result.elapsed_seconds:.2f}s",
            )
        )

    status = service.status()
    console.print(
        f"[dim]Remaining upstream requests: {status['rate_limit']['per_minute']}/min, "
        f"{status['rate_limit']['per_hour']}/hour | cached fingerprints: {status['cache_size']}[/dim]"
    )


@app.command()
def categories() -> None:
    """List business categories and their fallback pools."""
    catalog = load_catalog()
    table = Table(title="Business categories")
    table.add_column("id", style="bold")
    table.add_column("name")
    table.add_column("aliases")
    table.add_column("fallback", justify="right")
    for c in catalog.all():
        marker = " (default)" if c.id == catalog.default_id else ""
        table.add_row(c.id + marker, c.name, ", ".join(c.aliases), str(len(c.suggestions)))
    console.print(table)


@app.command()
def stats(
    config_path: Path = typer.Option(None, "--config", help="config.yaml path"),
) -> None:
    """Show live vs fallback statistics from the generation log."""
    config = load_config(config_path)
    db_path = config.log.resolved_db_path
    if not db_path.exists():
        console.print(f"[yellow]No generation log at {db_path}. Set log.enabled in config.yaml.[/yellow]")
        raise typer.Exit(1)

    data = GenerationLogStore(db_path).get_stats()
    reasons = ", ".join(f"{k}: {v}" for k, v in data["fallback_reasons"].items()) or "-"
    console.print(
        Panel(
            f"Requests: {data['total_requests']} | live: {data['live']} | "
            f"fallback: {data['fallback']} ({data['fallback_rate']:.1f}%)\n"
            f"Fallback reasons: {reasons}\n"
            f"Tokens: {data['total_input_tokens']} in / {data['total_output_tokens']} out | "
            f"cost: ${data['total_cost_usd']:.4f}",
            title="Generation log",
        )
    )


if __name__ == "__main__":
    app()
