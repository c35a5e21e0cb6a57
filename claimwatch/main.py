"""Main script for running ClaimWatch."""

import argparse
import asyncio
import logging

from rich.console import Console
from rich.table import Table

from .config import Settings
from .domain.exceptions import ClaimWatchError
from .domain.services.risk_scorer import risk_tier
from .infrastructure.dependencies import ServiceContainer

console = Console()

VERDICT_STYLES = {
    "true": "green",
    "false": "red",
    "mixed": "yellow",
    "misleading": "yellow",
    "unverified": "cyan",
}


def print_analysis(claim, analysis) -> None:
    style = VERDICT_STYLES.get(analysis.verdict.value, "white")
    console.print(f"\n[bold]Verdict:[/bold] [{style}]{analysis.verdict.value}[/{style}]")
    console.print(f"[bold]Confidence:[/bold] {analysis.confidence:.2%}")
    console.print(f"[bold]Risk:[/bold] {analysis.risk_score:.2f} ({risk_tier(analysis.risk_score).value})")
    console.print(f"[bold]Status:[/bold] {claim.status.value}")
    console.print(f"\n{analysis.rationale}")

    if analysis.sources:
        table = Table(title="Evidence")
        table.add_column("#")
        table.add_column("Source")
        table.add_column("Reliability")
        for i, source in enumerate(analysis.sources, 1):
            table.add_row(str(i), source.title, source.reliability.value)
        console.print(table)


async def interactive(settings: Settings) -> None:
    """Analyze claims typed at the console."""
    console.print("[bold]ClaimWatch[/bold] - claim analysis console")
    console.print("-----------------------------------------")

    container = ServiceContainer(settings.model_copy(update={"auto_analyze": False}))
    await container.initialize()
    service = container.get_claim_service()
    mode = "AI" if container.ai_provider else "heuristic"
    console.print(f"Running in {mode} mode")

    try:
        while True:
            text = console.input("\nEnter a claim to analyze (or 'quit' to exit): ")
            if text.lower() in ("quit", "exit", "q"):
                break

            console.print("\nAnalyzing...")
            try:
                claim = await service.create_claim(text)
                analysis = await service.run_analysis(claim.id)
                claim = await service.get_claim(claim.id)
                print_analysis(claim, analysis)
            except ClaimWatchError as e:
                console.print(f"\n[red]Error analyzing claim: {e}[/red]")
    finally:
        await container.shutdown()


def serve(host: str, port: int) -> None:
    import uvicorn

    from .api.app import app

    uvicorn.run(app, host=host, port=port)


def run() -> None:
    parser = argparse.ArgumentParser(prog="claimwatch", description="Claim analysis backend")
    subcommands = parser.add_subparsers(dest="command")
    serve_parser = subcommands.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="0.0.0.0")
    serve_parser.add_argument("--port", type=int, default=8000)
    subcommands.add_parser("console", help="Analyze claims interactively")
    args = parser.parse_args()

    if args.command == "serve":
        serve(args.host, args.port)
        return

    settings = Settings.from_env()
    logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))
    asyncio.run(interactive(settings))


if __name__ == "__main__":
    run()
