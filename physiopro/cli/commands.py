"""CLI commands for PhysioPro."""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from physiopro.config import get_settings

app = typer.Typer(
    name="physiopro",
    help="Exercise-prescription platform for clinicians, patients and admins",
    add_completion=False,
)
console = Console()


@app.command()
def serve(
    host: str = typer.Option(None, "--host", "-h", help="Host to bind (default from settings)"),
    port: int = typer.Option(None, "--port", "-p", help="Port to bind (default from settings)"),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload"),
):
    """Start the REST API server."""
    import uvicorn

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port

    console.print(f"Starting PhysioPro API server on {host}:{port}")
    uvicorn.run(
        "physiopro.api.app:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
    )


@app.command("init-db")
def init_db():
    """Create the tables and load demo data when enabled."""
    from physiopro.core.database import dispose_engine, init_db as create_tables

    async def _run():
        await create_tables()
        await dispose_engine()

    settings = get_settings()
    asyncio.run(_run())
    seeded = "with demo data" if settings.seed_demo_data else "without demo data"
    console.print(f"[green]Database ready at {settings.database_url} ({seeded})[/green]")


@app.command()
def export(
    table: str = typer.Argument(..., help="What to export: clinicians or exercises"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="CSV file to write"),
):
    """Export clinicians or exercises as CSV."""
    from physiopro.core.database import _get_session_factory, dispose_engine, init_db as create_tables
    from physiopro.core.repository import ExerciseRepository, UserRepository
    from physiopro.export import clinicians_csv, exercises_csv

    if table not in ("clinicians", "exercises"):
        console.print(f"[red]Unknown table: {table}. Use clinicians or exercises[/red]")
        raise typer.Exit(1)

    async def _run() -> str:
        await create_tables()
        async with _get_session_factory()() as session:
            if table == "clinicians":
                content = clinicians_csv(await UserRepository(session).list_clinicians())
            else:
                content = exercises_csv(await ExerciseRepository(session).list())
        await dispose_engine()
        return content

    content = asyncio.run(_run())
    if output:
        output.write_text(content)
        console.print(f"[green]Wrote {output}[/green]")
    else:
        console.print(content, markup=False)


@app.command("search-exercises")
def search_exercises(
    query: str = typer.Argument(..., help='Natural-language query, e.g. "knee strengthening"'),
):
    """Ask the AI exercise search and show the matching library entries."""
    from physiopro.core.database import _get_session_factory, dispose_engine, init_db as create_tables
    from physiopro.core.repository import ExerciseRepository
    from physiopro.flows import ExerciseSearchFlow, ExerciseSearchInput
    from physiopro.llm import create_router_from_settings

    async def _run():
        await create_tables()
        result = await ExerciseSearchFlow(create_router_from_settings()).run(ExerciseSearchInput(query=query))
        async with _get_session_factory()() as session:
            exercises = await ExerciseRepository(session).find_by_names(result.results)
        await dispose_engine()
        return result, exercises

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        progress.add_task("Searching exercises...", total=None)
        result, exercises = asyncio.run(_run())

    console.print(Panel(f"[bold]Query:[/bold] {query}", title="Exercise Search"))
    if not result.results:
        console.print("[yellow]No suggestions returned.[/yellow]")
        return

    found = {e.name: e for e in exercises}
    table = Table(title=f"Suggestions ({len(result.results)})")
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Difficulty")
    table.add_column("In Library")
    for name in result.results:
        exercise = found.get(name.strip())
        table.add_row(
            name,
            exercise.category if exercise else "",
            (exercise.difficulty or "") if exercise else "",
            "[green]yes[/green]" if exercise else "[red]no[/red]",
        )
    console.print(table)


@app.command()
def health():
    """Check model provider health."""
    from physiopro.llm import create_router_from_settings

    console.print("[bold]PhysioPro Health Check[/bold]\n")

    llm = create_router_from_settings()
    health_status = asyncio.run(llm.health_check())

    table = Table(title="LLM Status")
    table.add_column("Provider")
    table.add_column("Status")
    for provider, status in health_status.items():
        status_str = "[green]OK[/green]" if status else "[red]UNAVAILABLE[/red]"
        table.add_row(provider, status_str)
    console.print(table)


@app.command("flow-stats")
def flow_stats():
    """Summarize recorded AI flow runs and model calls."""
    from physiopro.observability import get_observability_logger

    obs = get_observability_logger()
    table = Table(title="AI Telemetry")
    table.add_column("Log")
    table.add_column("Total")
    table.add_column("Errors")
    table.add_column("Fallbacks")
    table.add_column("Avg ms")
    for log_type in ("flows", "llm"):
        stats = obs.get_stats(log_type)
        if not stats["total"]:
            table.add_row(log_type, "0", "-", "-", "-")
            continue
        table.add_row(
            log_type,
            str(stats["total"]),
            str(stats["errors"]),
            str(stats["fallbacks"]),
            f"{stats['avg_duration_ms']:.0f}",
        )
    console.print(table)


@app.command()
def version():
    """Show version information."""
    from physiopro import __version__

    console.print(f"PhysioPro v{__version__}")
