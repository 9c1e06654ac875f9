"""
Scoped Purge CLI - Command-line interface.

Inspect the entity catalog, preview a scope's purge order and run purges
from the terminal.
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from scoped_purge.config import EngineConfig, create_engine, load_config
from scoped_purge.core.exceptions import PurgeError, UnknownScopeError
from scoped_purge.engine.executor import PurgeEngine
from scoped_purge.engine.predicates import build_all_rows_predicate
from scoped_purge.engine.reporter import ResultReporter

app = typer.Typer(
    name="scoped-purge",
    help="Scoped Purge - dependency-ordered bulk deletion of relational data",
    no_args_is_help=True,
)
console = Console()

_CATALOG_HELP = "Catalog YAML file (default: $PURGE_CATALOG_PATH or built-in)"


def _load(catalog: Optional[Path]) -> tuple[EngineConfig, PurgeEngine]:
    """Load configuration and build the engine, exiting on configuration errors."""
    try:
        config = load_config()
        if catalog is not None:
            config = config.model_copy(update={"catalog_path": catalog})
        logging.basicConfig(
            level=config.log_level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
        return config, create_engine(config)
    except PurgeError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def entities(
    catalog: Optional[Path] = typer.Option(None, "--catalog", "-c", help=_CATALOG_HELP),
):
    """List registered entities and their dependencies."""
    _, engine = _load(catalog)
    graph = engine.graph

    table = Table(title=f"Registered Entities ({len(graph)})")
    table.add_column("Name", style="cyan")
    table.add_column("Key column")
    table.add_column("Kind", style="magenta")
    table.add_column("Depends on")
    table.add_column("Protected")

    for entity in graph.entities:
        table.add_row(
            entity.name,
            entity.key_column,
            entity.key_kind.value,
            ", ".join(graph.parents_of(entity.name)) or "-",
            "[yellow]yes[/yellow]" if entity.protected else "",
        )

    console.print(table)


@app.command()
def scopes(
    catalog: Optional[Path] = typer.Option(None, "--catalog", "-c", help=_CATALOG_HELP),
):
    """List scopes and the order their entities are purged in."""
    _, engine = _load(catalog)

    table = Table(title="Purge Scopes")
    table.add_column("Scope", style="cyan")
    table.add_column("Description")
    table.add_column("Order", style="green")

    for name in engine.resolver.names():
        scope = engine.resolver.get(name)
        order = "\n".join(f"  {i+1}. {n}" for i, n in enumerate(engine.resolver.resolve_names(name)))
        table.add_row(name, scope.description, order)

    console.print(table)


@app.command()
def plan(
    scope_name: str = typer.Argument(..., help="Scope to preview"),
    catalog: Optional[Path] = typer.Option(None, "--catalog", "-c", help=_CATALOG_HELP),
):
    """Show the purge order and predicates for a scope without deleting anything."""
    _, engine = _load(catalog)

    try:
        ordered = engine.plan(scope_name)
    except UnknownScopeError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"Purge plan: {scope_name}")
    table.add_column("#", justify="right")
    table.add_column("Entity", style="cyan")
    table.add_column("Predicate")

    for i, entity in enumerate(ordered):
        table.add_row(str(i + 1), entity.name, str(build_all_rows_predicate(entity)))

    console.print(table)


@app.command()
def purge(
    scope_name: str = typer.Argument(..., help="Scope to purge"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Directory for the JSON result"),
    actor: str = typer.Option("cli", "--actor", help="Name recorded in the audit trail"),
    catalog: Optional[Path] = typer.Option(None, "--catalog", "-c", help=_CATALOG_HELP),
):
    """Delete every row of every entity in a scope."""
    config, engine = _load(catalog)

    console.print(
        Panel.fit(
            f"[bold red]Scoped Purge[/bold red]\n"
            f"Scope: {scope_name}\n"
            f"Store: {config.store.value}",
        )
    )

    if not yes:
        try:
            names = engine.resolver.resolve_names(scope_name)
        except UnknownScopeError:
            names = None
        if names is not None and not typer.confirm(
            f"Permanently delete all rows from: {', '.join(names)}?"
        ):
            console.print("[yellow]Aborted[/yellow]")
            raise typer.Exit(1)

    result = engine.purge(scope_name, actor=actor)

    console.print("\n")
    console.print(ResultReporter.summary(result), markup=False)

    if output:
        output_path = ResultReporter.persist(result, output)
        console.print(f"\n[green]Result saved to:[/green] {output_path}")

    if not result.is_success():
        raise typer.Exit(1)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", "-p", help="Bind port"),
    catalog: Optional[Path] = typer.Option(None, "--catalog", "-c", help=_CATALOG_HELP),
):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    from scoped_purge.api.app import create_app

    config, engine = _load(catalog)
    console.print(f"[bold blue]Scoped Purge API[/bold blue] on http://{host}:{port}")
    try:
        uvicorn.run(create_app(engine=engine, config=config), host=host, port=port)
    finally:
        # The app does not own an injected engine, so release the store here
        close = getattr(engine.store, "close", None)
        if callable(close):
            close()


@app.command()
def version():
    """Show Scoped Purge version."""
    from scoped_purge import __version__

    console.print(f"Scoped Purge v{__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
