"""Main CLI entry point for harbormaster."""

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from harbormaster.config import CONFIG_ENV_VAR, HarbormasterConfig, load_config
from harbormaster.exceptions import HarbormasterError, PartialAggregation
from harbormaster.logging_config import get_logger, setup_logging

app = typer.Typer(
    name="harbormaster",
    help="Read-only view of ECS and EKS clusters, nodes and services",
    add_completion=False,
)

console = Console()
logger = get_logger(__name__)


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    log_file: str | None = typer.Option(None, "--log-file", help="Path to log file"),
    config_path: str | None = typer.Option(
        None, "--config", "-c", envvar=CONFIG_ENV_VAR, help="Path to YAML config file"
    ),
):
    """Global options for all commands."""
    log_path = Path(log_file) if log_file else None
    setup_logging(verbose=verbose, log_file=log_path)
    logger.debug("Logging initialized")
    ctx.obj = {"config_path": config_path, "verbose": verbose, "log_file": log_path}


def build_engine(config: HarbormasterConfig):
    """Create an Aggregator backed by fresh AWS clients."""
    from harbormaster.aggregator import Aggregator
    from harbormaster.clients import BackendClients

    clients = BackendClients.from_config(config)
    return Aggregator.from_clients(clients, config.schedulers)


def _run(ctx: typer.Context, operation):
    """Load config, build the engine and run ``operation``, reporting typed errors."""
    try:
        options = ctx.obj or {}
        config = load_config(options.get("config_path"))
        setup_logging(
            level=config.log_level,
            log_file=options.get("log_file"),
            verbose=options.get("verbose", False),
        )
        return operation(build_engine(config))
    except HarbormasterError as e:
        logger.error(f"{e.kind}: {e.message}")
        console.print(f"[red]{e.kind}:[/red] {e.message}")
        if e.details:
            console.print(f"\n{e.details}")
        raise typer.Exit(code=1)


def _print_warnings(result, strict: bool, quiet: bool = False) -> None:
    if not quiet:
        for warning in result.warnings:
            where = f"{warning.scheduler}/{warning.cluster}" if warning.cluster else warning.scheduler
            console.print(f"[yellow]Warning:[/yellow] {where}: {warning.kind}: {warning.message}")
    if strict and result.partial:
        try:
            result.raise_for_partial()
        except PartialAggregation as e:
            console.print(f"[red]{e.kind}:[/red] {e.message}")
            raise typer.Exit(code=2)


def _print_json(payload) -> None:
    typer.echo(json.dumps(payload, indent=2))


@app.command()
def version() -> None:
    """Show version information."""
    from harbormaster import __version__

    typer.echo(f"Harbormaster version {__version__}")


@app.command()
def clusters(
    ctx: typer.Context,
    scheduler: str | None = typer.Option(
        None, "--scheduler", "-s", help="Only query this scheduler (ecs or eks)"
    ),
    name: str | None = typer.Option(
        None, "--name", "-n", help="Show a single cluster (requires --scheduler)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
    strict: bool = typer.Option(
        False, "--strict", help="Exit with code 2 if any scheduler failed"
    ),
) -> None:
    """
    List clusters across every scheduler.

    Examples:
        harbormaster clusters
        harbormaster clusters --scheduler eks
        harbormaster clusters --scheduler ecs --name prod
    """
    if name is not None:
        if scheduler is None:
            console.print("[red]Error:[/red] --name requires --scheduler")
            raise typer.Exit(code=1)
        cluster = _run(ctx, lambda engine: engine.get_cluster(scheduler, name))
        if as_json:
            _print_json(cluster.model_dump(mode="json", by_alias=True))
            return
        table = Table(title=f"Cluster {cluster.name}")
        table.add_column("Field", style="cyan")
        table.add_column("Value")
        table.add_row("Name", cluster.name)
        table.add_row("ARN", cluster.arn)
        table.add_row("Scheduler", cluster.scheduler.value)
        table.add_row("Status", cluster.status)
        console.print(table)
        return

    result = _run(ctx, lambda engine: engine.list_clusters(scheduler))
    if as_json:
        _print_json(result.to_response())
    elif not result.items:
        console.print("[yellow]No clusters found[/yellow]")
    else:
        table = Table(title="Clusters")
        table.add_column("Scheduler", style="magenta")
        table.add_column("Name", style="cyan")
        table.add_column("Status", style="green")
        table.add_column("ARN")
        for cluster in result.items:
            table.add_row(cluster.scheduler.value, cluster.name, cluster.status, cluster.arn)
        console.print(table)
        console.print(f"\n[bold]Total clusters:[/bold] {len(result.items)}")
    _print_warnings(result, strict, quiet=as_json)


@app.command()
def nodes(
    ctx: typer.Context,
    scheduler: str | None = typer.Option(
        None, "--scheduler", "-s", help="Only query this scheduler (ecs or eks)"
    ),
    cluster: str | None = typer.Option(
        None, "--cluster", help="Only query this cluster (requires --scheduler)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
    strict: bool = typer.Option(
        False, "--strict", help="Exit with code 2 if any scheduler or cluster failed"
    ),
) -> None:
    """
    List worker nodes (ECS container instances and EKS nodes).
    """
    result = _run(ctx, lambda engine: engine.list_nodes(scheduler, cluster))
    if as_json:
        _print_json(result.to_response())
    elif not result.items:
        console.print("[yellow]No nodes found[/yellow]")
    else:
        table = Table(title="Nodes")
        table.add_column("Scheduler", style="magenta")
        table.add_column("Cluster", style="cyan")
        table.add_column("Name", style="cyan")
        table.add_column("Instance ID", style="yellow")
        table.add_column("Status", style="green")
        for node in result.items:
            table.add_row(
                node.scheduler.value, node.cluster.name, node.name, node.instance_id, node.status
            )
        console.print(table)
        console.print(f"\n[bold]Total nodes:[/bold] {len(result.items)}")
    _print_warnings(result, strict, quiet=as_json)


@app.command()
def services(
    ctx: typer.Context,
    scheduler: str | None = typer.Option(
        None, "--scheduler", "-s", help="Only query this scheduler (ecs or eks)"
    ),
    cluster: str | None = typer.Option(
        None, "--cluster", help="Only query this cluster (requires --scheduler)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
    strict: bool = typer.Option(
        False, "--strict", help="Exit with code 2 if any scheduler, cluster or namespace failed"
    ),
) -> None:
    """
    List services across every cluster.
    """
    result = _run(ctx, lambda engine: engine.list_services(scheduler, cluster))
    if as_json:
        _print_json(result.to_response())
    elif not result.items:
        console.print("[yellow]No services found[/yellow]")
    else:
        table = Table(title="Services")
        table.add_column("Scheduler", style="magenta")
        table.add_column("Cluster", style="cyan")
        table.add_column("Namespace", style="blue")
        table.add_column("Name", style="cyan")
        table.add_column("Launch Type", style="yellow")
        table.add_column("Status", style="green")
        for service in sorted(
            result.items, key=lambda s: (s.scheduler.value, s.cluster.name, s.namespace, s.name)
        ):
            table.add_row(
                service.scheduler.value,
                service.cluster.name,
                service.namespace or "-",
                service.name,
                service.launch_type,
                service.status,
            )
        console.print(table)
        console.print(f"\n[bold]Total services:[/bold] {len(result.items)}")
    _print_warnings(result, strict, quiet=as_json)


if __name__ == "__main__":
    app()
