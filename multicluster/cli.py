"""Main CLI entry point for multicluster."""

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from typer.core import TyperGroup

from multicluster.exceptions import MultiClusterError
from multicluster.logging_config import get_logger, setup_logging
from multicluster.models.cluster import ClusterStatus
from multicluster.orchestrator import ClusterOrchestrator, Outcome
from multicluster.settings import Settings

console = Console()
logger = get_logger(__name__)


class CommandGroup(TyperGroup):
    """Prints usage and exits 1 on an unknown command."""

    def resolve_command(self, ctx: typer.Context, args: list[str]):
        if args and self.get_command(ctx, args[0]) is None:
            console.print(f"[red]Error:[/red] Unknown command: {escape(args[0])}")
            typer.echo(ctx.get_help())
            ctx.exit(1)
        return super().resolve_command(ctx, args)


app = typer.Typer(
    name="multicluster",
    help="Local multi-cluster KIND environments with dedicated host IPs and MetalLB",
    cls=CommandGroup,
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def create_orchestrator(settings: Settings) -> ClusterOrchestrator:
    """Build the orchestrator used by the commands."""
    return ClusterOrchestrator.from_settings(settings, console=console)


def _orchestrator(ctx: typer.Context) -> ClusterOrchestrator:
    return create_orchestrator(ctx.obj)


def _fail(error: MultiClusterError) -> None:
    logger.error(f"{error.label}: {error.message}")
    console.print(f"[red]{error.label}:[/red] {escape(error.message)}")
    if error.details:
        console.print(f"\n{escape(error.details)}")
    raise typer.Exit(code=1)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    log_file: str | None = typer.Option(None, "--log-file", help="Path to log file"),
    clusters_dir: Path | None = typer.Option(
        None,
        "--clusters-dir",
        "-d",
        help="Directory holding cluster configurations (default: ./clusters)",
    ),
    assume_yes: bool = typer.Option(
        False, "--yes", "-y", help="Answer yes to overwrite/recreate confirmations"
    ),
    no_input: bool = typer.Option(
        False, "--no-input", help="Never prompt; keep existing clusters and configuration"
    ),
):
    """Global options for all commands."""
    log_path = Path(log_file) if log_file else None
    setup_logging(verbose=verbose, log_file=log_path)
    logger.debug("Logging initialized")

    settings = Settings()
    overrides = {}
    if clusters_dir is not None:
        overrides["clusters_dir"] = clusters_dir
    if assume_yes:
        overrides["assume_yes"] = True
    if no_input:
        overrides["non_interactive"] = True
    ctx.obj = settings.model_copy(update=overrides)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)


@app.command()
def version() -> None:
    """Show version information."""
    from multicluster import __version__

    typer.echo(f"multicluster version {__version__}")


@app.command("help")
def help_command(ctx: typer.Context) -> None:
    """Show this message."""
    typer.echo(ctx.parent.get_help())


@app.command()
def init(
    ctx: typer.Context,
    name: str | None = typer.Argument(None, help="Name of the cluster (and of its directory)"),
    cluster_ip: str | None = typer.Argument(None, help="Host IP dedicated to the cluster"),
    subnet: str | None = typer.Option(None, "--subnet", help="Subnet of the host network"),
    gateway: str | None = typer.Option(None, "--gateway", help="Gateway of the host network"),
    interface: str | None = typer.Option(
        None, "--interface", "-i", help="Host interface the cluster IP is added to"
    ),
) -> None:
    """
    Initialize a cluster configuration directory.

    Writes config/cluster.env, config/kind-config.yaml, config/metallb.yaml,
    a sample manifest and a README under <clusters-dir>/<name>/.

    Examples:
        multicluster init cluster1 192.168.55.51
        multicluster init cluster2 192.168.55.52 --interface eth0
    """
    try:
        _orchestrator(ctx).init(name, cluster_ip, subnet=subnet, gateway=gateway, interface=interface)
    except MultiClusterError as e:
        _fail(e)


@app.command()
def create(
    ctx: typer.Context,
    name: str | None = typer.Argument(None, help="Name of the cluster to create"),
) -> None:
    """
    Create a cluster from its configuration.

    Assigns the cluster IP to the parent interface, creates the KIND cluster,
    installs MetalLB and applies everything in manifests/.
    """
    try:
        outcome = _orchestrator(ctx).create(name)
    except MultiClusterError as e:
        _fail(e)
    except KeyboardInterrupt:
        console.print("\n[yellow]Cluster creation interrupted by user[/yellow]")
        raise typer.Exit(code=130)

    if outcome is Outcome.KEPT_EXISTING:
        logger.info(f"Cluster {name} left unchanged")


@app.command()
def delete(
    ctx: typer.Context,
    name: str | None = typer.Argument(None, help="Name of the cluster to delete"),
) -> None:
    """
    Delete a cluster and release its IP from the parent interface.

    The configuration directory is kept.
    """
    try:
        report = _orchestrator(ctx).delete(name)
    except MultiClusterError as e:
        _fail(e)

    if report.cluster_deleted and report.ip_released:
        console.print(f"[green]✓[/green] Cluster {name} deleted and IP released")
    else:
        console.print(f"[yellow]Cluster {name} cleanup finished with warnings[/yellow]")


def _print_status(status: ClusterStatus) -> None:
    console.print(f"\n[bold]=== {status.name} ===[/bold]")
    if not status.directory_present:
        console.print("[red]✗[/red] Configuration directory missing")
        return

    if status.config_loaded:
        console.print(f"[green]✓[/green] Configuration loaded (IP: {status.cluster_ip})")
    else:
        console.print(f"[red]✗[/red] Failed to load configuration: {status.config_error}")

    if status.registered is None:
        console.print(f"[yellow]?[/yellow] KIND cluster state unknown: {status.registration_error}")
    elif status.registered:
        console.print("[green]✓[/green] KIND cluster exists")
        if status.reachable:
            console.print("[green]✓[/green] Cluster is accessible")
            console.print(f"  Nodes: {status.node_count}")
        else:
            console.print("[red]✗[/red] Cluster not accessible")
    elif status.registration_error:
        console.print(f"[red]✗[/red] KIND cluster does not exist ({status.registration_error})")
    else:
        console.print("[red]✗[/red] KIND cluster does not exist")

    if status.manifests_dir_present:
        console.print(f"[green]✓[/green] Manifests directory exists ({status.manifest_count} files)")
    else:
        console.print("- No manifests directory")


@app.command()
def status(
    ctx: typer.Context,
    name: str | None = typer.Argument(None, help="Cluster to inspect (default: all clusters)"),
) -> None:
    """
    Show cluster status.

    Reports whether the configuration loads, whether the KIND cluster exists
    and answers, its node count and how many manifests it has.
    """
    settings: Settings = ctx.obj
    orchestrator = _orchestrator(ctx)

    if not name:
        if not settings.clusters_dir.is_dir():
            console.print(
                f"[yellow]Warning:[/yellow] Configuration directory not found: {settings.clusters_dir}"
            )
            return
        console.print("Scanning for cluster configurations...")

    statuses = orchestrator.status(name)
    if not statuses:
        console.print(
            f"[yellow]Warning:[/yellow] No cluster configurations found in {settings.clusters_dir}"
        )
        return

    for cluster_status in statuses:
        _print_status(cluster_status)


@app.command("list")
def list_clusters(ctx: typer.Context) -> None:
    """List all cluster configurations."""
    settings: Settings = ctx.obj
    orchestrator = _orchestrator(ctx)

    if not settings.clusters_dir.is_dir():
        console.print(
            f"[yellow]Warning:[/yellow] Configuration directory not found: {settings.clusters_dir}"
        )
        return

    summaries = orchestrator.list_clusters()
    if not summaries:
        console.print(
            f"[yellow]Warning:[/yellow] No cluster configurations found in {settings.clusters_dir}"
        )
        console.print("\nCreate a cluster configuration:")
        console.print("  multicluster init cluster1 192.168.55.51")
        console.print("  multicluster create cluster1")
        return

    table = Table(title="Available cluster configurations")
    table.add_column("Status")
    table.add_column("Name", style="cyan")
    table.add_column("IP", style="magenta")

    for summary in summaries:
        marker = "[green]✓ running[/green]" if summary.running else "[red]✗ absent[/red]"
        table.add_row(marker, summary.name, summary.display_ip)

    console.print(table)


if __name__ == "__main__":
    app()
