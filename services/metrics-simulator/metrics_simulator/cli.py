"""Service Metrics Simulator CLI - configuration checks and foreground runs."""

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from sms_common.config import CONFIG_PATH_ENV_VAR, DEFAULT_CONFIG_PATH, SimulatorConfig
from sms_common.models.metrics import MetricsRegistry, PrefixedRegistry
from sms_common.utils.graphite import resolve_graphite_address

from metrics_simulator.generator import MetricGenerator
from metrics_simulator.microservice import Microservice

app = typer.Typer(
    name="metrics-simulator",
    help="Service Metrics Simulator - mock microservice metrics for Graphite/Grafana",
    add_completion=False,
)
console = Console()

ConfigOption = typer.Option(
    DEFAULT_CONFIG_PATH,
    "--config",
    "-c",
    envvar=CONFIG_PATH_ENV_VAR,
    help="Path to configuration file",
)


def load_or_exit(config: str) -> SimulatorConfig:
    """Load the configuration or exit with status 1."""
    try:
        return SimulatorConfig.load(Path(config))
    except (OSError, ValueError) as e:
        console.print(
            f"[bold red]Error:[/bold red] Invalid configuration {escape(config)}: {escape(str(e))}"
        )
        raise typer.Exit(code=1) from e


@app.command()
def validate(config: str = ConfigOption) -> None:
    """Validate a configuration file and check every Graphite endpoint."""
    cfg = load_or_exit(config)
    console.print(f"[green]✓[/green] Config file parsed: {config}")

    table = Table(title="Clouds")
    table.add_column("Cloud", style="cyan")
    table.add_column("Graphite endpoint", style="white")
    table.add_column("Status")

    valid = 0
    for cloud in cfg.clouds:
        try:
            host, port = resolve_graphite_address(cloud.graphite_endpoint)
            table.add_row(cloud.name, cloud.graphite_endpoint, f"[green]{host}:{port}[/green]")
            valid += 1
        except ValueError as e:
            table.add_row(cloud.name, cloud.graphite_endpoint, f"[red]{escape(str(e))}[/red]")
    console.print(table)

    services = Table(title="Microservices")
    services.add_column("Microservice", style="cyan")
    services.add_column("Meters", justify="right")
    services.add_column("Timers", justify="right")
    for svc in cfg.microservices:
        services.add_row(svc.name, str(len(svc.metrics.meters)), str(len(svc.metrics.timers)))
    console.print(services)

    if valid == 0:
        console.print("[bold red]Error:[/bold red] No valid cloud configurations")
        raise typer.Exit(code=1)

    console.print(f"\n[bold green]{valid}/{len(cfg.clouds)} cloud(s) ready[/bold green]\n")


@app.command()
def show(config: str = ConfigOption) -> None:
    """List every metric name each cloud will publish."""
    cfg = load_or_exit(config)

    registry = MetricsRegistry()
    names: list[str] = []
    for svc in cfg.microservices:
        instance = Microservice(svc, PrefixedRegistry(registry, svc.prefix), MetricGenerator())
        names.extend(instance.metric_names())

    for cloud in cfg.clouds:
        console.print(f"\n[bold cyan]{cloud.name}[/bold cyan] ({cloud.graphite_endpoint})")
        for name in names:
            console.print(f"  {name}")
    console.print()


@app.command()
def run(config: str = ConfigOption) -> None:
    """Run the simulator in the foreground until interrupted."""
    from metrics_simulator.main import SimulatorOrchestrator

    code = SimulatorOrchestrator().run(config_path=config)
    raise typer.Exit(code=code)


if __name__ == "__main__":
    app()
