"""
Faultline CLI.

Commands:
- test: Run the workload x nemesis matrix against a cluster
- plan: Show the matrix a configuration would run
- list: Show registered workloads and nemeses
- serve: Browse stored results
"""

import logging
from pathlib import Path
from typing import List, Optional

import typer
import yaml
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from .. import __version__
from ..config import FaultlineConfig, load_config, generate_default_config
from ..core.errors import ConfigurationError, EXIT_CONFIG_ERROR
from ..core.report import MatrixReport, RunRecord
from ..execution import CommandExecutor, DryRunExecutor
from ..matrix import MatrixRunner, plan_matrix
from ..nemesis import NEMESES
from ..store import ResultStore
from ..workloads import WORKLOADS

logger = logging.getLogger(__name__)

# Command-line spelling of the absent secondary nemesis
ABSENT_NAME = 'absent'


app = typer.Typer(
    name="faultline",
    help="Fault-injection test matrices for distributed databases",
    add_completion=False,
)
console = Console()


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _split_nodes(values: List[str]) -> List[str]:
    """Accept both --nodes n1,n2 and repeated --nodes n1 --nodes n2."""
    nodes = []
    for value in values:
        nodes.extend(n.strip() for n in value.split(',') if n.strip())
    return nodes


def _nemesis_names(values: List[str]) -> List[Optional[str]]:
    return [None if v == ABSENT_NAME else v for v in values]


def _apply_matrix_options(
    cfg: FaultlineConfig,
    tests: Optional[List[str]],
    nemeses: Optional[List[str]],
    nemeses2: Optional[List[str]],
    nodes: Optional[List[str]],
    nodes_file: Optional[Path],
    replicas: Optional[int],
    test_count: Optional[int],
) -> FaultlineConfig:
    """Command-line values override the config file."""
    if tests:
        cfg.matrix.workloads = list(tests)
    if nemeses:
        cfg.matrix.nemeses = _nemesis_names(nemeses)
    if nemeses2:
        cfg.matrix.nemeses2 = _nemesis_names(nemeses2)
    if nodes:
        cfg.cluster.nodes = _split_nodes(nodes)
        cfg.cluster.nodes_file = None
    if nodes_file:
        cfg.cluster.nodes_file = str(nodes_file)
    if replicas is not None:
        cfg.cluster.replicas = replicas
    if test_count is not None:
        cfg.matrix.test_count = test_count
    return cfg


def _load(config_path: Optional[Path]) -> FaultlineConfig:
    try:
        return load_config(config_path)
    except (OSError, TypeError, ValueError, yaml.YAMLError) as e:
        console.print(f"[red]Error loading config:[/] {e}")
        raise typer.Exit(EXIT_CONFIG_ERROR)


def _print_config_errors(error: ConfigurationError) -> None:
    console.print("[bold red]Configuration error[/]")
    for e in error.errors:
        console.print(f"  [red]✗[/] [{e.code.value}] {e.message}")


def _print_result(record: RunRecord) -> None:
    mark = "[green]✓[/]" if record.valid else "[red]✗[/]"
    console.print(f"  {mark} [{record.index}] {record.name} ({record.duration_seconds:.1f}s)")


def _print_summary(report: MatrixReport) -> None:
    table = Table(title="Results")
    table.add_column("#", justify="right")
    table.add_column("Test")
    table.add_column("Nemeses")
    table.add_column("Valid")

    for run in report.runs:
        table.add_row(
            str(run.index),
            run.workload,
            " + ".join(run.nemeses) or "-",
            "[green]yes[/]" if run.valid else "[red]NO[/]",
        )
    console.print(table)


# === TEST COMMAND ===

@app.command()
def test(
    tests: Optional[List[str]] = typer.Option(None, "-t", "--test", help="Workload(s) to run"),
    nemeses: Optional[List[str]] = typer.Option(None, "--nemesis", help="Nemesis to use (repeatable)"),
    nemeses2: Optional[List[str]] = typer.Option(
        None, "--nemesis2", help=f"An additional nemesis to mix in (repeatable, '{ABSENT_NAME}' for none)"
    ),
    nodes: Optional[List[str]] = typer.Option(None, "--nodes", help="Node names, comma separated or repeated"),
    nodes_file: Optional[Path] = typer.Option(None, "--nodes-file", help="File with one node per line"),
    replicas: Optional[int] = typer.Option(None, "-r", "--replicas", min=1, help="Number of replicas"),
    test_count: Optional[int] = typer.Option(None, "--test-count", min=1, help="Times to run the whole matrix"),
    time_limit: Optional[float] = typer.Option(None, "--time-limit", help="Seconds per test run"),
    concurrency: Optional[int] = typer.Option(None, "--concurrency", min=1, help="Client workers per run"),
    strong_read: Optional[bool] = typer.Option(
        None, "--strong-read/--no-strong-read", help="Force strict reads by performing dummy writes"
    ),
    at_query: bool = typer.Option(False, "--at-query", help="Use At queries rather than plain reads"),
    fixed_instances: bool = typer.Option(False, "--fixed-instances", help="Don't create and destroy instances dynamically"),
    serialized_indices: bool = typer.Option(False, "--serialized-indices", help="Use strict serializable indexes"),
    wait_for_convergence: bool = typer.Option(
        False, "--wait-for-convergence", help="Don't start operations until data movement has completed"
    ),
    clear_cache: bool = typer.Option(False, "--clear-cache", help="Force a rebuild of the cluster"),
    db_version: Optional[str] = typer.Option(None, "--version", help="Database version to install"),
    datadog_api_key: Optional[str] = typer.Option(
        None, "--datadog-api-key", envvar="FAULTLINE_DATADOG_API_KEY", help="Enable integrated datadog stats"
    ),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for nemesis randomness"),
    runner: Optional[str] = typer.Option(None, "--runner", help="Command that executes one test run"),
    run_timeout: Optional[float] = typer.Option(None, "--run-timeout", help="Seconds before a run is abandoned"),
    store_dir: Optional[Path] = typer.Option(None, "--store-dir", help="Where per-run results are written"),
    report_path: Optional[Path] = typer.Option(None, "--report", help="Write the matrix report as JSON"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Materialize every run without executing"),
    config_path: Optional[Path] = typer.Option(None, "-c", "--config"),
    log_level: str = typer.Option("info", "--log-level"),
):
    """
    Run every workload against every nemesis pair, --test-count times.

    Exit codes: 0=all runs valid, 1=some run invalid, 254=bad configuration
    """
    _setup_logging(log_level)
    cfg = _apply_matrix_options(
        _load(config_path), tests, nemeses, nemeses2, nodes, nodes_file, replicas, test_count
    )

    opts = cfg.workload
    if time_limit is not None:
        opts.time_limit = time_limit
    if concurrency is not None:
        opts.concurrency = concurrency
    if strong_read is not None:
        opts.strong_read = strong_read
    opts.at_query = opts.at_query or at_query
    opts.fixed_instances = opts.fixed_instances or fixed_instances
    opts.serialized_indices = opts.serialized_indices or serialized_indices
    opts.wait_for_convergence = opts.wait_for_convergence or wait_for_convergence
    opts.clear_cache = opts.clear_cache or clear_cache
    if db_version:
        opts.version = db_version
    if datadog_api_key:
        opts.datadog_api_key = datadog_api_key
    if seed is not None:
        cfg.matrix.seed = seed
    if runner:
        cfg.executor.command = runner
    if run_timeout is not None:
        cfg.executor.timeout_seconds = run_timeout
    if store_dir:
        cfg.executor.store_dir = str(store_dir)

    if dry_run:
        executor = DryRunExecutor()
        store = None
    elif cfg.executor.command:
        executor = CommandExecutor(cfg.executor.command, timeout_seconds=cfg.executor.timeout_seconds)
        store = ResultStore(Path(cfg.executor.store_dir))
    else:
        console.print("[red]Error:[/] no test runner configured (use --runner or executor.command)")
        raise typer.Exit(EXIT_CONFIG_ERROR)

    console.print(f"[bold blue]Faultline v{__version__}[/]")
    logger.info("Options:\n%s", cfg.redacted().to_yaml())

    matrix = MatrixRunner(cfg, executor, store=store, on_result=_print_result)
    try:
        report = matrix.run()
    except ConfigurationError as e:
        _print_config_errors(e)
        raise typer.Exit(EXIT_CONFIG_ERROR)

    if report_path:
        report_path.write_text(report.to_json())
        console.print(f"[green]Report written to:[/] {report_path}")

    console.print()
    _print_summary(report)

    if report.valid:
        console.print("[bold green]━━━ PASSED ━━━[/]")
    else:
        console.print("[bold red]━━━ FAILED ━━━[/]")
        for run in report.failed_runs:
            console.print(f"  [red]✗[/] [{run.index}] {run.name}")
    raise typer.Exit(report.exit_code)


# === PLAN COMMAND ===

@app.command()
def plan(
    tests: Optional[List[str]] = typer.Option(None, "-t", "--test", help="Workload(s) to run"),
    nemeses: Optional[List[str]] = typer.Option(None, "--nemesis", help="Nemesis to use (repeatable)"),
    nemeses2: Optional[List[str]] = typer.Option(None, "--nemesis2", help="An additional nemesis to mix in"),
    nodes: Optional[List[str]] = typer.Option(None, "--nodes", help="Node names"),
    nodes_file: Optional[Path] = typer.Option(None, "--nodes-file", help="File with one node per line"),
    replicas: Optional[int] = typer.Option(None, "-r", "--replicas", min=1),
    test_count: Optional[int] = typer.Option(None, "--test-count", min=1),
    config_path: Optional[Path] = typer.Option(None, "-c", "--config"),
):
    """Show the runs a test invocation would schedule, in order."""
    cfg = _apply_matrix_options(
        _load(config_path), tests, nemeses, nemeses2, nodes, nodes_file, replicas, test_count
    )
    try:
        cells = plan_matrix(cfg)
    except ConfigurationError as e:
        _print_config_errors(e)
        raise typer.Exit(EXIT_CONFIG_ERROR)

    table = Table(title=f"Test matrix ({len(cells)} runs)")
    table.add_column("#", justify="right")
    table.add_column("Repetition", justify="right")
    table.add_column("Test")
    table.add_column("Nemeses")
    for cell in cells:
        table.add_row(
            str(cell.index),
            str(cell.repetition),
            cell.workload,
            " + ".join(cell.nemeses) or "-",
        )
    console.print(table)


# === LIST COMMAND ===

@app.command("list")
def list_cmd():
    """List registered workloads and nemeses."""
    workloads = Table(title="Workloads")
    workloads.add_column("Name", style="cyan")
    workloads.add_column("Description")
    for name, fn in WORKLOADS.items():
        workloads.add_row(name, (fn.__doc__ or '').strip())
    console.print(workloads)

    nemeses = Table(title="Nemeses")
    nemeses.add_column("Name", style="cyan")
    nemeses.add_column("Capabilities")
    for name, ref in NEMESES.items():
        nemeses.add_row(name, ", ".join(sorted(c.value for c in ref.capabilities)) or "-")
    console.print(nemeses)


# === SERVE COMMAND ===

@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", "--host"),
    port: int = typer.Option(8080, "-p", "--port"),
    store_dir: Path = typer.Option(Path("store"), "--store-dir"),
):
    """Serve stored results over HTTP."""
    from ..server.app import main as serve_main

    console.print(f"[bold blue]Faultline v{__version__}[/] results at http://{host}:{port}/runs")
    serve_main(host=host, port=port, store_dir=store_dir)


# === CONFIG COMMAND ===

@app.command("config")
def config_cmd(
    action: str = typer.Argument(..., help="Action: init|validate|dump"),
    path: Optional[Path] = typer.Argument(None, help="Config file path"),
):
    """Configuration management."""
    if action == "init":
        console.print(generate_default_config(), markup=False)

    elif action == "validate":
        if not path:
            console.print("[red]Path required for validate[/]")
            raise typer.Exit(1)
        try:
            cfg = FaultlineConfig.load(path)
        except (OSError, TypeError, ValueError, yaml.YAMLError) as e:
            console.print(f"[red]Error:[/] {e}")
            raise typer.Exit(1)
        errors = cfg.validate()
        if errors:
            console.print("[red]Invalid configuration:[/]")
            for e in errors:
                console.print(f"  - {e}")
            raise typer.Exit(1)
        console.print(f"[green]Valid:[/] {path}")

    elif action == "dump":
        cfg = FaultlineConfig.load(path) if path else load_config()
        console.print(cfg.redacted().to_yaml(), markup=False)

    else:
        console.print(f"[red]Unknown action:[/] {action}")
        console.print("Valid actions: init, validate, dump")
        raise typer.Exit(1)


# === VERSION COMMAND ===

@app.command()
def version():
    """Show version information."""
    console.print(Panel.fit(
        f"[bold blue]Faultline v{__version__}[/]\n"
        f"{len(WORKLOADS)} workloads, {len(NEMESES)} nemeses",
        border_style="blue",
    ))


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
