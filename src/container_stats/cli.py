"""CLI for container-stats.

Provides a command-line interface using Typer for:
- Running the collector (poll, aggregate, publish to QuestDB)
- Printing a one-off normalized snapshot
- Listing host disks that can be reported
- Writing a sample configuration
"""

from __future__ import annotations

import threading
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from container_stats.core.config import load_config
from container_stats.core.schemas import CollectorConfig
from container_stats.monitoring.base import DiskStat, Snapshot
from container_stats.monitoring.disks import DiskInspector
from container_stats.monitoring.docker_source import DockerStatsSource
from container_stats.monitoring.normalizer import normalize_all
from container_stats.publishing.publisher import StatsPublisher
from container_stats.runners.collection_loop import CollectionLoop, install_signal_handlers
from container_stats.runners.liveness import default_notifier
from container_stats.utils.logging import setup_logging

app = typer.Typer(
    name="container-stats",
    help="Publish docker container statistics to QuestDB",
    add_completion=False,
)

console = Console()


@app.command()
def run(
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to collector configuration file (YAML/JSON)"
    ),
    host: str | None = typer.Option(
        None, "--node", "-n", help="Host name added to the published data"
    ),
    mode: str | None = typer.Option(
        None, "--mode", "-m", help="Reduction mode: avg or max (default avg)"
    ),
    questdb: str | None = typer.Option(
        None, "--questdb", "-q", help="QuestDB host (default localhost)"
    ),
    port: int | None = typer.Option(None, "--port", "-p", help="QuestDB ILP port (default 9009)"),
    protocol: str | None = typer.Option(
        None, "--protocol", help="ILP transport: tcp, tcps, http or https (default tcp)"
    ),
    table: str | None = typer.Option(
        None, "--table", "-t", help="Container series name (default containerStats)"
    ),
    disk_table: str | None = typer.Option(
        None, "--disk-table", help="Disk series name (default diskStats)"
    ),
    interval: int | None = typer.Option(
        None, "--interval", "-i", help="Publish interval in minutes, 1-15 (default 5)"
    ),
    disks: list[str] | None = typer.Option(
        None, "--disk", "-d", help="Disk device to report (repeatable)"
    ),
    fail_fast: bool | None = typer.Option(
        None, "--fail-fast/--no-fail-fast", help="Stop on a malformed stats record"
    ),
    log_level: str = typer.Option("INFO", "--log-level", "-l", help="Logging level"),
    log_file: Path | None = typer.Option(
        None, "--log-file", help="Write logs to file in addition to console"
    ),
    json_logs: bool = typer.Option(
        False, "--json-logs", help="Output logs in JSON format (for programmatic parsing)"
    ),
) -> None:
    """Collect container statistics and publish them every interval."""
    setup_logging(
        level=log_level, log_file=log_file, json_format=json_logs, rich_console=not json_logs
    )

    collector_config = _load(
        config,
        {
            "host": host,
            "mode": mode,
            "questdb_host": questdb,
            "questdb_port": port,
            "protocol": protocol,
            "table": table,
            "disk_table": disk_table,
            "interval_minutes": interval,
            "disks": disks or None,
            "fail_fast": fail_fast,
        },
    )
    if not json_logs:
        _show_config_summary(collector_config)

    source = DockerStatsSource(collector_config.docker_command, fail_fast=collector_config.fail_fast)
    if not source.is_available():
        console.print("[bold red]Docker daemon is not reachable[/]")
        raise typer.Exit(1)

    loop = CollectionLoop(
        collector_config,
        source,
        StatsPublisher(collector_config),
        notifier=default_notifier(),
    )
    stop_event = threading.Event()
    install_signal_handlers(stop_event)
    loop.run(stop_event)


@app.command()
def snapshot(
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Path to collector configuration file (YAML/JSON)"
    ),
    docker_command: str | None = typer.Option(None, "--docker", help="Docker CLI binary"),
) -> None:
    """Poll docker once and print the normalized statistics."""
    setup_logging(level="WARNING")
    collector_config = _load(config, {"docker_command": docker_command}, host_required=False)

    source = DockerStatsSource(collector_config.docker_command)
    snapshots = normalize_all(source.poll())
    if not snapshots:
        console.print("[bold yellow]No running containers reported[/]")
        return
    _show_snapshots_table(snapshots)


@app.command()
def disks() -> None:
    """List host disks that can be reported with --disk."""
    _show_disks_table(DiskInspector().list_disks())


@app.command()
def init_config(
    output: Path = typer.Option(
        Path("container-stats.yaml"), "--output", "-o", help="Output configuration file"
    ),
) -> None:
    """Generate a sample configuration file."""
    sample_config = """\
# container-stats configuration
# Command-line options override these values.

# Host label added to every row (required)
host: docker-01

# Reduction applied to each interval's samples: avg or max
mode: avg

# QuestDB ILP endpoint
questdb_host: localhost
questdb_port: 9009
protocol: tcp

# Target tables
table: containerStats
disk_table: diskStats

# Publish interval in minutes (1-15)
interval_minutes: 5

# Disk devices reported alongside container rows (see `container-stats disks`)
disks: []

# Seconds to wait between two polls of `docker stats`
poll_pause_seconds: 0

# Stop on a malformed stats record instead of dropping it
fail_fast: false
"""
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(sample_config)
    console.print(f"[bold green]Sample configuration written to {output}[/]")


def _load(
    path: Path | None,
    overrides: dict[str, object],
    host_required: bool = True,
) -> CollectorConfig:
    """Load configuration or exit with status 1 on error."""
    if not host_required:
        overrides = {"host": "-", **overrides}
    try:
        return load_config(path, overrides)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error loading config: {e}[/]")
        raise typer.Exit(1) from e


def _show_config_summary(config: CollectorConfig) -> None:
    """Display a summary of the collector configuration."""
    table = Table(title="Collector Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Host", config.host)
    table.add_row("Mode", config.mode.value)
    table.add_row("QuestDB", config.ingress_conf)
    table.add_row("Table", config.table)
    table.add_row("Disk Table", config.disk_table)
    table.add_row("Interval", f"{config.interval_minutes} min")
    table.add_row("Disks", ", ".join(config.disks) or "none")

    console.print(table)


def _show_snapshots_table(snapshots: list[Snapshot]) -> None:
    """Display one poll's normalized statistics."""
    table = Table(title="Container Statistics")
    table.add_column("Name", style="cyan")
    table.add_column("Group", style="dim")
    table.add_column("CPU %", justify="right")
    table.add_column("Mem %", justify="right")
    table.add_column("Mem Use / Limit", justify="right")
    table.add_column("Block I/O", justify="right")
    table.add_column("Net I/O", justify="right")
    table.add_column("PIDs", justify="right")

    for s in sorted(snapshots, key=lambda s: s.name):
        table.add_row(
            s.name,
            s.container_group,
            f"{s.cpu_percent:.2f}",
            f"{s.memory_percent:.2f}",
            f"{s.memory_usage} / {s.memory_limit}",
            f"{s.block_io.incoming} / {s.block_io.outgoing}",
            f"{s.net_io.incoming} / {s.net_io.outgoing}",
            str(s.pids),
        )

    console.print(table)


def _show_disks_table(disks: list[DiskStat]) -> None:
    """Display the disks the inspector can see."""
    table = Table(title="Disks")
    table.add_column("Device", style="cyan")
    table.add_column("Mount Point")
    table.add_column("File System")
    table.add_column("Type")
    table.add_column("Available", justify="right")
    table.add_column("Available %", justify="right", style="green")

    for d in disks:
        table.add_row(
            d.name,
            d.mount_point,
            d.file_system,
            d.kind,
            f"{d.available_space / 1024**3:.1f} GiB",
            f"{d.available_percent:.1f}",
        )

    console.print(table)


if __name__ == "__main__":
    app()
