# src/streamwire/cli.py
"""streamwire Command Line Interface.

Entry point for the streamwire CLI tool.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

import typer
from pydantic import ValidationError

from streamwire import __version__
from streamwire.contracts import (
    ComponentKind,
    ConfigurationError,
    PartitionFieldError,
    PlanError,
    StreamResolutionError,
)
from streamwire.core.config import StreamwireSettings, load_settings

__all__ = [
    "app",
]

app = typer.Typer(
    name="streamwire",
    help="streamwire: compile declarative streaming execution plans into wired topologies.",
    no_args_is_help=True,
)


@dataclass(frozen=True)
class _CliState:
    """Global flags, shared with subcommands through the typer context."""

    verbose: bool
    json_logs: bool


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"streamwire version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from .env file.

    Args:
        env_file: Explicit path to .env file. If None, searches for .env
                 in current directory and parent directories.

    Returns:
        True if .env was found and loaded, False otherwise.

    Raises:
        typer.Exit: If explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(
                f"Error: .env file not found: {env_file}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(1)
        return load_dotenv(env_file, override=False)

    return load_dotenv(override=False)


@app.callback()
def main(
    ctx: typer.Context,
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(
        False,
        "--no-dotenv",
        help="Skip loading .env file.",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
        exists=False,  # Existence is checked in _load_dotenv for a better message
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """streamwire: compile declarative streaming execution plans into wired topologies."""
    from streamwire.core.logging import configure_logging

    log_level = "DEBUG" if verbose else "INFO"
    configure_logging(json_output=json_logs, level=log_level)
    ctx.obj = _CliState(verbose=verbose, json_logs=json_logs)

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho(
            "Warning: --env-file ignored because --no-dotenv is set.",
            fg=typer.colors.YELLOW,
            err=True,
        )


def _format_validation_error(
    title: str,
    message: str,
    hint: str | None = None,
    details: list[str] | None = None,
) -> None:
    """Display a formatted validation error with optional hint and details."""
    from rich.console import Console
    from rich.panel import Panel
    from rich.text import Text

    console = Console(stderr=True)

    content = Text()
    content.append(message, style="white")

    if details:
        content.append("\n\n")
        for detail in details:
            content.append(f"  • {detail}\n", style="dim")

    if hint:
        content.append("\n")
        content.append("Hint: ", style="yellow bold")
        content.append(hint, style="yellow")

    panel = Panel(
        content,
        title=f"[red bold]❌ {title}[/]",
        border_style="red",
        padding=(0, 1),
    )
    console.print(panel)


def _load_cli_settings(ctx: typer.Context, settings: str | None) -> StreamwireSettings:
    """Load settings (or defaults) and apply their logging section.

    Logging flags given on the command line win over the settings file.

    Raises:
        typer.Exit: If the settings file is missing or invalid.
    """
    if settings is None:
        return StreamwireSettings()

    settings_path = Path(settings).expanduser()
    try:
        config = load_settings(settings_path)
    except FileNotFoundError:
        _format_validation_error(
            title="File Not Found",
            message=f"Settings file does not exist: {settings}",
            hint="Check the path and ensure the file exists.",
        )
        raise typer.Exit(1) from None
    except ValidationError as e:
        details = []
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            details.append(f"{loc}: {error['msg']}")
        _format_validation_error(
            title="Configuration Validation Failed",
            message=f"Invalid settings in {settings_path.name}",
            details=details,
            hint="Check field names, types, and required values.",
        )
        raise typer.Exit(1) from None

    from streamwire.core.logging import configure_logging

    state: _CliState | None = ctx.obj
    verbose = state.verbose if state else False
    json_logs = state.json_logs if state else False
    configure_logging(
        json_output=json_logs or config.logging.json_output,
        level="DEBUG" if verbose else config.logging.level,
    )
    return config


def _read_plan(plan: Path) -> bytes:
    """Raw plan bytes; the XML declaration decides the encoding."""
    if not plan.exists():
        _format_validation_error(
            title="File Not Found",
            message=f"Plan file does not exist: {plan}",
            hint="Check the path and ensure the file exists.",
        )
        raise typer.Exit(1)
    return plan.read_bytes()


def _report_plan_error(error: PlanError) -> None:
    """Map a compilation failure to an error panel."""
    if isinstance(error, StreamResolutionError):
        _format_validation_error(
            title="Stream Resolution Failed",
            message=str(error),
            details=[f"consumer: {error.consumer}", f"stream: {error.stream}"],
            hint="Every consumed stream must be produced by a receiver, processor or trigger. Publisher outputs never feed other components.",
        )
    elif isinstance(error, PartitionFieldError):
        _format_validation_error(
            title="Invalid Partition Field",
            message=str(error),
            details=[f"stream: {error.stream}", f"field: {error.field}"],
            hint="Partition on an attribute declared in the stream definition.",
        )
    elif isinstance(error, ConfigurationError):
        _format_validation_error(
            title="Plan Configuration Error",
            message=str(error),
            hint="Check required attributes, parallelism values and stream definitions.",
        )
    else:
        _format_validation_error(title="Plan Compilation Failed", message=str(error))


@app.command()
def validate(
    ctx: typer.Context,
    plan: Path = typer.Argument(..., help="Path to execution plan XML file."),
    settings: str | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
) -> None:
    """Validate an execution plan without emitting the topology."""
    from streamwire.core.topology import compile_plan

    config = _load_cli_settings(ctx, settings)
    plan_xml = _read_plan(plan)

    try:
        graph = compile_plan(plan_xml, settings=config)
    except PlanError as e:
        _report_plan_error(e)
        raise typer.Exit(1) from None

    counts = {kind: 0 for kind in ComponentKind}
    for info in graph.nodes():
        counts[info.kind] += 1

    typer.echo("✅ Execution plan valid!")
    typer.echo(f"  Receivers: {counts[ComponentKind.SOURCE]}")
    typer.echo(f"  Processors: {counts[ComponentKind.PROCESSOR]}")
    typer.echo(f"  Publishers: {counts[ComponentKind.SINK]}")
    typer.echo(f"  Triggers: {counts[ComponentKind.TRIGGER]}")
    typer.echo(f"  Topology: {graph.node_count} nodes, {graph.edge_count} edges")


@app.command(name="compile")
def compile_command(
    ctx: typer.Context,
    plan: Path = typer.Argument(..., help="Path to execution plan XML file."),
    settings: str | None = typer.Option(
        None,
        "--settings",
        "-s",
        help="Path to settings YAML file.",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output the topology as JSON.",
    ),
) -> None:
    """Compile an execution plan and print the wired topology."""
    from streamwire.core.canonical import CANONICAL_VERSION, compute_topology_hash
    from streamwire.core.topology import compile_plan

    config = _load_cli_settings(ctx, settings)
    plan_xml = _read_plan(plan)

    try:
        graph = compile_plan(plan_xml, settings=config)
    except PlanError as e:
        if json_output:
            typer.echo(json.dumps({"error": str(e), "type": type(e).__name__}))
        else:
            _report_plan_error(e)
        raise typer.Exit(1) from None

    topology_hash = compute_topology_hash(graph)

    if json_output:
        payload = graph.to_dict()
        payload["topology_hash"] = topology_hash
        payload["canonical_version"] = CANONICAL_VERSION
        typer.echo(json.dumps(payload, indent=2))
        return

    typer.echo("Nodes:")
    for info in graph.nodes():
        cap = f", max {info.max_parallelism}" if info.max_parallelism is not None else ""
        typer.echo(f"  {info.name} [{info.kind}] x{info.parallelism}{cap}")
    typer.echo("Edges:")
    for edge in graph.edges():
        typer.echo(f"  {edge.producer} -> {edge.consumer} on {edge.stream} ({edge.grouping.describe()})")
    typer.echo(f"Topology hash: {topology_hash}")
