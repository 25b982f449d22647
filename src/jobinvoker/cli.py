"""CLI entry point for job-invoker using Typer."""

from __future__ import annotations

import logging
import sys
from contextlib import ExitStack
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from jobinvoker import __version__
from jobinvoker.diagnostics import DiagnosticsReporter
from jobinvoker.errors import InvocationError
from jobinvoker.invoker import Invoker
from jobinvoker.jobs import default_registry
from jobinvoker.logger import configure_logging
from jobinvoker.models import HostBindings, JobDescriptor

app = typer.Typer(
    name="jobinvoker",
    help="Resolve a registered job by name and run it against layered context files",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


def _version_callback(value: bool) -> None:
    """Print version and exit if --version flag is provided."""
    if value:
        console.print(f"jobinvoker {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version_flag: Annotated[
        bool,
        typer.Option("--version", "-v", callback=_version_callback, is_eager=True, help="Show version and exit"),
    ] = False,
) -> None:
    """job-invoker command line."""


def _parse_metadata(items: list[str] | None) -> dict[str, str]:
    """Parse KEY=VALUE options into a dict."""
    metadata: dict[str, str] = {}
    for item in items or []:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected KEY=VALUE, got '{item}'", param_hint="--metadata")
        metadata[key] = value
    return metadata


def _report_failure(error: InvocationError) -> None:
    label = error.kind.value.replace("_", " ").capitalize()
    err_console.print(f"[bold red]{label} error:[/bold red] {escape(error.message)}")
    if error.cause is not None:
        err_console.print(f"  [dim]caused by {type(error.cause).__name__}: {escape(str(error.cause))}[/dim]")


@app.command()
def run(
    job_name: Annotated[str, typer.Argument(help="Logical name of the registered job")],
    context_file: Annotated[
        list[str] | None,
        typer.Option(
            "--context-file",
            "-c",
            help="Context source (resource or file); repeat to layer, later files win",
        ),
    ] = None,
    input_path: Annotated[
        Path | None,
        typer.Option("--input", "-i", help="File bound as the input stream (default: stdin)"),
    ] = None,
    output_path: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="File bound as the output stream (default: stdout)"),
    ] = None,
    metadata: Annotated[
        list[str] | None,
        typer.Option("--metadata", "-m", help="KEY=VALUE passed as invocation metadata"),
    ] = None,
    debug: Annotated[bool, typer.Option("--debug", help="Log at DEBUG level")] = False,
) -> None:
    """Run a job once with the given context files."""
    configure_logging(logging.DEBUG if debug else logging.WARNING)
    default_registry.load_entry_points()
    invocation_metadata = _parse_metadata(metadata)

    with ExitStack() as stack:
        input_stream = stack.enter_context(input_path.open("rb")) if input_path else sys.stdin.buffer
        output_stream = stack.enter_context(output_path.open("wb")) if output_path else sys.stdout.buffer
        try:
            Invoker().run(
                JobDescriptor(job_name),
                context_file or [],
                HostBindings(input_stream, output_stream, invocation_metadata),
            )
        except InvocationError as e:
            _report_failure(e)
            raise typer.Exit(1) from e
        finally:
            output_stream.flush()


@app.command()
def jobs() -> None:
    """List registered jobs."""
    default_registry.load_entry_points()

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Job", style="cyan")
    table.add_column("Implementation")
    for name in default_registry.names():
        factory = default_registry.lookup(name)
        table.add_row(name, f"{factory.__module__}.{getattr(factory, '__qualname__', repr(factory))}")

    console.print(table)


@app.command()
def diagnostics(
    module: Annotated[
        str,
        typer.Option("--module", "-m", help="Module whose package chain is described"),
    ] = "jobinvoker",
) -> None:
    """Print the module search path and package chain used for post-mortems."""
    reporter = DiagnosticsReporter(module)
    console.print("[bold]Environment:[/bold]", escape(reporter.describe_environment()), soft_wrap=True)
    console.print("[bold]Loader chain:[/bold]", escape(reporter.describe_loader_chain()), soft_wrap=True)
