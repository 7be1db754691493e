"""Main CLI entry point for cargo-matrix."""

import json
import sys
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from rich.console import Console

from cargo_matrix import __version__
from cargo_matrix.config import get_settings
from cargo_matrix.core.exceptions import MatrixError, TaskFailure
from cargo_matrix.core.logging import configure_logging
from cargo_matrix.models.config import DEFAULT_CHANNEL
from cargo_matrix.models.settings import LogLevel
from cargo_matrix.runtime import runner
from cargo_matrix.runtime.execute import TaskKind

app = typer.Typer(
    name="cargo-matrix",
    help="Run cargo commands across every feature combination of a workspace",
    pretty_exceptions_enable=False,
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)

PASSTHROUGH_SETTINGS = {"allow_extra_args": True, "ignore_unknown_options": True}


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"[bold green]cargo-matrix[/bold green] version {__version__}")
        raise typer.Exit()


def _fail(error: Exception) -> typer.Exit:
    err_console.print(f"[red]Error:[/red] {error}", highlight=False)
    if isinstance(error, TaskFailure) and error.exit_code:
        return typer.Exit(error.exit_code)
    return typer.Exit(1)


@app.callback()
def main_callback(
    ctx: typer.Context,
    channel: str = typer.Option(
        DEFAULT_CHANNEL, "--channel", "-c", help="Channel to read the matrix configuration from"
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Print the commands as if every job succeeded"
    ),
    manifest_path: Optional[Path] = typer.Option(
        None, "--manifest-path", help="Path to the Cargo.toml of the workspace"
    ),
    package: Optional[str] = typer.Option(
        None, "--package", "-p", help="Only run the matrix of this package"
    ),
    chunks: Optional[int] = typer.Option(
        None, "--chunks", help="Split the packages into this many chunks"
    ),
    chunk: Optional[int] = typer.Option(
        None, "--chunk", help="1-based index of the chunk to run"
    ),
    config_path: Optional[Path] = typer.Option(
        None, "--config", help="Workspace matrix configuration file (YAML or JSON)"
    ),
    log_level: Optional[LogLevel] = typer.Option(
        None, "--log-level", case_sensitive=False, help="Console log level"
    ),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
):
    """Set up logging and collect the options shared by every command."""
    try:
        settings = get_settings()
    except MatrixError as e:
        raise _fail(e)

    configure_logging(
        level=(log_level or settings.logging.level).value,
        log_file=settings.logging.file,
    )
    logger.debug(f"cargo-matrix {__version__}, cargo program '{settings.cargo}'")

    obj = ctx.ensure_object(dict)
    obj["settings"] = settings
    obj["options"] = runner.RunOptions(
        channel=channel,
        dry_run=dry_run,
        manifest_path=manifest_path,
        package=package,
        chunks=chunks,
        chunk=chunk,
        config_path=config_path,
    )


def _options(ctx: typer.Context) -> runner.RunOptions:
    obj = ctx.ensure_object(dict)
    options = obj["options"]
    options.args = list(ctx.args) + list(obj.get("passthrough", []))
    return options


def _run(ctx: typer.Context, kind: TaskKind) -> None:
    options = _options(ctx)
    settings = ctx.obj["settings"]

    try:
        work = runner.plan(options, settings)
        if not work:
            console.print("[yellow]Nothing to do:[/yellow] no packages selected")
            return
        results = runner.execute(kind, work, options, settings, console=console)
    except MatrixError as e:
        raise _fail(e)

    console.print(
        f"[bold]Summary:[/bold] {len(results)} feature sets across {len(work)} packages "
        + ("[dim](dry run)[/dim]" if options.dry_run else "[bright_green]passed[/bright_green]")
    )


@app.command(context_settings=PASSTHROUGH_SETTINGS)
def build(ctx: typer.Context):
    """cargo build"""
    _run(ctx, TaskKind.BUILD)


@app.command(context_settings=PASSTHROUGH_SETTINGS)
def check(ctx: typer.Context):
    """cargo check"""
    _run(ctx, TaskKind.CHECK)


@app.command(context_settings=PASSTHROUGH_SETTINGS)
def clippy(ctx: typer.Context):
    """cargo clippy"""
    _run(ctx, TaskKind.CLIPPY)


@app.command(context_settings=PASSTHROUGH_SETTINGS)
def test(ctx: typer.Context):
    """cargo test"""
    _run(ctx, TaskKind.TEST)


@app.command(context_settings=PASSTHROUGH_SETTINGS)
def coverage(ctx: typer.Context):
    """cargo llvm-cov"""
    _run(ctx, TaskKind.COVERAGE)


@app.command("print")
def print_matrix(
    ctx: typer.Context,
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the JSON document to this file"
    ),
):
    """Print the feature matrix as a JSON CI matrix without running cargo."""
    options = _options(ctx)
    try:
        work = runner.plan(options, ctx.obj["settings"])
    except MatrixError as e:
        raise _fail(e)

    document = json.dumps(runner.matrix_document(work))
    if output is not None:
        output.write_text(document + "\n")
        err_console.print(f"[dim]Matrix written to {output}[/dim]")
    else:
        typer.echo(document)


def split_passthrough(argv: list[str]) -> tuple[list[str], list[str]]:
    """Split ``argv`` at the first ``--``; the tail is passed to cargo untouched."""
    if "--" in argv:
        index = argv.index("--")
        return argv[:index], argv[index:]
    return argv, []


def main(argv: Optional[list[str]] = None):
    """Main entry point."""
    argv = list(sys.argv[1:] if argv is None else argv)

    # cargo runs subcommands as `cargo-matrix matrix ...`
    if argv and argv[0] == "matrix":
        argv = argv[1:]

    if not argv:
        argv = ["--help"]

    args, passthrough = split_passthrough(argv)
    app(args=args, prog_name="cargo matrix", obj={"passthrough": passthrough})


if __name__ == "__main__":
    main()
