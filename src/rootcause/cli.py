"""rootcause CLI - trace an issue's diagnostic context to its root cause."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.markup import escape

from rootcause import __version__
from rootcause.errors import RootCauseError

app = typer.Typer(
    name="rootcause",
    help="Trace external diagnostic context for an issue back to its root cause.",
    no_args_is_help=True,
)
mcp_app = typer.Typer(help="MCP server for AI coding agents.")

app.add_typer(mcp_app, name="mcp")

console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    if value:
        console.print(f"rootcause {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", help="Enable debug logging")] = False,
) -> None:
    """rootcause - trace an issue's diagnostic context to its root cause."""
    configure_logging(verbose)


@app.command("analyze")
def analyze_cmd(
    issue: Annotated[str, typer.Argument(help="Issue ID or issue URL")],
    input_path: Annotated[
        Optional[Path],
        typer.Option("--input", "-i", help="Analyze saved context from a file ('-' for stdin) instead of fetching"),
    ] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print the report as JSON")] = False,
) -> None:
    """Fetch, parse, trace and classify one issue, then print the report."""
    from rootcause.context.fetcher import normalize_issue_id, read_context
    from rootcause.pipeline import analyze, analyze_context
    from rootcause.report.builder import render_markdown

    try:
        if input_path is not None:
            report = analyze_context(read_context(input_path), issue_id=normalize_issue_id(issue))
        else:
            report = analyze(issue)
    except RootCauseError as exc:
        err_console.print(f"[red]Error:[/red] {escape(str(exc))}", highlight=False)
        raise typer.Exit(1)

    if as_json:
        typer.echo(report.model_dump_json(indent=2))
    else:
        console.print(Markdown(render_markdown(report)))


# ── MCP commands ─────────────────────────────────────────────────


@mcp_app.command("serve")
def mcp_serve() -> None:
    """Start the MCP server (stdio transport)."""
    from rootcause.mcp.server import mcp

    mcp.run()
