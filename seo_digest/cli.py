"""Typer CLI application for SEO Digest.

Provides commands to generate summary or detailed multi-project reports
and to inspect credential configuration.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Any, Optional

import typer
import yaml
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from seo_digest.errors import SEODigestError

console = Console()
app = typer.Typer(
    name="seo-digest",
    help="SEO Digest -- multi-project traffic, search and authority reports.",
    add_completion=False,
    no_args_is_help=True,
)


def _setup_logging(verbose: bool = False) -> None:
    """Configure logging level and format."""
    if verbose:
        level = logging.DEBUG
    else:
        level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _run_async(coro):
    """Run an async coroutine from synchronous CLI context."""
    return asyncio.run(coro)


def _load_projects(path: Path) -> Any:
    """Read a project list from a JSON or YAML file.

    The file may hold the list itself or an object with a ``projects`` key.
    """
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    if isinstance(data, dict) and "projects" in data:
        return data["projects"]
    return data


def _print_errors(errors: list[dict]) -> None:
    table = Table(title="Failed Projects", show_header=True, header_style="bold magenta")
    table.add_column("Project", style="cyan", min_width=20)
    table.add_column("Provider", min_width=15)
    table.add_column("Error", max_width=80)
    for err in errors:
        table.add_row(err.get("project", ""), err.get("provider", "-"), err.get("message", ""))
    console.print(table)


# ------------------------------------------------------------------
# report
# ------------------------------------------------------------------
@app.command()
def report(
    projects_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON or YAML list of projects."),
    report_type: str = typer.Option("summary", "--type", "-t", help="Report type: summary or detailed."),
    end_date: Optional[str] = typer.Option(None, "--end-date", help="Reference end date (YYYY-MM-DD); default today."),
    title: Optional[str] = typer.Option(None, "--title", help="Report title."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write markdown to this file."),
    html_output: Optional[Path] = typer.Option(None, "--html", help="Write a standalone HTML page to this file."),
    fail_fast: bool = typer.Option(False, "--fail-fast", help="Fail the whole batch if any project fails."),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Per-project timeout in seconds."),
    config: str = typer.Option("config/settings.yaml", "--config", help="Settings YAML file."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Generate a multi-project analytics report."""
    _setup_logging(verbose)
    from seo_digest.app import ReportService

    console.print(Panel(f"[bold cyan]SEO Digest: {report_type} report[/bold cyan]"))
    service = ReportService(config_path=config)

    async def _run():
        try:
            return await service.generate(
                _load_projects(projects_file),
                report_type=report_type,
                end_date=end_date,
                title=title,
                fail_fast=fail_fast,
                timeout=timeout,
            )
        finally:
            await service.aclose()

    try:
        with Progress(SpinnerColumn(), TextColumn("[progress.description]{task.description}"), console=console) as progress:
            progress.add_task(description="Fetching metrics...", total=None)
            result = _run_async(_run())
    except SEODigestError as exc:
        console.print(f"[red]✘ {exc.message}[/red]")
        raise typer.Exit(code=2)

    if output:
        output.write_text(result["markdown"], encoding="utf-8")
        console.print(f"[green]✔[/green] Markdown written to {output}")
    else:
        console.print(Markdown(result["markdown"]))
    if html_output:
        html_output.write_text(result["html"], encoding="utf-8")
        console.print(f"[green]✔[/green] HTML written to {html_output}")

    console.print(Panel(result["summary"], title="Summary"))
    if result["errors"]:
        _print_errors(result["errors"])
        raise typer.Exit(code=1)
    console.print("[green]✔[/green] Report complete.")


# ------------------------------------------------------------------
# status
# ------------------------------------------------------------------
@app.command()
def status(
    env_file: str = typer.Option(".env", "--env", help="Path to the .env file."),
) -> None:
    """Show which credentials and settings are configured."""
    from seo_digest.utils.env_manager import EnvManager

    manager = EnvManager(env_file)
    key_status = manager.get_status()
    table = Table(title="Configuration", show_header=True, header_style="bold magenta")
    table.add_column("Category", style="cyan")
    table.add_column("Key")
    table.add_column("Configured")
    table.add_column("Value", max_width=40)
    for category in manager.get_categories():
        for key, info in key_status.items():
            if info["category"] != category:
                continue
            mark = "[green]✔[/green]" if info["configured"] else "[yellow]○[/yellow]"
            table.add_row(category, key, mark, info["masked_value"])
    console.print(table)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
