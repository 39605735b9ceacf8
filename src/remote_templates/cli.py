import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from . import __version__
from .config import TemplateCacheConfiguration, load_config
from .error import TemplateCacheError
from .templates import TemplateCache
from .utils.logging import configure_logging

app = typer.Typer(
    name="remote-templates",
    help="Fetch, compile and render named templates",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


def _setup(config_path: Optional[Path], log_level: Optional[str]) -> TemplateCacheConfiguration:
    """Load .env and configuration, then configure logging."""
    load_dotenv()
    try:
        config = load_config(config_path)
    except TemplateCacheError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=2)

    level = (log_level or os.getenv("LOG_LEVEL") or config.log_level).upper()
    if config.log_file or config.structured_logging:
        configure_logging({**config.model_dump(), "log_level": level})
        return config

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, console=err_console)],
        force=True,
    )
    return config


def _parse_vars(pairs: List[str]) -> Dict[str, str]:
    variables = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected key=value, got {pair!r}", param_hint="--var")
        variables[key.strip()] = value
    return variables


@app.command("version")
def version_command():
    """Display version information."""
    console.print(f"remote-templates {__version__}")


@app.command("render")
def render_command(
    name: str = typer.Argument(..., help="Template name"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config file"),
    var: List[str] = typer.Option([], "--var", "-v", help="Template variable as key=value"),
    url: Optional[str] = typer.Option(None, "--url", "-u", help="Register NAME at this URL first"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Log level"),
):
    """Fetch a template (blocking) and print the rendered output."""
    config = _setup(config_path, log_level)
    variables = _parse_vars(var)

    cache = TemplateCache(config=config)
    if url:
        cache.register(name, url)

    try:
        output = cache.render_sync(name, variables)
    except TemplateCacheError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=1)

    sys.stdout.write(output)
    sys.stdout.flush()


@app.command("inspect")
def inspect_command(
    name: str = typer.Argument(..., help="Template name"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config file"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Log level"),
):
    """List the variables a template expects."""
    config = _setup(config_path, log_level)
    cache = TemplateCache(config=config)

    try:
        cache.fetch(name)
        required = cache.compiler.required_variables(cache.compiled[name].source)
    except TemplateCacheError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=1)

    console.print(f"[bold]{name}[/bold] ({cache.url_for(name)})")
    for variable in sorted(required):
        console.print(f"  {variable}")


async def _check(config: TemplateCacheConfiguration, timeout: Optional[float]) -> Dict[str, str]:
    failures: Dict[str, str] = {}

    def on_error(name: str, error: BaseException) -> None:
        failures[name] = str(error)

    cache = TemplateCache.create(config=config, on_error=on_error)
    try:
        await asyncio.wait_for(cache.join(), timeout)
    except asyncio.TimeoutError:
        for name in cache.pending:
            failures.setdefault(name, "timed out")

    results = {}
    for name in cache.registry:
        if cache.is_cached(name):
            results[name] = "ok"
        else:
            results[name] = failures.get(name, "not loaded")
    return results


@app.command("check")
def check_command(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config file"),
    timeout: Optional[float] = typer.Option(None, "--timeout", "-t", help="Seconds to wait for all templates"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Log level"),
):
    """Load every configured template and report which ones compile."""
    config = _setup(config_path, log_level)
    if not config.templates:
        console.print("[yellow]No templates configured[/yellow]")
        return

    results = asyncio.run(_check(config, timeout))

    table = Table(title="Templates")
    table.add_column("Name", style="cyan")
    table.add_column("URL")
    table.add_column("Status")
    for name, status in results.items():
        style = "green" if status == "ok" else "red"
        table.add_row(name, config.templates.get(name, ""), f"[{style}]{escape(status)}[/{style}]")
    console.print(table)

    if any(status != "ok" for status in results.values()):
        raise typer.Exit(code=1)


def main():
    """Console script entry point."""
    app()


if __name__ == "__main__":
    main()
