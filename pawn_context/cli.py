"""
CLI commands for pawn-context.

Provides the `pawn-context` command-line interface for compiling files
through the parser registry, inspecting path resolution and checking the
compiler setup.
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from config.defaults import LOG_FORMAT
from config.loader import ConfigurationLoader
from core.models.config import CompilerSettings, GlobalSettings, WorkspaceFolder
from core.parser.context import ParserContext
from core.parser.registry import ParserRegistry
from pawn_context import __version__

console = Console()


def _configure_logging(level: str, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, level, logging.INFO),
        format=LOG_FORMAT
    )


def _build_settings(
    global_settings: GlobalSettings,
    compiler_path: Optional[Path],
    options: Tuple[str, ...]
) -> CompilerSettings:
    """Global settings with command line overrides applied"""
    settings = global_settings.to_compiler_settings()
    if compiler_path is not None:
        settings.path = compiler_path
    if options:
        settings.options = list(options)
    return settings


@click.group()
@click.version_option(version=__version__, prog_name="pawn-context")
def main():
    """
    pawn-context CLI.

    Compile PAWN files through the parser registry and inspect the symbols,
    diagnostics and workspace routing it produces.
    """
    pass


@main.command()
@click.argument('file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    '--workspace', '-w', 'workspaces',
    multiple=True,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Workspace folder (may be given several times)'
)
@click.option(
    '--compiler-path',
    type=click.Path(file_okay=False, path_type=Path),
    help='Directory containing the pawncc executable'
)
@click.option(
    '--option', '-o', 'options',
    multiple=True,
    help='Compiler option (may be given several times, replaces the defaults)'
)
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def parse(
    file: Path,
    workspaces: Tuple[Path, ...],
    compiler_path: Optional[Path],
    options: Tuple[str, ...],
    verbose: bool
):
    """Compile FILE and show the symbols and diagnostics it produces."""
    global_settings = GlobalSettings()
    _configure_logging(global_settings.log_level, verbose)
    settings = _build_settings(global_settings, compiler_path, options)

    if not settings.is_compiler_available():
        location = settings.executable_path or "(not configured)"
        console.print(f"[red]❌ Compiler not found: {location}[/red]")
        console.print("[yellow]💡 Use --compiler-path or set PAWN_CONTEXT_COMPILER_PATH[/yellow]")
        sys.exit(1)

    workspace_paths = [workspace.resolve() for workspace in workspaces]
    context = asyncio.run(_run_parse(file.resolve(), workspace_paths, settings))

    _print_symbols(context)
    _print_diagnostics(context)


@main.command()
@click.argument('path', type=click.Path(path_type=Path))
@click.option(
    '--workspace', '-w', 'workspaces',
    multiple=True,
    required=True,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help='Workspace folder (may be given several times)'
)
@click.option(
    '--compiler-path',
    type=click.Path(file_okay=False, path_type=Path),
    help='Directory containing the pawncc executable'
)
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def resolve(
    path: Path,
    workspaces: Tuple[Path, ...],
    compiler_path: Optional[Path],
    verbose: bool
):
    """Show which parser context owns PATH."""
    global_settings = GlobalSettings()
    _configure_logging(global_settings.log_level, verbose)
    settings = _build_settings(global_settings, compiler_path, ())

    workspace_paths = [workspace.resolve() for workspace in workspaces]
    key, is_workspace = asyncio.run(_run_resolve(path.absolute(), workspace_paths, settings))

    owner = "workspace" if is_workspace else "standalone"
    click.echo(f"{key} ({owner})")


@main.command()
@click.option(
    '--force', '-f',
    is_flag=True,
    help='Overwrite existing configuration'
)
@click.option(
    '--main-file',
    help='Workspace main file (default: detected from the folder contents)'
)
@click.option(
    '--option', '-o', 'options',
    multiple=True,
    help='Compiler option for this workspace (may be given several times)'
)
def init(force: bool, main_file: Optional[str], options: Tuple[str, ...]):
    """Write a pawn-context configuration for the current workspace."""
    project_path = Path.cwd()
    loader = ConfigurationLoader()
    config_file = loader.get_config_file(project_path)

    # Check if already initialized
    if config_file.exists() and not force:
        console.print("[yellow]⚠️  Workspace already initialized. Use --force to overwrite.[/yellow]")
        return

    if main_file is None:
        main_file = ParserRegistry().get_workspace_default_main_file(project_path)

    settings = CompilerSettings(main_file=main_file)
    if options:
        settings.options = list(options)

    if not loader.save_workspace_config(project_path, settings):
        console.print(f"[red]❌ Failed to create {config_file}[/red]")
        sys.exit(1)

    console.print(f"[green]✅ Created {config_file}[/green]")
    if main_file:
        console.print(f"[blue]📂 Main file: {main_file}[/blue]")
    else:
        console.print("[yellow]⚠️  No main file found, the workspace will not be compiled[/yellow]")


@main.command()
def status():
    """Show the effective compiler configuration."""
    global_settings = GlobalSettings()
    settings = global_settings.to_compiler_settings()
    project_path = Path.cwd()

    table = Table(title="pawn-context Status")
    table.add_column("Component", style="cyan", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    if settings.is_compiler_available():
        table.add_row("Compiler", "[green]✅ Available[/green]", str(settings.executable_path))
    elif settings.path is None:
        table.add_row("Compiler", "[red]❌ Not configured[/red]", "Set PAWN_CONTEXT_COMPILER_PATH")
    else:
        table.add_row("Compiler", "[red]❌ Not found[/red]", str(settings.executable_path))

    table.add_row("Options", " ".join(settings.options) or "-", "Passed before -R")

    config_file = ConfigurationLoader.get_config_file(project_path)
    if config_file.exists():
        table.add_row("Workspace Config", "[green]✅ Found[/green]", str(config_file))
    else:
        table.add_row("Workspace Config", "[yellow]Not initialized[/yellow]", "Run 'pawn-context init'")

    main_file = ParserRegistry(settings=settings).get_workspace_default_main_file(project_path)
    table.add_row("Main File", main_file or "[yellow]none[/yellow]", str(project_path))
    table.add_row("Package", "[green]✅ Installed[/green]", f"v{__version__}")

    console.print(table)


async def _run_parse(file: Path, workspaces: List[Path], settings: CompilerSettings) -> ParserContext:
    """Compile a file through a fresh registry."""
    registry = ParserRegistry(settings=settings, config_loader=ConfigurationLoader(settings))
    registry.init([WorkspaceFolder.from_path(workspace) for workspace in workspaces])

    try:
        return await registry.ensure_parsed(file)
    finally:
        await registry.shutdown()


async def _run_resolve(
    path: Path,
    workspaces: List[Path],
    settings: CompilerSettings
) -> Tuple[Path, bool]:
    """Resolve a path against freshly compiled workspaces."""
    registry = ParserRegistry(settings=settings, config_loader=ConfigurationLoader(settings))
    registry.init([WorkspaceFolder.from_path(workspace) for workspace in workspaces])

    try:
        key = await registry.resolve(path)
        return key, key in registry.workspace_keys()
    finally:
        await registry.shutdown()


def _print_symbols(context: ParserContext) -> None:
    table = Table(title=f"Symbols: {context.get_root_path()}")
    table.add_column("Kind", style="cyan", no_wrap=True)
    table.add_column("Count", justify="right")
    table.add_column("Examples", style="dim")

    symbols = context.symbols
    for kind, items in (
        ("functions", symbols.functions),
        ("variables", symbols.variables),
        ("constants", symbols.constants),
        ("enumerators", symbols.enumerators),
        ("tags", symbols.tags),
        ("substitutes", symbols.substitutes),
    ):
        examples = ", ".join(item.detail or item.name for item in items[:3])
        table.add_row(kind, str(len(items)), examples)

    table.add_row("included files", str(len(symbols.files)), "")
    console.print(table)


def _print_diagnostics(context: ParserContext) -> None:
    if not len(context.diagnostics):
        console.print("[green]✅ No diagnostics[/green]")
        return

    for diagnostic in context.diagnostics:
        style = "red" if diagnostic.is_error else "yellow"
        console.print(f"[{style}]{escape(diagnostic.detail)}[/{style}]", highlight=False)

    console.print(
        f"\n[bold]{len(context.diagnostics.errors)} errors, "
        f"{len(context.diagnostics.warnings)} warnings[/bold]"
    )


if __name__ == "__main__":
    main()
