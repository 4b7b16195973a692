"""Main CLI interface for the a11y testing bundle."""

import asyncio
import logging

import typer
from rich import print as rich_print
from rich.console import Console
from rich.table import Table

from ..config.manager import DEFAULT_CONFIG_FILE, ConfigManager
from ..core.manager import BundleManager
from ..editor.document import DocumentError
from ..editor.prompt import PromptError
from ..installers.base import InstallationError
from ..installers.git import UpdateOutcome
from ..server.manager import start_all, stop_all, stop_ports

app = typer.Typer(help="A11y testing bundle - install and manage accessibility MCP servers")
console = Console()

ConfigOption = typer.Option(
    DEFAULT_CONFIG_FILE, "--config", "-c", help="Settings file path"
)
VerboseOption = typer.Option(False, "--verbose", "-v", help="Enable verbose logging")


def setup_logging(verbose: bool, level: str = "info"):
    """Setup logging configuration."""
    log_level = logging.DEBUG if verbose else getattr(logging, level.upper())
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def load_manager(config: str, verbose: bool) -> BundleManager:
    """Load settings and build a manager wired to the terminal."""
    try:
        settings = ConfigManager(config).load_config()
    except ValueError as e:
        rich_print(f"[red]Error loading configuration: {e}[/red]")
        raise typer.Exit(1)

    setup_logging(verbose, settings.bundle.log_level)
    return BundleManager(settings, confirm=lambda question: typer.confirm(question))


@app.command("install-all")
def install_all(config: str = ConfigOption, verbose: bool = VerboseOption):
    """Clone, build, register and install the system prompt."""
    manager = load_manager(config, verbose)
    rich_print("[blue]Starting complete a11y testing bundle installation...[/blue]")

    result = asyncio.run(manager.install_all())

    for step in result.completed:
        rich_print(f"  [green]✓[/green] {step}")
    if not result.ok:
        rich_print(f"  [red]✗[/red] {result.failed_step}: {result.error}")
        rich_print("[red]Installation stopped.[/red] Run the individual commands to debug.")
        raise typer.Exit(1)

    print_health(result.health)
    rich_print("\n[green]Installation complete![/green]")
    rich_print("Restart VS Code to load the MCP servers.")


@app.command()
def setup(config: str = ConfigOption, verbose: bool = VerboseOption):
    """Clone and build all servers."""
    manager = load_manager(config, verbose)
    try:
        results = asyncio.run(manager.setup())
    except InstallationError as e:
        rich_print(f"[red]Setup failed: {e}[/red]")
        raise typer.Exit(1)

    print_results("Build Results", results)
    if not all(results.values()):
        raise typer.Exit(1)


@app.command()
def clone(config: str = ConfigOption, verbose: bool = VerboseOption):
    """Clone the server repositories (pull if already cloned)."""
    manager = load_manager(config, verbose)
    try:
        asyncio.run(manager.clone_all())
    except InstallationError as e:
        rich_print(f"[red]Clone operation failed: {e}[/red]")
        raise typer.Exit(1)
    rich_print("[green]All repositories cloned/updated successfully![/green]")


@app.command()
def build(config: str = ConfigOption, verbose: bool = VerboseOption):
    """Install dependencies and build every server."""
    manager = load_manager(config, verbose)
    results = asyncio.run(manager.build_all())

    print_results("Build Results", results)
    if not all(results.values()):
        rich_print("[yellow]Some servers failed to build. Check the errors above.[/yellow]")
        raise typer.Exit(1)
    rich_print("Restart VS Code to reload the MCP servers with the new builds.")


@app.command()
def register(config: str = ConfigOption, verbose: bool = VerboseOption):
    """Register the servers in the VS Code MCP configuration."""
    manager = load_manager(config, verbose)
    try:
        result = manager.register()
    except DocumentError as e:
        rich_print(f"[red]Failed to install MCP servers: {e}[/red]")
        rich_print("\n[bold]Manual installation required:[/bold]")
        rich_print(f"  1. Edit: {e.path}")
        rich_print('  2. Add the following to the "servers" section:\n')
        console.print(manager.registry.manual_instructions(manager.managed_entries()))
        raise typer.Exit(1)

    rich_print("[green]MCP servers registered with VS Code[/green]")
    rich_print(f"Configuration updated: {result.config_path}")
    for name in result.registered:
        rich_print(f"  • {name}")
    rich_print("Restart VS Code to activate the MCP servers.")


@app.command()
def unregister(config: str = ConfigOption, verbose: bool = VerboseOption):
    """Remove the servers from the VS Code MCP configuration."""
    manager = load_manager(config, verbose)
    try:
        removed = manager.unregister()
    except DocumentError as e:
        rich_print(f"[red]Failed to update mcp.json: {e}[/red]")
        raise typer.Exit(1)
    rich_print(f"Removed {removed} MCP server(s)")


@app.command("install-prompt")
def install_prompt(config: str = ConfigOption, verbose: bool = VerboseOption):
    """Copy the system prompt into VS Code's prompts directory."""
    manager = load_manager(config, verbose)
    try:
        target = manager.install_prompt()
    except PromptError as e:
        rich_print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    rich_print(f"[green]System prompt installed to: {target}[/green]")


@app.command()
def update(config: str = ConfigOption, verbose: bool = VerboseOption):
    """Pull, reinstall and rebuild servers that have upstream changes."""
    manager = load_manager(config, verbose)
    try:
        outcomes = asyncio.run(manager.update_all())
    except InstallationError as e:
        rich_print(f"[red]Update failed: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title="Update Results")
    table.add_column("Server", style="cyan")
    table.add_column("Result", style="magenta")
    for name, outcome in outcomes.items():
        label = outcome.value if outcome else "[red]failed[/red]"
        table.add_row(name, label)
    console.print(table)

    if any(outcome is None for outcome in outcomes.values()):
        raise typer.Exit(1)
    if any(outcome == UpdateOutcome.UPDATED for outcome in outcomes.values()):
        rich_print("Restart VS Code to use the updated servers.")


@app.command()
def status(config: str = ConfigOption, verbose: bool = VerboseOption):
    """Verify files, registration and system prompt."""
    manager = load_manager(config, verbose)
    report = manager.status()

    table = Table(title="Installation Status")
    table.add_column("Server", style="cyan")
    table.add_column("Files", style="green")
    table.add_column("Registered", style="blue")
    for name, present in report.server_files.items():
        table.add_row(
            name,
            "✓" if present else "✗",
            "✓" if report.registered.get(name) else "✗",
        )
    console.print(table)
    rich_print(f"System prompt: {'✓' if report.prompt_installed else '✗'}")

    if report.ok:
        rich_print("[green]Installation complete and verified![/green]")
        return

    rich_print("\n[yellow]Installation issues found:[/yellow]")
    for issue in report.issues:
        rich_print(f"  [red]•[/red] {issue}")
    rich_print("\n[bold]Recommended fixes:[/bold]")
    for fix in report.recommended_fixes():
        rich_print(f"  {fix}")
    raise typer.Exit(1)


@app.command()
def health(
    config: str = ConfigOption,
    verbose: bool = VerboseOption,
    stdio: bool = typer.Option(
        False, "--stdio", help="Launch each registered command and list its tools"
    ),
):
    """Check whether the servers respond."""
    manager = load_manager(config, verbose)
    results = asyncio.run(manager.health_check(stdio=stdio))
    print_health(results)
    if not all(result.healthy for result in results):
        raise typer.Exit(1)


@app.command()
def start(config: str = ConfigOption, verbose: bool = VerboseOption):
    """Start all servers in the foreground until Ctrl+C."""
    manager = load_manager(config, verbose)
    try:
        asyncio.run(run_servers(manager))
    except KeyboardInterrupt:
        rich_print("\n[yellow]All servers stopped[/yellow]")
    except Exception as e:
        rich_print(f"[red]Failed to start servers: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def stop(config: str = ConfigOption, verbose: bool = VerboseOption):
    """Stop servers listening on the bundle's ports."""
    manager = load_manager(config, verbose)
    ports = [server.port for server in manager.servers]
    stopped = asyncio.run(stop_ports(ports, manager.runner))
    for port, pid in stopped.items():
        if pid:
            rich_print(f"  [green]✓[/green] port {port} (PID {pid})")
        else:
            rich_print(f"  [dim]-[/dim] port {port}: nothing running")


@app.command()
def uninstall(
    config: str = ConfigOption,
    verbose: bool = VerboseOption,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
):
    """Unregister the servers, remove the prompt and delete cloned files."""
    manager = load_manager(config, verbose)
    if not manager.uninstall(assume_yes=yes):
        rich_print("[yellow]Uninstall cancelled[/yellow]")
        return
    rich_print("[green]Uninstall complete![/green] Restart VS Code to complete the removal.")


# Configuration management commands
config_app = typer.Typer(help="Configuration management commands")
app.add_typer(config_app, name="config")


@config_app.command("validate")
def validate_config(config: str = ConfigOption):
    """Validate the settings file."""
    issues = ConfigManager(config).validate_config()
    if not issues:
        rich_print("[green]Configuration is valid![/green]")
        return

    rich_print("[red]Configuration validation failed:[/red]")
    for issue in issues:
        rich_print(f"  [red]•[/red] {issue}")
    raise typer.Exit(1)


@config_app.command("show")
def show_config(config: str = ConfigOption, verbose: bool = VerboseOption):
    """Show the servers and resolved locations."""
    manager = load_manager(config, verbose)

    table = Table(title="Bundle Servers")
    table.add_column("Name", style="cyan")
    table.add_column("Repository", style="magenta")
    table.add_column("Branch", style="yellow")
    table.add_column("Port", style="blue")
    for server in manager.servers:
        table.add_row(server.display_name, server.git_url, server.branch, str(server.port))
    console.print(table)

    rich_print(f"Servers directory: {manager.settings.servers_dir}")
    rich_print(f"MCP configuration: {manager.registry.config_path}")
    rich_print(f"Prompt target: {manager.prompt.target}")


# Implementation functions
async def run_servers(manager: BundleManager):
    """Start every server and keep them running until cancelled."""
    runtime = manager.settings.runtime
    registry = await start_all(
        manager.servers,
        {},
        manager.settings.servers_dir,
        grace_period=runtime.start_grace_period,
    )
    for server in manager.servers:
        rich_print(f"  [green]✓[/green] {server.display_name}: http://localhost:{server.port}")
    rich_print("Press Ctrl+C to stop all servers")

    try:
        await asyncio.Event().wait()
    finally:
        await stop_all(registry, timeout=runtime.stop_timeout)


def print_results(title: str, results: dict):
    table = Table(title=title)
    table.add_column("Server", style="cyan")
    table.add_column("Result", style="green")
    for name, ok in results.items():
        table.add_row(name, "✓" if ok else "[red]✗[/red]")
    console.print(table)


def print_health(results):
    table = Table(title="Health Check Results")
    table.add_column("Server", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Detail", style="yellow")
    for result in results:
        table.add_row(result.name, result.status.value, result.detail)
    console.print(table)

    down = [result for result in results if not result.healthy]
    if down:
        rich_print(f"[red]{len(down)} server(s) down[/red]")
    else:
        rich_print("[green]All systems healthy[/green]")


def main():
    """Main entry point for CLI."""
    app()
