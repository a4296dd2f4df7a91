import logging
import os
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .errors import LauncherError
from .launcher import build_command
from .session import prepare_session, start_session
from .settings import LauncherSettings, apply_cli_overrides, load_settings
from .user_config import ensure_defaults, envs_path, resolve_config_dir, services_path

app = typer.Typer(add_completion=False)


def _settings(ctx: typer.Context) -> LauncherSettings:
    return ctx.obj["settings"]


def _start(settings: LauncherSettings, dry_run: bool) -> None:
    try:
        start_session(settings, dry_run=dry_run)
    except LauncherError as e:
        logging.error(f"Session start failed: {e}")
        raise typer.Exit(code=1)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
    config_dir: Optional[str] = typer.Option(
        None,
        "--config-dir",
        help="Directory holding the services and envs files (defaults to /home/<user>/.config/dwl-launcher)",
    ),
    home_root: Optional[str] = typer.Option(
        None,
        "--home-root",
        help="Directory containing user home directories",
    ),
    script: Optional[str] = typer.Option(
        None,
        "--script",
        help="Where to write the generated startup script",
    ),
    target: Optional[str] = typer.Option(
        None,
        "--target",
        help="Compositor executable to start",
    ),
):
    """Start a dwl session with configured services and environment.

    Reads ~/.config/dwl-launcher/services and ~/.config/dwl-launcher/envs,
    writes a startup script and starts the compositor with it. Running
    without a command is the same as 'dwl-launcher start'.
    """
    level = logging.DEBUG if verbose else logging.INFO
    if os.environ.get("RICH_FORCE_TERMINAL") == "0":
        logging.basicConfig(
            level=level,
            format="%(levelname)s: %(message)s",
            force=True,
        )
    else:
        logging.basicConfig(
            level=level,
            handlers=[RichHandler(rich_tracebacks=True)],
            force=True,
        )

    settings = apply_cli_overrides(
        load_settings(),
        {
            "config_dir": config_dir,
            "home_root": home_root,
            "script_path": script,
            "target_executable": target,
        },
    )
    ctx.obj = {"settings": settings}

    if ctx.invoked_subcommand is None:
        _start(settings, dry_run=False)


@app.command()
def start(
    ctx: typer.Context,
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Write the startup script but do not start the compositor",
    ),
):
    """Write the startup script and start the compositor."""
    _start(_settings(ctx), dry_run=dry_run)


@app.command()
def init(ctx: typer.Context):
    """Create the config directory and any missing default files."""
    settings = _settings(ctx)
    try:
        config_dir = resolve_config_dir(settings)
        created = ensure_defaults(config_dir)
    except LauncherError as e:
        logging.error(f"Initialization failed: {e}")
        raise typer.Exit(code=1)

    for path in (services_path(config_dir), envs_path(config_dir)):
        state = "created" if path in created else "exists"
        typer.echo(f"{state}: {path}")


@app.command()
def script(ctx: typer.Context):
    """Print the startup script without writing it."""
    try:
        plan = prepare_session(_settings(ctx))
    except LauncherError as e:
        logging.error(f"Cannot build startup script: {e}")
        raise typer.Exit(code=1)
    typer.echo(plan.script, nl=False)


@app.command()
def show(ctx: typer.Context):
    """Show configured services, environment and resolved paths."""
    settings = _settings(ctx)
    try:
        plan = prepare_session(settings)
    except LauncherError as e:
        logging.error(f"Cannot load configuration: {e}")
        raise typer.Exit(code=1)

    console = Console()

    console.print("\n[bold cyan]Services[/bold cyan]")
    services_table = Table(show_header=True, header_style="bold magenta")
    services_table.add_column("#", justify="right")
    services_table.add_column("Name", style="cyan")
    services_table.add_column("Command")
    for index, service in enumerate(plan.services.service, start=1):
        services_table.add_row(str(index), service.name, service.exec)
    console.print(services_table)

    console.print("\n[bold cyan]Environment[/bold cyan]")
    envs_table = Table(show_header=True, header_style="bold magenta")
    envs_table.add_column("Variable", style="cyan")
    envs_table.add_column("Value")
    for key, value in sorted(plan.envs.items()):
        envs_table.add_row(key, value)
    console.print(envs_table)

    console.print("\n[bold cyan]Paths[/bold cyan]")
    console.print(f"  config:  {plan.config_dir}")
    console.print(f"  script:  {settings.script_path}")
    console.print(f"  command: {' '.join(build_command(settings))}")


if __name__ == "__main__":
    app()
