"""Configuration commands for the DPE CLI."""

from pathlib import Path
from typing import Any, Dict, Optional

import click

from ...config_loader import load_clients_file
from ...config_paths import (
    CLIENTS_FILENAME,
    ENV_CLIENTS_PATH,
    get_clients_config_path,
    get_package_config_dir,
    get_user_config_dir,
    install_user_clients_file,
)
from ..formatters import create_console, format_json, format_paths_json, format_paths_table
from ..utils import ExitCode, exit_code_for, get_dpe_env_vars, handle_error


@click.group()
def config() -> None:
    """Locate, validate and initialize client configuration files."""
    pass


@config.command()
@click.pass_context
def paths(ctx: click.Context) -> None:
    """Show configuration file locations and which one is in effect."""
    try:
        active = ctx.obj.get("clients_path") or get_clients_config_path()
        env_path = get_dpe_env_vars()[ENV_CLIENTS_PATH]
        candidates = {
            "environment": env_path,
            "user": str(get_user_config_dir() / CLIENTS_FILENAME),
            "bundled": str(get_package_config_dir() / CLIENTS_FILENAME),
        }
        if ctx.obj.get("clients_path"):
            candidates = {"cli": ctx.obj["clients_path"], **candidates}

        data: Dict[str, Any] = {
            source: {
                "path": path,
                "exists": bool(path) and Path(path).is_file(),
                "active": path == active,
            }
            for source, path in candidates.items()
        }

        if ctx.obj["format"] == "json":
            format_json(format_paths_json(data))
        else:
            format_paths_table(data, create_console(no_color=ctx.obj["no_color"]))

    except Exception as e:
        handle_error(e, exit_code_for(e))


@config.command()
@click.argument("path", required=False, type=click.Path(dir_okay=False))
@click.pass_context
def validate(ctx: click.Context, path: Optional[str]) -> None:
    """Validate a client configuration file (defaults to the active one)."""
    target = path or ctx.obj.get("clients_path") or get_clients_config_path()
    try:
        document = load_clients_file(target)
    except Exception as e:
        handle_error(e, exit_code_for(e))
        return

    summary = {
        "path": target,
        "valid": True,
        "version": document.version,
        "default_client": document.default_client,
        "clients": sorted(document.clients),
    }
    if ctx.obj["format"] == "json":
        format_json(summary)
    else:
        console = create_console(no_color=ctx.obj["no_color"])
        console.print(f"[bold green]✓[/bold green] {target} is valid")
        console.print(f"Clients: {', '.join(summary['clients'])} (default: {document.default_client})")


@config.command()
def init() -> None:
    """Copy the bundled client configuration into the user config directory."""
    try:
        user_file, created = install_user_clients_file()
    except OSError as e:
        handle_error(e, ExitCode.CONFIG_ERROR)
        return
    if created:
        click.echo(f"Created {user_file}")
    else:
        click.echo(f"{user_file} already exists; left unchanged")
