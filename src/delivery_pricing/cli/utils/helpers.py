"""Helper functions for CLI operations."""

import os
import sys
from typing import Any, Dict, Optional

import click

from ...config_paths import ENV_CLIENTS_PATH
from ...errors import ClientNotFoundError, ConfigurationError
from ...registry import PricingRegistry, RegistryConfig


class ExitCode:
    """Standard exit codes for the CLI."""

    SUCCESS = 0
    GENERIC_ERROR = 1
    INVALID_USAGE = 2
    CLIENT_NOT_FOUND = 3
    CONFIG_ERROR = 4


def resolve_format(cli_format: Optional[str] = None, default_tty: str = "table", default_non_tty: str = "json") -> str:
    """Resolve output format with TTY detection.

    Args:
        cli_format: Format specified via CLI flag
        default_tty: Default format for TTY output
        default_non_tty: Default format for non-TTY output

    Returns:
        Resolved format name
    """
    if cli_format:
        return cli_format.lower()

    # Auto-detect based on TTY
    if sys.stdout.isatty():
        return default_tty
    else:
        return default_non_tty


def handle_error(error: Exception, exit_code: int = ExitCode.GENERIC_ERROR) -> None:
    """Handle CLI errors with consistent formatting.

    Args:
        error: Exception to handle
        exit_code: Exit code to use
    """
    click.echo(f"Error: {str(error)}", err=True)
    sys.exit(exit_code)


def exit_code_for(error: Exception) -> int:
    """Map an engine exception to its CLI exit code."""
    if isinstance(error, ClientNotFoundError):
        return ExitCode.CLIENT_NOT_FOUND
    if isinstance(error, ConfigurationError):
        return ExitCode.CONFIG_ERROR
    if isinstance(error, click.BadParameter):
        return ExitCode.INVALID_USAGE
    return ExitCode.GENERIC_ERROR


def get_registry_for(ctx_obj: Dict[str, Any]) -> PricingRegistry:
    """Get the registry for this invocation.

    An explicit ``--clients-path`` gets its own registry; otherwise the
    process-wide default registry is used.
    """
    clients_path = ctx_obj.get("clients_path")
    if clients_path:
        return PricingRegistry(RegistryConfig(clients_path=clients_path))
    return PricingRegistry.get_default()


def get_dpe_env_vars() -> Dict[str, Optional[str]]:
    """Get the environment variables the engine reads.

    Returns:
        Dictionary of variable names and their values (None when unset)
    """
    return {ENV_CLIENTS_PATH: os.environ.get(ENV_CLIENTS_PATH)}
