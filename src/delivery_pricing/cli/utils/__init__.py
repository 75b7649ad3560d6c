"""CLI utilities package."""

from .helpers import (
    ExitCode,
    exit_code_for,
    get_dpe_env_vars,
    get_registry_for,
    handle_error,
    resolve_format,
)

__all__ = [
    "ExitCode",
    "resolve_format",
    "handle_error",
    "exit_code_for",
    "get_registry_for",
    "get_dpe_env_vars",
]
