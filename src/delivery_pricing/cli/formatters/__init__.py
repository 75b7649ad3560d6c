"""CLI formatters package."""

from .json import (
    format_client_json,
    format_clients_list_json,
    format_json,
    format_paths_json,
)
from .table import (
    create_console,
    format_client_table,
    format_clients_table,
    format_paths_table,
    format_quote_table,
)

__all__ = [
    "format_json",
    "format_clients_list_json",
    "format_client_json",
    "format_paths_json",
    "create_console",
    "format_clients_table",
    "format_client_table",
    "format_quote_table",
    "format_paths_table",
]
