"""Logging utilities for the pricing engine.

This module provides standardized logging functionality for engine operations.
Every message is tagged with a :class:`LogEvent` and any keyword data passed
by the caller. An optional callback can receive the same records, e.g. to
forward them to an application's own telemetry.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional

# Type for log callback functions
LogCallback = Callable[[int, str, Dict[str, Any]], None]

LOGGER_NAME = "delivery_pricing"

_callback: Optional[LogCallback] = None


class LogLevel(int, Enum):
    """Log levels for the engine."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


class LogEvent(str, Enum):
    """Event types for engine logging."""

    PRICING_REGISTRY = "pricing_registry"
    CONFIG_LOAD = "config_load"
    TIER_CLASSIFICATION = "tier_classification"
    RULE_EVALUATION = "rule_evaluation"
    POLICY_ADJUSTMENT = "policy_adjustment"
    CALCULATION = "calculation"
    INPUT_VALIDATION = "input_validation"


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the package namespace.

    Args:
        name: Short module name, e.g. ``"registry"``

    Returns:
        The ``delivery_pricing.<name>`` logger
    """
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def set_log_callback(callback: Optional[LogCallback]) -> None:
    """Install (or remove, with ``None``) a callback that receives every log record."""
    global _callback
    _callback = callback


def _log(
    callback: LogCallback,
    level: LogLevel,
    event: LogEvent,
    data: Dict[str, Any],
) -> None:
    """Log an event with the provided callback.

    Args:
        callback: Function to call with the log data
        level: Severity level
        event: Event type
        data: Dictionary of event data
    """
    try:
        callback(level, event.value, data)
    except Exception as e:
        # Fallback to standard logging if callback fails
        logging.getLogger(LOGGER_NAME).error(
            f"Logging callback failed with error: {e}. Original log: "
            f"level={level}, event={event.value}, data={data}"
        )


def _emit(level: LogLevel, event: LogEvent, message: str, data: Dict[str, Any]) -> None:
    logger = logging.getLogger(LOGGER_NAME)
    if logger.isEnabledFor(level):
        if data:
            details = ", ".join(f"{key}={value}" for key, value in sorted(data.items()))
            logger.log(level, f"[{event.value}] {message} ({details})")
        else:
            logger.log(level, f"[{event.value}] {message}")
    if _callback is not None:
        _log(_callback, level, event, {"message": message, **data})


def log_debug(event: LogEvent, message: str, **data: Any) -> None:
    """Log a debug-level event."""
    _emit(LogLevel.DEBUG, event, message, data)


def log_info(event: LogEvent, message: str, **data: Any) -> None:
    """Log an info-level event."""
    _emit(LogLevel.INFO, event, message, data)


def log_warning(event: LogEvent, message: str, **data: Any) -> None:
    """Log a warning-level event."""
    _emit(LogLevel.WARNING, event, message, data)


def log_error(event: LogEvent, message: str, **data: Any) -> None:
    """Log an error-level event."""
    _emit(LogLevel.ERROR, event, message, data)
