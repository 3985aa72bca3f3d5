"""Validation helpers for resolved CLI and config options."""

import logging
from typing import TypeVar

from .exceptions import InvalidInputError, RequiredValueError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def validate_required(value: T | None, name: str) -> T:
    """Return ``value`` or raise if it was not supplied."""
    if value is None:
        raise RequiredValueError(f"{name} is required")
    return value


def validate_input_pattern(pattern: str) -> None:
    if not pattern or not pattern.strip():
        raise InvalidInputError("Input pattern cannot be empty")


def validate_output_directory(output_dir: str) -> None:
    if not output_dir or not output_dir.strip():
        raise InvalidInputError("Output directory cannot be empty")


def handle_config_error(error: Exception, explicit: bool) -> None:
    """Re-raise config errors for an explicit config file, warn otherwise."""
    if explicit:
        raise error
    logger.warning(f"Could not load config file: {error}")
