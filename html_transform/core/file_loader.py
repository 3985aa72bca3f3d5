"""Path-guarded file reads and directory listings."""

import logging
import os
from pathlib import Path

from .exceptions import MissingResourceError, ModuleReadError
from .path_guard import validate_directory, validate_file

logger = logging.getLogger(__name__)


def ensure_file_exists(file_path: str | os.PathLike[str]) -> Path:
    """Validate a file path and return it resolved."""
    return validate_file(file_path)


def load_file(file_path: str | os.PathLike[str], encoding: str = "utf-8") -> str:
    """Read a validated text file.

    Raises:
        ModuleReadError: If the file passed validation but could not be read
    """
    secure_path = validate_file(file_path)
    try:
        return secure_path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as e:
        raise ModuleReadError(f"Failed to read file {file_path}: {e}") from e


def ensure_directory_exists(dir_path: str | os.PathLike[str]) -> Path:
    """Validate a directory path and return it resolved."""
    return validate_directory(dir_path)


def list_files(dir_path: str | os.PathLike[str], extensions: tuple[str, ...]) -> list[str]:
    """List file names directly inside a directory with one of ``extensions``.

    Returns:
        File names (not paths), in directory order
    """
    secure_dir = validate_directory(dir_path)
    try:
        return [
            entry.name
            for entry in secure_dir.iterdir()
            if entry.is_file() and entry.name.endswith(extensions)
        ]
    except OSError as e:
        raise MissingResourceError(f"Failed to read directory {dir_path}: {e}") from e
