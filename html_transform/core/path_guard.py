"""Path confinement for every file the tool touches.

Config files, input documents, reference templates, output directories and
transform modules are all resolved through this module. Validation is
fail-closed: every rejection raises, nothing is downgraded to a warning.

Results are never cached. The filesystem can change between validation and
use, so callers must still handle a later open() failing.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path

from ..constants import MAX_GLOB_TRAVERSAL
from .exceptions import InvalidInputError, MissingResourceError, PathViolationError

logger = logging.getLogger("html_transform.security")


@dataclass(frozen=True)
class PathPolicy:
    """Read-only path policy shared by all validators."""

    blocked_patterns: tuple[re.Pattern, ...]
    allowed_extensions: frozenset[str]

    def is_blocked(self, path: str) -> bool:
        return any(pattern.search(path) for pattern in self.blocked_patterns)

    def is_extension_allowed(self, extension: str) -> bool:
        return extension.lower() in self.allowed_extensions


BLOCKED_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"\.\."),  # Path traversal
    # System directories
    re.compile(r"^/etc(/|$)"),
    re.compile(r"^/usr(/|$)"),
    re.compile(r"^/bin(/|$)"),
    re.compile(r"^/sbin(/|$)"),
    re.compile(r"^/root(/|$)"),
    re.compile(r"^/proc(/|$)"),
    re.compile(r"^/sys(/|$)"),
    re.compile(r"^/dev(/|$)"),
    re.compile(r"^/var/log(/|$)"),
    re.compile(r"^/home/[^/]+/\."),  # Hidden files in user directories
    # Credentials and keys
    re.compile(r"\.ssh", re.IGNORECASE),
    re.compile(r"\.aws", re.IGNORECASE),
    re.compile(r"\.env", re.IGNORECASE),
    re.compile(r"\.key$", re.IGNORECASE),
    re.compile(r"\.pem$", re.IGNORECASE),
    re.compile(r"\.p12$", re.IGNORECASE),
    re.compile(r"\.pfx$", re.IGNORECASE),
    re.compile(r"id_rsa", re.IGNORECASE),
    re.compile(r"id_dsa", re.IGNORECASE),
    re.compile(r"id_ecdsa", re.IGNORECASE),
    re.compile(r"authorized_keys", re.IGNORECASE),
    re.compile(r"known_hosts", re.IGNORECASE),
)

ALLOWED_EXTENSIONS: frozenset[str] = frozenset({
    ".html",
    ".htm",
    ".py",
    ".json",
    ".yaml",
    ".yml",
    ".toml",
    ".md",
})

DEFAULT_POLICY = PathPolicy(
    blocked_patterns=BLOCKED_PATTERNS,
    allowed_extensions=ALLOWED_EXTENSIONS,
)

# Literal prefix of a glob: everything before the first "/*" or "/**"
_GLOB_SUFFIX_RE = re.compile(r"/\*\*?.*$")


def _require_path(value: str | os.PathLike[str] | None, message: str) -> str:
    if isinstance(value, os.PathLike):
        value = os.fspath(value)
    if not value or not isinstance(value, str):
        raise InvalidInputError(message)
    return value


def is_path_blocked(path: str | os.PathLike[str], policy: PathPolicy = DEFAULT_POLICY) -> bool:
    """Check whether a path matches any blocked pattern after normalization."""
    normalized = os.path.normpath(os.fspath(path))
    return policy.is_blocked(normalized)


def validate_path(
    path: str | os.PathLike[str],
    base_path: str | os.PathLike[str] | None = None,
    policy: PathPolicy = DEFAULT_POLICY,
) -> Path:
    """Validate a path against the policy and confine it to ``base_path``.

    Args:
        path: Path to validate, relative or absolute
        base_path: Optional directory the result must stay inside

    Returns:
        Absolute resolved path

    Raises:
        InvalidInputError: If path is empty or not a string
        PathViolationError: If path is blocked or escapes base_path
    """
    raw = _require_path(path, "Invalid path: path must be a non-empty string")
    normalized = os.path.normpath(raw)

    if policy.is_blocked(normalized):
        logger.warning(
            "Security: Blocked path access attempt",
            extra={"event": "path_violation", "path": raw, "reason": "blocked_pattern"},
        )
        raise PathViolationError(f"Access denied: path violates security policy ({raw})")

    if base_path:
        resolved_base = Path(os.fspath(base_path)).resolve()
        resolved = (resolved_base / normalized).resolve()
        relative = os.path.relpath(resolved, resolved_base)

        if relative.startswith("..") or os.path.isabs(relative):
            logger.warning(
                "Security: Path traversal attempt blocked",
                extra={"event": "path_violation", "path": raw, "reason": "outside_base"},
            )
            raise PathViolationError(
                f"Access denied: path outside allowed directory ({raw})"
            )
    else:
        resolved = Path(normalized).resolve()

    # Symlinks may point into a blocked location
    if policy.is_blocked(str(resolved)):
        logger.warning(
            "Security: Blocked path access attempt",
            extra={"event": "path_violation", "path": str(resolved), "reason": "blocked_target"},
        )
        raise PathViolationError(f"Access denied: path violates security policy ({raw})")

    return resolved


def is_extension_allowed(path: str | os.PathLike[str], policy: PathPolicy = DEFAULT_POLICY) -> bool:
    """Check a file's extension against the allow-list."""
    return policy.is_extension_allowed(Path(os.fspath(path)).suffix)


def validate_extension(path: str | os.PathLike[str], policy: PathPolicy = DEFAULT_POLICY) -> None:
    """Require a non-empty, allow-listed extension.

    Raises:
        InvalidInputError: If path is empty or not a string
        PathViolationError: If the extension is missing or not allowed
    """
    raw = _require_path(path, "Invalid file path for extension validation")
    extension = Path(raw).suffix.lower()

    if not extension:
        raise PathViolationError(f"File must have an extension: {raw}")

    if not policy.is_extension_allowed(extension):
        logger.warning(
            f"Security: Blocked file extension: {extension}",
            extra={"event": "path_violation", "path": raw, "reason": "extension"},
        )
        raise PathViolationError(f"File extension not allowed: {extension}")


def validate_directory(path: str | os.PathLike[str], policy: PathPolicy = DEFAULT_POLICY) -> Path:
    """Validate that a path is an existing directory.

    Raises:
        InvalidInputError: If path is empty or not a string
        PathViolationError: If path is blocked or not a directory
        MissingResourceError: If the directory does not exist
    """
    raw = _require_path(path, "Invalid directory path")
    resolved = validate_path(raw, policy=policy)

    if not resolved.exists():
        raise MissingResourceError(f"Requested directory does not exist: {raw}")

    if not resolved.is_dir():
        raise PathViolationError(f"Requested path is not a directory: {raw}")

    return resolved


def validate_file(
    path: str | os.PathLike[str],
    base_path: str | os.PathLike[str] | None = None,
    policy: PathPolicy = DEFAULT_POLICY,
) -> Path:
    """Validate that a path is an existing, readable file with an allowed extension.

    Args:
        path: File path to validate
        base_path: Optional directory the file must stay inside

    Returns:
        Absolute resolved path

    Raises:
        InvalidInputError: If path is empty or not a string
        PathViolationError: If path is blocked, escapes base_path, has a
            disallowed extension, is not a regular file or is unreadable
        MissingResourceError: If the file does not exist
    """
    resolved = validate_path(path, base_path, policy=policy)
    validate_extension(resolved, policy=policy)

    if not resolved.exists():
        raise MissingResourceError(f"Requested file does not exist: {path}")

    if not resolved.is_file():
        raise PathViolationError(f"Requested path is not a file: {path}")

    if not os.access(resolved, os.R_OK):
        raise PathViolationError(f"Requested file is not accessible: {path}")

    return resolved


def validate_glob_pattern(
    pattern: str,
    base_path: str | os.PathLike[str],
    policy: PathPolicy = DEFAULT_POLICY,
) -> str:
    """Check the literal base of a glob pattern before it is expanded.

    Only the portion before the first wildcard segment is inspected; the
    expansion itself is left to :mod:`glob`.

    Returns:
        The unchanged pattern

    Raises:
        InvalidInputError: If pattern is empty or not a string
        PathViolationError: If the base resolves to a blocked location or
            climbs more than MAX_GLOB_TRAVERSAL levels
    """
    raw = _require_path(pattern, "Invalid glob pattern")
    base_portion = _GLOB_SUFFIX_RE.sub("", raw)

    resolved = os.path.normpath(os.path.join(os.path.abspath(os.fspath(base_path)), base_portion))
    if policy.is_blocked(resolved):
        logger.warning(
            "Security: Glob pattern targets blocked path",
            extra={"event": "path_violation", "path": raw, "reason": "blocked_glob"},
        )
        raise PathViolationError(f"Glob pattern attempts to access blocked path: {raw}")

    upward_levels = base_portion.count("..")
    if upward_levels > MAX_GLOB_TRAVERSAL:
        raise PathViolationError(f"Glob pattern contains excessive path traversal: {raw}")

    return raw


def get_allowed_extensions(policy: PathPolicy = DEFAULT_POLICY) -> list[str]:
    """Get the sorted list of allowed file extensions."""
    return sorted(policy.allowed_extensions)


def get_blocked_patterns(policy: PathPolicy = DEFAULT_POLICY) -> tuple[re.Pattern, ...]:
    """Get the blocked path patterns (for tooling and tests)."""
    return policy.blocked_patterns
