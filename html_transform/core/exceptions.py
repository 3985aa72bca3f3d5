"""Custom exception hierarchy for html-transform.

Every fatal condition the tool can hit has its own exception type so that
callers can tell a security rejection apart from a malformed module or a
missing file, and react differently to each.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..security.models import SecurityAnalysis


class HtmlTransformError(Exception):
    """Base exception for all html-transform errors.

    The CLI catches this single type to turn any fatal error into a
    non-zero exit status.
    """
    pass


# =============================================================================
# Security Errors
# =============================================================================

class SecurityError(HtmlTransformError):
    """Base exception for security-related errors."""
    pass


class PathViolationError(SecurityError):
    """Path is blocked by policy, escapes its base directory, or has a
    disallowed extension."""
    pass


class SecurityRejectionError(SecurityError):
    """Transform module failed the pre-execution risk gate."""

    def __init__(
        self,
        message: str,
        file_name: str | None = None,
        analysis: SecurityAnalysis | None = None,
    ):
        super().__init__(message)
        self.file_name = file_name
        self.analysis = analysis


# =============================================================================
# Resource Errors
# =============================================================================

class ResourceError(HtmlTransformError):
    """Base exception for filesystem resource errors."""
    pass


class MissingResourceError(ResourceError):
    """Required file or directory does not exist."""
    pass


class ModuleReadError(ResourceError):
    """Transform module source could not be read."""
    pass


# =============================================================================
# Transform Errors
# =============================================================================

class TransformError(HtmlTransformError):
    """Base exception for transform module errors."""
    pass


class ModuleLoadError(TransformError):
    """Transform module raised while being imported."""
    pass


class StructuralInvalidError(TransformError):
    """Transform module loaded but does not expose a callable transform."""
    pass


class TransformExecutionError(TransformError):
    """A loaded transform raised while being applied to the document."""

    def __init__(self, message: str, unit_name: str):
        super().__init__(message)
        self.unit_name = unit_name


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(HtmlTransformError):
    """Base exception for configuration errors."""
    pass


class InvalidConfigError(ConfigurationError):
    """Configuration file is invalid or malformed."""
    pass


class MissingConfigError(ConfigurationError):
    """Required configuration is missing."""
    pass


# =============================================================================
# Validation Errors
# =============================================================================

class ValidationError(HtmlTransformError):
    """Base exception for input validation errors."""
    pass


class InvalidInputError(ValidationError):
    """Invalid input provided to a function or option."""
    pass


class RequiredValueError(ValidationError):
    """A required option was not supplied on the command line or in config."""
    pass
