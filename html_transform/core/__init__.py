"""Core utilities: exception hierarchy, path confinement and guarded file access."""

from .exceptions import (
    ConfigurationError,
    HtmlTransformError,
    InvalidConfigError,
    InvalidInputError,
    MissingConfigError,
    MissingResourceError,
    ModuleLoadError,
    ModuleReadError,
    PathViolationError,
    RequiredValueError,
    ResourceError,
    SecurityError,
    SecurityRejectionError,
    StructuralInvalidError,
    TransformError,
    TransformExecutionError,
    ValidationError,
)
from .file_loader import ensure_directory_exists, ensure_file_exists, list_files, load_file
from .path_guard import (
    DEFAULT_POLICY,
    PathPolicy,
    get_allowed_extensions,
    get_blocked_patterns,
    is_extension_allowed,
    is_path_blocked,
    validate_directory,
    validate_extension,
    validate_file,
    validate_glob_pattern,
    validate_path,
)
from .validation import (
    handle_config_error,
    validate_input_pattern,
    validate_output_directory,
    validate_required,
)

__all__ = [
    # Path guard
    "DEFAULT_POLICY",
    "PathPolicy",
    "get_allowed_extensions",
    "get_blocked_patterns",
    "is_extension_allowed",
    "is_path_blocked",
    "validate_directory",
    "validate_extension",
    "validate_file",
    "validate_glob_pattern",
    "validate_path",
    # Option validation
    "handle_config_error",
    "validate_input_pattern",
    "validate_output_directory",
    "validate_required",
    # File access
    "ensure_directory_exists",
    "ensure_file_exists",
    "list_files",
    "load_file",
    # Exceptions
    "HtmlTransformError",
    "SecurityError",
    "PathViolationError",
    "SecurityRejectionError",
    "ResourceError",
    "MissingResourceError",
    "ModuleReadError",
    "TransformError",
    "ModuleLoadError",
    "StructuralInvalidError",
    "TransformExecutionError",
    "ConfigurationError",
    "InvalidConfigError",
    "MissingConfigError",
    "ValidationError",
    "InvalidInputError",
    "RequiredValueError",
]
