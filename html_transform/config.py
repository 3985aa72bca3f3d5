"""
Configuration loading and option resolution.

A transforms directory carries a config file (YAML, JSON or TOML) naming the
input pattern, output directory and the explicit transform order. Command
line options override config values; config values override defaults.
"""

from __future__ import annotations

import glob
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import toml
import yaml
from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .constants import CONFIG_FILE_NAMES
from .core.exceptions import (
    ConfigurationError,
    InvalidConfigError,
    MissingConfigError,
    MissingResourceError,
)
from .core.file_loader import load_file
from .core.path_guard import validate_directory, validate_file, validate_glob_pattern, validate_path
from .core.validation import (
    handle_config_error,
    validate_input_pattern,
    validate_output_directory,
    validate_required,
)

logger = logging.getLogger(__name__)

_GLOB_CHARS = ("*", "?", "[")


class TransformConfig(BaseModel):
    """Parsed transforms-directory configuration.

    Both snake_case and the camelCase keys of older config files are
    accepted.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    input: str | None = None
    output: str | None = None
    reference: str | None = None
    transforms: list[str] = Field(default_factory=list)
    dry_run: bool | None = Field(default=None, validation_alias=AliasChoices("dry_run", "dryRun"))
    verbose: bool | None = None
    no_format: bool | None = Field(default=None, validation_alias=AliasChoices("no_format", "noFormat"))
    skip_security_check: bool | None = Field(
        default=None,
        validation_alias=AliasChoices("skip_security_check", "skipSecurityCheck"),
    )
    formatter_config: str | None = Field(
        default=None,
        validation_alias=AliasChoices("formatter_config", "formatterConfig", "prettierConfig"),
    )
    data: dict[str, Any] = Field(default_factory=dict)


def find_config_file(transforms_dir: str | os.PathLike[str]) -> Path | None:
    """Return the first config file present in the transforms directory."""
    for name in CONFIG_FILE_NAMES:
        candidate = Path(transforms_dir) / name
        if candidate.is_file():
            return candidate
    return None


def _parse(content: str, extension: str) -> Any:
    if extension in (".yaml", ".yml"):
        return yaml.safe_load(content)
    if extension == ".json":
        return json.loads(content)
    if extension == ".toml":
        return toml.loads(content)
    raise InvalidConfigError(f"Unsupported config file format: {extension}")


def load_config(config_path: str | os.PathLike[str]) -> TransformConfig:
    """Load and validate a config file.

    Raises:
        MissingConfigError: If the file does not exist
        InvalidConfigError: If the format is unsupported or the content
            fails to parse or validate
        PathViolationError: If the path is blocked by policy
    """
    resolved = validate_path(config_path)
    if not resolved.exists():
        raise MissingConfigError(f"Config file not found: {config_path}")

    extension = resolved.suffix.lower()
    content = load_file(validate_file(resolved))

    try:
        data = _parse(content, extension)
    except (yaml.YAMLError, json.JSONDecodeError, toml.TomlDecodeError) as e:
        raise InvalidConfigError(f"Failed to parse config file {config_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise InvalidConfigError(f"Config file {config_path} must contain a mapping")

    try:
        return TransformConfig.model_validate(data)
    except PydanticValidationError as e:
        raise InvalidConfigError(f"Invalid config file {config_path}: {e}") from e


@dataclass
class ResolvedOptions:
    """Options after merging CLI flags, config file and defaults."""

    input_files: list[Path]
    input_pattern: str
    input_base: Path
    transforms_dir: Path
    output_dir: Path | None
    transform_order: list[str] = field(default_factory=list)
    reference: Path | None = None
    dry_run: bool = False
    verbose: bool = False
    no_format: bool = False
    skip_security_check: bool = False
    formatter_config: Path | None = None
    config: TransformConfig = field(default_factory=TransformConfig)


def _first(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def _glob_base(pattern: str) -> Path:
    """Directory that expanded paths are made relative to."""
    if not any(ch in pattern for ch in _GLOB_CHARS):
        return Path(pattern).parent
    parts = Path(pattern).parts
    literal: list[str] = []
    for part in parts:
        if any(ch in part for ch in _GLOB_CHARS):
            break
        literal.append(part)
    return Path(*literal) if literal else Path(".")


def resolve_options(
    transforms: str,
    input: str | None = None,
    output: str | None = None,
    reference: str | None = None,
    config_path: str | None = None,
    dry_run: bool | None = None,
    verbose: bool | None = None,
    no_format: bool | None = None,
    formatter_config: str | None = None,
    skip_security_check: bool | None = None,
) -> ResolvedOptions:
    """Merge command line options with the transforms-directory config.

    Relative ``input`` and ``output`` values that come from the config file
    are resolved against the transforms directory; values given on the
    command line are resolved against the working directory.

    Raises:
        MissingConfigError: If no config file is found and none was given
        RequiredValueError: If the input pattern or output directory is missing
        MissingResourceError: If the input pattern matches no files
        PathViolationError: If any path violates the path policy
    """
    transforms_dir = validate_directory(transforms)

    found = Path(config_path) if config_path else find_config_file(transforms_dir)
    config = TransformConfig()
    if found is not None:
        try:
            config = load_config(found)
            logger.info(f"Config loaded from: {found}")
        except ConfigurationError as e:
            handle_config_error(e, explicit=config_path is not None)
    else:
        raise MissingConfigError(
            "Config file (config.yaml, config.yml, config.json or config.toml) "
            f"is required in transforms directory: {transforms}"
        )

    input_pattern = validate_required(
        input or config.input,
        "Input pattern (either via CLI option -i or config file)",
    )
    validate_input_pattern(input_pattern)

    from_config = not input and config.input is not None
    if from_config and not os.path.isabs(input_pattern):
        base_for_glob = transforms_dir
    else:
        base_for_glob = Path.cwd()

    validate_glob_pattern(input_pattern, base_for_glob)
    resolved_pattern = str(base_for_glob / input_pattern)

    matches = sorted(glob.glob(resolved_pattern, recursive=True))
    if not matches:
        raise MissingResourceError(
            f"No files found matching pattern: {resolved_pattern} (original: {input_pattern})"
        )
    input_files = [validate_file(match) for match in matches]

    output_dir: Path | None = None
    output_value = output or config.output
    if output_value is not None:
        validate_output_directory(output_value)
        if not output and not os.path.isabs(output_value):
            output_dir = validate_path(transforms_dir / output_value)
        else:
            output_dir = validate_path(output_value)

    reference_value = reference or config.reference
    reference_path: Path | None = None
    if reference_value:
        if not reference and not os.path.isabs(reference_value):
            reference_path = validate_file(transforms_dir / reference_value)
        else:
            reference_path = validate_file(reference_value)

    formatter_value = formatter_config or config.formatter_config
    formatter_path = validate_file(formatter_value) if formatter_value else None

    return ResolvedOptions(
        input_files=input_files,
        input_pattern=input_pattern,
        input_base=(base_for_glob / _glob_base(input_pattern)).resolve(),
        transforms_dir=transforms_dir,
        output_dir=output_dir,
        transform_order=list(config.transforms),
        reference=reference_path,
        dry_run=bool(_first(dry_run, config.dry_run, False)),
        verbose=bool(_first(verbose, config.verbose, False)),
        no_format=bool(_first(no_format, config.no_format, False)),
        skip_security_check=bool(_first(skip_security_check, config.skip_security_check, False)),
        formatter_config=formatter_path,
        config=config,
    )
