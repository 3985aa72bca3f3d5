"""
Transform module loading behind the risk gate.

A transform module is a Python file exporting a transform either as a
module-level ``TRANSFORM`` (a mapping, a :class:`TransformUnit` or any object
with a ``transform`` attribute) or as a module-level ``transform`` function.
The source is analyzed before the file is executed; a module that fails the
gate is never imported.
"""

import hashlib
import importlib.util
import logging
import re
import sys
from collections.abc import Mapping
from pathlib import Path
from types import ModuleType
from typing import Any

from ..constants import EXPORT_ATTRIBUTE
from ..core.exceptions import ModuleLoadError, SecurityRejectionError, StructuralInvalidError
from ..security.models import SecurityAnalysis
from ..security.risk_analyzer import RiskAnalyzer, get_risk_analyzer
from .models import TransformUnit

logger = logging.getLogger(__name__)
security_logger = logging.getLogger("html_transform.security")

_MODULE_NAME_RE = re.compile(r"\W")


def _module_name_for(path: Path) -> str:
    digest = hashlib.sha256(str(path).encode("utf-8")).hexdigest()[:12]
    return f"_html_transform_{_MODULE_NAME_RE.sub('_', path.stem)}_{digest}"


def load_module(file_path: str | Path) -> ModuleType:
    """Execute a Python file and return the resulting module.

    This is the only place transform code runs at import time. Callers must
    clear the file through the risk gate first unless the operator opted out.

    Raises:
        ModuleLoadError: If the file cannot be imported
    """
    path = Path(file_path).resolve()
    module_name = _module_name_for(path)

    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ModuleLoadError(f"Failed to load module from {file_path}: not a Python module")

    module = importlib.util.module_from_spec(spec)
    # Registered only while executing so decorators like @dataclass can find it
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        raise ModuleLoadError(f"Failed to load module from {file_path}: {e}") from e
    finally:
        sys.modules.pop(module_name, None)

    return module


def extract_transform_unit(module: ModuleType, default_name: str) -> TransformUnit:
    """Build a TransformUnit from a module's export.

    Raises:
        StructuralInvalidError: If no callable transform is exported
    """
    exported: Any = getattr(module, EXPORT_ATTRIBUTE, None)
    if exported is None:
        exported = module

    if isinstance(exported, Mapping):
        def get(key: str) -> Any:
            return exported.get(key)
    else:
        def get(key: str) -> Any:
            return getattr(exported, key, None)

    transform = get("transform")
    if not callable(transform):
        raise StructuralInvalidError(
            "Transform file does not export a valid transform function"
        )

    order = get("order")
    return TransformUnit(
        name=str(get("name") or default_name),
        transform=transform,
        description=get("description"),
        order=float(order) if isinstance(order, int | float) else None,
    )


def _rejection_message(file_name: str, analysis: SecurityAnalysis) -> str:
    lines = [f"Transform file {file_name} failed security validation:", *analysis.warnings]
    if analysis.blocked_patterns:
        lines.append("Blocked patterns detected:")
        lines.extend(analysis.blocked_patterns)
    lines.append(f"Risk score: {analysis.risk_score}/10")
    return "\n  ".join(lines)


async def load_transform_module(
    file_path: str | Path,
    skip_security_check: bool = False,
    analyzer: RiskAnalyzer | None = None,
) -> TransformUnit:
    """Clear a transform module through the risk gate, then load it.

    Args:
        file_path: Path to the transform module
        skip_security_check: Load without analysis. Operator opt-out only.
        analyzer: Analyzer to use; defaults to the global instance

    Returns:
        The module's TransformUnit

    Raises:
        SecurityRejectionError: If the module fails the gate
        ModuleReadError: If the source cannot be read for analysis
        ModuleLoadError: If the module raises on import
        StructuralInvalidError: If the module exports no callable transform
    """
    path = Path(file_path)
    file_name = path.name

    if skip_security_check:
        security_logger.warning(
            f"Security check skipped for {file_name}",
            extra={"event": "security_decision", "decision": "skipped", "file": file_name},
        )
    else:
        analysis = await (analyzer or get_risk_analyzer()).analyze_file(path)

        if not analysis.safe:
            security_logger.error(
                f"Security validation failed for {file_name}",
                extra={
                    "event": "security_decision",
                    "decision": "rejected",
                    "file": file_name,
                    "risk_score": analysis.risk_score,
                    "pattern": analysis.blocked_patterns,
                },
            )
            raise SecurityRejectionError(
                _rejection_message(file_name, analysis),
                file_name=file_name,
                analysis=analysis,
            )

        if analysis.warnings:
            security_logger.warning(f"Security warnings for {file_name}:")
            for warning in analysis.warnings:
                security_logger.warning(f"  - {warning}")
            security_logger.warning(f"  Risk score: {analysis.risk_score}/10")

        security_logger.info(
            f"Transform {file_name} cleared (risk {analysis.risk_score}/10)",
            extra={
                "event": "security_decision",
                "decision": "cleared",
                "file": file_name,
                "risk_score": analysis.risk_score,
            },
        )

    module = load_module(path)
    try:
        return extract_transform_unit(module, default_name=path.stem)
    except StructuralInvalidError:
        logger.warning(f"Transform file {file_name} does not export a valid transform function")
        raise
