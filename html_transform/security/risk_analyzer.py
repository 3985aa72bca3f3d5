"""
Pre-execution risk gate for transform modules.

The analyzer scores a module's source text against the fixed catalog in
:mod:`.risk_patterns` and decides whether the module may be imported. The
score alone is never the only gate: any HIGH or CRITICAL match blocks the
module even when the aggregate score is low.
"""

import asyncio
import hashlib
import logging
from pathlib import Path

from ..constants import (
    MAX_MODULE_FILE_SIZE,
    MAX_RISK_SCORE,
    MODULE_EXTENSIONS,
    PATTERN_SATURATION,
    RISK_THRESHOLD,
    STRUCTURE_PENALTY,
)
from ..core.exceptions import MissingResourceError, ModuleReadError
from .models import BatchSummary, SecurityAnalysis
from .risk_patterns import (
    ALL_RISK_PATTERNS,
    EXPORT_PATTERNS,
    TRANSFORM_DECLARATION_PATTERNS,
    RiskPattern,
)

logger = logging.getLogger(__name__)

STRUCTURE_WARNING = "Invalid transform structure: missing required export or transform function"


class RiskAnalyzer:
    """Scores transform module source text for dangerous capability use."""

    def __init__(self, patterns: tuple[RiskPattern, ...] = ALL_RISK_PATTERNS):
        """
        Initialize the analyzer.

        Args:
            patterns: Risk pattern catalog. Defaults to the built-in catalog.
        """
        self.patterns = patterns

    def analyze(self, source: str) -> SecurityAnalysis:
        """Analyze transform source text. Pure; performs no I/O.

        Args:
            source: Full text of the transform module

        Returns:
            A fresh SecurityAnalysis for this text
        """
        warnings: list[str] = []
        blocked_patterns: list[str] = []
        total_points = 0

        for pattern in self.patterns:
            occurrences = pattern.count(source)
            if not occurrences:
                continue

            suffix = "s" if occurrences > 1 else ""
            description = f"{pattern.description} ({occurrences} occurrence{suffix})"
            warnings.append(description)

            if pattern.severity.blocks:
                blocked_patterns.append(description)

            total_points += min(
                pattern.risk_points * occurrences,
                pattern.risk_points * PATTERN_SATURATION,
            )

        structure_valid = self.validate_structure(source)
        if not structure_valid:
            warnings.append(STRUCTURE_WARNING)
            total_points += STRUCTURE_PENALTY

        risk_score = round(min(total_points, MAX_RISK_SCORE), 1)
        content_hash = hashlib.sha256(source.encode("utf-8")).hexdigest()

        safe = (
            risk_score < RISK_THRESHOLD
            and not blocked_patterns
            and structure_valid
        )

        return SecurityAnalysis(
            safe=safe,
            risk_score=risk_score,
            warnings=warnings,
            blocked_patterns=blocked_patterns,
            structure_valid=structure_valid,
            content_hash=content_hash,
        )

    @staticmethod
    def validate_structure(source: str) -> bool:
        """Check for a module export and a transform function declaration."""
        has_export = any(p.search(source) for p in EXPORT_PATTERNS)
        if not has_export:
            return False
        return any(p.search(source) for p in TRANSFORM_DECLARATION_PATTERNS)

    async def analyze_file(self, file_path: str | Path) -> SecurityAnalysis:
        """Read a transform module and analyze its source.

        Raises:
            ModuleReadError: If the file cannot be read or decoded
        """
        path = Path(file_path)

        def _read() -> str:
            if path.stat().st_size > MAX_MODULE_FILE_SIZE:
                raise ValueError(f"File too large (max {MAX_MODULE_FILE_SIZE} bytes)")
            with open(path, encoding="utf-8") as f:
                return f.read()

        try:
            content = await asyncio.to_thread(_read)
        except (OSError, UnicodeDecodeError, ValueError) as e:
            raise ModuleReadError(f"Failed to read transform file {path}: {e}") from e

        return self.analyze(content)

    async def batch_analyze(self, directory: str | Path) -> dict[str, SecurityAnalysis]:
        """Analyze every transform module directly inside ``directory``.

        Files are analyzed concurrently; each analysis is independent, so the
        result matches a sequential run. A file that cannot be read gets a
        worst-case record instead of aborting the batch.

        Returns:
            Mapping of file name to analysis, in sorted file-name order

        Raises:
            MissingResourceError: If the directory itself cannot be read
        """
        base = Path(directory)
        try:
            names = sorted(
                entry.name
                for entry in base.iterdir()
                if entry.name.endswith(MODULE_EXTENSIONS)
            )
        except OSError as e:
            raise MissingResourceError(
                f"Failed to read transform directory {base}: {e}"
            ) from e

        async def _analyze_one(name: str) -> SecurityAnalysis:
            try:
                return await self.analyze_file(base / name)
            except ModuleReadError as e:
                logger.warning(f"Could not analyze {name}: {e}")
                return SecurityAnalysis.failed(str(e))

        analyses = await asyncio.gather(*(_analyze_one(name) for name in names))
        return dict(zip(names, analyses))


def summarize(results: dict[str, SecurityAnalysis]) -> BatchSummary:
    """Compute summary statistics over batch analysis results.

    The highest-risk file keeps the first one encountered on ties, and is
    None when every score is zero.
    """
    total = len(results)
    safe = 0
    total_risk = 0.0
    highest_file: str | None = None
    highest_score = 0.0

    for file_name, analysis in results.items():
        if analysis.safe:
            safe += 1
        total_risk += analysis.risk_score
        if analysis.risk_score > highest_score:
            highest_score = analysis.risk_score
            highest_file = file_name

    return BatchSummary(
        total=total,
        safe=safe,
        unsafe=total - safe,
        average_risk_score=round(total_risk / total, 1) if total else 0.0,
        highest_risk_file=highest_file,
        highest_risk_score=highest_score,
    )


# Global instance for lazy loading
_analyzer_instance: RiskAnalyzer | None = None


def get_risk_analyzer() -> RiskAnalyzer:
    """Get the global risk analyzer instance."""
    global _analyzer_instance
    if _analyzer_instance is None:
        _analyzer_instance = RiskAnalyzer()
    return _analyzer_instance
