"""
Directory-wide audit of transform modules.

Runs the risk analyzer over every module in a transforms directory and
renders the per-file verdicts with summary statistics, for the ``audit``
CLI command.
"""

import logging
from pathlib import Path
from typing import Any

from ..core.path_guard import validate_directory
from .models import BatchSummary, SecurityAnalysis
from .risk_analyzer import RiskAnalyzer, get_risk_analyzer, summarize

logger = logging.getLogger(__name__)


class BatchReporter:
    """Aggregates risk analysis results across a directory of modules."""

    def __init__(self, analyzer: RiskAnalyzer | None = None):
        self.analyzer = analyzer or get_risk_analyzer()

    async def audit(
        self, directory: str | Path
    ) -> tuple[dict[str, SecurityAnalysis], BatchSummary]:
        """Analyze a directory and summarize the results.

        Args:
            directory: Transforms directory; validated by the path guard

        Returns:
            Tuple of (per-file results, summary)
        """
        resolved = validate_directory(directory)
        results = await self.analyzer.batch_analyze(resolved)
        summary = summarize(results)

        logger.info(
            f"Audited {summary.total} transform modules in {resolved}: "
            f"{summary.safe} safe, {summary.unsafe} unsafe"
        )
        return results, summary

    @staticmethod
    def to_dict(
        results: dict[str, SecurityAnalysis], summary: BatchSummary
    ) -> dict[str, Any]:
        """Machine-readable form of an audit."""
        return {
            "summary": summary.model_dump(),
            "files": {name: analysis.model_dump() for name, analysis in results.items()},
        }

    @staticmethod
    def render(results: dict[str, SecurityAnalysis], summary: BatchSummary) -> str:
        """Human-readable audit report."""
        lines = ["# Transform Security Audit\n"]

        if not results:
            lines.append("No transform modules found.")
            return "\n".join(lines)

        for name, analysis in results.items():
            verdict = "SAFE" if analysis.safe else "UNSAFE"
            lines.append(f"## {name}: {verdict} (risk {analysis.risk_score}/10)")
            for warning in analysis.warnings:
                marker = "!" if warning in analysis.blocked_patterns else "-"
                lines.append(f"  {marker} {warning}")
            if analysis.content_hash:
                lines.append(f"  sha256: {analysis.content_hash}")
            lines.append("")

        lines.append("=== Summary ===")
        lines.append(f"Total: {summary.total}")
        lines.append(f"Safe: {summary.safe}")
        lines.append(f"Unsafe: {summary.unsafe}")
        lines.append(f"Average risk score: {summary.average_risk_score}")
        if summary.highest_risk_file:
            lines.append(
                f"Highest risk: {summary.highest_risk_file} ({summary.highest_risk_score}/10)"
            )

        return "\n".join(lines)
