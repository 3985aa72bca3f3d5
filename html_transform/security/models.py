"""Pydantic models for transform risk analysis results."""

from __future__ import annotations

from pydantic import BaseModel, Field


class SecurityAnalysis(BaseModel):
    """Verdict of the risk gate for one transform module's source text.

    Attributes:
        safe: Whether the module may be loaded.
        risk_score: Aggregate danger estimate on a 0-10 scale, rounded to
            one decimal place.
        warnings: Descriptions of every matched pattern, in catalog order,
            followed by the structure warning if any.
        blocked_patterns: The subset of warnings from high or critical
            severity patterns. Any entry here makes the module unsafe.
        structure_valid: Whether an export and a transform function
            declaration were both recognized.
        content_hash: SHA-256 hex digest of the analyzed text, for audit
            trails and caller-side idempotence checks. Empty for synthetic
            failure records.
    """

    safe: bool
    risk_score: float = Field(ge=0, le=10)
    warnings: list[str] = Field(default_factory=list)
    blocked_patterns: list[str] = Field(default_factory=list)
    structure_valid: bool = True
    content_hash: str = ""

    @classmethod
    def failed(cls, reason: str) -> SecurityAnalysis:
        """Worst-case record for a file that could not be analyzed."""
        return cls(
            safe=False,
            risk_score=10,
            warnings=[f"Failed to analyze: {reason}"],
            blocked_patterns=["Analysis failed"],
            structure_valid=False,
            content_hash="",
        )


class BatchSummary(BaseModel):
    """Summary statistics over a batch of analyzed transform modules."""

    total: int = 0
    safe: int = 0
    unsafe: int = 0
    average_risk_score: float = 0.0
    highest_risk_file: str | None = None
    highest_risk_score: float = 0.0
