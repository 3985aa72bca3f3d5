"""Pre-execution risk analysis for transform modules."""

from .batch_reporter import BatchReporter
from .models import BatchSummary, SecurityAnalysis
from .risk_analyzer import RiskAnalyzer, get_risk_analyzer, summarize
from .risk_patterns import (
    ALL_RISK_PATTERNS,
    PatternCategory,
    RiskPattern,
    Severity,
    get_pattern_categories,
    get_patterns_by_category,
    get_patterns_by_severity,
)

__all__ = [
    "ALL_RISK_PATTERNS",
    "BatchReporter",
    "BatchSummary",
    "PatternCategory",
    "RiskAnalyzer",
    "RiskPattern",
    "SecurityAnalysis",
    "Severity",
    "get_pattern_categories",
    "get_patterns_by_category",
    "get_patterns_by_severity",
    "get_risk_analyzer",
    "summarize",
]
