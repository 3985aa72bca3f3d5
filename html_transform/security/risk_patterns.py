"""
Risk pattern catalog for lexical analysis of Python transform modules.

Transform modules are operator-supplied Python files that run in-process with
full interpreter privileges. Before one is imported, its source text is
scanned against the fixed catalog below. Each pattern carries:

- A compiled regular expression matched against the raw source text
- A human-readable description used in warnings and rejection messages
- A severity tier (LOW, MEDIUM, HIGH, CRITICAL)
- A risk-point weight feeding the 0-10 risk score
- A category grouping related capabilities

HIGH and CRITICAL matches block a module outright, independent of the score.
Several entries share a description when they detect the same capability
through different spellings (``import x`` versus ``from x import y``); each
still counts and saturates on its own.

The catalog is matched lexically. It does not parse code and is trivially
bypassed by obfuscation; it is an advisory gate, not a sandbox.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


class Severity(str, Enum):
    """Severity tiers for risk patterns."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def blocks(self) -> bool:
        """Whether a single match of this tier fails the gate."""
        return self in (Severity.CRITICAL, Severity.HIGH)


class PatternCategory(str, Enum):
    """Capability categories covered by the catalog."""

    PROCESS_EXECUTION = "Process Execution"
    DYNAMIC_CODE = "Dynamic Code Evaluation"
    FILESYSTEM = "Filesystem Access"
    NETWORK = "Network Access"
    PROCESS_STATE = "Process State"
    DESERIALIZATION = "Insecure Deserialization"
    INTROSPECTION = "Interpreter Introspection"


@dataclass(frozen=True)
class RiskPattern:
    """A single lexical risk rule.

    Attributes:
        matcher: Compiled regex counted against the module source.
        description: Short human-readable name of the construct.
        severity: Severity tier; HIGH and CRITICAL block the module.
        risk_points: Weight added to the score per occurrence, saturating
            at twice this value.
        category: Capability category.
    """

    matcher: re.Pattern
    description: str
    severity: Severity
    risk_points: int
    category: PatternCategory

    def count(self, source: str) -> int:
        """Count non-overlapping occurrences in ``source``."""
        return sum(1 for _ in self.matcher.finditer(source))


def _import_of(*modules: str) -> str:
    """Regex matching ``import m`` or ``from m import ...`` at line start."""
    names = "|".join(re.escape(m) for m in modules)
    return rf"(?m)^\s*(?:import\s+(?:{names})\b(?!\.)|from\s+(?:{names})\s+import\b)"


# ---------------------------------------------------------------------------
# A. Process Execution
# ---------------------------------------------------------------------------

PROCESS_EXECUTION_PATTERNS: list[RiskPattern] = [
    RiskPattern(
        matcher=re.compile(r"(?m)^\s*import\s+subprocess\b"),
        description="subprocess module import",
        severity=Severity.CRITICAL,
        risk_points=10,
        category=PatternCategory.PROCESS_EXECUTION,
    ),
    RiskPattern(
        matcher=re.compile(r"(?m)^\s*from\s+subprocess\s+import\b"),
        description="subprocess module import",
        severity=Severity.CRITICAL,
        risk_points=10,
        category=PatternCategory.PROCESS_EXECUTION,
    ),
    RiskPattern(
        matcher=re.compile(r"\bos\.system\s*\("),
        description="os.system() call",
        severity=Severity.CRITICAL,
        risk_points=10,
        category=PatternCategory.PROCESS_EXECUTION,
    ),
    RiskPattern(
        matcher=re.compile(r"\bos\.popen\s*\("),
        description="os.popen() call",
        severity=Severity.CRITICAL,
        risk_points=10,
        category=PatternCategory.PROCESS_EXECUTION,
    ),
    RiskPattern(
        matcher=re.compile(r"\bos\.(?:exec|spawn)\w*\s*\("),
        description="os.exec*()/os.spawn*() call",
        severity=Severity.CRITICAL,
        risk_points=10,
        category=PatternCategory.PROCESS_EXECUTION,
    ),
    RiskPattern(
        matcher=re.compile(r"\bPopen\s*\("),
        description="Popen() process spawn",
        severity=Severity.CRITICAL,
        risk_points=10,
        category=PatternCategory.PROCESS_EXECUTION,
    ),
    RiskPattern(
        matcher=re.compile(r"(?m)^\s*from\s+os\s+import\b[^\n]*\b(?:system|popen|exec\w*|spawn\w*)\b"),
        description="os process function import",
        severity=Severity.CRITICAL,
        risk_points=10,
        category=PatternCategory.PROCESS_EXECUTION,
    ),
    RiskPattern(
        # Aliasing os hides os.system() and friends from the call patterns
        matcher=re.compile(r"(?m)^\s*import\s+os\s+as\s+\w+"),
        description="aliased os module import",
        severity=Severity.HIGH,
        risk_points=8,
        category=PatternCategory.PROCESS_EXECUTION,
    ),
    RiskPattern(
        matcher=re.compile(r"\bcreate_subprocess_(?:shell|exec)\s*\("),
        description="asyncio subprocess spawn",
        severity=Severity.CRITICAL,
        risk_points=10,
        category=PatternCategory.PROCESS_EXECUTION,
    ),
    RiskPattern(
        matcher=re.compile(r"\basyncio\.subprocess\b"),
        description="asyncio.subprocess module access",
        severity=Severity.CRITICAL,
        risk_points=10,
        category=PatternCategory.PROCESS_EXECUTION,
    ),
    RiskPattern(
        matcher=re.compile(_import_of("pty")),
        description="pty module import",
        severity=Severity.CRITICAL,
        risk_points=10,
        category=PatternCategory.PROCESS_EXECUTION,
    ),
]


# ---------------------------------------------------------------------------
# B. Dynamic Code Evaluation
# ---------------------------------------------------------------------------

DYNAMIC_CODE_PATTERNS: list[RiskPattern] = [
    RiskPattern(
        # Lookbehind skips ast.literal_eval and method calls named eval
        matcher=re.compile(r"(?<![\w.])eval\s*\("),
        description="eval() function call",
        severity=Severity.CRITICAL,
        risk_points=10,
        category=PatternCategory.DYNAMIC_CODE,
    ),
    RiskPattern(
        matcher=re.compile(r"(?<![\w.])exec\s*\("),
        description="exec() function call",
        severity=Severity.CRITICAL,
        risk_points=10,
        category=PatternCategory.DYNAMIC_CODE,
    ),
    RiskPattern(
        # Builtin only; re.compile() and friends are attribute calls
        matcher=re.compile(r"(?<![\w.])compile\s*\("),
        description="compile() builtin call",
        severity=Severity.CRITICAL,
        risk_points=10,
        category=PatternCategory.DYNAMIC_CODE,
    ),
    RiskPattern(
        matcher=re.compile(r"\b__import__\s*\("),
        description="Dynamic __import__() call",
        severity=Severity.HIGH,
        risk_points=7,
        category=PatternCategory.DYNAMIC_CODE,
    ),
    RiskPattern(
        matcher=re.compile(r"\bimportlib\.import_module\s*\("),
        description="Dynamic importlib.import_module() call",
        severity=Severity.MEDIUM,
        risk_points=5,
        category=PatternCategory.DYNAMIC_CODE,
    ),
    RiskPattern(
        matcher=re.compile(_import_of("ctypes")),
        description="ctypes module import",
        severity=Severity.HIGH,
        risk_points=8,
        category=PatternCategory.DYNAMIC_CODE,
    ),
]


# ---------------------------------------------------------------------------
# C. Filesystem Access
# ---------------------------------------------------------------------------

FILESYSTEM_PATTERNS: list[RiskPattern] = [
    RiskPattern(
        matcher=re.compile(r"(?m)^\s*import\s+shutil\b"),
        description="shutil module import",
        severity=Severity.HIGH,
        risk_points=8,
        category=PatternCategory.FILESYSTEM,
    ),
    RiskPattern(
        matcher=re.compile(r"(?m)^\s*from\s+shutil\s+import\b"),
        description="shutil module import",
        severity=Severity.HIGH,
        risk_points=8,
        category=PatternCategory.FILESYSTEM,
    ),
    RiskPattern(
        matcher=re.compile(r"(?<![\w.])open\s*\("),
        description="open() file access",
        severity=Severity.HIGH,
        risk_points=7,
        category=PatternCategory.FILESYSTEM,
    ),
    RiskPattern(
        # Path.open() and other attribute spellings
        matcher=re.compile(r"\.open\s*\("),
        description=".open() method call",
        severity=Severity.HIGH,
        risk_points=7,
        category=PatternCategory.FILESYSTEM,
    ),
    RiskPattern(
        matcher=re.compile(r"\.write_(?:text|bytes)\s*\("),
        description="write_text()/write_bytes() call",
        severity=Severity.HIGH,
        risk_points=8,
        category=PatternCategory.FILESYSTEM,
    ),
    RiskPattern(
        matcher=re.compile(r"\.read_(?:text|bytes)\s*\("),
        description="read_text()/read_bytes() call",
        severity=Severity.HIGH,
        risk_points=7,
        category=PatternCategory.FILESYSTEM,
    ),
    RiskPattern(
        matcher=re.compile(r"\.unlink\s*\("),
        description="unlink() function call",
        severity=Severity.HIGH,
        risk_points=8,
        category=PatternCategory.FILESYSTEM,
    ),
    RiskPattern(
        matcher=re.compile(r"\bos\.remove\s*\("),
        description="os.remove() call",
        severity=Severity.HIGH,
        risk_points=8,
        category=PatternCategory.FILESYSTEM,
    ),
    RiskPattern(
        matcher=re.compile(r"\.rmdir\s*\("),
        description="rmdir() function call",
        severity=Severity.HIGH,
        risk_points=8,
        category=PatternCategory.FILESYSTEM,
    ),
    RiskPattern(
        matcher=re.compile(r"\.(?:mkdir|makedirs)\s*\("),
        description="mkdir() function call",
        severity=Severity.MEDIUM,
        risk_points=6,
        category=PatternCategory.FILESYSTEM,
    ),
    RiskPattern(
        matcher=re.compile(r"(?m)^\s*import\s+os\b(?!\.)"),
        description="os module import",
        severity=Severity.MEDIUM,
        risk_points=6,
        category=PatternCategory.FILESYSTEM,
    ),
    RiskPattern(
        matcher=re.compile(r"(?m)^\s*from\s+os\s+import\b"),
        description="os module import",
        severity=Severity.MEDIUM,
        risk_points=6,
        category=PatternCategory.FILESYSTEM,
    ),
    RiskPattern(
        matcher=re.compile(
            r"(?m)^\s*(?:import\s+(?:os\.path|pathlib)\b|from\s+(?:os\.path|pathlib)\s+import\b)"
        ),
        description="path module import",
        severity=Severity.LOW,
        risk_points=2,
        category=PatternCategory.FILESYSTEM,
    ),
]


# ---------------------------------------------------------------------------
# D. Network Access
# ---------------------------------------------------------------------------

NETWORK_PATTERNS: list[RiskPattern] = [
    RiskPattern(
        matcher=re.compile(_import_of("socket")),
        description="socket module import",
        severity=Severity.MEDIUM,
        risk_points=6,
        category=PatternCategory.NETWORK,
    ),
    RiskPattern(
        matcher=re.compile(
            r"(?m)^\s*(?:import\s+(?:requests|httpx|aiohttp|urllib3|urllib\.request|http\.client)\b"
            r"|from\s+(?:requests|httpx|aiohttp|urllib3|urllib\.request|http\.client|http)\s+import\b)"
        ),
        description="HTTP client module import",
        severity=Severity.MEDIUM,
        risk_points=6,
        category=PatternCategory.NETWORK,
    ),
    RiskPattern(
        matcher=re.compile(r"\burlopen\s*\("),
        description="urlopen() network call",
        severity=Severity.MEDIUM,
        risk_points=5,
        category=PatternCategory.NETWORK,
    ),
    RiskPattern(
        matcher=re.compile(r"\b(?:requests|httpx)\.(?:get|post|put|patch|delete|head|request)\s*\("),
        description="HTTP request call",
        severity=Severity.MEDIUM,
        risk_points=5,
        category=PatternCategory.NETWORK,
    ),
]


# ---------------------------------------------------------------------------
# E. Process State
# ---------------------------------------------------------------------------

PROCESS_STATE_PATTERNS: list[RiskPattern] = [
    RiskPattern(
        matcher=re.compile(r"\bos\.environ\b"),
        description="os.environ access",
        severity=Severity.MEDIUM,
        risk_points=5,
        category=PatternCategory.PROCESS_STATE,
    ),
    RiskPattern(
        matcher=re.compile(r"\bos\.getenv\s*\("),
        description="os.getenv() call",
        severity=Severity.MEDIUM,
        risk_points=5,
        category=PatternCategory.PROCESS_STATE,
    ),
    RiskPattern(
        matcher=re.compile(r"\bsys\.exit\s*\("),
        description="sys.exit() call",
        severity=Severity.MEDIUM,
        risk_points=6,
        category=PatternCategory.PROCESS_STATE,
    ),
    RiskPattern(
        matcher=re.compile(r"\bos\.kill\s*\("),
        description="os.kill() call",
        severity=Severity.HIGH,
        risk_points=8,
        category=PatternCategory.PROCESS_STATE,
    ),
    RiskPattern(
        matcher=re.compile(r"\bos\.chdir\s*\("),
        description="os.chdir() call",
        severity=Severity.MEDIUM,
        risk_points=6,
        category=PatternCategory.PROCESS_STATE,
    ),
]


# ---------------------------------------------------------------------------
# F. Insecure Deserialization
# ---------------------------------------------------------------------------

DESERIALIZATION_PATTERNS: list[RiskPattern] = [
    RiskPattern(
        matcher=re.compile(_import_of("pickle", "marshal", "shelve")),
        description="pickle/marshal module import",
        severity=Severity.HIGH,
        risk_points=8,
        category=PatternCategory.DESERIALIZATION,
    ),
]


# ---------------------------------------------------------------------------
# G. Interpreter Introspection
# ---------------------------------------------------------------------------

INTROSPECTION_PATTERNS: list[RiskPattern] = [
    RiskPattern(
        matcher=re.compile(r"\b__builtins__\b"),
        description="__builtins__ access",
        severity=Severity.MEDIUM,
        risk_points=4,
        category=PatternCategory.INTROSPECTION,
    ),
    RiskPattern(
        matcher=re.compile(r"\bglobals\s*\(\s*\)"),
        description="globals() access",
        severity=Severity.LOW,
        risk_points=2,
        category=PatternCategory.INTROSPECTION,
    ),
    RiskPattern(
        matcher=re.compile(r"\bsys\.modules\b"),
        description="sys.modules access",
        severity=Severity.LOW,
        risk_points=2,
        category=PatternCategory.INTROSPECTION,
    ),
]


# ---------------------------------------------------------------------------
# Aggregated catalog and lookup helpers
# ---------------------------------------------------------------------------

ALL_RISK_PATTERNS: tuple[RiskPattern, ...] = (
    *PROCESS_EXECUTION_PATTERNS,
    *DYNAMIC_CODE_PATTERNS,
    *FILESYSTEM_PATTERNS,
    *NETWORK_PATTERNS,
    *PROCESS_STATE_PATTERNS,
    *DESERIALIZATION_PATTERNS,
    *INTROSPECTION_PATTERNS,
)

PATTERN_CATEGORIES: dict[PatternCategory, tuple[RiskPattern, ...]] = {
    category: tuple(p for p in ALL_RISK_PATTERNS if p.category == category)
    for category in PatternCategory
}


def get_patterns_by_severity(severity: Severity) -> list[RiskPattern]:
    """Get all patterns of a given severity tier."""
    return [p for p in ALL_RISK_PATTERNS if p.severity == severity]


def get_patterns_by_category(category: PatternCategory) -> list[RiskPattern]:
    """Get all patterns in a capability category."""
    return list(PATTERN_CATEGORIES.get(category, ()))


def get_pattern_categories() -> dict[PatternCategory, tuple[RiskPattern, ...]]:
    """Get the catalog grouped by capability category."""
    return dict(PATTERN_CATEGORIES)


def get_blocking_descriptions() -> list[str]:
    """Distinct descriptions of every pattern that blocks on a single match."""
    seen: dict[str, None] = {}
    for pattern in ALL_RISK_PATTERNS:
        if pattern.severity.blocks:
            seen.setdefault(pattern.description, None)
    return list(seen)


# ---------------------------------------------------------------------------
# Structural shape of a transform module
# ---------------------------------------------------------------------------

# Module-level export: TRANSFORM = ... (optionally annotated) or __all__ = ...
EXPORT_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"(?m)^TRANSFORM\s*(?::[^=\n]*)?="),
    re.compile(r"(?m)^__all__\s*(?::[^=\n]*)?="),
)

# Transform function: def/async def, lambda or callable assignment,
# keyword argument, or mapping entry
TRANSFORM_DECLARATION_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"(?m)^\s*(?:async\s+)?def\s+transform\s*\("),
    re.compile(r"\btransform\s*=\s*(?:lambda\b|[A-Za-z_])"),
    re.compile(r"[\"']transform[\"']\s*:\s*(?:lambda\b|[A-Za-z_])"),
)
