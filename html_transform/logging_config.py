"""
Logging configuration for html-transform.

Console output uses a plain line format; the optional log file receives one
JSON object per record so that security decisions and path violations can be
analyzed after a run.
"""

import json
import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from typing import Any

from .core.exceptions import ResourceError

ROOT_LOGGER = "html_transform"
SECURITY_LOGGER = "html_transform.security"
CONSOLE_FORMAT = "[%(asctime)s] %(name)s %(levelname)s: %(message)s"

_EXTRA_FIELDS = (
    "event",
    "file",
    "risk_score",
    "decision",
    "pattern",
    "path",
    "reason",
    "unit",
    "error",
)


class SecurityEventFormatter(logging.Formatter):
    """JSON formatter for security and transform events."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for field in _EXTRA_FIELDS:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        return json.dumps(log_entry, default=str)


def configure_logging(
    level: str = "INFO",
    log_file: str | None = None,
    json_format: bool = False,
) -> logging.Logger:
    """
    Configure the html_transform logger hierarchy.

    Calling this again replaces the handlers installed by a previous call.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Path to a JSON-lines log file, rotated daily (optional)
        json_format: Emit JSON on the console as well

    Returns:
        The package root logger
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(
        SecurityEventFormatter() if json_format else logging.Formatter(CONSOLE_FORMAT)
    )
    logger.addHandler(console_handler)

    if log_file:
        file_handler = TimedRotatingFileHandler(
            log_file,
            when="D",
            interval=1,
            backupCount=7,
            encoding="utf-8",
        )
        file_handler.setFormatter(SecurityEventFormatter())
        logger.addHandler(file_handler)

    return logger


def get_security_logger() -> logging.Logger:
    """Get the logger that records risk-gate decisions."""
    return logging.getLogger(SECURITY_LOGGER)


def summarize_security_log(log_file: str) -> dict[str, Any]:
    """
    Count security decisions and path violations in a JSON-lines log.

    Lines that are not JSON are ignored.

    Raises:
        ResourceError: If the log file cannot be read
    """
    stats: dict[str, Any] = {
        "total_decisions": 0,
        "rejected": 0,
        "cleared": 0,
        "skipped": 0,
        "path_violations": 0,
        "transform_failures": 0,
        "rejected_files": [],
        "violation_reasons": {},
    }

    try:
        with open(log_file, encoding="utf-8") as f:
            lines = f.readlines()
    except OSError as e:
        raise ResourceError(f"Cannot read log file {log_file}: {e}") from e

    for line in lines:
        try:
            entry = json.loads(line.strip())
        except json.JSONDecodeError:
            continue
        if not isinstance(entry, dict):
            continue

        event = entry.get("event")
        if event == "security_decision":
            stats["total_decisions"] += 1
            decision = entry.get("decision")
            if decision in ("rejected", "cleared", "skipped"):
                stats[decision] += 1
            if decision == "rejected" and entry.get("file"):
                stats["rejected_files"].append(entry["file"])
        elif event == "path_violation":
            stats["path_violations"] += 1
            reason = entry.get("reason", "unknown")
            stats["violation_reasons"][reason] = stats["violation_reasons"].get(reason, 0) + 1
        elif event == "transform_failed":
            stats["transform_failures"] += 1

    return stats


def format_security_summary(stats: dict[str, Any]) -> str:
    """Render statistics from :func:`summarize_security_log`."""
    lines = [
        "=== Security Log Summary ===",
        f"Decisions: {stats['total_decisions']}",
        f"Rejected: {stats['rejected']}",
        f"Cleared: {stats['cleared']}",
        f"Skipped: {stats['skipped']}",
        f"Path violations: {stats['path_violations']}",
        f"Transform failures: {stats['transform_failures']}",
    ]

    if stats["rejected_files"]:
        lines.append("")
        lines.append("=== Rejected Files ===")
        lines.extend(stats["rejected_files"])

    if stats["violation_reasons"]:
        lines.append("")
        lines.append("=== Violation Reasons ===")
        for reason, count in sorted(stats["violation_reasons"].items()):
            lines.append(f"{reason}: {count}")

    return "\n".join(lines)
