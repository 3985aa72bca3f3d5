"""Tests for logging configuration and security log analysis."""

import json
import logging

import pytest

from html_transform.core.exceptions import ResourceError
from html_transform.logging_config import (
    SecurityEventFormatter,
    configure_logging,
    format_security_summary,
    get_security_logger,
    summarize_security_log,
)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="html_transform.security",
        level=logging.ERROR,
        pathname=__file__,
        lineno=1,
        msg="Security validation failed for %s",
        args=("evil.py",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestSecurityEventFormatter:

    def test_base_fields(self):
        entry = json.loads(SecurityEventFormatter().format(_record()))
        assert entry["level"] == "ERROR"
        assert entry["logger"] == "html_transform.security"
        assert entry["message"] == "Security validation failed for evil.py"
        assert "timestamp" in entry
        assert "event" not in entry

    def test_extra_fields(self):
        record = _record(
            event="security_decision",
            decision="rejected",
            file="evil.py",
            risk_score=10.0,
            pattern=["eval() function call (1 occurrence)"],
        )
        entry = json.loads(SecurityEventFormatter().format(record))
        assert entry["event"] == "security_decision"
        assert entry["decision"] == "rejected"
        assert entry["file"] == "evil.py"
        assert entry["risk_score"] == 10.0
        assert entry["pattern"] == ["eval() function call (1 occurrence)"]


class TestConfigureLogging:

    def test_console_only(self):
        logger = configure_logging(level="DEBUG")
        assert logger.name == "html_transform"
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert logger.propagate is False

    def test_reconfiguring_replaces_handlers(self, tmp_path):
        configure_logging()
        logger = configure_logging(log_file=str(tmp_path / "run.log"))
        assert len(logger.handlers) == 2
        assert isinstance(logger.handlers[1].formatter, SecurityEventFormatter)

    def test_json_console(self):
        logger = configure_logging(json_format=True)
        assert isinstance(logger.handlers[0].formatter, SecurityEventFormatter)

    def test_security_events_reach_log_file(self, tmp_path):
        log_file = tmp_path / "run.log"
        configure_logging(log_file=str(log_file))
        get_security_logger().warning(
            "Security check skipped for a.py",
            extra={"event": "security_decision", "decision": "skipped", "file": "a.py"},
        )

        entry = json.loads(log_file.read_text(encoding="utf-8").splitlines()[0])
        assert entry["decision"] == "skipped"
        assert summarize_security_log(str(log_file))["skipped"] == 1


class TestSummarizeSecurityLog:

    def test_counts(self, tmp_path):
        log_file = tmp_path / "security.log"
        lines = [
            json.dumps({"event": "security_decision", "decision": "rejected", "file": "a.py"}),
            json.dumps({"event": "security_decision", "decision": "rejected", "file": "b.py"}),
            json.dumps({"event": "security_decision", "decision": "cleared", "file": "c.py"}),
            json.dumps({"event": "path_violation", "reason": "outside_base"}),
            json.dumps({"event": "path_violation", "reason": "outside_base"}),
            json.dumps({"event": "transform_failed", "unit": "x"}),
            "not json at all",
            json.dumps(["unexpected"]),
        ]
        log_file.write_text("\n".join(lines), encoding="utf-8")

        stats = summarize_security_log(str(log_file))
        assert stats["total_decisions"] == 3
        assert stats["rejected"] == 2
        assert stats["cleared"] == 1
        assert stats["skipped"] == 0
        assert stats["rejected_files"] == ["a.py", "b.py"]
        assert stats["path_violations"] == 2
        assert stats["violation_reasons"] == {"outside_base": 2}
        assert stats["transform_failures"] == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(ResourceError):
            summarize_security_log(str(tmp_path / "missing.log"))

    def test_format_summary(self):
        stats = {
            "total_decisions": 1,
            "rejected": 1,
            "cleared": 0,
            "skipped": 0,
            "path_violations": 0,
            "transform_failures": 0,
            "rejected_files": ["evil.py"],
            "violation_reasons": {},
        }
        text = format_security_summary(stats)
        assert text.startswith("=== Security Log Summary ===")
        assert "=== Rejected Files ===\nevil.py" in text
        assert "Violation Reasons" not in text
