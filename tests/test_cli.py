"""End-to-end tests for the html-transform command line."""

import json

import pytest

from html_transform.cli import build_parser, main
from html_transform.config import resolve_options
from html_transform.logging_config import summarize_security_log
from html_transform.transformer import Transformer


class TestParser:

    def test_run_requires_transforms(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["run", "-i", "x.html"])

    def test_run_flags_default_to_unset(self):
        args = build_parser().parse_args(["run", "-t", "transforms"])
        assert args.dry_run is None
        assert args.skip_security_check is None

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "usage:" in capsys.readouterr().out


class TestRunCommand:
    """The run subcommand."""

    def test_writes_outputs_preserving_structure(self, transforms_dir):
        assert main(["run", "-t", str(transforms_dir)]) == 0

        out = transforms_dir / "out"
        index = (out / "index.html").read_text(encoding="utf-8")
        post = (out / "blog" / "post.html").read_text(encoding="utf-8")
        assert "Updated" in index
        assert "Original" not in index
        assert "Updated" in post

    def test_dry_run_writes_nothing(self, transforms_dir):
        assert main(["run", "-t", str(transforms_dir), "--dry-run"]) == 0
        assert not (transforms_dir / "out").exists()

    def test_cli_output_directory(self, transforms_dir, tmp_path):
        dist = tmp_path / "dist"
        assert main(["run", "-t", str(transforms_dir), "-o", str(dist), "--no-format"]) == 0
        content = (dist / "index.html").read_text(encoding="utf-8")
        assert "<title>Updated</title>" in content

    def test_prints_without_output_directory(self, transforms_dir, capsys):
        (transforms_dir / "config.yaml").write_text("input: pages/index.html\n", encoding="utf-8")
        assert main(["run", "-t", str(transforms_dir)]) == 0
        out = capsys.readouterr().out
        assert "=== " in out
        assert "Updated" in out

    def test_rejected_transform_fails_run(self, transforms_dir, eval_source):
        (transforms_dir / "02-evil.py").write_text(eval_source, encoding="utf-8")
        assert main(["run", "-t", str(transforms_dir)]) == 1
        assert not (transforms_dir / "out").exists()

    def test_skip_security_check(self, transforms_dir, eval_source):
        (transforms_dir / "02-evil.py").write_text(eval_source, encoding="utf-8")
        assert main(["run", "-t", str(transforms_dir), "--skip-security-check"]) == 0
        index = (transforms_dir / "out" / "index.html").read_text(encoding="utf-8")
        assert "Injected" in index

    def test_missing_config_fails(self, tmp_path):
        assert main(["run", "-t", str(tmp_path)]) == 1

    def test_log_file_records_decisions(self, transforms_dir, tmp_path):
        log_file = tmp_path / "run.log"
        assert main(["run", "-t", str(transforms_dir), "--log-file", str(log_file)]) == 0

        stats = summarize_security_log(str(log_file))
        assert stats["cleared"] == 1
        assert stats["rejected"] == 0


class TestTransformer:
    """Per-file driver used by the run command."""

    @pytest.mark.asyncio
    async def test_transforms_loaded_once(self, transforms_dir):
        options = resolve_options(transforms=str(transforms_dir))
        transformer = Transformer(options)

        first = await transformer.prepare()
        second = await transformer.prepare()
        assert first is second

        results = [await transformer.transform(path) for path in options.input_files]
        assert all("Updated" in html for html in results)

    @pytest.mark.asyncio
    async def test_dry_run_returns_unformatted(self, transforms_dir):
        options = resolve_options(transforms=str(transforms_dir), dry_run=True)
        result = await Transformer(options).transform(options.input_files[0])
        assert "<title>Updated</title>" in result
        assert "\n" not in result


class TestAuditCommand:
    """The audit subcommand."""

    def test_clean_directory(self, transforms_dir, capsys):
        assert main(["audit", str(transforms_dir)]) == 0
        out = capsys.readouterr().out
        assert "01-update-title.py: SAFE" in out

    def test_unsafe_directory(self, transforms_dir, eval_source, capsys):
        (transforms_dir / "02-evil.py").write_text(eval_source, encoding="utf-8")
        assert main(["audit", str(transforms_dir)]) == 1
        out = capsys.readouterr().out
        assert "02-evil.py: UNSAFE (risk 10.0/10)" in out
        assert "Unsafe: 1" in out

    def test_json_output(self, transforms_dir, eval_source, capsys):
        (transforms_dir / "02-evil.py").write_text(eval_source, encoding="utf-8")
        main(["audit", str(transforms_dir), "--json"])
        report = json.loads(capsys.readouterr().out)
        assert report["summary"]["total"] == 2
        assert report["summary"]["highest_risk_file"] == "02-evil.py"
        assert report["files"]["01-update-title.py"]["safe"] is True

    def test_missing_directory(self, tmp_path):
        assert main(["audit", str(tmp_path / "missing")]) == 1


class TestLogSummaryCommand:

    def test_summary_output(self, tmp_path, capsys):
        log_file = tmp_path / "security.log"
        entries = [
            {"event": "security_decision", "decision": "rejected", "file": "evil.py"},
            {"event": "security_decision", "decision": "cleared", "file": "ok.py"},
            {"event": "path_violation", "reason": "blocked_pattern"},
        ]
        log_file.write_text("\n".join(json.dumps(e) for e in entries), encoding="utf-8")

        assert main(["log-summary", str(log_file)]) == 0
        out = capsys.readouterr().out
        assert "Rejected: 1" in out
        assert "Cleared: 1" in out
        assert "evil.py" in out
        assert "blocked_pattern: 1" in out

    def test_missing_log(self, tmp_path):
        assert main(["log-summary", str(tmp_path / "missing.log")]) == 1
