"""Tests for HTML loading, serialization and formatting."""

import json
import logging

import pytest

from html_transform.core.exceptions import MissingResourceError, PathViolationError
from html_transform.document import format_html, load_html, parse_html, serialize


class TestLoadAndSerialize:

    def test_round_trip_preserves_doctype(self, sample_html):
        assert serialize(parse_html(sample_html)).startswith("<!DOCTYPE html>")

    def test_load_html(self, tmp_path, sample_html):
        page = tmp_path / "index.html"
        page.write_text(sample_html, encoding="utf-8")
        assert load_html(page).title.string == "Original"

    def test_load_missing(self, tmp_path):
        with pytest.raises(MissingResourceError):
            load_html(tmp_path / "missing.html")

    def test_load_disallowed_extension(self, tmp_path):
        page = tmp_path / "page.php"
        page.write_text("<p></p>", encoding="utf-8")
        with pytest.raises(PathViolationError):
            load_html(page)


class TestFormatHtml:

    def test_no_format_returns_input(self):
        markup = "<div><p>x</p></div>"
        assert format_html(markup, no_format=True) == markup

    def test_default_indent(self):
        result = format_html("<div><p>x</p></div>")
        assert "\n  <p>" in result

    def test_indent_from_config(self, tmp_path):
        config = tmp_path / "fmt.json"
        config.write_text(json.dumps({"indent": 4}), encoding="utf-8")
        result = format_html("<div><p>x</p></div>", formatter_config=config)
        assert "\n    <p>" in result

    def test_yaml_config(self, tmp_path):
        config = tmp_path / "fmt.yaml"
        config.write_text("indent: 3\n", encoding="utf-8")
        result = format_html("<div><p>x</p></div>", formatter_config=config)
        assert "\n   <p>" in result

    def test_broken_config_returns_markup_unchanged(self, tmp_path, caplog):
        config = tmp_path / "fmt.json"
        config.write_text("{broken", encoding="utf-8")
        markup = "<div><p>x</p></div>"
        with caplog.at_level(logging.WARNING):
            assert format_html(markup, formatter_config=config) == markup
        assert "Formatting failed" in caplog.text
