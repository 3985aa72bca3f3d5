"""HTML document loading, serialization and formatting.

BeautifulSoup is the document-tree collaborator: transforms receive the
parsed soup and mutate it in place.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

import yaml
from bs4 import BeautifulSoup
from bs4.dammit import EntitySubstitution
from bs4.formatter import HTMLFormatter

from .core.file_loader import load_file

logger = logging.getLogger(__name__)

HTML_PARSER = "html.parser"
DEFAULT_INDENT = 2


def parse_html(markup: str) -> BeautifulSoup:
    """Parse markup into a mutable document tree."""
    return BeautifulSoup(markup, HTML_PARSER)


def load_html(file_path: str | os.PathLike[str]) -> BeautifulSoup:
    """Read and parse a path-guarded HTML file."""
    return parse_html(load_file(file_path))


def serialize(document: BeautifulSoup) -> str:
    """Serialize the full document back to markup."""
    return str(document)


def _load_formatter_options(config_path: str | os.PathLike[str]) -> dict[str, Any]:
    content = load_file(config_path)
    if Path(config_path).suffix.lower() in (".yaml", ".yml"):
        options = yaml.safe_load(content)
    else:
        options = json.loads(content)
    return options or {}


def format_html(
    markup: str,
    no_format: bool = False,
    formatter_config: str | os.PathLike[str] | None = None,
) -> str:
    """Pretty-print markup.

    Formatting is cosmetic: any failure is logged and the markup is returned
    unchanged.

    Args:
        markup: Serialized document
        no_format: Return the markup untouched
        formatter_config: Optional JSON or YAML file with formatter options
            (``indent``: spaces per nesting level)
    """
    if no_format:
        return markup

    try:
        options = _load_formatter_options(formatter_config) if formatter_config else {}
        formatter = HTMLFormatter(
            entity_substitution=EntitySubstitution.substitute_xml,
            indent=int(options.get("indent", DEFAULT_INDENT)),
        )
        return parse_html(markup).prettify(formatter=formatter)
    except Exception as e:
        logger.warning(f"Formatting failed, returning unformatted HTML: {e}")
        return markup
