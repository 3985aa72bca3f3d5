"""Shared fixtures for html-transform tests."""

import logging
from pathlib import Path

import pytest

CLEAN_TRANSFORM = '''
def transform(context):
    context.document.title.string = "Updated"


TRANSFORM = {"name": "update-title", "transform": transform}
'''

EVAL_TRANSFORM = '''
def transform(context):
    context.document.title.string = eval("'Injected'")


TRANSFORM = {"name": "evil", "transform": transform}
'''

SAMPLE_HTML = (
    "<!DOCTYPE html><html><head><title>Original</title></head>"
    "<body><div id=\"main\"><p>Hello</p></div></body></html>"
)


@pytest.fixture(autouse=True)
def reset_package_logging():
    """Undo configure_logging() so caplog sees package records in every test."""
    yield
    logger = logging.getLogger("html_transform")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def write_module():
    """Write a transform module and return its path."""

    def _write(directory: Path, name: str, source: str) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        path.write_text(source, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def transforms_dir(tmp_path: Path) -> Path:
    """Transforms directory with one clean module and a config file."""
    directory = tmp_path / "transforms"
    directory.mkdir()
    (directory / "01-update-title.py").write_text(CLEAN_TRANSFORM, encoding="utf-8")
    (directory / "config.yaml").write_text(
        "input: pages/**/*.html\noutput: out\n", encoding="utf-8"
    )

    pages = directory / "pages"
    (pages / "blog").mkdir(parents=True)
    (pages / "index.html").write_text(SAMPLE_HTML, encoding="utf-8")
    (pages / "blog" / "post.html").write_text(SAMPLE_HTML, encoding="utf-8")
    return directory


@pytest.fixture
def clean_source() -> str:
    return CLEAN_TRANSFORM


@pytest.fixture
def eval_source() -> str:
    return EVAL_TRANSFORM


@pytest.fixture
def sample_html() -> str:
    return SAMPLE_HTML
