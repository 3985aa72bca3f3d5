"""Data types passed between the loader, the pipeline and transform modules."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from bs4 import BeautifulSoup

    from .utils import TransformUtils


@dataclass
class TransformContext:
    """Everything a transform receives when applied.

    Attributes:
        document: The document being transformed. Shared by every unit in
            the run, so each sees the cumulative effect of earlier units.
        template_document: Optional reference document to copy from.
        config: Free-form data from the ``data`` section of the config file.
        utils: DOM helpers for attribute copy, child migration and element
            replacement.
    """

    document: BeautifulSoup
    utils: TransformUtils
    template_document: BeautifulSoup | None = None
    config: dict[str, Any] = field(default_factory=dict)


TransformCallable = Callable[[TransformContext], "None | Awaitable[None]"]


@dataclass
class TransformUnit:
    """A named transform procedure, plain or coroutine function."""

    name: str
    transform: TransformCallable
    description: str | None = None
    order: float | None = None


@dataclass
class ModuleDescriptor:
    """A transform module that passed the gate and loaded for this run."""

    file_name: str
    resolved_path: Path
    unit: TransformUnit
