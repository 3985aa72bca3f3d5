"""Execution order of transform module files."""

import re
from collections.abc import Iterable, Sequence

from ..constants import UNPREFIXED_ORDER

_NUMERIC_PREFIX_RE = re.compile(r"^\d+")


def numeric_prefix(file_name: str) -> float:
    """Leading integer of a file name, or UNPREFIXED_ORDER when there is none."""
    match = _NUMERIC_PREFIX_RE.match(file_name)
    return int(match.group()) if match else UNPREFIXED_ORDER


def order_module_files(
    available: Iterable[str], order: Sequence[str] | None = None
) -> list[str]:
    """Decide the order in which module files run.

    With an explicit ``order``, listed files come first in list order (names
    not on disk are ignored, repeats keep the first position) and every other
    file follows in lexicographic order. Without one, files sort by leading
    numeric prefix, then by name.
    """
    files = list(available)

    if order:
        present = set(files)
        ordered = list(dict.fromkeys(name for name in order if name in present))
        listed = set(order)
        remaining = sorted(name for name in files if name not in listed)
        return ordered + remaining

    return sorted(files, key=lambda name: (numeric_prefix(name), name))
