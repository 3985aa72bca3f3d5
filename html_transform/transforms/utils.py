"""DOM helpers handed to every transform through its context."""

import copy

from bs4 import Tag


class TransformUtils:
    """Small element-manipulation helpers shared by transforms."""

    @staticmethod
    def copy_attributes(source: Tag, target: Tag) -> None:
        """Copy every attribute of ``source`` onto ``target``, overwriting."""
        for name, value in source.attrs.items():
            target[name] = list(value) if isinstance(value, list) else value

    @staticmethod
    def move_children(source: Tag, target: Tag) -> None:
        """Move all child nodes of ``source`` to the end of ``target``."""
        while source.contents:
            # append() detaches the node from its current parent
            target.append(source.contents[0])

    @staticmethod
    def replace_element(old: Tag, new: Tag) -> None:
        """Replace ``old`` in its parent with a deep copy of ``new``.

        Detached elements are left alone.
        """
        if old.parent is not None:
            old.replace_with(copy.copy(new))


TRANSFORM_UTILS = TransformUtils()
