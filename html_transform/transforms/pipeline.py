"""TransformPipeline: loads transform modules in order and applies them to a document.

Transforms run strictly one after another. Later transforms may depend on
the document state left by earlier ones, so application is never
parallelized; a coroutine transform is awaited to completion before the next
unit starts.
"""

import inspect
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any

from ..constants import MODULE_EXTENSIONS
from ..core.exceptions import ModuleLoadError, StructuralInvalidError, TransformExecutionError
from ..core.file_loader import list_files
from ..core.path_guard import validate_directory, validate_file
from ..security.risk_analyzer import RiskAnalyzer
from .models import ModuleDescriptor, TransformContext, TransformUnit
from .module_loader import load_transform_module
from .ordering import order_module_files
from .utils import TRANSFORM_UTILS, TransformUtils

if TYPE_CHECKING:
    from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)


async def apply_transforms(
    document: "BeautifulSoup",
    units: Sequence[TransformUnit],
    template_document: "BeautifulSoup | None" = None,
    config: dict[str, Any] | None = None,
    utils: TransformUtils = TRANSFORM_UTILS,
) -> None:
    """Apply units to ``document`` in list order.

    Raises:
        TransformExecutionError: On the first unit that raises; the remaining
            units are not applied
    """
    context = TransformContext(
        document=document,
        utils=utils,
        template_document=template_document,
        config=dict(config or {}),
    )

    for unit in units:
        logger.debug(f"Applying transform {unit.name}")
        try:
            result = unit.transform(context)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(
                f'Error applying transform "{unit.name}": {e}',
                extra={"event": "transform_failed", "unit": unit.name, "error": str(e)},
            )
            raise TransformExecutionError(
                f'Transform "{unit.name}" failed: {e}', unit_name=unit.name
            ) from e


class TransformPipeline:
    """Ordered, gated loading and sequential application of transforms."""

    def __init__(
        self,
        skip_security_check: bool = False,
        analyzer: RiskAnalyzer | None = None,
        utils: TransformUtils = TRANSFORM_UTILS,
    ):
        """
        Initialize the pipeline.

        Args:
            skip_security_check: Load modules without the risk gate
            analyzer: Risk analyzer; defaults to the global instance
            utils: DOM helpers exposed to transforms
        """
        self.skip_security_check = skip_security_check
        self.analyzer = analyzer
        self.utils = utils

    def discover(
        self, transforms_dir: str | Path, order: Sequence[str] | None = None
    ) -> list[Path]:
        """List the module files of a transforms directory in execution order.

        Every returned path has passed the path guard, confined to the
        transforms directory.
        """
        directory = validate_directory(transforms_dir)
        names = order_module_files(list_files(directory, MODULE_EXTENSIONS), order)
        return [validate_file(name, base_path=directory) for name in names]

    async def load_modules(self, module_paths: Sequence[str | Path]) -> list[ModuleDescriptor]:
        """Load modules in the given order.

        Security rejections abort loading. Modules that fail to import or do
        not export a transform are logged and skipped.

        Raises:
            SecurityRejectionError: If any module fails the risk gate
        """
        descriptors: list[ModuleDescriptor] = []

        for module_path in module_paths:
            path = Path(module_path)
            try:
                unit = await load_transform_module(
                    path,
                    skip_security_check=self.skip_security_check,
                    analyzer=self.analyzer,
                )
            except (ModuleLoadError, StructuralInvalidError) as e:
                logger.warning(f"Skipping transform {path.name}: {e}")
                continue

            descriptors.append(
                ModuleDescriptor(file_name=path.name, resolved_path=path.resolve(), unit=unit)
            )

        return descriptors

    async def load(
        self, transforms_dir: str | Path, order: Sequence[str] | None = None
    ) -> list[ModuleDescriptor]:
        """Discover the modules of a transforms directory and load them in order."""
        return await self.load_modules(self.discover(transforms_dir, order))

    async def apply(
        self,
        document: "BeautifulSoup",
        units: Sequence[TransformUnit],
        template_document: "BeautifulSoup | None" = None,
        config: dict[str, Any] | None = None,
    ) -> None:
        """Apply already-loaded units to a document."""
        await apply_transforms(
            document,
            units,
            template_document=template_document,
            config=config,
            utils=self.utils,
        )

    async def run(
        self,
        document: "BeautifulSoup",
        module_paths: Sequence[str | Path],
        template_document: "BeautifulSoup | None" = None,
        config: dict[str, Any] | None = None,
    ) -> list[ModuleDescriptor]:
        """Load modules in the given order and apply them to ``document``.

        Returns:
            Descriptors of the modules that were applied
        """
        descriptors = await self.load_modules(module_paths)
        logger.debug(
            f"Loaded {len(descriptors)} transforms: {[d.unit.name for d in descriptors]}"
        )
        await self.apply(
            document,
            [d.unit for d in descriptors],
            template_document=template_document,
            config=config,
        )
        return descriptors
