"""
Per-file transformation driver.

Transform modules are discovered and loaded once per run; each input
document is then parsed, transformed, serialized and formatted.
"""

import logging
import os
from pathlib import Path

from .config import ResolvedOptions
from .core.validation import validate_required
from .document import format_html, load_html, serialize
from .security.risk_analyzer import RiskAnalyzer
from .transforms.models import ModuleDescriptor
from .transforms.pipeline import TransformPipeline

logger = logging.getLogger(__name__)


class Transformer:
    """Applies a transforms directory to HTML documents."""

    def __init__(self, options: ResolvedOptions, analyzer: RiskAnalyzer | None = None):
        self.options = options
        self.pipeline = TransformPipeline(
            skip_security_check=options.skip_security_check,
            analyzer=analyzer,
        )
        self._descriptors: list[ModuleDescriptor] | None = None

    async def prepare(self) -> list[ModuleDescriptor]:
        """Discover and load the transform modules, at most once."""
        if self._descriptors is None:
            transforms_dir = validate_required(self.options.transforms_dir, "Transforms directory")
            self._descriptors = await self.pipeline.load(
                transforms_dir, self.options.transform_order
            )
            logger.debug(
                f"Loaded {len(self._descriptors)} transforms: "
                f"{[d.unit.name for d in self._descriptors]}"
            )
        return self._descriptors

    async def transform(self, input_file: str | os.PathLike[str]) -> str:
        """Transform one document and return the resulting markup.

        In dry-run mode the serialized document is returned unformatted.
        """
        input_path = validate_required(input_file, "Input file")
        descriptors = await self.prepare()

        document = load_html(input_path)
        template_document = load_html(self.options.reference) if self.options.reference else None

        await self.pipeline.apply(
            document,
            [d.unit for d in descriptors],
            template_document=template_document,
            config=self.options.config.data,
        )
        result = serialize(document)

        if self.options.dry_run:
            logger.info(f"Dry run mode - {Path(input_path).name} will not be written")
            return result

        return format_html(
            result,
            no_format=self.options.no_format,
            formatter_config=self.options.formatter_config,
        )
