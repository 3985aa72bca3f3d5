"""Transform modules: loading, ordering and sequential application."""

from .models import ModuleDescriptor, TransformContext, TransformUnit
from .module_loader import extract_transform_unit, load_module, load_transform_module
from .ordering import numeric_prefix, order_module_files
from .pipeline import TransformPipeline, apply_transforms
from .utils import TRANSFORM_UTILS, TransformUtils

__all__ = [
    "ModuleDescriptor",
    "TRANSFORM_UTILS",
    "TransformContext",
    "TransformPipeline",
    "TransformUnit",
    "TransformUtils",
    "apply_transforms",
    "extract_transform_unit",
    "load_module",
    "load_transform_module",
    "numeric_prefix",
    "order_module_files",
]
