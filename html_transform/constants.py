"""Constants and configuration values for html-transform.

This module centralizes thresholds and limits that are shared between the
risk analyzer, the path guard and the pipeline.
"""

import os

# =============================================================================
# Risk Gate
# =============================================================================

# Risk scores are reported on a 0-10 scale
MAX_RISK_SCORE = 10

# Modules scoring at or above this are unsafe even with no blocked pattern
RISK_THRESHOLD = 7

# Extra points charged when a module lacks an export or transform function
STRUCTURE_PENALTY = 3

# A single pattern never contributes more than this multiple of its points
PATTERN_SATURATION = 2

# Maximum transform source size read for analysis (1MB)
MAX_MODULE_FILE_SIZE = 1 * 1024 * 1024


# =============================================================================
# Path Policy
# =============================================================================

# Maximum number of ".." segments allowed in the literal part of a glob
MAX_GLOB_TRAVERSAL = 3


# =============================================================================
# Transform Modules
# =============================================================================

# File extensions treated as transform modules
MODULE_EXTENSIONS = (".py",)

# Name of the module attribute holding the exported transform
EXPORT_ATTRIBUTE = "TRANSFORM"

# Sort key for module files without a leading numeric prefix; above any real prefix
UNPREFIXED_ORDER = float("inf")


# =============================================================================
# Configuration
# =============================================================================

# Config files looked up in the transforms directory, in priority order
CONFIG_FILE_NAMES = ("config.yaml", "config.yml", "config.json", "config.toml")

# Default log level for the CLI
DEFAULT_LOG_LEVEL = os.environ.get("HTML_TRANSFORM_LOG_LEVEL", "INFO")
