"""Centralized constants for modgraph.

Single source of truth for output paths and the Terraform vocabulary the
loaders rely on.
"""

from pathlib import Path

# ============================================================================
# OUTPUT DIRECTORIES
# ============================================================================

# Primary output directory for all modgraph artifacts
MG_DIR = Path("./.modgraph")

# Log files
ERROR_LOG_FILE = MG_DIR / "error.log"

# Output subdirectories
RAW_DIR = MG_DIR / "raw"
CONFIG_FILE_NAME = "config.json"

# ============================================================================
# TERRAFORM
# ============================================================================

TERRAFORM_EXTENSIONS = [".tf"]

# Module block arguments that configure the call itself rather than
# feeding one of the module's variables
MODULE_META_ARGUMENTS = frozenset({
    "source",
    "version",
    "providers",
    "depends_on",
    "count",
    "for_each",
})
