"""Terraform module composition loading."""

from .loader import TerraformModuleLoader
from .parser import HCLParser

__all__ = [
    "HCLParser",
    "TerraformModuleLoader",
]
