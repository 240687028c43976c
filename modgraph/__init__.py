"""modgraph - apply-order resolution for Terraform module compositions."""

__version__ = "0.3.0"
