"""Shared utilities for modgraph."""
