"""Tree-sitter HCL parser for Terraform files."""

from pathlib import Path
from typing import Any

from ..graph.errors import ConfigurationError
from ..utils.logging import logger


class HCLParser:
    """Parse Terraform/HCL files into tree-sitter trees.

    Zero fallbacks: a missing grammar or a file tree-sitter cannot parse is a
    hard failure, never a silent partial read.
    """

    def __init__(self):
        """Load the tree-sitter HCL grammar."""
        try:
            from tree_sitter_language_pack import get_parser

            self.parser = get_parser("hcl")
        except Exception as e:
            raise RuntimeError(
                f"Failed to load tree-sitter grammar for HCL: {e}\n"
                "Terraform loading requires the tree-sitter HCL grammar.\n"
                "Please try: pip install --force-reinstall tree-sitter-language-pack"
            ) from e

    def parse_text(self, content: str, file_path: str = "<string>") -> dict[str, Any]:
        """Parse HCL source text.

        Returns:
            Dict with 'type' ('tree_sitter'), 'tree', 'content' and 'file_path'

        Raises:
            ConfigurationError: The source contains syntax errors
        """
        tree = self.parser.parse(content.encode("utf-8"))

        if tree.root_node.has_error:
            line = _first_error_line(tree.root_node)
            raise ConfigurationError("HCL syntax error", file=file_path, line=line)

        return {
            "type": "tree_sitter",
            "tree": tree,
            "content": content,
            "file_path": file_path,
        }

    def parse_file(self, file_path: str | Path) -> dict[str, Any]:
        """Parse a single .tf file."""
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"Terraform file not found: {file_path}")

        content = path.read_text(encoding="utf-8")
        logger.debug(f"Parsing {path} ({len(content)} bytes)")
        return self.parse_text(content, str(path))


def _first_error_line(node: Any) -> int | None:
    """1-indexed line of the first ERROR or missing node."""
    if node.type == "ERROR" or node.is_missing:
        return node.start_point[0] + 1
    for child in node.children:
        if child.has_error:
            return _first_error_line(child)
    return None
