"""HCL block extraction using tree-sitter.

Extracts module calls, variables and outputs from Terraform files with precise
line numbers.

HCL AST Structure:
    config_file
    └── body
        └── block
            ├── identifier: "module" | "variable" | "output" | ...
            ├── string_lit: first label (module name, variable name, resource type)
            ├── string_lit: second label (resource name only)
            ├── block_start
            ├── body: { attributes, nested blocks }
            └── block_end
"""

import re
from typing import Any

# module.NAME, module.NAME.OUTPUT, module.NAME[0].OUTPUT, module.NAME["key"].OUTPUT
MODULE_REFERENCE = re.compile(
    r'\bmodule\.([A-Za-z_][\w-]*)(?:\[[^\]]*\])?(?:\.([A-Za-z_][\w-]*))?'
)


def _text(node: Any) -> str:
    return node.text.decode("utf-8", errors="ignore")


def extract_hcl_blocks(node: Any, top_level_only: bool = True) -> list[dict]:
    """Extract HCL blocks from a tree-sitter AST.

    Args:
        node: tree-sitter AST node (usually ``tree.root_node``)
        top_level_only: Skip blocks nested inside other blocks

    Returns:
        List of block dicts with identifier, labels, line, column and the
        block's body node (None for empty blocks)
    """
    blocks = []

    if node is None:
        return blocks

    if node.type == "block":
        # Skip block_start, block_end, body and comment nodes - just get identifier and labels
        children = [c for c in node.children if c.type not in ("block_start", "block_end", "body", "comment")]
        body = next((c for c in node.children if c.type == "body"), None)

        identifier = _text(children[0]) if children else None
        labels = [_text(c).strip('"') for c in children[1:]]

        blocks.append({
            "identifier": identifier,
            "labels": labels,
            "line": node.start_point[0] + 1,
            "column": node.start_point[1],
            "body": body,
        })

        if top_level_only:
            return blocks

    for child in node.children:
        blocks.extend(extract_hcl_blocks(child, top_level_only))

    return blocks


def extract_hcl_attributes(node: Any) -> dict[str, str]:
    """Extract attributes from an HCL block body.

    Args:
        node: tree-sitter body node

    Returns:
        Dictionary of attribute name -> raw expression text
    """
    attributes = {}

    if node is None or node.type != "body":
        return attributes

    for child in node.children:
        if child.type != "attribute":
            continue

        # attribute node structure: identifier "=" expression
        attr_name = None
        attr_value = None
        for subchild in child.children:
            if subchild.type == "identifier" and attr_name is None:
                attr_name = _text(subchild)
            elif subchild.type not in ("=", "comment") and attr_name is not None:
                attr_value = _text(subchild)

        if attr_name and attr_value is not None:
            attributes[attr_name] = attr_value

    return attributes


def extract_module_calls(tree, file_path: str) -> list[dict]:
    """Extract ``module "<name>" { ... }`` blocks.

    Returns:
        List of dicts with module_name, source, attributes, line, file_path
    """
    calls = []
    for block in extract_hcl_blocks(tree.root_node):
        if block["identifier"] != "module" or not block["labels"]:
            continue

        attributes = extract_hcl_attributes(block["body"])
        calls.append({
            "module_name": block["labels"][0],
            "source": unquote(attributes.get("source", "")) or None,
            "attributes": attributes,
            "line": block["line"],
            "file_path": file_path,
        })

    return calls


def extract_variables(tree, file_path: str) -> list[dict]:
    """Extract Terraform variable declarations."""
    return [
        {"variable_name": block["labels"][0], "line": block["line"], "file_path": file_path}
        for block in extract_hcl_blocks(tree.root_node)
        if block["identifier"] == "variable" and block["labels"]
    ]


def extract_outputs(tree, file_path: str) -> list[dict]:
    """Extract Terraform output declarations."""
    return [
        {"output_name": block["labels"][0], "line": block["line"], "file_path": file_path}
        for block in extract_hcl_blocks(tree.root_node)
        if block["identifier"] == "output" and block["labels"]
    ]


def extract_module_references(expression: str) -> list[tuple[str, str]]:
    """Find ``module.X.Y`` references in an expression.

    Handles modern (``module.x.y``), legacy (``${module.x.y}``) and indexed
    (``module.x[0].y``) forms.

    Returns:
        Ordered, de-duplicated (module_name, output_name) pairs; output_name
        is empty for whole-module references such as ``depends_on`` entries
    """
    refs: list[tuple[str, str]] = []
    for match in MODULE_REFERENCE.finditer(expression):
        ref = (match.group(1), match.group(2) or "")
        if ref not in refs:
            refs.append(ref)
    return refs


def unquote(value: str) -> str:
    """Strip surrounding whitespace and double quotes from a literal."""
    return value.strip().strip('"')
