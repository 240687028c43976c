"""YAML/JSON manifest loader.

Describes a module composition without any Terraform files:

    modules:
      - name: networking
        outputs: [vpc_id, private_subnet_ids]
      - name: ecs
        inputs: [vpc_id]
        body: {cpu: 256}
    bindings:
      - {producer: networking, consumer: ecs, output: vpc_id, input: vpc_id}
      - "ecs.subnet_ids -> networking.private_subnet_ids"
      - "ecs -> iam"

JSON documents are valid YAML and load the same way.
"""

import re
from pathlib import Path
from typing import Any

import yaml

from .graph.errors import ConfigurationError
from .graph.model import Binding, DependencyGraph, Module
from .utils.logging import logger

# "consumer[.input] -> producer[.output]"
_SHORT_BINDING = re.compile(
    r'^\s*(?P<consumer>[\w-]+)(?:\.(?P<input>[\w-]+))?\s*->\s*(?P<producer>[\w-]+)(?:\.(?P<output>[\w-]+))?\s*$'
)


def load_manifest(path: str | Path) -> tuple[list[Module], list[Binding]]:
    """Read modules and bindings from a manifest file.

    Raises:
        FileNotFoundError: The manifest does not exist
        ConfigurationError: The document is not a valid manifest
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Manifest not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML: {e}", file=str(path)) from e

    modules, bindings = parse_manifest(data, source=str(path))
    logger.info(f"Loaded manifest {path}: {len(modules)} modules, {len(bindings)} bindings")
    return modules, bindings


def load_manifest_graph(path: str | Path) -> DependencyGraph:
    modules, bindings = load_manifest(path)
    return DependencyGraph(modules, bindings)


def parse_manifest(data: Any, source: str | None = None) -> tuple[list[Module], list[Binding]]:
    """Convert an already-loaded manifest document."""
    if not isinstance(data, dict):
        raise ConfigurationError("Manifest must be a mapping with 'modules' and 'bindings'", file=source)

    raw_modules = data.get("modules") or []
    raw_bindings = data.get("bindings") or []
    if not isinstance(raw_modules, list) or not isinstance(raw_bindings, list):
        raise ConfigurationError("'modules' and 'bindings' must be lists", file=source)

    modules = [_parse_module(entry, source) for entry in raw_modules]
    bindings = [_parse_binding(entry, source) for entry in raw_bindings]
    return modules, bindings


def _parse_module(entry: Any, source: str | None) -> Module:
    # Bare names are modules without declared inputs/outputs
    if isinstance(entry, str):
        return Module(name=entry, file=source)

    if not isinstance(entry, dict) or not entry.get("name"):
        raise ConfigurationError(f"Module entry needs a 'name': {entry!r}", file=source)

    for key in ("inputs", "outputs"):
        if not isinstance(entry.get(key) or [], list):
            raise ConfigurationError(f"Module '{entry['name']}': '{key}' must be a list", file=source)

    return Module(
        name=str(entry["name"]),
        inputs=frozenset(str(i) for i in entry.get("inputs") or []),
        outputs=frozenset(str(o) for o in entry.get("outputs") or []),
        body=entry.get("body"),
        source=entry.get("source"),
        file=source,
    )


def _parse_binding(entry: Any, source: str | None) -> Binding:
    if isinstance(entry, str):
        match = _SHORT_BINDING.match(entry)
        if not match:
            raise ConfigurationError(
                f"Cannot parse binding '{entry}' (expected 'consumer.input -> producer.output')",
                file=source,
            )
        return Binding(
            consumer=match["consumer"],
            producer=match["producer"],
            input=match["input"] or "",
            output=match["output"] or "",
        )

    if not isinstance(entry, dict) or not entry.get("producer") or not entry.get("consumer"):
        raise ConfigurationError(f"Binding entry needs 'producer' and 'consumer': {entry!r}", file=source)

    return Binding(
        consumer=str(entry["consumer"]),
        producer=str(entry["producer"]),
        input=str(entry.get("input") or ""),
        output=str(entry.get("output") or ""),
    )
