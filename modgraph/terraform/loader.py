"""Terraform module composition loader.

Turns the ``module`` blocks of a root configuration into Modules and
Bindings:

- Each ``module "<name>"`` call is a Module. Its declared inputs and outputs
  come from the ``variable``/``output`` blocks of a local ``source``
  directory (or the copy ``terraform init`` installed for remote sources);
  unresolved sources fall back to the call's argument names.
- Each ``module.<producer>.<output>`` reference inside an argument is a
  Binding to that argument.
- Each ``module.<producer>`` listed in ``depends_on`` is an ordering-only
  Binding.

Usage:
    loader = TerraformModuleLoader("infra/")
    modules, bindings = loader.load()
    order = resolve(modules, bindings)
"""

import json
from pathlib import Path
from typing import Any

from ..graph.model import Binding, DependencyGraph, Module
from ..utils.constants import MODULE_META_ARGUMENTS, TERRAFORM_EXTENSIONS
from ..utils.logging import logger
from . import extractor
from .parser import HCLParser


class TerraformModuleLoader:
    """Load a Terraform root configuration into modules and bindings."""

    def __init__(self, root: str | Path, extensions: list[str] | None = None,
                 parser: HCLParser | None = None):
        """Initialize loader for a root configuration directory.

        Args:
            root: Directory holding the root module's .tf files
            extensions: File suffixes to read (default: .tf)
            parser: Shared HCLParser (created on demand)
        """
        self.root = Path(root)
        if not self.root.is_dir():
            raise FileNotFoundError(f"Terraform root not found: {root}")

        self.extensions = extensions or TERRAFORM_EXTENSIONS
        self.parser = parser or HCLParser()
        self._interfaces: dict[Path, tuple[frozenset[str], frozenset[str]] | None] = {}
        self._installed: dict[str, str] | None = None
        self.stats = {
            "files_processed": 0,
            "modules": 0,
            "bindings": 0,
            "local_sources": 0,
            "installed_sources": 0,
            "unresolved_sources": 0,
        }

    def load(self) -> tuple[list[Module], list[Binding]]:
        """Read every module call in the root directory.

        Returns:
            (modules, bindings), both in file/declaration order
        """
        modules: list[Module] = []
        bindings: list[Binding] = []

        for path in self._terraform_files(self.root):
            parsed = self.parser.parse_file(path)
            self.stats["files_processed"] += 1

            for call in extractor.extract_module_calls(parsed["tree"], str(path)):
                modules.append(self._build_module(call))
                bindings.extend(self._build_bindings(call))

        self.stats["modules"] = len(modules)
        self.stats["bindings"] = len(bindings)

        logger.info(
            f"Loaded Terraform composition from {self.root}: "
            f"{self.stats['modules']} modules, {self.stats['bindings']} bindings, "
            f"{self.stats['files_processed']} files"
        )
        return modules, bindings

    def load_graph(self) -> DependencyGraph:
        """Load and build the dependency graph in one step."""
        modules, bindings = self.load()
        return DependencyGraph(modules, bindings)

    def _terraform_files(self, directory: Path) -> list[Path]:
        """Terraform files directly inside ``directory``, sorted by name."""
        return sorted(
            path for path in directory.iterdir()
            if path.is_file()
            and any(path.name.endswith(ext) for ext in self.extensions)
        )

    def _build_module(self, call: dict[str, Any]) -> Module:
        name = call["module_name"]
        arguments = {k for k in call["attributes"] if k not in MODULE_META_ARGUMENTS}

        interface = self._module_interface(name, call["source"])
        if interface is None:
            self.stats["unresolved_sources"] += 1
            inputs, outputs = frozenset(arguments), frozenset()
        else:
            inputs, outputs = interface

        return Module(
            name=name,
            inputs=inputs,
            outputs=outputs,
            body=dict(call["attributes"]),
            source=call["source"],
            file=call["file_path"],
            line=call["line"],
        )

    def _build_bindings(self, call: dict[str, Any]) -> list[Binding]:
        consumer = call["module_name"]
        bindings = []

        for attr_name, expression in call["attributes"].items():
            if attr_name == "source":
                continue

            # Meta-arguments order the call but feed no variable
            input_name = "" if attr_name in MODULE_META_ARGUMENTS else attr_name
            for producer, output in extractor.extract_module_references(expression):
                if attr_name == "depends_on":
                    output = ""
                bindings.append(Binding(
                    consumer=consumer,
                    producer=producer,
                    input=input_name,
                    output=output,
                ))

        return bindings

    def _module_interface(self, name: str, source: str | None) -> tuple[frozenset[str], frozenset[str]] | None:
        """Declared (variables, outputs) of a module call's source.

        Local paths are read directly. Registry and git sources are read from
        the copy ``terraform init`` placed under .terraform/modules, when
        present. Anything else returns None.
        """
        if source and source.startswith(("./", "../")):
            interface = self._read_interface(self.root / source, source)
            if interface is not None:
                self.stats["local_sources"] += 1
            return interface

        installed_dir = self._installed_modules().get(name)
        if installed_dir:
            interface = self._read_interface(self.root / installed_dir, source or name)
            if interface is not None:
                self.stats["installed_sources"] += 1
            return interface

        return None

    def _installed_modules(self) -> dict[str, str]:
        """Module key -> directory from .terraform/modules/modules.json."""
        if self._installed is not None:
            return self._installed

        self._installed = {}
        manifest = self.root / ".terraform" / "modules" / "modules.json"
        if not manifest.exists():
            return self._installed

        try:
            with open(manifest, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Could not read installed module manifest {manifest}: {e}")
            return self._installed

        for entry in data.get("Modules", []):
            # The root module has an empty key; nested calls use dotted keys
            key = entry.get("Key")
            if key and "." not in key and entry.get("Dir"):
                self._installed[key] = entry["Dir"]

        logger.debug(f"Found {len(self._installed)} installed modules in {manifest}")
        return self._installed

    def _read_interface(self, directory: Path, source: str) -> tuple[frozenset[str], frozenset[str]] | None:
        """Collect variable and output names declared in a module directory."""
        directory = directory.resolve()
        if directory in self._interfaces:
            return self._interfaces[directory]

        if not directory.is_dir():
            logger.warning(f"Module source {source} not found under {self.root}; using call arguments")
            self._interfaces[directory] = None
            return None

        variables: set[str] = set()
        outputs: set[str] = set()
        for path in self._terraform_files(directory):
            parsed = self.parser.parse_file(path)
            variables.update(v["variable_name"] for v in extractor.extract_variables(parsed["tree"], str(path)))
            outputs.update(o["output_name"] for o in extractor.extract_outputs(parsed["tree"], str(path)))

        interface = (frozenset(variables), frozenset(outputs))
        self._interfaces[directory] = interface
        logger.debug(f"Module source {source}: {len(variables)} variables, {len(outputs)} outputs")
        return interface
