"""Tests for Terraform module composition loading.

Runs the tree-sitter HCL pipeline against the fixture configurations under
tests/fixtures/terraform:

- ecs_fargate: networking, security, iam, ecr, s3, dynamodb, ecs, cicd
- installed:   registry modules resolved through .terraform/modules
- cyclic:      alpha <-> beta, gamma consuming the cycle
- dangling:    reference to an undeclared module
- broken:      HCL syntax error
"""

from pathlib import Path

import pytest

from modgraph.graph.analyzer import apply_layers, binding_issues
from modgraph.graph.errors import ConfigurationError, CycleDetected, UnknownModuleReference
from modgraph.graph.model import Binding
from modgraph.graph.resolver import resolve, resolve_graph
from modgraph.terraform import extractor
from modgraph.terraform.loader import TerraformModuleLoader

FIXTURE_PATH = Path(__file__).parent / "fixtures" / "terraform"
ECS_FARGATE = FIXTURE_PATH / "ecs_fargate"


class TestModuleReferences:
    """Reference extraction works on raw expression text, no parser needed."""

    @pytest.mark.parametrize("expression, expected", [
        ("module.networking.vpc_id", [("networking", "vpc_id")]),
        ('"${module.ecr.repository_url}:latest"', [("ecr", "repository_url")]),
        ("[module.dynamodb, module.s3]", [("dynamodb", ""), ("s3", "")]),
        ("module.vpc[0].id", [("vpc", "id")]),
        ('module.svc["api"].arn', [("svc", "arn")]),
        ("module.vpc.enabled ? 1 : 0", [("vpc", "enabled")]),
        ("concat(module.a.ids, module.a.ids, module.b.ids)", [("a", "ids"), ("b", "ids")]),
        ("var.module_name", []),
        ('"plain string"', []),
    ])
    def test_extract_module_references(self, expression, expected):
        assert extractor.extract_module_references(expression) == expected

    def test_unquote(self):
        assert extractor.unquote(' "./modules/ecs" ') == "./modules/ecs"


class TestExtractor:
    def test_module_calls(self, hcl_parser):
        parsed = hcl_parser.parse_file(ECS_FARGATE / "main.tf")
        calls = extractor.extract_module_calls(parsed["tree"], str(ECS_FARGATE / "main.tf"))

        names = [c["module_name"] for c in calls]
        assert names == ["networking", "security", "iam", "ecr", "s3", "dynamodb", "ecs", "cicd"]

        ecs = calls[names.index("ecs")]
        assert ecs["source"] == "./modules/ecs"
        assert ecs["attributes"]["vpc_id"] == "module.networking.vpc_id"
        assert ecs["line"] > 0

    def test_locals_and_providers_are_not_module_calls(self, hcl_parser):
        parsed = hcl_parser.parse_file(ECS_FARGATE / "versions.tf")
        assert extractor.extract_module_calls(parsed["tree"], "versions.tf") == []

    def test_variables_and_outputs(self, hcl_parser):
        variables = hcl_parser.parse_file(ECS_FARGATE / "modules" / "security" / "variables.tf")
        outputs = hcl_parser.parse_file(ECS_FARGATE / "modules" / "security" / "outputs.tf")

        assert [v["variable_name"] for v in extractor.extract_variables(variables["tree"], "v.tf")] == [
            "app_name", "vpc_id", "container_port",
        ]
        assert [o["output_name"] for o in extractor.extract_outputs(outputs["tree"], "o.tf")] == [
            "alb_sg_id", "ecs_tasks_sg_id",
        ]

    def test_nested_blocks_skipped_at_top_level(self, hcl_parser):
        parsed = hcl_parser.parse_file(ECS_FARGATE / "modules" / "dynamodb" / "main.tf")

        top_level = extractor.extract_hcl_blocks(parsed["tree"].root_node)
        everything = extractor.extract_hcl_blocks(parsed["tree"].root_node, top_level_only=False)

        assert [b["identifier"] for b in top_level] == ["resource", "locals"]
        assert "attribute" in [b["identifier"] for b in everything]

    def test_syntax_error(self, hcl_parser):
        with pytest.raises(ConfigurationError) as exc_info:
            hcl_parser.parse_file(FIXTURE_PATH / "broken" / "main.tf")
        assert "main.tf" in str(exc_info.value)

    def test_missing_file(self, hcl_parser):
        with pytest.raises(FileNotFoundError):
            hcl_parser.parse_file(FIXTURE_PATH / "nope.tf")


class TestEcsFargateComposition:
    @pytest.fixture
    def loader(self, hcl_parser):
        return TerraformModuleLoader(ECS_FARGATE, parser=hcl_parser)

    def test_modules_take_interface_from_local_source(self, loader):
        modules, _ = loader.load()
        by_name = {m.name: m for m in modules}

        assert set(by_name) == {"networking", "security", "iam", "ecr", "s3", "dynamodb", "ecs", "cicd"}
        assert by_name["networking"].outputs == {"vpc_id", "public_subnet_ids", "private_subnet_ids"}
        assert by_name["networking"].inputs == {"app_name", "vpc_cidr", "azs"}
        assert by_name["ecs"].source == "./modules/ecs"
        assert by_name["ecs"].file.endswith("main.tf")
        assert by_name["ecs"].body["table_name"] == "module.dynamodb.table_name"

    def test_bindings(self, loader):
        _, bindings = loader.load()

        assert Binding("security", "networking", "vpc_id", "vpc_id") in bindings
        assert Binding("ecs", "ecr", "image_url", "repository_url") in bindings
        assert Binding("cicd", "dynamodb", "", "") in bindings
        assert len(bindings) == 18

    def test_stats(self, loader):
        loader.load()
        assert loader.stats["files_processed"] == 4
        assert loader.stats["modules"] == 8
        assert loader.stats["local_sources"] == 8
        assert loader.stats["unresolved_sources"] == 0

    def test_apply_order(self, loader):
        modules, bindings = loader.load()
        assert resolve(modules, bindings) == [
            "dynamodb", "ecr", "iam", "networking", "s3", "security", "ecs", "cicd",
        ]

    def test_apply_layers(self, loader):
        assert apply_layers(loader.load_graph()) == [
            ["dynamodb", "ecr", "networking", "s3"],
            ["iam", "security"],
            ["ecs"],
            ["cicd"],
        ]

    def test_no_binding_issues(self, loader):
        assert binding_issues(loader.load_graph()) == []


class TestInstalledModules:
    def test_registry_module_read_from_terraform_dir(self, hcl_parser):
        loader = TerraformModuleLoader(FIXTURE_PATH / "installed", parser=hcl_parser)
        modules, bindings = loader.load()
        by_name = {m.name: m for m in modules}

        assert by_name["vpc"].inputs == {"name", "cidr", "azs"}
        assert by_name["vpc"].outputs == {"vpc_id", "private_subnets"}
        assert loader.stats["installed_sources"] == 1

        # Not installed: fall back to the call's arguments
        assert by_name["service"].inputs == {"vpc_id", "subnet_ids"}
        assert by_name["service"].outputs == frozenset()
        assert loader.stats["unresolved_sources"] == 1

        # count feeds no variable but still orders the call
        assert Binding("service", "vpc", "", "enabled") in bindings

    def test_undeclared_output_reported(self, hcl_parser):
        graph = TerraformModuleLoader(FIXTURE_PATH / "installed", parser=hcl_parser).load_graph()

        issues = binding_issues(graph)

        assert [(i["kind"], i["name"]) for i in issues] == [("undeclared_output", "enabled")]
        assert resolve_graph(graph) == ["vpc", "service"]


class TestInvalidCompositions:
    def test_cycle(self, hcl_parser):
        graph = TerraformModuleLoader(FIXTURE_PATH / "cyclic", parser=hcl_parser).load_graph()

        with pytest.raises(CycleDetected) as exc_info:
            resolve_graph(graph)

        assert exc_info.value.modules == ["alpha", "beta"]

    def test_dangling_reference(self, hcl_parser):
        loader = TerraformModuleLoader(FIXTURE_PATH / "dangling", parser=hcl_parser)

        with pytest.raises(UnknownModuleReference) as exc_info:
            loader.load_graph()

        assert exc_info.value.module_name == "network"

    def test_missing_root(self, hcl_parser):
        with pytest.raises(FileNotFoundError):
            TerraformModuleLoader(FIXTURE_PATH / "does_not_exist", parser=hcl_parser)
