"""Tests for the YAML/JSON manifest loader."""

import json
from pathlib import Path

import pytest

from modgraph.graph.errors import ConfigurationError, UnknownModuleReference
from modgraph.graph.model import Binding
from modgraph.graph.resolver import resolve
from modgraph.manifest import load_manifest, load_manifest_graph, parse_manifest

MANIFEST_FIXTURES = Path(__file__).parent / "fixtures" / "manifests"


def test_load_fixture_manifest():
    modules, bindings = load_manifest(MANIFEST_FIXTURES / "ecs_fargate.yml")

    assert [m.name for m in modules] == ["networking", "security", "iam", "ecs"]
    ecs = modules[3]
    assert ecs.body == {"cpu": 256, "memory": 512}
    assert "alb_sg_id" in ecs.inputs
    assert Binding("iam", "networking") in bindings
    assert Binding("ecs", "iam", "execution_role_arn", "task_execution_role_arn") in bindings


def test_fixture_manifest_resolves():
    modules, bindings = load_manifest(MANIFEST_FIXTURES / "ecs_fargate.yml")
    assert resolve(modules, bindings) == ["networking", "iam", "security", "ecs"]


def test_load_manifest_graph():
    graph = load_manifest_graph(MANIFEST_FIXTURES / "ecs_fargate.yml")
    assert graph.dependencies("ecs") == {"networking", "security", "iam"}


def test_json_manifest(tmp_path):
    path = tmp_path / "stack.json"
    path.write_text(json.dumps({
        "modules": ["a", {"name": "b", "outputs": ["id"]}],
        "bindings": [{"consumer": "a", "producer": "b", "input": "b_id", "output": "id"}],
    }))

    modules, bindings = load_manifest(path)

    assert [m.name for m in modules] == ["a", "b"]
    assert bindings == [Binding("a", "b", "b_id", "id")]


def test_empty_document_is_empty_composition(tmp_path):
    path = tmp_path / "empty.yml"
    path.write_text("")
    assert load_manifest(path) == ([], [])


def test_empty_interface_lists(tmp_path):
    path = tmp_path / "stack.yml"
    path.write_text("modules:\n  - name: a\n    inputs:\n    outputs:\n")

    modules, _ = load_manifest(path)

    assert modules[0].inputs == frozenset()
    assert modules[0].outputs == frozenset()


def test_missing_manifest(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_manifest(tmp_path / "nope.yml")


def test_invalid_yaml(tmp_path):
    path = tmp_path / "bad.yml"
    path.write_text("modules: [a, b\n")
    with pytest.raises(ConfigurationError) as exc_info:
        load_manifest(path)
    assert str(path) in str(exc_info.value)


@pytest.mark.parametrize("data", [
    ["not", "a", "mapping"],
    {"modules": "networking"},
    {"modules": [{"inputs": ["x"]}]},
    {"modules": [{"name": "a", "inputs": "x"}]},
    {"modules": ["a"], "bindings": [{"producer": "a"}]},
    {"modules": ["a"], "bindings": ["a => b"]},
])
def test_structural_errors(data):
    with pytest.raises(ConfigurationError):
        parse_manifest(data)


@pytest.mark.parametrize("text, expected", [
    ("ecs -> iam", Binding("ecs", "iam")),
    ("ecs.vpc_id -> networking.vpc_id", Binding("ecs", "networking", "vpc_id", "vpc_id")),
    ("  cicd->ecs.cluster_name ", Binding("cicd", "ecs", "", "cluster_name")),
    ("my-app.db-url -> rds-db.endpoint", Binding("my-app", "rds-db", "db-url", "endpoint")),
])
def test_short_binding_forms(text, expected):
    _, bindings = parse_manifest({"modules": [], "bindings": [text]})
    assert bindings == [expected]


def test_dangling_binding_surfaces_on_resolve():
    modules, bindings = parse_manifest({"modules": ["ecs"], "bindings": ["ecs -> networking"]})
    with pytest.raises(UnknownModuleReference):
        resolve(modules, bindings)
