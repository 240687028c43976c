"""Pytest configuration and fixtures."""
import pytest

from modgraph.graph.model import Binding, Module


@pytest.fixture
def hcl_parser():
    """Tree-sitter HCL parser; skips the test when the grammar is unavailable."""
    from modgraph.terraform.parser import HCLParser

    try:
        return HCLParser()
    except RuntimeError as e:
        pytest.skip(f"tree-sitter HCL grammar not available: {e}")


@pytest.fixture
def ecs_modules():
    """networking <- {security, iam} <- ecs."""
    return [
        Module("networking", outputs={"vpc_id", "private_subnet_ids"}),
        Module("security", inputs={"vpc_id"}, outputs={"alb_sg_id"}),
        Module("iam", inputs={"vpc_id"}, outputs={"task_role_arn"}),
        Module("ecs", inputs={"vpc_id", "alb_sg_id", "task_role_arn"}),
    ]


@pytest.fixture
def ecs_bindings():
    return [
        Binding("security", "networking", "vpc_id", "vpc_id"),
        Binding("iam", "networking", "vpc_id", "vpc_id"),
        Binding("ecs", "security", "alb_sg_id", "alb_sg_id"),
        Binding("ecs", "iam", "task_role_arn", "task_role_arn"),
    ]
