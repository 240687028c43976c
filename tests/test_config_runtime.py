"""Tests for runtime configuration loading."""

import json

from modgraph.config_runtime import DEFAULTS, load_runtime_config


def _write_config(root, data):
    config_dir = root / ".modgraph"
    config_dir.mkdir()
    (config_dir / "config.json").write_text(json.dumps(data) if not isinstance(data, str) else data)


def test_defaults_without_config(tmp_path):
    assert load_runtime_config(str(tmp_path)) == DEFAULTS


def test_defaults_not_mutated(tmp_path, monkeypatch):
    monkeypatch.setenv("MODGRAPH_REPORT_MAX_ROWS", "5")
    load_runtime_config(str(tmp_path))
    assert DEFAULTS["report"]["max_rows"] == 50


def test_file_overrides_defaults(tmp_path):
    _write_config(tmp_path, {"report": {"max_rows": 10}, "terraform": {"extensions": [".tf", ".tofu"]}})

    cfg = load_runtime_config(str(tmp_path))

    assert cfg["report"]["max_rows"] == 10
    assert cfg["terraform"]["extensions"] == [".tf", ".tofu"]
    assert cfg["paths"] == DEFAULTS["paths"]


def test_file_values_of_wrong_type_ignored(tmp_path):
    _write_config(tmp_path, {"report": {"max_rows": "many", "unknown_key": 1}})
    assert load_runtime_config(str(tmp_path))["report"]["max_rows"] == 50


def test_invalid_json_falls_back_to_defaults(tmp_path):
    _write_config(tmp_path, "{not json")
    assert load_runtime_config(str(tmp_path)) == DEFAULTS


def test_environment_overrides_file(tmp_path, monkeypatch):
    _write_config(tmp_path, {"report": {"max_rows": 10}})
    monkeypatch.setenv("MODGRAPH_REPORT_MAX_ROWS", "3")
    monkeypatch.setenv("MODGRAPH_TERRAFORM_EXTENSIONS", ".tf, .tofu")
    monkeypatch.setenv("MODGRAPH_PATHS_ORDER_JSON", "out/order.json")

    cfg = load_runtime_config(str(tmp_path))

    assert cfg["report"]["max_rows"] == 3
    assert cfg["terraform"]["extensions"] == [".tf", ".tofu"]
    assert cfg["paths"]["order_json"] == "out/order.json"


def test_invalid_environment_value_keeps_previous(tmp_path, monkeypatch):
    monkeypatch.setenv("MODGRAPH_REPORT_MAX_ROWS", "lots")
    assert load_runtime_config(str(tmp_path))["report"]["max_rows"] == 50
