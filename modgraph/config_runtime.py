"""Runtime configuration for modgraph - centralized configuration management."""

import copy
import json
import os
from pathlib import Path
from typing import Any

from .utils.constants import CONFIG_FILE_NAME, MG_DIR, RAW_DIR, TERRAFORM_EXTENSIONS
from .utils.logging import logger

DEFAULTS = {
    "paths": {
        "order_json": str(RAW_DIR / "apply_order.json"),
        "layers_json": str(RAW_DIR / "apply_layers.json"),
        "impact_json": str(RAW_DIR / "impact.json"),
        "check_json": str(RAW_DIR / "check.json"),
    },
    "terraform": {
        "extensions": list(TERRAFORM_EXTENSIONS),
    },
    "report": {
        "max_rows": 50,
        "max_issue_rows": 20,
    },
}


def load_runtime_config(root: str = ".") -> dict[str, Any]:
    """
    Load runtime configuration from .modgraph/config.json and environment variables.

    Config priority (highest to lowest):
    1. Environment variables (MODGRAPH_<SECTION>_<KEY>)
    2. .modgraph/config.json file under ``root``
    3. Built-in defaults

    Args:
        root: Root directory to look for config file

    Returns:
        Configuration dictionary with merged values
    """
    cfg = copy.deepcopy(DEFAULTS)

    path = Path(root) / MG_DIR.name / CONFIG_FILE_NAME
    try:
        if path.exists():
            with open(path, encoding="utf-8") as f:
                user = json.load(f)

            if isinstance(user, dict):
                for section in cfg:
                    if section in user and isinstance(user[section], dict):
                        for key, value in user[section].items():
                            if key in cfg[section] and isinstance(value, type(cfg[section][key])):
                                cfg[section][key] = value
                            else:
                                logger.warning(f"Ignoring config key {section}.{key} in {path}")
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Could not load config file from {path}: {e}; continuing with defaults")

    for section in cfg:
        for key in cfg[section]:
            env_var = f"MODGRAPH_{section.upper()}_{key.upper()}"
            if env_var not in os.environ:
                continue

            value = os.environ[env_var]
            default_value = cfg[section][key]
            try:
                if isinstance(default_value, int):
                    cfg[section][key] = int(value)
                elif isinstance(default_value, list):
                    cfg[section][key] = [v.strip() for v in value.split(",") if v.strip()]
                else:
                    cfg[section][key] = value
            except ValueError as e:
                logger.warning(
                    f"Invalid value for environment variable {env_var}: '{value}' - {e}; "
                    f"using {default_value!r}"
                )

    return cfg
