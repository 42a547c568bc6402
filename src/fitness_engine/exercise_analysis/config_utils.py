import copy
import json
import os
from typing import Any, Dict, Optional

_PACKAGE_DIR = os.path.dirname(os.path.dirname(__file__))


def load_tracker_config(config_path: str = None) -> Dict[str, Any]:
    """Load tracker thresholds from JSON file."""
    if config_path is None:
        config_path = os.path.join(os.path.dirname(__file__), "tracker_config.json")
    with open(config_path, "r") as f:
        return json.load(f)


def load_normative_data(data_path: str = None) -> Dict[str, Any]:
    """Load the versioned normative dataset from JSON file."""
    if data_path is None:
        data_path = os.path.join(_PACKAGE_DIR, "scoring", "normative_data.json")
    with open(data_path, "r") as f:
        return json.load(f)


def load_test_catalog(catalog_path: str = None) -> Dict[str, Any]:
    if catalog_path is None:
        catalog_path = os.path.join(_PACKAGE_DIR, "scoring", "test_catalog.json")
    with open(catalog_path, "r") as f:
        return json.load(f)


def merge_config(base: Dict[str, Any], overrides: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Return a deep copy of base with overrides merged in key by key."""
    merged = copy.deepcopy(base)
    if not overrides:
        return merged
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged
