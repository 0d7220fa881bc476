"""Configuration loading for the search core."""

import json
import os
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..search.facets import FACET_NAMES

DEFAULT_CONFIG_PATH = Path("icore.config.yaml")
EXAMPLE_CONFIG_PATH = Path("config/icore.config.example.yaml")

SEARCH_API_KEY_ENV = "ICORE_SEARCH_API_KEY"
STORAGE_SAS_TOKEN_ENV = "ICORE_STORAGE_SAS_TOKEN"

BASE_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "search": {
        "service_name": None,
        "api_key": None,
        "api_version": "2020-06-30",
        "endpoint": None,
        "timeout_seconds": 30,
    },
    "storage": {
        "account_url": None,
        "sas_token": None,
        "container": "data",
        "timeout_seconds": 30,
    },
    "facets": {
        "forced": {},
        "strict": False,
        "facet_list_path": None,
        "tag_list_path": None,
    },
}

# Facet list file keys -> facet names used for strict validation
FACET_LIST_VOCABULARIES = {
    "makerCategories": "maker_categories",
    "occupationTypes": "job_types",
}


def _merge_defaults(config: Dict[str, Any]) -> Dict[str, Any]:
    """Fill every known section with built-in defaults."""
    merged = deepcopy(config)
    for section, defaults in BASE_DEFAULTS.items():
        user_section = merged.get(section) or {}
        if not isinstance(user_section, dict):
            raise ValueError(f"Config section '{section}' must be a dictionary")
        merged[section] = {**deepcopy(defaults), **user_section}
    return merged


def _apply_environment(config: Dict[str, Any]) -> None:
    """Secrets left out of the file may come from the environment."""
    if not config["search"].get("api_key"):
        config["search"]["api_key"] = os.environ.get(SEARCH_API_KEY_ENV)
    if not config["storage"].get("sas_token"):
        config["storage"]["sas_token"] = os.environ.get(STORAGE_SAS_TOKEN_ENV)


def normalize_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate a raw config dict and apply defaults.

    Args:
        config: Parsed YAML

    Returns:
        Normalized config (a new dict)

    Raises:
        ValueError: If the structure is invalid
    """
    if not isinstance(config, dict):
        raise ValueError("Config must be a dictionary")
    if "version" not in config:
        raise ValueError("Config must have 'version' field")

    normalized = _merge_defaults(config)
    _apply_environment(normalized)

    forced = normalized["facets"].get("forced") or {}
    if not isinstance(forced, dict):
        raise ValueError("Config 'facets.forced' must be a dictionary")
    unknown = sorted(set(forced) - set(FACET_NAMES))
    if unknown:
        raise ValueError(f"Config 'facets.forced' has unknown facet(s): {', '.join(unknown)}")
    normalized["facets"]["forced"] = {name: str(value) for name, value in forced.items()}
    normalized["facets"]["strict"] = bool(normalized["facets"].get("strict"))

    return normalized


def load_config(path: Path | None = None) -> Dict[str, Any]:
    """
    Load and normalize configuration from YAML.

    Args:
        path: Optional path to config file. Defaults to icore.config.yaml

    Returns:
        Normalized configuration dictionary

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If config structure is invalid
    """
    cfg_path = path or DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}
    return normalize_config(config)


def require_setting(config: Dict[str, Any], section: str, key: str) -> Any:
    """Fetch a setting that has no usable default."""
    value = (config.get(section) or {}).get(key)
    if value in (None, ""):
        raise ValueError(f"Config '{section}.{key}' is required")
    return value


def load_reference_list(path: Path | str) -> Dict[str, Any]:
    """
    Load a static JSON reference list (facet list, tag list).

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is not a JSON object
    """
    list_path = Path(path)
    if not list_path.exists():
        raise FileNotFoundError(f"Reference list not found: {list_path}")
    with list_path.open("r", encoding="utf-8-sig") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Reference list {list_path} must be a JSON object")
    return data


def facet_vocabularies(facet_list: Dict[str, Any]) -> Dict[str, List[str]]:
    """
    Extract allowed facet identifiers from a facet list document.

    The document maps "makerCategories"/"occupationTypes" to lists of
    {"ID": ..., "Label": ..., "Description": ...} entries (key case varies).
    """
    vocabularies: Dict[str, List[str]] = {}
    for list_key, facet_name in FACET_LIST_VOCABULARIES.items():
        entries = _get_case_insensitive(facet_list, list_key)
        if not isinstance(entries, list):
            continue
        ids = []
        for entry in entries:
            if isinstance(entry, dict):
                entry_id = _get_case_insensitive(entry, "id")
                if entry_id is not None:
                    ids.append(str(entry_id))
        vocabularies[facet_name] = ids
    return vocabularies


def _get_case_insensitive(mapping: Dict[str, Any], key: str) -> Optional[Any]:
    lowered = key.lower()
    for candidate, value in mapping.items():
        if str(candidate).lower() == lowered:
            return value
    return None
