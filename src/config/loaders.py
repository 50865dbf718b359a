"""
Facility profile file loading.

This module handles:
- Resolving profile paths relative to the project root
- Shell-style ``${VAR:-default}`` expansion before YAML parsing
- Deep-merging an operator's ``<profile>.local.yaml`` over the shared profile
"""

import os
import re
from pathlib import Path

import structlog
import yaml

logger = structlog.get_logger("config.loaders")

# Project root directory (parent of src/)
_PROJ_DIR = Path(__file__).parent.parent.parent.resolve()

# ${VAR}, ${VAR:-default} or ${VAR:=default}
_ENV_VAR_PATTERN = re.compile(r'\$\{([^}:]+)(:-|:=)?([^}]*)?\}')


def _expand_env_vars_with_defaults(text: str) -> str:
    """
    Expand environment variable references in raw profile text.

    ``${VAR:-default}`` and ``${VAR:=default}`` fall back to *default* when VAR is
    unset or empty; a bare ``${VAR}`` that is unset is left untouched so that
    the YAML error points at it. Unbraced ``$NAME`` is left alone: presets use
    it as placeholder syntax.
    """
    def replace_match(match):
        var_name = match.group(1)
        operator = match.group(2)
        default_value = match.group(3) or ""

        env_value = os.environ.get(var_name)
        if operator in (":-", ":="):
            return default_value if not env_value else env_value
        return env_value if env_value is not None else match.group(0)

    return _ENV_VAR_PATTERN.sub(replace_match, text)


def resolve_config_path(path: str) -> str:
    """Absolute path for *path*; relative paths are taken from the project root."""
    if not os.path.isabs(path):
        return os.path.join(_PROJ_DIR, path)
    return path


def load_yaml_with_env_expansion(path: str) -> dict:
    """
    Read a YAML profile, expanding environment variables first.

    Raises:
        FileNotFoundError: If the profile doesn't exist
        yaml.YAMLError: If the expanded text is not valid YAML
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            raw_text = f.read()
    except FileNotFoundError:
        raise FileNotFoundError(f"Facility profile not found at: {path}")

    try:
        data = yaml.safe_load(_expand_env_vars_with_defaults(raw_text))
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Error parsing facility profile {path}: {e}")
    return data if data is not None else {}


def deep_merge_dicts(base: dict, override: dict) -> dict:
    """
    Recursively merge *override* into a copy of *base*.

    Nested mappings merge key by key; lists and scalars in *override* replace
    the base value; an explicit ``None`` removes the key. Neither input is mutated.
    """
    merged = dict(base)
    for key, override_val in override.items():
        if override_val is None:
            merged.pop(key, None)
            continue
        base_val = merged.get(key)
        if isinstance(base_val, dict) and isinstance(override_val, dict):
            merged[key] = deep_merge_dicts(base_val, override_val)
        else:
            merged[key] = override_val
    return merged


def load_yaml_with_local_override(path: str) -> dict:
    """
    Load a facility profile and merge its optional local override.

    For ``config/kjfk.yaml`` the override is ``config/kjfk.local.yaml``. A
    missing override is normal; an unreadable or non-mapping override is
    logged and ignored so the shared profile still loads.
    """
    base_data = load_yaml_with_env_expansion(path)

    stem, ext = os.path.splitext(path)
    local_path = f"{stem}.local{ext}"
    if not os.path.isfile(local_path):
        return base_data

    try:
        local_data = load_yaml_with_env_expansion(local_path)
    except (OSError, yaml.YAMLError) as exc:
        logger.warning(
            "Failed to load local profile override; using base profile only",
            local_path=local_path,
            error=str(exc),
        )
        return base_data

    if not isinstance(local_data, dict):
        logger.warning("Local profile override is not a mapping; ignoring", local_path=local_path)
        return base_data

    logger.info("Merging local profile override", local_path=local_path)
    return deep_merge_dicts(base_data, local_data)
