"""Helpers shared by the layered config loader."""

from pathlib import Path
from typing import Optional

import yaml

from workbranch.ui.output import warn


def deep_merge(base: dict, override: dict) -> dict:
    """Merge override into a copy of base. Nested dicts merge, anything else replaces."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def load_yaml(path: Path) -> Optional[dict]:
    """Mapping from a YAML file, or None when it is missing, empty, or not a mapping.

    A file that fails to parse is skipped with a warning so one bad layer
    does not block the others.
    """
    if not path.exists():
        return None
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        warn(f"Ignoring malformed config {path}: {first_problem(e)}")
        return None
    return data if isinstance(data, dict) else None


def first_problem(exc: yaml.YAMLError) -> str:
    mark = getattr(exc, "problem_mark", None)
    problem = getattr(exc, "problem", None) or str(exc)
    if mark is None:
        return problem
    return f"{problem} (line {mark.line + 1}, column {mark.column + 1})"
