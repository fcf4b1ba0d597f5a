"""JSON config file loading utilities."""

import json
from pathlib import Path
from typing import Any

from avatarpicker.constants import CONFIG_FILENAME
from avatarpicker.core.errors import ConfigError


def load_json(path: Path) -> Any:
    """Load and return parsed JSON from a file."""
    with open(path) as f:
        return json.load(f)


def load_catalog_document(path: Path) -> dict:
    """Load a catalog document, accepting either the file or its directory.

    Unreadable or malformed files surface as ConfigError.
    """
    path = Path(path)
    if path.is_dir():
        path = path / CONFIG_FILENAME
    try:
        data = load_json(path)
    except FileNotFoundError as e:
        raise ConfigError(f"catalog file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"catalog file {path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"catalog file {path} must contain a JSON object")
    return data
