"""Load serialized panics written by Panic.to_json() / Panic.to_yaml()."""

import json
from pathlib import Path

import yaml

from ...core import Panic


def load_record(path: Path) -> Panic:
    """
    Read a serialized Panic from a JSON or YAML file.

    Raises:
        ValueError: If the file is not a serialized panic
    """
    text = path.read_text()

    if path.suffix == ".json":
        data = json.loads(text)
    elif path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text)
    else:
        raise ValueError(f"Unsupported file type '{path.suffix}' (expected .json, .yaml or .yml)")

    if not isinstance(data, dict):
        raise ValueError(f"{path} does not contain a serialized panic")

    return Panic.from_dict(data)
