from __future__ import annotations

import json
import shlex
from pathlib import Path
from typing import Any, Dict

import yaml
from pydantic import ValidationError

from .models import RepairConfig

_SUFFIXES = {".json": "json", ".yaml": "yaml", ".yml": "yaml"}


def _read_mapping(path: Path) -> Dict[str, Any]:
    kind = _SUFFIXES.get(path.suffix.lower())
    if kind is None:
        raise ValueError(f"Unsupported config format: {path.suffix} (expected .yaml/.yml/.json)")

    text = path.read_text(encoding="utf-8")
    data = json.loads(text) if kind == "json" else (yaml.safe_load(text) or {})
    if not isinstance(data, dict):
        raise ValueError(f"{path}: a repair config must be a mapping, got {type(data).__name__}")
    return data


def _normalize(data: Dict[str, Any], path: Path) -> Dict[str, Any]:
    """
    Fill in the shorthands a hand-written repair config may use:

    - ``id`` defaults to the config file stem
    - ``oracle.command`` may be a shell-style string (``"./test.sh --fast"``)
    """
    data = dict(data)
    data.setdefault("id", path.stem)

    oracle = data.get("oracle")
    if isinstance(oracle, dict) and isinstance(oracle.get("command"), str):
        data["oracle"] = {**oracle, "command": shlex.split(oracle["command"])}
    return data


def load_repair_config(path: str | Path) -> RepairConfig:
    """
    Load and validate a RepairConfig from YAML/JSON.

    Validation errors are re-raised as ValueError naming the file. The
    resolved path is kept on ``source_path`` so relative oracle commands can
    be found next to it.
    """
    path = Path(path).expanduser().resolve()
    data = _normalize(_read_mapping(path), path)

    try:
        cfg = RepairConfig.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"{path}: invalid repair config\n{e}") from e
    cfg.source_path = path
    return cfg
