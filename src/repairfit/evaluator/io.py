from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from .models import OracleOutput


def write_input_json(
    path: str | Path,
    *,
    variant: str,
    test: str,
    source: str | Path,
    context: Dict[str, Any] | None = None,
) -> None:
    path = Path(path)
    payload = {
        "variant": variant,
        "test": test,
        "source": str(source),
        "context": context or {},
    }
    path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")


def read_output_json(path: str | Path) -> OracleOutput:
    path = Path(path)
    data = json.loads(path.read_text(encoding="utf-8"))
    return OracleOutput.model_validate(data)
