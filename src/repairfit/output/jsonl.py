"""JSON Lines (JSONL) utilities.

Evaluation results and repairs are appended one record per line. Appends that
may race across threads or processes go through a sibling ``.lock`` file.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterator, Mapping

from filelock import FileLock


def jsonl_dumps(obj: Mapping[str, Any]) -> str:
    """Serialize an object to deterministic JSON for JSONL files."""
    return json.dumps(obj, sort_keys=True, separators=(",", ":"))


def append_jsonl_line(path: str | Path, record: Mapping[str, Any]) -> None:
    """Append one record as a JSONL line, holding the file lock while writing."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with FileLock(str(p) + ".lock"):
        # newline="\n" enforces consistent LF newlines across platforms.
        with p.open("a", encoding="utf-8", newline="\n") as f:
            f.write(jsonl_dumps(record))
            f.write("\n")


def read_jsonl(path: str | Path) -> Iterator[dict[str, Any]]:
    with Path(path).open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            yield json.loads(line)
