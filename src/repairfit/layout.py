from __future__ import annotations

from pathlib import Path
from typing import Union

PathLike = Union[str, Path]


def _norm(p: PathLike) -> Path:
    """
    Normalize a path consistently across OSes:
      - expand '~'
      - resolve to an absolute path
    """
    return Path(p).expanduser().resolve()


def run_root(outdir: PathLike, run_id: str) -> Path:
    """
    Root directory for a search run.

    Layout:
      <outdir>/runs/<run_id>/
    """
    return _norm(outdir) / "runs" / str(run_id)


def variant_workdir(outdir: PathLike, run_id: str, variant_name: str) -> Path:
    """
    Scratch directory for testing one variant. Removed by the variant's cleanup.

    Layout:
      <outdir>/runs/<run_id>/<variant_name>/
    """
    return run_root(outdir, run_id) / str(variant_name)


def repair_dir(outdir: PathLike, number: int) -> Path:
    """
    Directory holding the n-th repair found under an output root.

    Layout:
      <outdir>/repair<N>/
    """
    if number < 1:
        raise ValueError(f"repair number must be >= 1, got {number}")
    return _norm(outdir) / f"repair{number}"


def repairs_ledger(outdir: PathLike) -> Path:
    """
    JSONL ledger of every repair written under an output root.

    Layout:
      <outdir>/repairs.jsonl
    """
    return _norm(outdir) / "repairs.jsonl"


def highest_repair_number(outdir: PathLike) -> int:
    """Largest N among existing <outdir>/repair<N>/ directories, or 0."""
    root = _norm(outdir)
    if not root.is_dir():
        return 0
    numbers = [0]
    for child in root.iterdir():
        name = child.name
        if child.is_dir() and name.startswith("repair") and name[len("repair"):].isdigit():
            numbers.append(int(name[len("repair"):]))
    return max(numbers)
