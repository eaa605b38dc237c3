from __future__ import annotations

import json
import logging
import random
import uuid
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from repairfit.config import RepairConfig
from repairfit.fitness import (
    EvaluationResult,
    RepairRecord,
    SearchCancellation,
    SuccessCounter,
    SuccessHandler,
    evaluate_weighted,
    get_strategy,
)
from repairfit.layout import run_root
from repairfit.output.jsonl import append_jsonl_line
from repairfit.variant import Variant

logger = logging.getLogger(__name__)


@dataclass
class SearchResult:
    run_id: str
    results: List[EvaluationResult] = field(default_factory=list)
    repair: Optional[RepairRecord] = None
    best: Optional[EvaluationResult] = None
    results_path: Optional[Path] = None
    summary_path: Optional[Path] = None

    @property
    def repaired(self) -> bool:
        return self.repair is not None


def _default_run_id() -> str:
    return str(uuid.uuid4())


def _is_better(candidate: EvaluationResult, best: Optional[EvaluationResult]) -> bool:
    if candidate.fitness is None:
        return False
    return best is None or best.fitness is None or candidate.fitness > best.fitness


def run_search(
    variants: Sequence[Variant],
    config: RepairConfig,
    *,
    outdir: str | Path = "results",
    run_id: Optional[str] = None,
    counter: Optional[SuccessCounter] = None,
    cancellation: Optional[SearchCancellation] = None,
) -> SearchResult:
    """
    Evaluate ``variants`` with the configured strategy and stop at the first repair.

    Up to ``config.search.max_workers`` variants are evaluated at once. When
    one of them is a repair, variants not yet started are dropped and the ones
    still running stop at their next test (after their own cleanup).
    Passing a shared ``cancellation`` lets the caller stop the search as well.

    Outputs:
      <outdir>/repair<N>/repair.<ext><suffix>   (per repair)
      <outdir>/repairs.jsonl
      <outdir>/runs/<run_id>/results.jsonl
      <outdir>/runs/<run_id>/summary.json
    """
    outdir = Path(outdir).expanduser().resolve()
    run_id_val = run_id or _default_run_id()
    run_dir = run_root(outdir, run_id_val)
    run_dir.mkdir(parents=True, exist_ok=True)
    results_path = run_dir / "results.jsonl"

    if cancellation is None:
        cancellation = SearchCancellation()
    handler = SuccessHandler(outdir, source=config.source, counter=counter, cancellation=cancellation)
    strategy = get_strategy(config.search.strategy)
    fitness_cfg = config.fitness

    def _evaluate(index: int, variant: Variant) -> EvaluationResult:
        if strategy is evaluate_weighted:
            rng = random.Random(fitness_cfg.seed + index) if fitness_cfg.seed is not None else None
            return evaluate_weighted(variant, fitness_cfg, handler, cancellation=cancellation, rng=rng)
        return strategy(variant, fitness_cfg, handler, cancellation=cancellation)

    out = SearchResult(run_id=run_id_val, results_path=results_path)
    logger.info(
        "Evaluating %d variant(s) with %s fitness (workers=%d)",
        len(variants),
        config.search.strategy,
        config.search.max_workers,
    )

    with ThreadPoolExecutor(max_workers=config.search.max_workers) as executor:
        futures: Dict[Future, Variant] = {
            executor.submit(_evaluate, i, v): v for i, v in enumerate(variants)
        }
        try:
            for fut in as_completed(futures):
                if fut.cancelled():
                    continue
                res = fut.result()
                out.results.append(res)
                append_jsonl_line(results_path, {"problem_id": config.id, "run_id": run_id_val, **res.to_dict()})

                if _is_better(res, out.best):
                    out.best = res

                if res.repaired and out.repair is None:
                    out.repair = res.repair
                    dropped = sum(1 for f in futures if f.cancel())
                    if dropped:
                        logger.info("Dropped %d variant(s) not yet evaluated", dropped)
        except BaseException:
            # Stop the other evaluations before the executor waits on them.
            cancellation.request("error")
            for f in futures:
                f.cancel()
            raise

    summary: Dict[str, Any] = {
        "problem_id": config.id,
        "run_id": run_id_val,
        "strategy": config.search.strategy,
        "fitness": config.fitness.model_dump(),
        "evaluated": len(out.results),
        "submitted": len(variants),
        "best": out.best.to_dict() if out.best else None,
        "repair": out.repair.to_dict() if out.repair else None,
        "results_file": str(results_path),
        "outdir": str(outdir),
    }
    summary_path = run_dir / "summary.json"
    summary_path.write_text(json.dumps(summary, indent=2, sort_keys=True), encoding="utf-8")
    out.summary_path = summary_path

    if out.repair is not None:
        logger.info("Repair written to %s", out.repair.source_path)
    else:
        logger.info("No repair among %d evaluated variant(s)", len(out.results))
    return out
