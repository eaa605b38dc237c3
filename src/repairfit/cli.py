# src/repairfit/cli.py
from __future__ import annotations

import os
import uuid
from pathlib import Path
from typing import List, Optional

import typer

from repairfit.config import RepairConfig, SearchConfig, load_repair_config
from repairfit.fitness import successes
from repairfit.layout import highest_repair_number, repairs_ledger, variant_workdir
from repairfit.log import configure_logging
from repairfit.output.jsonl import read_jsonl
from repairfit.search import SearchResult, run_search
from repairfit.variant import SourceVariant

app = typer.Typer(help="repairfit: fitness evaluation for test-driven program repair")

ENV_OUTDIR = "REPAIRFIT_OUTDIR"


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def _default_run_id() -> str:
    return str(uuid.uuid4())


def _resolve_results_dir(config: Path, outdir: Path | None) -> Path:
    """
    Resolution order:
      1) explicit --outdir
      2) env var REPAIRFIT_OUTDIR
      3) <config_dir>/results
    """
    if outdir is not None:
        return outdir.expanduser().resolve()

    env = os.environ.get(ENV_OUTDIR)
    if env:
        return Path(env).expanduser().resolve()

    return config.expanduser().resolve().parent / "results"


def _load_config(
    config: Path,
    *,
    negative_test_weight: float | None,
    single_fitness: bool | None,
    sample: float | None,
    strategy: str | None,
    workers: int | None,
) -> RepairConfig:
    try:
        cfg = load_repair_config(config)
        cfg = cfg.with_fitness_overrides(
            negative_test_weight=negative_test_weight,
            single_fitness=single_fitness,
            sample=sample,
        )
        search_updates = {}
        if strategy is not None:
            search_updates["strategy"] = strategy
        if workers is not None:
            search_updates["max_workers"] = workers
        if search_updates:
            search = SearchConfig.model_validate({**cfg.search.model_dump(), **search_updates})
            cfg = cfg.model_copy(update={"search": search})
    except ValueError as e:  # includes pydantic ValidationError
        raise typer.BadParameter(str(e)) from e
    return cfg


def _build_variants(cfg: RepairConfig, sources: List[Path], results_dir: Path, run_id: str) -> List[SourceVariant]:
    base_dir = cfg.source_path.parent if cfg.source_path is not None else None
    variants: List[SourceVariant] = []
    seen: set[str] = set()
    for src in sources:
        name = src.stem
        if name in seen:
            raise typer.BadParameter(f"Duplicate variant name {name!r} (variant names come from file stems)")
        seen.add(name)
        variants.append(
            SourceVariant.from_file(
                src,
                workdir=variant_workdir(results_dir, run_id, name),
                oracle=cfg.oracle,
                source_config=cfg.source,
                context=cfg.context,
                base_dir=base_dir,
            )
        )
    return variants


def _report(result: SearchResult) -> None:
    for res in result.results:
        fitness = "-" if res.fitness is None else f"{res.fitness:g}"
        typer.echo(f"{res.variant:<24} {res.status.value:<10} fitness={fitness}  score={res.score:g}  tests={res.tests_run}")
    if result.repair is not None:
        typer.echo(f"Repair found: {result.repair.variant}")
        typer.echo(f"Written to:   {result.repair.source_path}")
    else:
        typer.echo("No repair found.")
    if result.summary_path is not None:
        typer.echo(f"Summary: {result.summary_path}")


# Shared option declarations
_OUTDIR_OPT = typer.Option(
    None,
    "--outdir",
    "-o",
    help="Output root. Resolution order: explicit --outdir, else $REPAIRFIT_OUTDIR, else <config_dir>/results.",
)
_WEIGHT_OPT = typer.Option(None, "--negative-test-weight", help="Negative tests fitness factor (default 2.0).")
_SINGLE_OPT = typer.Option(None, "--single-fitness/--multi-test", help="Use a single fitness value.")
_SAMPLE_OPT = typer.Option(None, "--sample", help="Fraction of positive tests to sample, in (0, 1].")
_STRATEGY_OPT = typer.Option(None, "--strategy", help="Fitness strategy: weighted or first_failure.")
_LOG_LEVEL_OPT = typer.Option("INFO", "--log-level", help="Logging level (DEBUG, INFO, WARNING, ...).")
_LOG_FILE_OPT = typer.Option(None, "--log-file", help="Also write logs to this file.")


# -----------------------------------------------------------------------------
# Commands
# -----------------------------------------------------------------------------
@app.command("search")
def search_cmd(
    config: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Repair config (YAML/JSON)."),
    sources: List[Path] = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Variant source files."),
    outdir: Optional[Path] = _OUTDIR_OPT,
    run_id: Optional[str] = typer.Option(None, "--run-id", help="Optional run id (defaults to a UUID)."),
    negative_test_weight: Optional[float] = _WEIGHT_OPT,
    single_fitness: Optional[bool] = _SINGLE_OPT,
    sample: Optional[float] = _SAMPLE_OPT,
    strategy: Optional[str] = _STRATEGY_OPT,
    workers: Optional[int] = typer.Option(None, "--workers", "-j", min=1, help="Concurrent evaluations."),
    log_level: str = _LOG_LEVEL_OPT,
    log_file: Optional[Path] = _LOG_FILE_OPT,
):
    """
    Evaluate a set of variant sources and stop at the first repair.

    Exits with code 1 when none of the variants is a repair.
    """
    configure_logging(log_level, log_file)
    config_abs = config.expanduser().resolve()
    cfg = _load_config(
        config_abs,
        negative_test_weight=negative_test_weight,
        single_fitness=single_fitness,
        sample=sample,
        strategy=strategy,
        workers=workers,
    )
    results_dir = _resolve_results_dir(config_abs, outdir)
    run_id_val = run_id or _default_run_id()

    # Continue numbering after repairs already present under this output root.
    successes.reset(highest_repair_number(results_dir))

    variants = _build_variants(cfg, sources, results_dir, run_id_val)
    result = run_search(variants, cfg, outdir=results_dir, run_id=run_id_val)
    _report(result)
    if not result.repaired:
        raise typer.Exit(code=1)


@app.command("evaluate")
def evaluate_cmd(
    config: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Repair config (YAML/JSON)."),
    source: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Variant source file."),
    outdir: Optional[Path] = _OUTDIR_OPT,
    run_id: str = typer.Option("manual", "--run-id", help="Run id used to build the workdir path."),
    negative_test_weight: Optional[float] = _WEIGHT_OPT,
    single_fitness: Optional[bool] = _SINGLE_OPT,
    sample: Optional[float] = _SAMPLE_OPT,
    strategy: Optional[str] = _STRATEGY_OPT,
    log_level: str = _LOG_LEVEL_OPT,
    log_file: Optional[Path] = _LOG_FILE_OPT,
):
    """
    Evaluate a single variant (useful for debugging test oracles).
    """
    configure_logging(log_level, log_file)
    config_abs = config.expanduser().resolve()
    cfg = _load_config(
        config_abs,
        negative_test_weight=negative_test_weight,
        single_fitness=single_fitness,
        sample=sample,
        strategy=strategy,
        workers=1,
    )
    results_dir = _resolve_results_dir(config_abs, outdir)
    successes.reset(highest_repair_number(results_dir))

    variants = _build_variants(cfg, [source], results_dir, run_id)
    result = run_search(variants, cfg, outdir=results_dir, run_id=run_id)
    _report(result)


@app.command("repairs")
def repairs_cmd(
    results_dir: Path = typer.Argument(..., exists=True, file_okay=False, readable=True, help="Output root (<outdir>)."),
):
    """
    List the repairs recorded under an output root.
    """
    ledger = repairs_ledger(results_dir)
    if not ledger.exists():
        typer.echo("No repairs recorded.")
        raise typer.Exit(code=1)

    for rec in read_jsonl(ledger):
        typer.echo(f"repair{rec.get('number')}: {rec.get('variant')}  ->  {rec.get('source_path')}")


@app.command("info")
def info():
    typer.echo("repairfit is installed and commands are registered correctly.")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
