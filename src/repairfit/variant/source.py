from __future__ import annotations

import logging
import shutil
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from repairfit.config.models import OracleConfig, SourceConfig
from repairfit.evaluator import run_external_test
from repairfit.evaluator.models import TestOutcome
from repairfit.testcases import TestId, format_test_label

from .base import Variant

logger = logging.getLogger(__name__)


def resolve_command(command: List[str], base_dir: Optional[Path]) -> List[str]:
    """
    Expand an oracle command:
      - '{python}' becomes the current interpreter
      - relative tokens naming an existing file under base_dir become absolute
    """
    cmd = [sys.executable if tok == "{python}" else tok for tok in command]
    if base_dir is None:
        return cmd
    resolved: List[str] = []
    for tok in cmd:
        p = Path(tok)
        if not p.is_absolute():
            candidate = base_dir / p
            if candidate.exists():
                tok = str(candidate.resolve())
        resolved.append(tok)
    return resolved


class SourceVariant(Variant):
    """
    A variant whose program is a single source text, tested by an external oracle.

    The source is written to <workdir>/source.<ext><suffix> before the first
    test; each test runs in <workdir>/<test label>/.
    """

    def __init__(
        self,
        name: str,
        source: str,
        *,
        workdir: str | Path,
        oracle: OracleConfig,
        source_config: SourceConfig | None = None,
        context: Dict[str, Any] | None = None,
        base_dir: Path | None = None,
    ) -> None:
        super().__init__()
        self._name = name
        self._source = source
        self._workdir = Path(workdir).expanduser().resolve()
        self._oracle = oracle
        self._source_config = source_config or SourceConfig()
        self._context = dict(context or {})
        self._command = resolve_command(oracle.command, base_dir)
        self._source_path: Optional[Path] = None

    @classmethod
    def from_file(cls, path: str | Path, **kwargs: Any) -> "SourceVariant":
        path = Path(path)
        with path.open("r", encoding="utf-8", newline="") as f:
            return cls(path.stem, f.read(), **kwargs)

    @property
    def workdir(self) -> Path:
        return self._workdir

    def name(self) -> str:
        return self._name

    def _materialize(self) -> Path:
        if self._source_path is None:
            self._workdir.mkdir(parents=True, exist_ok=True)
            path = self._workdir / self._source_config.source_filename()
            path.write_text(self._source, encoding="utf-8")
            self._source_path = path
        return self._source_path

    def run_test(self, test: TestId) -> TestOutcome:
        source_path = self._materialize()
        label = format_test_label(test)
        run = run_external_test(
            command=self._command,
            workdir=self._workdir / label,
            variant=self._name,
            test=label,
            source=source_path,
            context=self._context,
            timeout_s=self._oracle.timeout_s,
            extra_args=self._oracle.extra_args,
            env=self._oracle.env,
        )
        logger.debug("%s %s: passed=%s values=%s", self._name, label, run.outcome.passed, list(run.outcome.values))
        return run.outcome

    def output_source(self, path: Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        # newline="" keeps the text byte-for-byte as given
        with path.open("w", encoding="utf-8", newline="") as f:
            f.write(self._source)

    def cleanup(self) -> None:
        self._source_path = None
        if self._oracle.keep_workdirs:
            return
        shutil.rmtree(self._workdir, ignore_errors=True)
