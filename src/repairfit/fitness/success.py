"""Recognizing and recording a repair.

A repair bumps the process-wide success counter, gets its own
``<outdir>/repair<N>/`` directory and a copy of its source, and requests
termination of the search on the run's cancellation token.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

from repairfit.config.models import SourceConfig
from repairfit.layout import repair_dir, repairs_ledger
from repairfit.output.jsonl import append_jsonl_line
from repairfit.variant.base import Variant

from .results import RepairRecord

logger = logging.getLogger(__name__)


class SearchCancellation:
    """
    Cooperative stop request shared by every evaluation of a search.

    The first repair sets it; evaluations still running check it between
    tests and stop after running their own cleanup.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._reason: Optional[str] = None

    def request(self, reason: str) -> bool:
        """Request cancellation. Returns True for the first request only."""
        with self._lock:
            if self._event.is_set():
                return False
            self._reason = reason
            self._event.set()
            return True

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._event.wait(timeout)


class SuccessCounter:
    """Monotonic count of repairs found in this process."""

    def __init__(self, start: int = 0) -> None:
        if start < 0:
            raise ValueError(f"start must be >= 0, got {start}")
        self._value = start
        self._lock = threading.Lock()

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    def claim_directory(self, outdir: str | Path) -> tuple[int, Path]:
        """
        Increment the counter and create <outdir>/repair<N>/ as one step.

        An existing repair<N> directory is an error rather than something to
        overwrite.
        """
        with self._lock:
            self._value += 1
            number = self._value
            directory = repair_dir(outdir, number)
            directory.mkdir(parents=True, exist_ok=False)
        return number, directory

    def reset(self, value: int = 0) -> None:
        with self._lock:
            self._value = value


successes = SuccessCounter()


class SuccessHandler:
    """
    What to do when a variant passes every required test.

    One handler is shared by all evaluations of a search run.
    """

    def __init__(
        self,
        outdir: str | Path,
        *,
        source: SourceConfig | None = None,
        counter: SuccessCounter | None = None,
        cancellation: SearchCancellation | None = None,
    ) -> None:
        self.outdir = Path(outdir).expanduser().resolve()
        self.source = source or SourceConfig()
        self.counter = counter if counter is not None else successes
        self.cancellation = cancellation if cancellation is not None else SearchCancellation()

    def note_success(self, variant: Variant) -> RepairRecord:
        number, directory = self.counter.claim_directory(self.outdir)
        name = variant.name()
        logger.info("Repair found: %s", name)

        source_path = directory / self.source.repair_filename()
        variant.output_source(source_path)

        record = RepairRecord(number=number, variant=name, directory=directory, source_path=source_path)
        append_jsonl_line(repairs_ledger(self.outdir), record.to_dict())

        if self.cancellation.request(name):
            logger.info("Stopping search after repair %s (%s)", number, name)
        return record
