"""
Migration driver (batch mode): run every blob in a revision source through the
migration runner, write migrated blobs back, and collect per-item results.

A failing item is recorded and the batch moves on; nothing a single item does can
abort the run. A stop request is honored between items, never mid-item.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from .core.errors import StorageError
from .migrations.runner import MigrationResult, MigrationRunner, Outcome
from .report import BatchReport
from .store.backend import RevisionSource

logger = logging.getLogger(__name__)


class MigrationDriver:
    def __init__(
        self,
        source: RevisionSource,
        runner: Optional[MigrationRunner] = None,
        *,
        dry_run: bool = False,
        workers: int = 1,
    ) -> None:
        self.source = source
        self.runner = runner or MigrationRunner()
        self.dry_run = dry_run
        self.workers = max(1, int(workers))
        self._stop = threading.Event()

    def request_stop(self) -> None:
        """Finish the item in progress, then stop. Safe to call from a signal handler."""
        self._stop.set()

    @property
    def stop_requested(self) -> bool:
        return self._stop.is_set()

    def process_item(self, item_id: str) -> MigrationResult:
        """Read, migrate and (unless dry run) write back one item. Never raises package errors."""
        try:
            data = self.source.read(item_id)
        except StorageError as e:
            logger.warning("Failed to read %s: %s", item_id, e)
            return MigrationResult(blob_id=item_id, outcome=Outcome.FAILED, error=str(e))

        result = self.runner.migrate_item(data, blob_id=item_id)
        if result.outcome is not Outcome.MIGRATED or self.dry_run:
            return result
        try:
            self.source.write(item_id, result.data)
        except StorageError as e:
            logger.warning("Failed to write %s: %s", item_id, e)
            return MigrationResult(
                blob_id=item_id,
                outcome=Outcome.FAILED,
                error=str(e),
                from_version=result.from_version,
                to_version=result.to_version,
                steps_applied=result.steps_applied,
            )
        return result

    def _process_unless_stopped(self, item_id: str) -> Optional[MigrationResult]:
        if self._stop.is_set():
            return None
        return self.process_item(item_id)

    def _run_sequential(self, item_ids: List[str], report: BatchReport) -> None:
        for position, item_id in enumerate(item_ids):
            if self._stop.is_set():
                report.not_attempted.extend(item_ids[position:])
                return
            report.add(self.process_item(item_id))

    def _run_pool(self, item_ids: List[str], report: BatchReport) -> None:
        # each task owns its item's bytes; results are collected in item order
        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            results = list(pool.map(self._process_unless_stopped, item_ids))
        for item_id, result in zip(item_ids, results):
            if result is None:
                report.not_attempted.append(item_id)
            else:
                report.add(result)

    def _update_ledger(self, report: BatchReport) -> None:
        try:
            recorded = set(self.source.ran_migrations())
            new_names = [step.label for step in self.runner.steps if step.label not in recorded]
            if new_names:
                self.source.record_migrations(new_names)
        except StorageError as e:
            logger.error("Could not update migration ledger for %s: %s", self.source.describe(), e)
            report.ledger_error = str(e)

    def run(self) -> BatchReport:
        """
        Attempt every item and return the report. Only listing the source can
        raise (StorageError); per-item failures end up in the report.
        """
        report = BatchReport(source=self.source.describe(), dry_run=self.dry_run)
        item_ids = self.source.iter_item_ids()
        logger.info("Migrating %d item(s) from %s", len(item_ids), report.source)

        if self.workers > 1 and self.source.supports_concurrency:
            self._run_pool(item_ids, report)
        else:
            if self.workers > 1:
                logger.info("%s does not support concurrent items; running sequentially", report.source)
            self._run_sequential(item_ids, report)

        if report.interrupted:
            logger.warning("Stopped early; %d item(s) not attempted", len(report.not_attempted))
        elif not self.dry_run:
            self._update_ledger(report)

        logger.info(
            "Done with %s: %d migrated, %d up to date, %d failed",
            report.source,
            report.migrated,
            report.skipped,
            report.failed,
        )
        return report
