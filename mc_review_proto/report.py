"""
Batch report: per-item results from one driver run, with counts, the failure
list, and a tabular (pandas) export for CSV output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple, Union

import pandas as pd

from .migrations.runner import MigrationResult, Outcome

REPORT_COLUMNS = ["blob_id", "outcome", "from_version", "to_version", "steps", "error"]
NOT_ATTEMPTED = "not_attempted"

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INTERRUPTED = 130


@dataclass
class BatchReport:
    source: str
    dry_run: bool = False
    results: List[MigrationResult] = field(default_factory=list)
    not_attempted: List[str] = field(default_factory=list)
    ledger_error: Optional[str] = None

    def add(self, result: MigrationResult) -> None:
        self.results.append(result)

    def _count(self, outcome: Outcome) -> int:
        return sum(1 for r in self.results if r.outcome is outcome)

    @property
    def migrated(self) -> int:
        return self._count(Outcome.MIGRATED)

    @property
    def skipped(self) -> int:
        return self._count(Outcome.UP_TO_DATE)

    @property
    def failed(self) -> int:
        return self._count(Outcome.FAILED)

    @property
    def interrupted(self) -> bool:
        return bool(self.not_attempted)

    @property
    def failures(self) -> List[Tuple[str, str]]:
        """(item id, error message) for every failed item, in processing order."""
        return [(str(r.blob_id), r.error or "") for r in self.results if r.failed]

    @property
    def exit_code(self) -> int:
        if self.interrupted:
            return EXIT_INTERRUPTED
        if self.failed or self.ledger_error:
            return EXIT_FAILED
        return EXIT_OK

    def to_frame(self) -> pd.DataFrame:
        rows = [
            {
                "blob_id": r.blob_id,
                "outcome": r.outcome.value,
                "from_version": r.from_version,
                "to_version": r.to_version,
                "steps": ",".join(r.steps_applied),
                "error": r.error,
            }
            for r in self.results
        ]
        rows.extend(
            {
                "blob_id": item_id,
                "outcome": NOT_ATTEMPTED,
                "from_version": None,
                "to_version": None,
                "steps": "",
                "error": None,
            }
            for item_id in self.not_attempted
        )
        if not rows:
            return pd.DataFrame(columns=REPORT_COLUMNS)
        return pd.DataFrame(rows, columns=REPORT_COLUMNS)

    def write_csv(self, path: Union[str, Path]) -> Path:
        out = Path(path)
        out.parent.mkdir(parents=True, exist_ok=True)
        self.to_frame().to_csv(out, index=False, encoding="utf-8")
        return out

    def format_summary(self) -> str:
        mode = " (dry run, nothing written)" if self.dry_run else ""
        lines = [
            f"Migrated {self.source}{mode}",
            f"  migrated:    {self.migrated}",
            f"  up to date:  {self.skipped}",
            f"  failed:      {self.failed}",
        ]
        if self.not_attempted:
            lines.append(f"  interrupted: {len(self.not_attempted)} item(s) not attempted")
        for blob_id, error in self.failures:
            lines.append(f"  FAILED {blob_id}: {error}")
        if self.ledger_error:
            lines.append(f"  ledger not updated: {self.ledger_error}")
        return "\n".join(lines)
