"""
Directory revision source: each *.proto file directly under a directory is one blob.
Writes go to a temporary file that replaces the original, so an interrupted
write never leaves a truncated blob behind.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, List, Union

from ..core.errors import ConfigurationError, StorageError
from .backend import RevisionSource

logger = logging.getLogger(__name__)


class FileRevisionSource(RevisionSource):
    """Proto files in one directory; item ids are the file paths."""

    supports_concurrency = True

    def __init__(
        self,
        directory: Union[str, Path],
        *,
        extension: str = ".proto",
        ledger_file: str = "_ran_migrations",
    ) -> None:
        self.directory = Path(directory)
        if not self.directory.is_dir():
            raise ConfigurationError(f"not a directory: {directory}")
        self.extension = extension
        self.ledger_path = self.directory / ledger_file

    def describe(self) -> str:
        return f"directory {self.directory}"

    def iter_item_ids(self) -> List[str]:
        try:
            return [
                str(p)
                for p in sorted(self.directory.iterdir())
                if p.is_file() and p.name.endswith(self.extension)
            ]
        except OSError as e:
            raise StorageError(f"cannot list {self.directory}: {e}") from e

    def read(self, item_id: str) -> bytes:
        try:
            return Path(item_id).read_bytes()
        except OSError as e:
            raise StorageError(f"cannot read {item_id}: {e}", blob_id=item_id) from e

    def write(self, item_id: str, data: bytes) -> None:
        target = Path(item_id)
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(prefix=f".{target.name}.", dir=str(target.parent))
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_path, target)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise StorageError(f"cannot write {item_id}: {e}", blob_id=item_id) from e

    def ran_migrations(self) -> List[str]:
        try:
            text = self.ledger_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StorageError(f"cannot read {self.ledger_path}: {e}") from e
        return [line.strip() for line in text.splitlines() if line.strip()]

    def record_migrations(self, names: Iterable[str]) -> None:
        names = list(names)
        if not names:
            return
        try:
            with open(self.ledger_path, "a", encoding="utf-8") as f:
                f.write("".join(f"{name}\n" for name in names))
        except OSError as e:
            raise StorageError(f"cannot update {self.ledger_path}: {e}") from e
        logger.info("Recorded %d migration(s) in %s", len(names), self.ledger_path)
