"""
Revision source interface: byte-level read/write over persisted form data blobs,
plus the ledger of migration names a batch has run. No migration logic here.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, List


class RevisionSource(ABC):
    """
    Where the driver finds blobs. Item ids are opaque strings (row id or file path).
    Implementations raise StorageError for I/O failures on a single item.
    """

    # Whether read/write for different items may run on different threads.
    supports_concurrency: bool = False

    @abstractmethod
    def describe(self) -> str:
        """Human-readable location, for logs and reports."""
        ...

    @abstractmethod
    def iter_item_ids(self) -> List[str]:
        """Ids of every item holding a blob, in a stable order."""
        ...

    @abstractmethod
    def read(self, item_id: str) -> bytes:
        ...

    @abstractmethod
    def write(self, item_id: str, data: bytes) -> None:
        """Replace the item's blob. Each call is its own unit of work."""
        ...

    @abstractmethod
    def ran_migrations(self) -> List[str]:
        """Migration names already recorded in the ledger."""
        ...

    @abstractmethod
    def record_migrations(self, names: Iterable[str]) -> None:
        """Append names to the ledger."""
        ...
