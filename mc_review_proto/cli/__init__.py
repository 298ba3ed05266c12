"""Command-line entry points: mcr-proto and migrate-protos."""

from __future__ import annotations

import logging
from typing import Optional

from .. import config

EXIT_USAGE = 2


def setup_logging(level: Optional[str] = None) -> None:
    """Configure the root logger once, at the configured level unless overridden."""
    logging.basicConfig(
        level=config.log_level(level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
