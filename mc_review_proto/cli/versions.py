"""
List the registered migration steps in order.
Use: mcr-proto versions
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from ..migrations.steps import CURRENT_PROTO_VERSION, MIGRATIONS


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    ap = argparse.ArgumentParser(prog="mcr-proto versions", description="List registered migration steps.")
    ap.parse_args(argv)
    print(f"Current proto version: {CURRENT_PROTO_VERSION}")
    for step in MIGRATIONS:
        change = f"v{step.from_version} -> v{step.to_version}" if step.bumps_version else f"v{step.from_version}"
        print(f"  {step.label:<24} {change}")
    return 0
