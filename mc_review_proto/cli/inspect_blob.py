"""
Decode one stored proto, migrate it in memory, and print it as JSON.
Use: mcr-proto inspect <file> [--raw]
Nothing is written back.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from google.protobuf import json_format

from ..core.errors import McReviewProtoError
from ..migrations.runner import MigrationRunner
from ..proto.codec import decode
from ..proto.convert import to_domain, to_jsonable


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    ap = argparse.ArgumentParser(
        prog="mcr-proto inspect",
        description="Print a stored HealthPlanFormData proto (migrated to the current version) as JSON.",
    )
    ap.add_argument("path", help="Proto file to inspect")
    ap.add_argument("--raw", action="store_true", help="Print the migrated proto fields instead of the domain model.")
    args = ap.parse_args(argv)

    path = Path(args.path)
    try:
        data = path.read_bytes()
    except OSError as e:
        print(f"inspect failed: {e}", file=sys.stderr)
        return 1
    try:
        result = MigrationRunner().run(decode(data), blob_id=str(path))
        if args.raw:
            payload = json_format.MessageToDict(result.proto, preserving_proto_field_name=True)
        else:
            payload = to_jsonable(to_domain(result.proto))
    except McReviewProtoError as e:
        print(f"inspect failed: {e}", file=sys.stderr)
        return 1
    print(json.dumps(payload, indent=2, sort_keys=True))
    return 0
