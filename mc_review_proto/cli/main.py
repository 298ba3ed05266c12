"""
Top-level CLI dispatcher: mcr-proto <command> [args...].
All commands dispatch to package CLI modules.
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

COMMANDS = {
    "migrate": "Migrate stored protos (db | files <dir>)",
    "init": "Create the revisions and ledger tables",
    "inspect": "Print one stored proto as JSON",
    "versions": "List registered migration steps",
}


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    parser = argparse.ArgumentParser(
        prog="mcr-proto",
        description="Health plan form data proto versioning and migration",
    )
    subparsers = parser.add_subparsers(dest="command", help="command")
    for name, help_text in COMMANDS.items():
        subparsers.add_parser(name, help=help_text, add_help=False)

    args, rest = parser.parse_known_args(argv)
    if not args.command:
        parser.print_help()
        return 0

    cmd = args.command

    if cmd == "migrate":
        from . import migrate as mod

        return mod.main(rest, prog="mcr-proto migrate")
    if cmd == "init":
        from . import init_db as mod

        return mod.main(rest)
    if cmd == "inspect":
        from . import inspect_blob as mod

        return mod.main(rest)
    if cmd == "versions":
        from . import versions as mod

        return mod.main(rest)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
