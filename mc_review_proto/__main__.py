"""Allow python -m mc_review_proto <command>."""

import sys

from .cli.main import main

sys.exit(main())
