"""Entry point for ``python -m cheatsheet_reference``."""

import sys

from cheatsheet_reference.cli import main

sys.exit(main())
