# =============================================================================
# museflow/cli/__main__.py -- Package Entry Point
# =============================================================================
#
# Enables running the CLI package as a module:
#     python -m museflow.cli run summarize --text "..."
#
# All subcommands live in museflow/cli/main.py.
# =============================================================================

"""Allow ``python -m museflow.cli`` execution."""

import sys

from museflow.cli.main import main

sys.exit(main())
