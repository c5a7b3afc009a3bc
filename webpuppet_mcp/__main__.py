"""Allow running as `python -m webpuppet_mcp`."""

import sys

from webpuppet_mcp.cli.serve import main

if __name__ == "__main__":
    sys.exit(main())
