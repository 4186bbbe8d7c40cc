"""
CLI package main module for direct execution.

This allows the CLI to be run with: python -m fibertel_exporter.cli

License: MIT
"""

import sys

from .main import main

if __name__ == "__main__":
    # Set the program name for help display
    if sys.argv and sys.argv[0].endswith("__main__.py"):
        sys.argv[0] = "fibertel-exporter"

    sys.exit(main())
