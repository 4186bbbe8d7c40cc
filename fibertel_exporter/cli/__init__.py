"""
Command Line Interface Package for the Fibertel exporter

- args.py: Argument parsing and validation
- formatters.py: Output formatting for --once mode
- logging_setup.py: Logging configuration
- main.py: Main orchestration and entry point

License: MIT
"""

from .main import main

__all__ = ["main"]
