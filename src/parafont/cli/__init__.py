"""Command-line interface for parafont.

This module provides the CLI using Typer with rich output for
user-friendly feedback.

Key features:
- Glyph construction with parameter and override input
- Dependency inspection of a single point
- Headless replay of input scripts
- Detailed error reporting
"""

from parafont.cli.app import cli, main

__all__ = ["cli", "main"]
