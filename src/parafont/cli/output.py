"""Rich console output helpers for the CLI.

This module provides user-friendly console output using Rich library
with tables and formatted messages.
"""

from collections.abc import Iterable

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table
from rich.text import Text

from parafont.domain import Action, ConstructedFont, NodePath

console = Console()

# Unicode symbols for consistent visual language
SYM_STEP = "▸"  # Step indicator
SYM_OK = "✓"  # Success
SYM_ERR = "✗"  # Error
SYM_DOT = "·"  # Separator/secondary info


def create_progress() -> Progress:
    """Create a rich progress bar for glyph construction.

    Returns:
        Configured Progress instance with bar and time elapsed.
    """
    return Progress(
        TextColumn("  "),
        BarColumn(bar_width=40, complete_style="green", finished_style="green"),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )


def print_header(version: str) -> None:
    """Print application header.

    Args:
        version: Application version string
    """
    console.print(f"\n[bold]parafont[/bold] v{version}")
    console.print("─" * 44)


def print_step(message: str) -> None:
    """Print a processing step indicator.

    Args:
        message: Step description message
    """
    console.print(f"\n{SYM_STEP} {message}")


def print_source_info(source_path: str, glyph_count: int, parameter_count: int) -> None:
    """Print font source information."""
    # Use Text to safely handle paths with special characters
    line = Text("  ")
    line.append(source_path)
    console.print(line)
    console.print(f"  {glyph_count:,} glyphs {SYM_DOT} {parameter_count:,} parameters")


def print_glyph_table(font: ConstructedFont) -> None:
    """Print one row per constructed glyph."""
    table = Table(show_edge=False, header_style="bold")
    table.add_column("Glyph")
    table.add_column("Char", justify="center")
    table.add_column("Contours", justify="right")
    table.add_column("Components", justify="right")
    table.add_column("Advance", justify="right")
    table.add_column("Overrides", justify="right")

    for glyph in font.glyphs:
        table.add_row(
            glyph.name,
            glyph.letter,
            str(len(glyph.contours)),
            str(len(glyph.components)),
            f"{glyph.advance_width:.1f}",
            str(len(glyph.manual_changes)),
        )
    console.print(table)


def print_dependencies(point: NodePath, dependencies: Iterable[NodePath]) -> None:
    """Print the points a point's formulas read."""
    dependencies = list(dependencies)
    if not dependencies:
        console.print(f"  {point} has no point dependencies")
        return
    console.print(f"  [bold]{point}[/bold] reads:")
    for dependency in dependencies:
        console.print(f"    {SYM_DOT} {dependency}")


def print_actions(actions: Iterable[Action]) -> None:
    """Print dispatched action messages in order."""
    table = Table(show_edge=False, header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("Action")
    table.add_column("Payload")
    for index, action in enumerate(actions, start=1):
        table.add_row(str(index), action.name, Text(repr(action.payload)))
    console.print(table)


def print_success(message: str, details: str | None = None) -> None:
    """Print success message.

    Args:
        message: Main message
        details: Optional secondary line
    """
    console.print(f"\n[bold green]{SYM_OK} {message}[/bold green]")
    if details:
        console.print(f"  {details}")


def print_error(message: str, details: str | None = None) -> None:
    """Print error message.

    Args:
        message: Main error message
        details: Optional detailed error information
    """
    console.print(f"\n[bold red]{SYM_ERR} Error:[/bold red] {message}")
    if details:
        console.print(f"  {details}")
