"""CLI application entry point for parafont.

This module provides the main CLI interface using Typer.
"""

import json
from pathlib import Path
from typing import Annotated, Any

import typer

from parafont import __version__
from parafont.cli.output import (
    console,
    create_progress,
    print_actions,
    print_dependencies,
    print_error,
    print_glyph_table,
    print_header,
    print_source_info,
    print_step,
    print_success,
)
from parafont.config import LoggingConfig
from parafont.core import FontConstructor
from parafont.core.construction import MANUAL_CHANGES
from parafont.domain import NodePath
from parafont.exceptions import GeometrySaveError, ParafontError, SourceLoadError
from parafont.interaction import CanvasMode, HeadlessEditor
from parafont.io import FontSourceReader, GeometryWriter
from parafont.utils import configure_logging

# Create the Typer app
app = typer.Typer(
    name="parafont",
    help="Construct parametric glyphs and replay interactive edits on them.",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]parafont[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main_options(
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            help="Write detailed logs to file",
        ),
    ] = None,
    log_level: Annotated[
        str,
        typer.Option(
            "--log-level",
            help="Logging level (DEBUG|INFO|WARNING|ERROR)",
        ),
    ] = "WARNING",
    _version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Construct parametric glyphs and replay interactive edits on them."""
    settings = LoggingConfig(log_file=log_file, log_level=log_level)
    configure_logging(
        log_file=settings.log_file,
        console_level=settings.log_level,
        file_level=settings.file_log_level,
    )


def _json_option(name: str, value: str | None) -> dict[str, Any]:
    """Parse a JSON object given on the command line."""
    if value is None:
        return {}
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as e:
        print_error(f"Invalid JSON for {name}", details=e.msg)
        raise typer.Exit(code=1) from None
    if not isinstance(parsed, dict):
        print_error(f"{name} must be a JSON object")
        raise typer.Exit(code=1)
    return parsed


def _load_source(path: Path, quiet: bool):
    if not quiet:
        print_step("Loading font source")
    reader = FontSourceReader(path)
    source = reader.load()
    if not quiet:
        print_source_info(str(path), reader.glyph_count, len(source.parameters))
    return source


@app.command()
def build(
    source_path: Annotated[
        Path,
        typer.Argument(
            help="Path to the JSON font source",
            show_default=False,
        ),
    ],
    chars: Annotated[
        str | None,
        typer.Option(
            "--chars",
            "-c",
            help="Characters to construct (default: every encoded glyph)",
        ),
    ] = None,
    params: Annotated[
        str | None,
        typer.Option(
            "--params",
            "-p",
            help='Parameter values as a JSON object, e.g. \'{"thickness": 90}\'',
        ),
    ] = None,
    overrides: Annotated[
        str | None,
        typer.Option(
            "--overrides",
            help='Manual changes as JSON, e.g. \'{"a": {"contours.0.nodes.0.x": 10}}\'',
        ),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Write the constructed geometry to a JSON file",
        ),
    ] = None,
    dependencies: Annotated[
        bool,
        typer.Option(
            "--dependencies",
            help="Include dependency trees in the output file",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Minimal console output",
        ),
    ] = False,
) -> None:
    """Construct glyphs of a font source.

    Example:
        parafont build font.json --chars abc --params '{"width": 1.2}'
    """
    values = _json_option("--params", params)
    manual_changes = _json_option("--overrides", overrides)

    if not quiet:
        print_header(__version__)

    try:
        source = _load_source(source_path, quiet)
        subset: list[str | int] = list(chars) if chars else sorted(source.unicode_to_glyph_name)

        constructor = FontConstructor(source)
        construction_params = {**values, MANUAL_CHANGES: manual_changes}
        if not quiet:
            print_step("Constructing")
            with create_progress() as progress:
                task_id = progress.add_task(f"Constructing {len(subset)} glyphs", total=len(subset))

                def update_progress(completed: int, total: int, *_: object) -> None:
                    progress.update(task_id, completed=completed, total=total)

                font = constructor.construct_font(construction_params, subset, update_progress)
        else:
            font = constructor.construct_font(construction_params, subset)

        if not quiet:
            print_glyph_table(font)

        if output is not None:
            GeometryWriter(output, include_dependencies=dependencies).save(font, values)

        if not quiet:
            details = str(output) if output is not None else None
            print_success(f"{len(font.glyphs)} glyphs constructed", details=details)

    except SourceLoadError as e:
        print_error(f"Could not load font source: {e.reason}")
        raise typer.Exit(code=1)
    except GeometrySaveError as e:
        print_error(f"Could not save geometry: {e.reason}")
        raise typer.Exit(code=1)
    except ParafontError as e:
        print_error(str(e))
        raise typer.Exit(code=1)


@app.command()
def deps(
    source_path: Annotated[
        Path,
        typer.Argument(help="Path to the JSON font source", show_default=False),
    ],
    glyph_name: Annotated[
        str,
        typer.Argument(help="Glyph name", show_default=False),
    ],
    point: Annotated[
        str,
        typer.Argument(help="Point path, e.g. contours.0.nodes.1", show_default=False),
    ],
    params: Annotated[
        str | None,
        typer.Option("--params", "-p", help="Parameter values as a JSON object"),
    ] = None,
) -> None:
    """Show which points a point's formulas read."""
    values = _json_option("--params", params)
    point_path = NodePath.parse(point).point()
    if point_path is None:
        print_error(f"Not a point path: {point}")
        raise typer.Exit(code=1)

    try:
        source = _load_source(source_path, quiet=True)
        glyph = FontConstructor(source).construct_glyph(glyph_name, values)
    except ParafontError as e:
        print_error(str(e))
        raise typer.Exit(code=1)

    if glyph.get(point_path) is None:
        print_error(f"Glyph '{glyph_name}' has no point {point_path}")
        raise typer.Exit(code=1)
    print_dependencies(point_path, glyph.dependency_tree.dependencies_of(point_path))


@app.command()
def replay(
    source_path: Annotated[
        Path,
        typer.Argument(help="Path to the JSON font source", show_default=False),
    ],
    script_path: Annotated[
        Path,
        typer.Argument(help="Path to the JSON input script", show_default=False),
    ],
    glyph_name: Annotated[
        str | None,
        typer.Option("--glyph", "-g", help="Glyph to edit (default: the script's glyph)"),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the resulting overrides to a JSON file"),
    ] = None,
) -> None:
    """Replay a pointer/keyboard script through a headless editing session.

    The script is a JSON object with "glyph", optional "values", "mode"
    and "viewport", and an "events" list.
    """
    try:
        script = json.loads(script_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        print_error(f"Could not read script: {e}")
        raise typer.Exit(code=1) from None
    if isinstance(script, list):
        script = {"events": script}

    name = glyph_name or script.get("glyph")
    if not name:
        print_error("No glyph given", details="Use --glyph or a \"glyph\" entry in the script")
        raise typer.Exit(code=1)

    try:
        mode = CanvasMode(script.get("mode", CanvasMode.SELECT_POINTS.value))
    except ValueError:
        print_error(f"Unknown mode: {script.get('mode')}")
        raise typer.Exit(code=1) from None

    try:
        source = _load_source(source_path, quiet=True)
        editor = HeadlessEditor(
            source,
            name,
            values=script.get("values"),
            canvas_mode=mode,
            viewport=tuple(script.get("viewport", (1024.0, 768.0))),
        )
        editor.start()
        actions = editor.run_script(script.get("events", []))
        editor.stop()
    except ParafontError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    except ValueError as e:
        print_error(f"Invalid script: {e}")
        raise typer.Exit(code=1)

    print_actions(actions)
    stats = editor.session.session_logger.stats
    print_success(
        f"{stats.frame_count} frames replayed",
        details=f"{stats.edits_dispatched} edits, {stats.edits_skipped} skipped",
    )

    if output is not None:
        state = editor.store.state
        document = {
            "manual_changes": state.manual_changes,
            "glyph_component_choice": state.glyph_component_choice,
            "component_class_choice": state.component_class_choice,
            "glyph_special_props": state.glyph_special_props,
        }
        try:
            output.write_text(json.dumps(document, indent=2), encoding="utf-8")
        except OSError as e:
            print_error(f"Could not write overrides: {e}")
            raise typer.Exit(code=1) from None


def cli() -> None:
    """Entry point for the CLI application."""
    app()


def main() -> None:
    """Entry point for the CLI application (alias for cli)."""
    cli()


if __name__ == "__main__":
    cli()
