"""Parafont - Interactive editing core for parametric fonts.

Parafont constructs glyph geometry from a parametric font source (formulas
over named parameters plus manual point overrides) and drives a headless
editing session: a pointer/keyboard state machine that turns drags into
constraint-preserving override changes.

Example:
    $ parafont build font.json --chars abc

This will construct the glyphs for "a", "b" and "c" and print their metrics.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
