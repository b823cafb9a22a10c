"""Exception hierarchy for parafont."""


class ParafontError(Exception):
    """Base exception for all parafont errors."""

    pass


class SourceError(ParafontError):
    """Errors related to loading font source data."""

    pass


class SourceLoadError(SourceError):
    """Error reading a font source file."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load font source '{path}': {reason}")


class SourceFormatError(SourceError):
    """Font source data does not match the expected layout."""

    def __init__(self, path: str, details: str) -> None:
        self.path = path
        self.details = details
        super().__init__(f"Invalid font source '{path}': {details}")


class GeometrySaveError(SourceError):
    """Error writing constructed geometry."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to save geometry '{path}': {reason}")


class GlyphError(ParafontError):
    """Errors related to glyph construction."""

    pass


class GlyphNotFoundError(GlyphError):
    """Requested glyph not found in font source."""

    def __init__(self, glyph_name: str) -> None:
        self.glyph_name = glyph_name
        super().__init__(f"Glyph '{glyph_name}' not found in font source")


class FormulaError(ParafontError):
    """Errors in formula compilation or evaluation."""

    pass


class FormulaSyntaxError(FormulaError):
    """Formula text could not be compiled."""

    def __init__(self, expression: str, reason: str) -> None:
        self.expression = expression
        self.reason = reason
        super().__init__(f"Invalid formula '{expression}': {reason}")


class FormulaEvaluationError(FormulaError):
    """Formula failed while being evaluated."""

    def __init__(self, expression: str, reason: str) -> None:
        self.expression = expression
        self.reason = reason
        super().__init__(f"Could not evaluate '{expression}': {reason}")


class UnknownNameError(FormulaError):
    """Formula refers to a name missing from the environment."""

    def __init__(self, expression: str, name: str) -> None:
        self.expression = expression
        self.name = name
        super().__init__(f"Unknown name '{name}' in formula '{expression}'")


class DependencyCycleError(FormulaError):
    """Points of a glyph depend on each other in a cycle."""

    def __init__(self, glyph_name: str, cycle: list[str]) -> None:
        self.glyph_name = glyph_name
        self.cycle = cycle
        super().__init__(
            f"Dependency cycle in glyph '{glyph_name}': {' -> '.join(cycle)}"
        )
