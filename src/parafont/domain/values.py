"""Constant-or-formula values.

Every numeric field of a font source is either a literal or a formula over
the parameter environment. Both variants expose the same ``resolve(env)``
operation so callers never branch on which one they hold.

Formulas use Python expression syntax restricted to arithmetic, comparisons,
conditionals, a fixed set of math functions and constant-index access into
already resolved points (``contours[0].nodes[1].x``, ``anchors[0].y``).
"""

import ast
import math
import operator
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from parafont.domain.path import NodePath, Token, step
from parafont.exceptions import FormulaEvaluationError, FormulaSyntaxError, UnknownNameError

FUNCTIONS: dict[str, Callable[..., Any]] = {
    "abs": abs,
    "acos": math.acos,
    "asin": math.asin,
    "atan": math.atan,
    "atan2": math.atan2,
    "ceil": math.ceil,
    "cos": math.cos,
    "degrees": math.degrees,
    "floor": math.floor,
    "hypot": math.hypot,
    "max": max,
    "min": min,
    "radians": math.radians,
    "round": round,
    "sin": math.sin,
    "sqrt": math.sqrt,
    "tan": math.tan,
}

CONSTANTS: dict[str, float] = {"pi": math.pi, "e": math.e}

# Names that start a point reference instead of naming a parameter
POINT_ROOTS = frozenset({"contours", "anchors"})

_BINARY_OPERATORS: dict[type[ast.operator], Callable[[Any, Any], Any]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}

_UNARY_OPERATORS: dict[type[ast.unaryop], Callable[[Any], Any]] = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
    ast.Not: operator.not_,
}

_COMPARE_OPERATORS: dict[type[ast.cmpop], Callable[[Any, Any], Any]] = {
    ast.Eq: operator.eq,
    ast.NotEq: operator.ne,
    ast.Lt: operator.lt,
    ast.LtE: operator.le,
    ast.Gt: operator.gt,
    ast.GtE: operator.ge,
}

_ALLOWED_NODES: tuple[type[ast.AST], ...] = (
    ast.Expression,
    ast.BinOp,
    ast.UnaryOp,
    ast.BoolOp,
    ast.Compare,
    ast.IfExp,
    ast.Call,
    ast.Name,
    ast.Constant,
    ast.Attribute,
    ast.Subscript,
    ast.Load,
    ast.And,
    ast.Or,
    *_BINARY_OPERATORS,
    *_UNARY_OPERATORS,
    *_COMPARE_OPERATORS,
)


def _reference_chain(node: ast.AST) -> list[Token] | None:
    """Collect the tokens of an attribute/subscript chain rooted at a name."""
    tokens: list[Token] = []
    while True:
        if isinstance(node, ast.Attribute):
            tokens.append(node.attr)
            node = node.value
        elif isinstance(node, ast.Subscript):
            if not isinstance(node.slice, ast.Constant):
                return None
            tokens.append(node.slice.value)
            node = node.value
        elif isinstance(node, ast.Name):
            tokens.append(node.id)
            return list(reversed(tokens))
        else:
            return None


def _analyze(expression: str, tree: ast.Expression) -> tuple[frozenset[str], tuple[NodePath, ...]]:
    """Validate a parsed formula and extract its free names and point references."""
    names: set[str] = set()
    references: set[NodePath] = set()

    for node in ast.walk(tree):
        if not isinstance(node, _ALLOWED_NODES):
            raise FormulaSyntaxError(expression, f"'{type(node).__name__}' is not allowed")

        if isinstance(node, ast.Constant) and not isinstance(node.value, (int, float, str)):
            raise FormulaSyntaxError(expression, f"constant {node.value!r} is not allowed")

        if isinstance(node, ast.Call):
            if not isinstance(node.func, ast.Name) or node.func.id not in FUNCTIONS:
                raise FormulaSyntaxError(expression, "only math functions can be called")
            if node.keywords:
                raise FormulaSyntaxError(expression, "keyword arguments are not allowed")

        if isinstance(node, ast.Subscript) and not isinstance(node.slice, ast.Constant):
            raise FormulaSyntaxError(expression, "indexes must be constants")

        if isinstance(node, ast.Attribute) and node.attr.startswith("_"):
            raise FormulaSyntaxError(expression, f"private attribute '{node.attr}'")

        if isinstance(node, (ast.Attribute, ast.Subscript)):
            chain = _reference_chain(node)
            if chain and chain[0] in POINT_ROOTS:
                point = NodePath(tuple(chain)).point()
                if point is not None:
                    references.add(point)

        if isinstance(node, ast.Name) and node.id not in POINT_ROOTS:
            if node.id not in FUNCTIONS and node.id not in CONSTANTS:
                names.add(node.id)

    return frozenset(names), tuple(sorted(references, key=str))


@dataclass(frozen=True)
class Literal:
    """A constant value.

    Attributes:
        value: The constant (number, string, list)
    """

    value: Any

    @property
    def names(self) -> frozenset[str]:
        """Parameter names this value reads (none)."""
        return frozenset()

    @property
    def references(self) -> tuple[NodePath, ...]:
        """Points this value reads (none)."""
        return ()

    def resolve(self, env: Mapping[str, Any]) -> Any:  # noqa: ARG002
        """Return the constant."""
        return self.value


@dataclass(frozen=True)
class Formula:
    """An expression over the parameter environment.

    The expression is compiled once at construction; resolving it evaluates
    the compiled tree against the given environment. Nothing is cached
    between resolutions.

    Attributes:
        expression: Formula text in Python expression syntax
        names: Free parameter names read by the formula
        references: Points read by the formula
    """

    expression: str
    names: frozenset[str] = field(init=False, compare=False)
    references: tuple[NodePath, ...] = field(init=False, compare=False)
    _tree: ast.Expression = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        try:
            tree = ast.parse(self.expression.strip(), mode="eval")
        except SyntaxError as e:
            raise FormulaSyntaxError(self.expression, e.msg) from e

        names, references = _analyze(self.expression, tree)
        object.__setattr__(self, "_tree", tree)
        object.__setattr__(self, "names", names)
        object.__setattr__(self, "references", references)

    def resolve(self, env: Mapping[str, Any]) -> Any:
        """Evaluate the formula.

        Args:
            env: Parameter values plus any resolved point views

        Returns:
            The computed value

        Raises:
            UnknownNameError: If the formula reads a name missing from env
            FormulaEvaluationError: If evaluation fails
        """
        try:
            return self._evaluate(self._tree.body, env)
        except (ArithmeticError, TypeError, ValueError) as e:
            raise FormulaEvaluationError(self.expression, str(e)) from e

    def _evaluate(self, node: ast.AST, env: Mapping[str, Any]) -> Any:
        if isinstance(node, ast.Constant):
            return node.value

        if isinstance(node, ast.Name):
            if node.id in env:
                return env[node.id]
            if node.id in CONSTANTS:
                return CONSTANTS[node.id]
            raise UnknownNameError(self.expression, node.id)

        if isinstance(node, ast.BinOp):
            left = self._evaluate(node.left, env)
            right = self._evaluate(node.right, env)
            return _BINARY_OPERATORS[type(node.op)](left, right)

        if isinstance(node, ast.UnaryOp):
            return _UNARY_OPERATORS[type(node.op)](self._evaluate(node.operand, env))

        if isinstance(node, ast.BoolOp):
            if isinstance(node.op, ast.And):
                result: Any = True
                for value in node.values:
                    result = self._evaluate(value, env)
                    if not result:
                        return result
                return result
            result = False
            for value in node.values:
                result = self._evaluate(value, env)
                if result:
                    return result
            return result

        if isinstance(node, ast.Compare):
            left = self._evaluate(node.left, env)
            for op, comparator in zip(node.ops, node.comparators):
                right = self._evaluate(comparator, env)
                if not _COMPARE_OPERATORS[type(op)](left, right):
                    return False
                left = right
            return True

        if isinstance(node, ast.IfExp):
            if self._evaluate(node.test, env):
                return self._evaluate(node.body, env)
            return self._evaluate(node.orelse, env)

        if isinstance(node, ast.Call):
            args = [self._evaluate(arg, env) for arg in node.args]
            return FUNCTIONS[node.func.id](*args)  # type: ignore[attr-defined]

        if isinstance(node, ast.Attribute):
            return self._step(self._evaluate(node.value, env), node.attr)

        if isinstance(node, ast.Subscript):
            return self._step(self._evaluate(node.value, env), node.slice.value)  # type: ignore[attr-defined]

        raise FormulaEvaluationError(self.expression, f"unsupported node {type(node).__name__}")

    def _step(self, obj: Any, token: Token) -> Any:
        value = step(obj, token)
        if value is None:
            raise FormulaEvaluationError(self.expression, f"'{token}' does not resolve")
        return value


Value = Literal | Formula


def constant_or_formula(raw: Any, text: bool = False) -> Value:
    """Build a value from raw source data.

    Strings are formulas unless ``text`` is set, in which case they are
    literal text. A mapping with a ``formula`` key is always a formula.

    Args:
        raw: Raw source value
        text: Treat plain strings as literal text

    Returns:
        Literal or Formula
    """
    if isinstance(raw, (Literal, Formula)):
        return raw
    if isinstance(raw, Mapping) and "formula" in raw:
        return Formula(str(raw["formula"]))
    if isinstance(raw, str) and not text:
        return Formula(raw)
    return Literal(raw)
