"""Structured addressing into the constructed glyph tree.

A NodePath is a sequence of field names and list indexes. Its dotted string
form ("contours.0.nodes.1.x") is the key used by the manual-changes overlay.
"""

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

Token = str | int

# Point-level prefixes: ("contours", i, "nodes", j) and ("anchors", k)
_CONTOUR_POINT_DEPTH = 4
_ANCHOR_POINT_DEPTH = 2


def step(obj: Any, token: Token) -> Any | None:
    """Resolve a single path token against an object.

    Mappings are indexed by key, sequences by position and any other object
    by attribute. Classes may declare a ``path_aliases`` mapping to expose
    attributes under a different token (e.g. ``in`` for ``handle_in``).

    Args:
        obj: Object to step into
        token: Field name or list index

    Returns:
        The child value, or None when it does not exist
    """
    if obj is None:
        return None

    if isinstance(obj, Mapping):
        if token in obj:
            return obj[token]
        return obj.get(str(token))

    if isinstance(obj, Sequence) and not isinstance(obj, str):
        if isinstance(token, int) and 0 <= token < len(obj):
            return obj[token]
        return None

    if not isinstance(token, str) or token.startswith("_"):
        return None

    aliases = getattr(type(obj), "path_aliases", {})
    return getattr(obj, aliases.get(token, token), None)


@dataclass(frozen=True, slots=True)
class NodePath:
    """Immutable path of tokens into a glyph tree.

    Attributes:
        tokens: Field names (str) and list indexes (int)
    """

    tokens: tuple[Token, ...] = ()

    @classmethod
    def parse(cls, text: str) -> "NodePath":
        """Parse a dotted path string.

        Numeric segments become list indexes.

        Examples:
            >>> NodePath.parse("contours.0.nodes.1.x").tokens
            ('contours', 0, 'nodes', 1, 'x')
        """
        if not text:
            return cls()
        return cls(tuple(int(part) if part.isdigit() else part for part in text.split(".")))

    @classmethod
    def of(cls, *tokens: Token) -> "NodePath":
        """Build a path from individual tokens."""
        return cls(tuple(tokens))

    def __str__(self) -> str:
        return ".".join(str(token) for token in self.tokens)

    def __len__(self) -> int:
        return len(self.tokens)

    def __iter__(self) -> Iterator[Token]:
        return iter(self.tokens)

    def __truediv__(self, token: Token) -> "NodePath":
        return NodePath(self.tokens + (token,))

    def child(self, *tokens: Token) -> "NodePath":
        """Extend the path with several tokens."""
        return NodePath(self.tokens + tokens)

    @property
    def parent(self) -> "NodePath":
        """Path without its last token."""
        return NodePath(self.tokens[:-1])

    @property
    def name(self) -> Token | None:
        """Last token of the path."""
        return self.tokens[-1] if self.tokens else None

    def key(self, *tokens: Token) -> str:
        """Dotted override key for this path extended by ``tokens``."""
        return str(self.child(*tokens))

    def startswith(self, prefix: "NodePath") -> bool:
        """Check whether ``prefix`` is a leading part of this path."""
        return self.tokens[: len(prefix.tokens)] == prefix.tokens

    def point(self) -> "NodePath | None":
        """Truncate to the point this path addresses.

        Keeps any leading ``components.n`` segments so component points
        stay distinct from the parent glyph's own points.

        Returns:
            The point-level path, or None if the path addresses no point
        """
        tokens = self.tokens
        offset = 0
        while (
            len(tokens) - offset >= 2
            and tokens[offset] == "components"
            and isinstance(tokens[offset + 1], int)
        ):
            offset += 2

        rest = tokens[offset:]
        if (
            len(rest) >= _CONTOUR_POINT_DEPTH
            and rest[0] == "contours"
            and isinstance(rest[1], int)
            and rest[2] == "nodes"
            and isinstance(rest[3], int)
        ):
            return NodePath(tokens[: offset + _CONTOUR_POINT_DEPTH])
        if len(rest) >= _ANCHOR_POINT_DEPTH and rest[0] == "anchors" and isinstance(rest[1], int):
            return NodePath(tokens[: offset + _ANCHOR_POINT_DEPTH])
        return None

    def is_anchor(self) -> bool:
        """Check whether the path addresses an anchor."""
        return "anchors" in self.tokens

    def get(self, tree: Any) -> Any | None:
        """Resolve the path against a tree.

        Args:
            tree: Root object (glyph, dict, list)

        Returns:
            The addressed value, or None if any segment is missing
        """
        current = tree
        for token in self.tokens:
            current = step(current, token)
            if current is None:
                return None
        return current
