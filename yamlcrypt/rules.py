"""
Path scoping.

Given a dotted path expression, decide whether a position in a document
tree is in scope for transformation.

Rules DO NOT perform actions. They only return decisions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .errors import UsageError

KeyPath = Tuple[str, ...]


def parse_path(expression: Optional[str]) -> KeyPath:
    """
    Split ``obj.key`` into ``("obj", "key")``.

    An empty or missing expression yields the empty path, which matches
    everything.
    """

    if not expression:
        return ()
    parts = tuple(expression.split("."))
    if any(not part for part in parts):
        raise UsageError(f"invalid path expression: {expression}")
    return parts


def matches(current: KeyPath, target: KeyPath) -> bool:
    """True if current equals target or lies beneath it."""
    return tuple(current[: len(target)]) == tuple(target)


@dataclass(frozen=True)
class PathRule:
    target: KeyPath = ()

    @classmethod
    def parse(cls, expression: Optional[str]) -> "PathRule":
        return cls(parse_path(expression))

    def matches(self, current: KeyPath) -> bool:
        return matches(current, self.target)

    def __str__(self) -> str:
        return ".".join(self.target) or "<document>"
