"""
Document trees.

A parsed YAML document is converted into an explicit tree of
ScalarNode / MappingNode / SequenceNode so that walking it is exhaustive.
Parsing and dumping always go through PyYAML's safe loader and dumper.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Tuple, Union

import yaml

from .errors import UsageError
from .rules import KeyPath


@dataclass
class ScalarNode:
    value: Any

    @property
    def is_text(self) -> bool:
        return isinstance(self.value, str)


@dataclass
class MappingNode:
    items: Dict[Any, "Node"] = field(default_factory=dict)


@dataclass
class SequenceNode:
    items: List["Node"] = field(default_factory=list)


Node = Union[ScalarNode, MappingNode, SequenceNode]


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------


def from_python(obj: Any) -> Node:
    if isinstance(obj, dict):
        return MappingNode({key: from_python(value) for key, value in obj.items()})
    if isinstance(obj, list):
        return SequenceNode([from_python(item) for item in obj])
    return ScalarNode(obj)


def to_python(node: Node) -> Any:
    if isinstance(node, ScalarNode):
        return node.value
    if isinstance(node, MappingNode):
        return {key: to_python(value) for key, value in node.items.items()}
    if isinstance(node, SequenceNode):
        return [to_python(item) for item in node.items]
    raise TypeError(f"not a document node: {type(node).__name__}")


def walk(node: Node, path: KeyPath = ()) -> Iterator[Tuple[KeyPath, ScalarNode]]:
    """
    Yield every scalar leaf together with its mapping-key path.

    Sequence indices are not part of the path.
    """

    if isinstance(node, ScalarNode):
        yield path, node
    elif isinstance(node, MappingNode):
        for key, child in node.items.items():
            yield from walk(child, path + (str(key),))
    elif isinstance(node, SequenceNode):
        for child in node.items:
            yield from walk(child, path)
    else:
        raise TypeError(f"not a document node: {type(node).__name__}")


# ---------------------------------------------------------------------------
# YAML streams
# ---------------------------------------------------------------------------


def parse_stream(content: Union[str, bytes]) -> List[Node]:
    """Parse a (multi-document) YAML stream."""
    try:
        return [from_python(doc) for doc in yaml.safe_load_all(content)]
    except yaml.YAMLError as e:
        raise UsageError(f"invalid YAML document: {e}") from e


def dump_stream(documents: List[Node]) -> str:
    """Serialize documents, keeping key order."""
    return yaml.safe_dump_all(
        [to_python(doc) for doc in documents],
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )
