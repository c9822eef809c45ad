"""Generic traversal over a raw API description tree.

Every mapping in the tree is yielded once, tagged with the kind of construct
it represents. Transformations subclass NodeVisitor and implement
``visit_<kind>`` for the kinds they care about.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator

from swagger_endpoints.parser.base import HTTP_METHODS, ComponentRef, parse_component_ref


class NodeKind(str, Enum):
    OPERATION = "operation"
    RESPONSES = "responses"
    PARAMETER = "parameter"
    REFERENCE = "reference"
    OBJECT_SCHEMA = "object_schema"
    NODE = "node"


@dataclass
class DocumentNode:
    kind: NodeKind
    tokens: tuple[str, ...]
    value: dict[str, Any]

    @property
    def pointer(self) -> str:
        """JSON pointer of this node relative to the traversal root."""
        return "".join("/" + t.replace("~", "~0").replace("/", "~1") for t in self.tokens)


def _is_object_type(value: Any) -> bool:
    if isinstance(value, list):
        return "object" in value
    return value == "object"


def _classify(node: dict[str, Any], tokens: tuple[str, ...]) -> NodeKind:
    if isinstance(node.get("$ref"), str):
        return NodeKind.REFERENCE
    in_paths = len(tokens) >= 3 and tokens[0] == "paths"
    if in_paths and len(tokens) == 3 and tokens[2].lower() in HTTP_METHODS:
        return NodeKind.OPERATION
    if in_paths and len(tokens) == 4 and tokens[3] == "responses" and tokens[2].lower() in HTTP_METHODS:
        return NodeKind.RESPONSES
    if len(tokens) >= 2 and tokens[-2] == "parameters":
        if (tokens[0] == "paths" and tokens[-1].isdigit()) or tokens[:-1] in (
            ("parameters",), ("components", "parameters"),
        ):
            return NodeKind.PARAMETER
    if _is_object_type(node.get("type")):
        return NodeKind.OBJECT_SCHEMA
    return NodeKind.NODE


def iter_nodes(tree: Any, tokens: tuple[str, ...] = ()) -> Iterator[DocumentNode]:
    """Yield every mapping in ``tree`` in pre-order.

    Children are listed only after the parent has been handed to the caller,
    so keys the caller deletes from the parent are not descended into.
    """
    if isinstance(tree, dict):
        yield DocumentNode(_classify(tree, tokens), tokens, tree)
        for key, child in list(tree.items()):
            yield from iter_nodes(child, tokens + (str(key),))
    elif isinstance(tree, list):
        for index, child in enumerate(list(tree)):
            yield from iter_nodes(child, tokens + (str(index),))


def collect_refs(tree: Any) -> Iterator[ComponentRef]:
    """Yield the component references found anywhere under ``tree``."""
    for node in iter_nodes(tree):
        if node.kind is NodeKind.REFERENCE:
            ref = parse_component_ref(node.value["$ref"])
            if ref is not None:
                yield ref


class NodeVisitor:
    """Dispatches each node to ``visit_<kind>`` when such a method exists."""

    def visit(self, tree: Any) -> None:
        for node in iter_nodes(tree):
            handler = getattr(self, f"visit_{node.kind.value}", None)
            if handler is not None:
                handler(node)
