"""Typed view over TipTap/ProseMirror JSON document trees.

Documents arrive as plain mappings shaped like
``{type, text?, attrs?: {blockId?, ...}, content?: [...]}``. They are lifted
into one frozen variant per node kind so traversal dispatches on the kind
instead of probing keys. Nothing here validates the document: anything that
does not look like a node becomes an empty element that carries no text and
no block id.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar, Union


def _block_id(attrs: Mapping[str, Any]) -> str | None:
    value = attrs.get("blockId")
    if isinstance(value, str) and value:
        return value
    return None


@dataclass(frozen=True)
class TextNode:
    text: str
    kind = "text"

    @property
    def block_id(self) -> str | None:
        return None


@dataclass(frozen=True)
class MentionNode:
    """Inline reference entity (character, prop, ...); reads as its label."""

    label: str
    attrs: Mapping[str, Any] = field(default_factory=dict)
    kind = "mention"

    @property
    def block_id(self) -> str | None:
        return _block_id(self.attrs)


@dataclass(frozen=True)
class ElementNode:
    type: str
    attrs: Mapping[str, Any] = field(default_factory=dict)
    content: tuple["Node", ...] = ()
    kind = "element"

    @property
    def block_id(self) -> str | None:
        return _block_id(self.attrs)


Node = Union[TextNode, MentionNode, ElementNode]

# Raw JSON mapping or an already-parsed tree
DocumentLike = Union[Node, Mapping[str, Any]]


def parse_node(raw: Any) -> Node:
    """Lift a raw JSON node into its typed variant."""
    if not isinstance(raw, Mapping):
        return ElementNode(type="")

    node_type = raw.get("type")
    node_type = node_type if isinstance(node_type, str) else ""
    attrs = raw.get("attrs")
    attrs = attrs if isinstance(attrs, Mapping) else {}

    if node_type == "text":
        text = raw.get("text")
        return TextNode(text=text if isinstance(text, str) else "")

    if node_type == "mention":
        label = attrs.get("label")
        return MentionNode(label=label if isinstance(label, str) else "", attrs=attrs)

    content = raw.get("content")
    children = tuple(parse_node(c) for c in content) if isinstance(content, list) else ()
    return ElementNode(type=node_type, attrs=attrs, content=children)


def as_node(document: DocumentLike) -> Node:
    if isinstance(document, (TextNode, MentionNode, ElementNode)):
        return document
    return parse_node(document)


T = TypeVar("T")


class NodeVisitor(Generic[T]):
    """
    Recursive visitor over node variants.

    ``visit`` dispatches to ``visit_text``, ``visit_mention`` or
    ``visit_element``; extra positional arguments are passed through so
    subclasses can thread fold state (offsets, depth) without mutation.
    """

    def visit(self, node: Node, *args: Any) -> T:
        method = getattr(self, f"visit_{node.kind}")
        return method(node, *args)

    def visit_text(self, node: TextNode, *args: Any) -> T:
        raise NotImplementedError

    def visit_mention(self, node: MentionNode, *args: Any) -> T:
        raise NotImplementedError

    def visit_element(self, node: ElementNode, *args: Any) -> T:
        raise NotImplementedError


class _TextExtractor(NodeVisitor[str]):
    def visit_text(self, node: TextNode) -> str:
        return node.text

    def visit_mention(self, node: MentionNode) -> str:
        return node.label

    def visit_element(self, node: ElementNode) -> str:
        return "".join(self.visit(child) for child in node.content)


def extract_text(node: Node) -> str:
    """Concatenate all text leaves under ``node``; mentions read as their label."""
    return _TextExtractor().visit(node)
