"""Block lookup and context extraction over document trees."""

from __future__ import annotations

from dataclasses import dataclass

from .model import BlockText, CandidateBlock
from .tree import DocumentLike, ElementNode, MentionNode, NodeVisitor, TextNode, as_node


@dataclass(frozen=True)
class BlockSpan:
    block_id: str
    start: int  # char offsets into BlockIndex.text
    end: int


@dataclass(frozen=True)
class BlockIndex:
    """Full document text plus the span of every block, in document order."""

    text: str
    spans: tuple[BlockSpan, ...]

    def first(self, block_id: str) -> BlockSpan | None:
        for span in self.spans:
            if span.block_id == block_id:
                return span
        return None

    def text_of(self, span: BlockSpan) -> str:
        return self.text[span.start : span.end]

    def before(self, span: BlockSpan) -> str:
        return self.text[: span.start]

    def after(self, span: BlockSpan) -> str:
        return self.text[span.end :]

    def candidates(self) -> tuple[CandidateBlock, ...]:
        return tuple(
            CandidateBlock(
                block_id=span.block_id,
                text=self.text_of(span),
                preceding_text=self.before(span),
                following_text=self.after(span),
            )
            for span in self.spans
        )


_Fold = tuple[str, tuple[BlockSpan, ...]]


class _SpanCollector(NodeVisitor[_Fold]):
    def visit_text(self, node: TextNode, offset: int) -> _Fold:
        return node.text, ()

    def visit_mention(self, node: MentionNode, offset: int) -> _Fold:
        if node.block_id is None:
            return node.label, ()
        return node.label, (BlockSpan(node.block_id, offset, offset + len(node.label)),)

    def visit_element(self, node: ElementNode, offset: int) -> _Fold:
        parts: list[str] = []
        nested: tuple[BlockSpan, ...] = ()
        pos = offset
        for child in node.content:
            child_text, child_spans = self.visit(child, pos)
            parts.append(child_text)
            nested += child_spans
            pos += len(child_text)

        text = "".join(parts)
        if node.block_id is None:
            return text, nested
        # Parent precedes its descendants in document order
        return text, (BlockSpan(node.block_id, offset, pos),) + nested


def index_blocks(document: DocumentLike) -> BlockIndex:
    text, spans = _SpanCollector().visit(as_node(document), 0)
    return BlockIndex(text=text, spans=spans)


def all_blocks_in_order(document: DocumentLike) -> tuple[BlockText, ...]:
    index = index_blocks(document)
    return tuple(BlockText(span.block_id, index.text_of(span)) for span in index.spans)


def text_of(document: DocumentLike, block_id: str) -> str | None:
    """Text of the first block carrying ``block_id``, or None if there is none."""
    index = index_blocks(document)
    span = index.first(block_id)
    return index.text_of(span) if span else None


def text_before(document: DocumentLike, block_id: str) -> str:
    index = index_blocks(document)
    span = index.first(block_id)
    return index.before(span) if span else ""


def text_after(document: DocumentLike, block_id: str) -> str:
    index = index_blocks(document)
    span = index.first(block_id)
    return index.after(span) if span else ""
