"""Tests for typed document trees."""

from storyanchor.core.tree import ElementNode, MentionNode, TextNode, extract_text, parse_node


def test_parse_node_variants():
    """Test each node kind maps to its variant."""
    node = parse_node({
        "type": "paragraph",
        "attrs": {"blockId": "b1"},
        "content": [
            {"type": "text", "text": "Hello "},
            {"type": "mention", "attrs": {"id": "c1", "label": "Sam", "type": "character"}},
        ],
    })

    assert isinstance(node, ElementNode)
    assert node.type == "paragraph"
    assert node.block_id == "b1"
    assert isinstance(node.content[0], TextNode)
    assert isinstance(node.content[1], MentionNode)
    assert node.content[1].label == "Sam"


def test_extract_text_reads_mention_labels():
    """Test mentions contribute their display label."""
    node = parse_node({
        "type": "paragraph",
        "content": [
            {"type": "text", "text": "Hello "},
            {"type": "mention", "attrs": {"label": "Sam"}},
            {"type": "text", "text": "!"},
        ],
    })
    assert extract_text(node) == "Hello Sam!"


def test_parse_node_tolerates_malformed_input():
    """Test malformed nodes turn into empty elements."""
    assert parse_node("oops") == ElementNode(type="")
    assert parse_node(None) == ElementNode(type="")

    node = parse_node({"type": "doc", "content": "not a list"})
    assert node.content == ()

    text = parse_node({"type": "text", "text": 42})
    assert text == TextNode(text="")


def test_block_id_must_be_non_empty_string():
    """Test only string block ids count."""
    assert parse_node({"type": "paragraph", "attrs": {"blockId": 7}}).block_id is None
    assert parse_node({"type": "paragraph", "attrs": {"blockId": ""}}).block_id is None
    assert parse_node({"type": "paragraph", "attrs": "junk"}).block_id is None
    assert TextNode("x").block_id is None
