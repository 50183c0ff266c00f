"""Tests for reply node classification and serialization."""

from conftest import node
from superai.session.content import (
    CodeBlock,
    OrderedList,
    PlainText,
    UnorderedList,
    classify,
    local_images,
    serialize_texts,
)


def test_ordered_list_uses_declared_start():
    content = classify(node("x\ny", ordered={"start": 5, "items": ["x", "y"]}))

    assert content == OrderedList(5, ("x", "y"))
    assert content.lines() == ["5. x", "6. y"]


def test_ordered_list_without_start_counts_from_one():
    content = classify(node(ordered={"start": None, "items": ["a", "b", "c"]}))

    assert content.render() == "1. a\n2. b\n3. c"


def test_unordered_list_renders_dashes():
    content = classify(node(unordered=[" first ", "second"]))

    assert isinstance(content, UnorderedList)
    assert content.render() == "- first\n- second"


def test_code_block_wins_over_lists():
    """Test that a node with code and a list is serialized as code."""
    content = classify(node("print(1)", code="  print(1)\n", unordered=["x"]))

    assert isinstance(content, CodeBlock)
    assert content.render() == "```\nprint(1)\n```"


def test_empty_list_falls_back_to_text():
    content = classify(node("  plain answer ", ordered={"start": 1, "items": []}))

    assert content == PlainText("  plain answer ")
    assert content.render() == "plain answer"


def test_serialize_texts_drops_empty_nodes():
    texts = serialize_texts([node("A"), node("   "), node(unordered=["b"])])

    assert texts == ["A", "- b"]


def test_only_blob_images_are_kept():
    images = local_images(
        [node(images=["blob:https://www.superai.id/1f2e", "https://cdn.example.com/logo.png"])]
    )

    assert images == ["blob:https://www.superai.id/1f2e"]
