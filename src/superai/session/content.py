"""
Reply node content kinds and their text serialization.

A reply node is read from the page as a plain snapshot dict:

    {"text": str, "code": str | None,
     "ordered": {"start": int, "items": [str]} | None,
     "unordered": [str], "images": [str]}

classify() turns it into exactly one content kind; each kind knows how to
render itself.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Union

BLOB_PREFIX = "blob:"


@dataclass(frozen=True)
class CodeBlock:
    text: str

    def render(self) -> str:
        return f"```\n{self.text.strip()}\n```"


@dataclass(frozen=True)
class OrderedList:
    start: int
    items: tuple[str, ...]

    def lines(self) -> list[str]:
        return [f"{self.start + i}. {item}" for i, item in enumerate(self.items)]

    def render(self) -> str:
        return "\n".join(self.lines())


@dataclass(frozen=True)
class UnorderedList:
    items: tuple[str, ...]

    def lines(self) -> list[str]:
        return [f"- {item}" for item in self.items]

    def render(self) -> str:
        return "\n".join(self.lines())


@dataclass(frozen=True)
class PlainText:
    text: str

    def render(self) -> str | None:
        """Trimmed text, or None when there is nothing left."""
        trimmed = self.text.strip()
        return trimmed or None


ReplyContent = Union[CodeBlock, OrderedList, UnorderedList, PlainText]


def _items(raw: Any) -> tuple[str, ...]:
    if not isinstance(raw, (list, tuple)):
        return ()
    return tuple(str(item).strip() for item in raw)


def _start(raw: Any) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return 1


def classify(snapshot: dict[str, Any]) -> ReplyContent:
    """
    Pick the content kind of one reply node.

    Precedence: code block, ordered list, unordered list, plain text.
    An ordered list without a usable start attribute starts at 1.
    """
    code = snapshot.get("code")
    if code is not None:
        return CodeBlock(str(code))

    ordered = snapshot.get("ordered")
    if isinstance(ordered, dict):
        items = _items(ordered.get("items"))
        if items:
            return OrderedList(_start(ordered.get("start", 1)), items)

    unordered = _items(snapshot.get("unordered"))
    if unordered:
        return UnorderedList(unordered)

    return PlainText(str(snapshot.get("text") or ""))


def serialize_texts(snapshots: Iterable[dict[str, Any]]) -> list[str]:
    """Rendered text of each node, skipping nodes that render empty."""
    texts = []
    for snapshot in snapshots:
        rendered = classify(snapshot).render()
        if rendered:
            texts.append(rendered)
    return texts


def local_images(snapshots: Iterable[dict[str, Any]]) -> list[str]:
    """Image sources that are client-local blob references, in node order."""
    images = []
    for snapshot in snapshots:
        for src in snapshot.get("images") or ():
            if isinstance(src, str) and src.startswith(BLOB_PREFIX):
                images.append(src)
    return images
