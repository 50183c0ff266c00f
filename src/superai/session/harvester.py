"""
Response Harvester: collect the reply produced by the last exchange.

The reply region is read as a list of node snapshots (see content.py). The
newest separator reply splits old from new: everything strictly after the
last node containing the separator marker belongs to this exchange.
"""

from __future__ import annotations

import asyncio
from typing import Any, Sequence

from ..envelope import Envelope
from ..errors import ModelUnidentified, NoNewContent, StaleElement
from .base import SessionComponent
from .content import local_images, serialize_texts
from .state import ChatMode

# Page function: snapshot every reply node inside the reply container
SNAPSHOT_JS = """
([parentSel, childSel]) => {
  const parent = document.querySelector(parentSel);
  if (!parent) return [];
  return Array.from(parent.querySelectorAll(childSel)).map((el) => {
    const code = el.querySelector("pre code");
    const ol = el.querySelector("ol");
    const olItems = Array.from(el.querySelectorAll("ol > li")).map((li) => li.textContent.trim());
    const ulItems = Array.from(el.querySelectorAll("ul > li")).map((li) => li.textContent.trim());
    return {
      text: el.innerText || "",
      code: code ? code.textContent : null,
      ordered: olItems.length ? { start: parseInt(ol.getAttribute("start") || "1", 10), items: olItems } : null,
      unordered: ulItems,
      images: Array.from(el.querySelectorAll("img")).map((img) => img.src),
    };
  });
}
"""


def last_separator_index(snapshots: Sequence[dict[str, Any]], marker: str) -> int:
    """Index of the last node whose text contains marker, or -1."""
    for i in range(len(snapshots) - 1, -1, -1):
        if marker in str(snapshots[i].get("text") or ""):
            return i
    return -1


def select_new_nodes(
    snapshots: Sequence[dict[str, Any]],
    marker: str,
    mode: ChatMode = ChatMode.NEW,
    baseline: int = 0,
) -> list[dict[str, Any]]:
    """
    The nodes that belong to the current exchange.

    With a separator present: every node strictly after the last one.
    Without one: a resumed thread cuts at the reply count recorded when it
    was opened (if that count still lies inside the list); otherwise every
    node is new.
    """
    cut = last_separator_index(snapshots, marker)
    if cut >= 0:
        return list(snapshots[cut + 1 :])
    if mode is ChatMode.RECENT and 0 < baseline <= len(snapshots):
        return list(snapshots[baseline:])
    return list(snapshots)


class ResponseHarvester(SessionComponent):
    """Reads the active model name and the new reply nodes."""

    async def harvest(self, last_message_sent: str) -> Envelope:
        """
        Collect the new reply.

        Returns:
            Envelope with data {"model", "texts", "images"} on success;
            MODEL_UNIDENTIFIED, or NO_NEW_CONTENT carrying data {"model"}
        """
        model: str | None = None
        try:
            model = await self._read_model_name()
            nodes = await self._wait_for_reply()

            texts = serialize_texts(nodes)
            images = local_images(nodes)
            if not texts and not images:
                raise NoNewContent("No new responses found")

            self._logger.info(
                "Harvested %d text block(s) and %d image(s) from %s", len(texts), len(images), model
            )
            return Envelope.ok(
                "New responses retrieved",
                prompt=last_message_sent,
                data={"model": model, "texts": texts, "images": images},
            )
        except Exception as e:
            data = {"model": model} if model is not None else None
            return self._failed(e, "Error retrieving responses", prompt=last_message_sent, data=data)

    async def _read_model_name(self) -> str:
        page = self.session.require_page()
        trigger = await page.query(self.selectors.model_trigger)
        if trigger is None:
            raise ModelUnidentified("AI model could not be identified.")
        try:
            name = (await trigger.inner_text()).strip()
        except StaleElement as e:
            raise ModelUnidentified("AI model could not be identified.") from e
        if not name:
            raise ModelUnidentified("AI model could not be identified.")
        return name

    async def _snapshot(self) -> list[dict[str, Any]]:
        page = self.session.require_page()
        raw = await page.evaluate(
            SNAPSHOT_JS, [self.selectors.reply_container, self.selectors.reply_item]
        )
        nodes = [n for n in raw or () if isinstance(n, dict)]
        return select_new_nodes(
            nodes,
            self.config.separator.marker,
            self.session.mode,
            self.session.baseline_reply_count,
        )

    async def _wait_for_reply(self) -> list[dict[str, Any]]:
        """
        Poll until the new nodes render something and are unchanged between
        two polls.

        Streaming replies grow node by node and may start as empty
        placeholders; on expiry of reply_wait_s the latest snapshot is
        returned as is. If the reply to the closing separator renders while
        polling, the new set empties again and the last renderable set is the
        reply.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeouts.reply_wait_s

        previous: list[dict[str, Any]] = []
        while True:
            current = await self._snapshot()
            if _renders(current) and current == previous:
                return current
            if _renders(previous) and not current:
                return previous
            if loop.time() >= deadline:
                self._logger.warning("Reply did not settle within %ss", self.timeouts.reply_wait_s)
                return current
            previous = current
            await self._pause(self.timeouts.reply_poll_s)


def _renders(snapshots: list[dict[str, Any]]) -> bool:
    return bool(serialize_texts(snapshots) or local_images(snapshots))
