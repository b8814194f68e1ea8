from __future__ import annotations

from markdown_it import MarkdownIt
from mdit_py_plugins.footnote import footnote_plugin
from mdit_py_plugins.tasklists import tasklists_plugin


class MarkdownRenderer:
    """Render note bodies for the detail page. Raw HTML in a note is escaped."""

    def __init__(self) -> None:
        self._md = (
            MarkdownIt("commonmark", {"html": False, "typographer": True})
            .enable(["table", "strikethrough"])
            .use(tasklists_plugin, enabled=False)
            .use(footnote_plugin)
        )

    def render(self, text: str) -> str:
        return self._md.render(text or "")


def excerpt(text: str, limit: int = 160) -> str:
    flat = (text or "").strip().replace("\n", " ")
    if len(flat) > limit:
        return flat[:limit] + "…"
    return flat
