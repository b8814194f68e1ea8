from __future__ import annotations

from collections.abc import Iterable, Sequence

from pydantic import BaseModel, Field

from .schemas import NoteOut, TagOut

RawNote = NoteOut
Tag = TagOut


class NoteView(BaseModel):
    id: str
    title: str
    markdown: str
    pinned: bool = False
    tags: list[Tag] = Field(default_factory=list)

    @property
    def tag_ids(self) -> set[str]:
        return {t.id for t in self.tags}


def join_notes(notes: Iterable[RawNote], tags: Sequence[Tag]) -> list[NoteView]:
    # Ids that no longer name a tag are dropped.
    out: list[NoteView] = []
    for note in notes:
        wanted = set(note.tag_ids)
        out.append(
            NoteView(
                id=note.id,
                title=note.title,
                markdown=note.markdown,
                pinned=note.pinned,
                tags=[t for t in tags if t.id in wanted],
            )
        )
    return out


def filter_notes(notes: Iterable[NoteView], title: str = "", tag_ids: Iterable[str] = ()) -> list[NoteView]:
    needle = (title or "").lower()
    required = set(tag_ids)
    return [
        n
        for n in notes
        if (not needle or needle in n.title.lower()) and required <= n.tag_ids
    ]


def sort_pinned_first(notes: Iterable[NoteView]) -> list[NoteView]:
    # sorted() is stable, so unpinned notes keep their incoming order.
    return sorted(notes, key=lambda n: not n.pinned)


def visible_notes(notes: Iterable[NoteView], title: str = "", tag_ids: Iterable[str] = ()) -> list[NoteView]:
    return sort_pinned_first(filter_notes(notes, title=title, tag_ids=tag_ids))
