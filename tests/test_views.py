from __future__ import annotations

from tagnotes.views import NoteView, RawNote, Tag, filter_notes, join_notes, sort_pinned_first, visible_notes

A = Tag(id="A", label="alpha")
B = Tag(id="B", label="beta")


def view(note_id, title, tags=(), pinned=False):
    return NoteView(id=note_id, title=title, markdown="", pinned=pinned, tags=list(tags))


def test_join_attaches_tags_in_collection_order():
    raw = [RawNote(id="n1", title="x", markdown="m", tagIds=["B", "A"])]
    joined = join_notes(raw, [A, B])
    assert [t.id for t in joined[0].tags] == ["A", "B"]
    assert joined[0].markdown == "m"


def test_join_drops_stale_tag_ids():
    raw = [RawNote(id="n1", title="x", markdown="m", tagIds=["A", "gone"])]
    assert join_notes(raw, [A])[0].tags == [A]


def test_filter_by_title_and_tags():
    notes = [
        view("1", "Grocery", [A]),
        view("2", "Groceries", [B]),
        view("3", "Work", [A, B]),
    ]
    assert [n.id for n in filter_notes(notes, title="Groc", tag_ids=["A"])] == ["1"]


def test_filter_title_is_case_insensitive():
    notes = [view("1", "Grocery"), view("2", "work")]
    assert [n.id for n in filter_notes(notes, title="gROC")] == ["1"]


def test_filter_requires_every_tag():
    notes = [view("1", "a", [A]), view("2", "b", [A, B])]
    assert [n.id for n in filter_notes(notes, tag_ids=["A", "B"])] == ["2"]


def test_empty_filter_keeps_everything():
    notes = [view("1", "a"), view("2", "b", [B])]
    assert filter_notes(notes) == notes


def test_pinned_note_sorts_before_earlier_unpinned():
    y = view("Y", "y")
    x = view("X", "x", pinned=True)
    assert [n.id for n in sort_pinned_first([y, x])] == ["X", "Y"]


def test_sort_is_stable_within_groups():
    notes = [view("1", "a"), view("2", "b", pinned=True), view("3", "c"), view("4", "d", pinned=True)]
    assert [n.id for n in sort_pinned_first(notes)] == ["2", "4", "1", "3"]


def test_visible_notes_filters_then_sorts():
    notes = [view("1", "Plan", [A]), view("2", "Plan B", [A], pinned=True), view("3", "Other", [A], pinned=True)]
    assert [n.id for n in visible_notes(notes, title="plan", tag_ids=["A"])] == ["2", "1"]
