from __future__ import annotations

import sqlite3

import pytest

from tagnotes.db import connect, init_db
from tagnotes.repo import (
    create_note,
    create_tag,
    delete_note,
    delete_tag,
    get_note,
    list_notes,
    list_tags,
    set_pinned,
    tag_usage,
    update_note,
    update_tag,
)


def test_create_and_get_note(conn):
    create_tag(conn, "t1", "a")
    create_note(conn, "n1", "Title", "Body", pinned=True, tag_ids=["t1"])

    assert get_note(conn, "n1") == {
        "id": "n1",
        "title": "Title",
        "markdown": "Body",
        "pinned": True,
        "tagIds": ["t1"],
    }
    assert get_note(conn, "missing") is None


def test_tag_ids_follow_link_order(conn):
    for tid in ("t1", "t2", "t3"):
        create_tag(conn, tid, tid)
    create_note(conn, "n1", "T", "M", tag_ids=["t3", "t1", "t2"])
    assert list_notes(conn)[0]["tagIds"] == ["t3", "t1", "t2"]


def test_update_note_reports_missing(conn):
    assert update_note(conn, "ghost", "T", "M", False, []) is False
    assert list_notes(conn) == []


def test_set_pinned(conn):
    create_note(conn, "n1", "T", "M")
    assert set_pinned(conn, "n1", True) is True
    assert get_note(conn, "n1")["pinned"] is True
    assert set_pinned(conn, "ghost", True) is False


def test_create_tag_insert_or_ignore(conn):
    assert create_tag(conn, "t1", "first") is True
    assert create_tag(conn, "t1", "second") is False
    assert list_tags(conn) == [{"id": "t1", "label": "first"}]


def test_update_and_delete_tag(conn):
    create_tag(conn, "t1", "a")
    assert update_tag(conn, "t1", "b") is True
    assert update_tag(conn, "nope", "b") is False
    delete_tag(conn, "t1")
    delete_tag(conn, "t1")
    assert list_tags(conn) == []


def test_cascade_on_tag_delete(conn):
    create_tag(conn, "t1", "a")
    create_note(conn, "n1", "T", "M", tag_ids=["t1"])
    delete_tag(conn, "t1")
    assert get_note(conn, "n1")["tagIds"] == []
    assert conn.execute("SELECT COUNT(*) FROM note_tags").fetchone()[0] == 0


def test_deleting_note_row_cascades_links(conn):
    create_tag(conn, "t1", "a")
    create_note(conn, "n1", "T", "M", tag_ids=["t1"])
    conn.execute("DELETE FROM notes WHERE id = ?", ("n1",))
    assert conn.execute("SELECT COUNT(*) FROM note_tags").fetchone()[0] == 0


def test_delete_note(conn):
    create_tag(conn, "t1", "a")
    create_note(conn, "n1", "T", "M", tag_ids=["t1"])
    delete_note(conn, "n1")
    delete_note(conn, "n1")
    assert list_notes(conn) == []
    assert list_tags(conn) == [{"id": "t1", "label": "a"}]


def test_tag_usage(conn):
    create_tag(conn, "t1", "a")
    create_tag(conn, "t2", "b")
    create_note(conn, "n1", "T", "M", tag_ids=["t1"])
    create_note(conn, "n2", "T", "M", tag_ids=["t1", "t2"])
    assert tag_usage(conn) == {"t1": 2, "t2": 1}


def test_link_rows_reject_unknown_note(conn):
    create_tag(conn, "t1", "a")
    with pytest.raises(sqlite3.IntegrityError):
        conn.execute("INSERT INTO note_tags(note_id, tag_id) VALUES ('ghost', 't1')")


def test_failed_write_rolls_back_note_and_links(tmp_path):
    db_path = tmp_path / "atomic.db"
    with connect(db_path) as c:
        init_db(c)
        create_tag(c, "t1", "a")

    with pytest.raises(RuntimeError):
        with connect(db_path) as c:
            create_note(c, "n1", "T", "M", tag_ids=["t1"])
            raise RuntimeError("boom")

    with connect(db_path) as c:
        assert list_notes(c) == []
        assert c.execute("SELECT COUNT(*) FROM note_tags").fetchone()[0] == 0
