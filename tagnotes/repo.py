from __future__ import annotations

import sqlite3
from collections.abc import Iterable
from datetime import datetime, timezone


def _now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def _note_row(row: sqlite3.Row, tag_ids: list[str]) -> dict:
    return {
        "id": str(row["id"]),
        "title": str(row["title"]),
        "markdown": str(row["markdown"]),
        "pinned": bool(row["pinned"]),
        "tagIds": tag_ids,
    }


def _link_tags(conn: sqlite3.Connection, note_id: str, tag_ids: Iterable[str]) -> None:
    # Ids that name no tag are skipped so a note never points at a missing tag.
    for tag_id in tag_ids:
        conn.execute(
            "INSERT OR IGNORE INTO note_tags(note_id, tag_id) SELECT ?, id FROM tags WHERE id = ?",
            (note_id, tag_id),
        )


def _get_tag_ids_for_note(conn: sqlite3.Connection, note_id: str) -> list[str]:
    rows = conn.execute(
        "SELECT tag_id FROM note_tags WHERE note_id = ? ORDER BY rowid",
        (note_id,),
    ).fetchall()
    return [str(r["tag_id"]) for r in rows]


def list_notes(conn: sqlite3.Connection) -> list[dict]:
    rows = conn.execute(
        "SELECT id, title, markdown, pinned FROM notes ORDER BY created_at, rowid"
    ).fetchall()
    links = conn.execute("SELECT note_id, tag_id FROM note_tags ORDER BY rowid").fetchall()

    by_note: dict[str, list[str]] = {}
    for link in links:
        by_note.setdefault(str(link["note_id"]), []).append(str(link["tag_id"]))

    return [_note_row(r, by_note.get(str(r["id"]), [])) for r in rows]


def get_note(conn: sqlite3.Connection, note_id: str) -> dict | None:
    row = conn.execute(
        "SELECT id, title, markdown, pinned FROM notes WHERE id = ?",
        (note_id,),
    ).fetchone()
    if not row:
        return None
    return _note_row(row, _get_tag_ids_for_note(conn, note_id))


def create_note(
    conn: sqlite3.Connection,
    note_id: str,
    title: str,
    markdown: str,
    pinned: bool = False,
    tag_ids: Iterable[str] = (),
) -> None:
    conn.execute(
        "INSERT INTO notes(id, title, markdown, pinned, created_at) VALUES (?, ?, ?, ?, ?)",
        (note_id, title, markdown, 1 if pinned else 0, _now_iso()),
    )
    _link_tags(conn, note_id, tag_ids)


def update_note(
    conn: sqlite3.Connection,
    note_id: str,
    title: str,
    markdown: str,
    pinned: bool,
    tag_ids: Iterable[str],
) -> bool:
    cur = conn.execute(
        "UPDATE notes SET title = ?, markdown = ?, pinned = ? WHERE id = ?",
        (title, markdown, 1 if pinned else 0, note_id),
    )
    if cur.rowcount == 0:
        return False
    conn.execute("DELETE FROM note_tags WHERE note_id = ?", (note_id,))
    _link_tags(conn, note_id, tag_ids)
    return True


def set_pinned(conn: sqlite3.Connection, note_id: str, pinned: bool) -> bool:
    cur = conn.execute("UPDATE notes SET pinned = ? WHERE id = ?", (1 if pinned else 0, note_id))
    return cur.rowcount > 0


def delete_note(conn: sqlite3.Connection, note_id: str) -> None:
    conn.execute("DELETE FROM note_tags WHERE note_id = ?", (note_id,))
    conn.execute("DELETE FROM notes WHERE id = ?", (note_id,))


def list_tags(conn: sqlite3.Connection) -> list[dict]:
    rows = conn.execute("SELECT id, label FROM tags ORDER BY rowid").fetchall()
    return [{"id": str(r["id"]), "label": str(r["label"])} for r in rows]


def create_tag(conn: sqlite3.Connection, tag_id: str, label: str) -> bool:
    cur = conn.execute("INSERT OR IGNORE INTO tags(id, label) VALUES (?, ?)", (tag_id, label))
    return cur.rowcount > 0


def update_tag(conn: sqlite3.Connection, tag_id: str, label: str) -> bool:
    cur = conn.execute("UPDATE tags SET label = ? WHERE id = ?", (label, tag_id))
    return cur.rowcount > 0


def delete_tag(conn: sqlite3.Connection, tag_id: str) -> None:
    conn.execute("DELETE FROM tags WHERE id = ?", (tag_id,))


def tag_usage(conn: sqlite3.Connection) -> dict[str, int]:
    rows = conn.execute(
        """
        SELECT t.id AS id, COUNT(nt.note_id) AS cnt
        FROM tags t
        LEFT JOIN note_tags nt ON nt.tag_id = t.id
        GROUP BY t.id
        """
    ).fetchall()
    return {str(r["id"]): int(r["cnt"]) for r in rows}
