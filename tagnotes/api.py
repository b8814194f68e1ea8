from __future__ import annotations

from fastapi import APIRouter

from .config import Settings
from .db import connect
from .log import get_logger
from .repo import (
    create_note,
    create_tag,
    delete_note,
    delete_tag,
    list_notes,
    list_tags,
    update_note,
    update_tag,
)
from .schemas import NoteCreate, NoteOut, NoteUpdate, Success, TagCreate, TagOut, TagUpdate

logger = get_logger(__name__)


def build_api_router(settings: Settings) -> APIRouter:
    """JSON endpoints for notes and tags.

    Each handler runs inside a single ``connect`` block, so a note and its
    tag links are committed or rolled back together.
    """
    router = APIRouter()

    # ---- notes ----

    @router.get("/notes", response_model=list[NoteOut])
    def api_list_notes() -> list[dict]:
        with connect(settings.db_path) as conn:
            return list_notes(conn)

    @router.post("/notes", response_model=Success)
    def api_create_note(body: NoteCreate) -> Success:
        with connect(settings.db_path) as conn:
            create_note(
                conn,
                note_id=body.id,
                title=body.title,
                markdown=body.markdown,
                pinned=body.pinned,
                tag_ids=body.tag_ids,
            )
        logger.debug("created note %s with %d tag(s)", body.id, len(body.tag_ids))
        return Success()

    @router.put("/notes/{note_id}", response_model=Success)
    def api_update_note(note_id: str, body: NoteUpdate) -> Success:
        with connect(settings.db_path) as conn:
            found = update_note(
                conn,
                note_id,
                title=body.title,
                markdown=body.markdown,
                pinned=body.pinned,
                tag_ids=body.tag_ids,
            )
        if not found:
            logger.debug("note %s does not exist, update ignored", note_id)
        return Success()

    @router.delete("/notes/{note_id}", response_model=Success)
    def api_delete_note(note_id: str) -> Success:
        with connect(settings.db_path) as conn:
            delete_note(conn, note_id)
        return Success()

    # ---- tags ----

    @router.get("/tags", response_model=list[TagOut])
    def api_list_tags() -> list[dict]:
        with connect(settings.db_path) as conn:
            return list_tags(conn)

    @router.post("/tags", response_model=Success)
    def api_create_tag(body: TagCreate) -> Success:
        with connect(settings.db_path) as conn:
            inserted = create_tag(conn, body.id, body.label)
        if not inserted:
            logger.debug("tag %s already exists, create ignored", body.id)
        return Success()

    @router.put("/tags/{tag_id}", response_model=Success)
    def api_update_tag(tag_id: str, body: TagUpdate) -> Success:
        with connect(settings.db_path) as conn:
            found = update_tag(conn, tag_id, body.label)
        if not found:
            logger.debug("tag %s does not exist, update ignored", tag_id)
        return Success()

    @router.delete("/tags/{tag_id}", response_model=Success)
    def api_delete_tag(tag_id: str) -> Success:
        with connect(settings.db_path) as conn:
            delete_tag(conn, tag_id)
        return Success()

    return router
