from __future__ import annotations

import time
import uuid
from pathlib import Path

from fastapi import FastAPI, Form, HTTPException, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from markupsafe import Markup

from .api import build_api_router
from .config import Settings, load_settings
from .db import connect, init_db
from .errors import make_exception_handlers
from .log import get_logger, setup_logging
from .markdown import MarkdownRenderer, excerpt
from .repo import (
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
from .views import NoteView, RawNote, Tag, join_notes, visible_notes

logger = get_logger(__name__)
access_logger = get_logger("access")


def parse_labels(raw: str) -> list[str]:
    """Split a comma-separated list of new tag labels, dropping blanks and repeats."""
    if not raw:
        return []
    out: list[str] = []
    seen = set()
    for label in (t.strip() for t in raw.replace("，", ",").split(",")):
        if label and label.lower() not in seen:
            seen.add(label.lower())
            out.append(label)
    return out


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()
    setup_logging(settings.log_level)

    base_dir = Path(__file__).parent
    templates = Jinja2Templates(directory=str(base_dir / "templates"))
    templates.env.filters["excerpt"] = excerpt
    static_dir = base_dir / "static"
    md = MarkdownRenderer()

    app = FastAPI(
        title="TagNotes",
        version="0.1.0",
        exception_handlers=make_exception_handlers(),
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")

    with connect(settings.db_path) as conn:
        init_db(conn)

    @app.on_event("startup")
    def _startup() -> None:
        logger.info("serving notes from %s", settings.db_path)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        path = request.url.path
        if path == "/healthz" or path.startswith("/static/"):
            return response
        status = response.status_code
        level = "error" if status >= 500 else "warning" if status >= 400 else "info"
        getattr(access_logger, level)(
            "%s %s %d %.1fms",
            request.method,
            path,
            status,
            (time.perf_counter() - start) * 1000,
        )
        return response

    app.include_router(build_api_router(settings))

    def _is_htmx(request: Request) -> bool:
        return request.headers.get("HX-Request", "").lower() == "true"

    def _load(conn) -> tuple[list[NoteView], list[Tag]]:
        tags = [Tag.model_validate(t) for t in list_tags(conn)]
        notes = [RawNote.model_validate(n) for n in list_notes(conn)]
        return join_notes(notes, tags), tags

    def _load_one(conn, note_id: str) -> NoteView:
        row = get_note(conn, note_id)
        if not row:
            raise HTTPException(status_code=404, detail="note not found")
        tags = [Tag.model_validate(t) for t in list_tags(conn)]
        return join_notes([RawNote.model_validate(row)], tags)[0]

    def _resolve_tags(conn, tag_ids: list[str], new_tags: str) -> list[str]:
        ids = list(dict.fromkeys(tag_ids))
        for label in parse_labels(new_tags):
            tag_id = str(uuid.uuid4())
            create_tag(conn, tag_id, label)
            ids.append(tag_id)
        return ids

    def _render_form(
        request: Request,
        mode: str,
        note: dict,
        tags: list[Tag],
        error: str | None = None,
        status_code: int = 200,
    ) -> HTMLResponse:
        return templates.TemplateResponse(
            request,
            "note_form.html",
            {"mode": mode, "note": note, "tags": tags, "error": error},
            status_code=status_code,
        )

    # ---- pages ----

    @app.get("/", response_class=HTMLResponse)
    def home(request: Request, title: str = "", tag: list[str] = Query(default=[])) -> HTMLResponse:
        with connect(settings.db_path) as conn:
            notes, tags = _load(conn)
        return templates.TemplateResponse(
            request,
            "index.html",
            {
                "notes": visible_notes(notes, title=title, tag_ids=tag),
                "tags": tags,
                "title_filter": title,
                "active_tags": set(tag),
            },
        )

    @app.get("/new", response_class=HTMLResponse)
    def new_note_form(request: Request) -> HTMLResponse:
        with connect(settings.db_path) as conn:
            tags = [Tag.model_validate(t) for t in list_tags(conn)]
        blank = {"id": None, "title": "", "markdown": "", "pinned": False, "tag_ids": set()}
        return _render_form(request, "create", blank, tags)

    @app.post("/new")
    def create_note_action(
        request: Request,
        title: str = Form(""),
        markdown: str = Form(""),
        pinned: bool = Form(False),
        tag_ids: list[str] = Form(default=[]),
        new_tags: str = Form(""),
    ) -> Response:
        title, markdown = title.strip(), markdown.strip()
        with connect(settings.db_path) as conn:
            if not title or not markdown:
                tags = [Tag.model_validate(t) for t in list_tags(conn)]
                draft = {"id": None, "title": title, "markdown": markdown, "pinned": pinned, "tag_ids": set(tag_ids)}
                return _render_form(request, "create", draft, tags, "Title and body are required.", 400)
            ids = _resolve_tags(conn, tag_ids, new_tags)
            create_note(conn, str(uuid.uuid4()), title=title, markdown=markdown, pinned=pinned, tag_ids=ids)
        return RedirectResponse(url="/", status_code=303)

    @app.get("/note/{note_id}", response_class=HTMLResponse)
    def view_note(request: Request, note_id: str) -> HTMLResponse:
        with connect(settings.db_path) as conn:
            note = _load_one(conn, note_id)
        # safe because the renderer escapes raw HTML
        body_html = Markup(md.render(note.markdown))
        return templates.TemplateResponse(request, "note_view.html", {"note": note, "body_html": body_html})

    @app.get("/note/{note_id}/edit", response_class=HTMLResponse)
    def edit_note_form(request: Request, note_id: str) -> HTMLResponse:
        with connect(settings.db_path) as conn:
            note = _load_one(conn, note_id)
            tags = [Tag.model_validate(t) for t in list_tags(conn)]
        current = {
            "id": note.id,
            "title": note.title,
            "markdown": note.markdown,
            "pinned": note.pinned,
            "tag_ids": note.tag_ids,
        }
        return _render_form(request, "edit", current, tags)

    @app.post("/note/{note_id}/edit")
    def update_note_action(
        request: Request,
        note_id: str,
        title: str = Form(""),
        markdown: str = Form(""),
        pinned: bool = Form(False),
        tag_ids: list[str] = Form(default=[]),
        new_tags: str = Form(""),
    ) -> Response:
        title, markdown = title.strip(), markdown.strip()
        with connect(settings.db_path) as conn:
            if not get_note(conn, note_id):
                raise HTTPException(status_code=404, detail="note not found")
            if not title or not markdown:
                tags = [Tag.model_validate(t) for t in list_tags(conn)]
                draft = {"id": note_id, "title": title, "markdown": markdown, "pinned": pinned, "tag_ids": set(tag_ids)}
                return _render_form(request, "edit", draft, tags, "Title and body are required.", 400)
            ids = _resolve_tags(conn, tag_ids, new_tags)
            update_note(conn, note_id, title=title, markdown=markdown, pinned=pinned, tag_ids=ids)
        return RedirectResponse(url=f"/note/{note_id}", status_code=303)

    @app.post("/note/{note_id}/pin")
    def pin_note_action(request: Request, note_id: str) -> Response:
        with connect(settings.db_path) as conn:
            row = get_note(conn, note_id)
            if not row:
                raise HTTPException(status_code=404, detail="note not found")
            set_pinned(conn, note_id, not row["pinned"])
            note = _load_one(conn, note_id)
        if _is_htmx(request):
            return templates.TemplateResponse(request, "_note_card.html", {"n": note})
        return RedirectResponse(url="/", status_code=303)

    @app.post("/note/{note_id}/delete")
    def delete_note_action(request: Request, note_id: str) -> Response:
        with connect(settings.db_path) as conn:
            delete_note(conn, note_id)
        if _is_htmx(request):
            return HTMLResponse("", status_code=200)
        return RedirectResponse(url="/", status_code=303)

    @app.get("/manage/tags", response_class=HTMLResponse)
    def manage_tags_page(request: Request) -> HTMLResponse:
        with connect(settings.db_path) as conn:
            tags = [Tag.model_validate(t) for t in list_tags(conn)]
            usage = tag_usage(conn)
        return templates.TemplateResponse(request, "tags.html", {"tags": tags, "usage": usage})

    @app.post("/manage/tags/{tag_id}")
    def rename_tag_action(tag_id: str, label: str = Form("")) -> Response:
        label = label.strip()
        if label:
            with connect(settings.db_path) as conn:
                if not update_tag(conn, tag_id, label):
                    raise HTTPException(status_code=404, detail="tag not found")
        return RedirectResponse(url="/manage/tags", status_code=303)

    @app.post("/manage/tags/{tag_id}/delete")
    def delete_tag_action(tag_id: str) -> Response:
        with connect(settings.db_path) as conn:
            delete_tag(conn, tag_id)
        return RedirectResponse(url="/manage/tags", status_code=303)

    @app.get("/healthz")
    def healthz() -> dict:
        return {"ok": True, "db": str(settings.db_path)}

    return app

