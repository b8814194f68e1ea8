from __future__ import annotations

import uuid
from collections.abc import Iterable
from dataclasses import dataclass

import httpx
from pydantic import ValidationError

from .log import get_logger
from .views import NoteView, RawNote, Tag, join_notes, visible_notes

logger = get_logger(__name__)


class ApiError(Exception):
    pass


@dataclass(frozen=True)
class Result:
    ok: bool
    error: str | None = None

    @classmethod
    def success(cls) -> Result:
        return cls(ok=True)

    @classmethod
    def failure(cls, message: str) -> Result:
        return cls(ok=False, error=message)

    def __bool__(self) -> bool:
        return self.ok


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return f"{response.request.method} {response.request.url.path} failed {response.status_code}"


class NotesApi:
    def __init__(
        self,
        base_url: str = "http://localhost:4000",
        http: httpx.Client | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._owns_http = http is None
        self._http = http or httpx.Client(base_url=base_url, timeout=timeout)

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> NotesApi:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _get(self, path: str) -> list:
        try:
            r = self._http.get(path)
        except httpx.HTTPError as e:
            raise ApiError(f"GET {path}: {e}") from e
        if r.is_error:
            raise ApiError(_error_message(r))
        try:
            return r.json()
        except ValueError as e:
            raise ApiError(f"GET {path}: response is not JSON") from e

    def _send(self, method: str, path: str, json: dict | None = None) -> Result:
        try:
            r = self._http.request(method, path, json=json)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            return Result.failure(str(e) or type(e).__name__)
        if r.is_error:
            message = _error_message(r)
            logger.warning("%s %s rejected: %s", method, path, message)
            return Result.failure(message)
        return Result.success()

    def list_notes(self) -> list[RawNote]:
        try:
            return [RawNote.model_validate(n) for n in self._get("/notes")]
        except ValidationError as e:
            raise ApiError(f"GET /notes: unexpected response: {e.error_count()} error(s)") from e

    def list_tags(self) -> list[Tag]:
        try:
            return [Tag.model_validate(t) for t in self._get("/tags")]
        except ValidationError as e:
            raise ApiError(f"GET /tags: unexpected response: {e.error_count()} error(s)") from e

    def create_note(self, note: RawNote) -> Result:
        return self._send("POST", "/notes", note.model_dump(by_alias=True))

    def update_note(self, note: RawNote) -> Result:
        body = note.model_dump(by_alias=True, exclude={"id"})
        return self._send("PUT", f"/notes/{note.id}", body)

    def delete_note(self, note_id: str) -> Result:
        return self._send("DELETE", f"/notes/{note_id}")

    def create_tag(self, tag: Tag) -> Result:
        return self._send("POST", "/tags", tag.model_dump())

    def update_tag(self, tag_id: str, label: str) -> Result:
        return self._send("PUT", f"/tags/{tag_id}", {"label": label})

    def delete_tag(self, tag_id: str) -> Result:
        return self._send("DELETE", f"/tags/{tag_id}")


class NoteStore:
    def __init__(self, api: NotesApi) -> None:
        self.api = api
        self.notes: list[RawNote] = []
        self.tags: list[Tag] = []

    @property
    def notes_with_tags(self) -> list[NoteView]:
        return join_notes(self.notes, self.tags)

    def visible(self, title: str = "", tag_ids: Iterable[str] = ()) -> list[NoteView]:
        return visible_notes(self.notes_with_tags, title=title, tag_ids=tag_ids)

    def refresh(self) -> None:
        notes = self.api.list_notes()
        tags = self.api.list_tags()
        self.notes, self.tags = notes, tags

    def _after(self, result: Result) -> Result:
        try:
            self.refresh()
        except ApiError as e:
            logger.warning("refresh after mutation failed: %s", e)
            if result.ok:
                return Result.failure(f"saved, but refresh failed: {e}")
        return result

    def get(self, note_id: str) -> NoteView | None:
        for note in self.notes_with_tags:
            if note.id == note_id:
                return note
        return None

    def create_note(
        self,
        title: str,
        markdown: str,
        tag_ids: Iterable[str] = (),
        pinned: bool = False,
        note_id: str | None = None,
    ) -> Result:
        note = RawNote(
            id=note_id or str(uuid.uuid4()),
            title=title,
            markdown=markdown,
            pinned=pinned,
            tag_ids=list(tag_ids),
        )
        return self._after(self.api.create_note(note))

    def update_note(
        self,
        note_id: str,
        title: str,
        markdown: str,
        tag_ids: Iterable[str],
        pinned: bool = False,
    ) -> Result:
        note = RawNote(id=note_id, title=title, markdown=markdown, pinned=pinned, tag_ids=list(tag_ids))
        return self._after(self.api.update_note(note))

    def delete_note(self, note_id: str) -> Result:
        return self._after(self.api.delete_note(note_id))

    def toggle_pin(self, note_id: str) -> Result:
        note = next((n for n in self.notes if n.id == note_id), None)
        if note is None:
            return Result.failure(f"unknown note {note_id}")
        flipped = note.model_copy(update={"pinned": not note.pinned})
        return self._after(self.api.update_note(flipped))

    def add_tag(self, label: str, tag_id: str | None = None) -> tuple[Tag, Result]:
        tag = Tag(id=tag_id or str(uuid.uuid4()), label=label)
        return tag, self._after(self.api.create_tag(tag))

    def update_tag(self, tag_id: str, label: str) -> Result:
        return self._after(self.api.update_tag(tag_id, label))

    def delete_tag(self, tag_id: str) -> Result:
        return self._after(self.api.delete_tag(tag_id))
