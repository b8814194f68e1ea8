from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from tagnotes.config import Settings
from tagnotes.db import connect, init_db
from tagnotes.web import create_app


@pytest.fixture
def settings(tmp_path):
    return Settings(db_path=tmp_path / "notes.db", log_level="WARNING")


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def conn(tmp_path):
    with connect(tmp_path / "repo.db") as c:
        init_db(c)
        yield c


def add_tag(client, tag_id, label):
    r = client.post("/tags", json={"id": tag_id, "label": label})
    assert r.status_code == 200, r.text


def add_note(client, note_id, title="T", markdown="M", **extra):
    r = client.post("/notes", json={"id": note_id, "title": title, "markdown": markdown, **extra})
    assert r.status_code == 200, r.text


def notes_by_id(client):
    r = client.get("/notes")
    assert r.status_code == 200
    return {n["id"]: n for n in r.json()}
