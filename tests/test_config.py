from __future__ import annotations

from pathlib import Path

import pytest

from tagnotes.config import load_settings


def test_defaults():
    s = load_settings({})
    assert s.db_path == Path("./notes.db")
    assert s.port == 4000
    assert s.log_level == "INFO"
    assert s.cors_origins == ("*",)
    assert s.api_base == "http://localhost:4000"


def test_overrides():
    s = load_settings(
        {
            "TAGNOTES_DB_PATH": "/tmp/x.db",
            "TAGNOTES_PORT": "9000",
            "TAGNOTES_LOG_LEVEL": "debug",
            "TAGNOTES_CORS_ORIGINS": "http://a, http://b,",
            "TAGNOTES_API_BASE": "http://notes:9000/",
        }
    )
    assert s.db_path == Path("/tmp/x.db")
    assert s.port == 9000
    assert s.log_level == "DEBUG"
    assert s.cors_origins == ("http://a", "http://b")
    assert s.api_base == "http://notes:9000"


def test_invalid_port():
    with pytest.raises(ValueError, match="TAGNOTES_PORT"):
        load_settings({"TAGNOTES_PORT": "eighty"})


def test_invalid_log_level():
    with pytest.raises(ValueError, match="TAGNOTES_LOG_LEVEL"):
        load_settings({"TAGNOTES_LOG_LEVEL": "loud"})
