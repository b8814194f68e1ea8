from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class Settings:
    db_path: Path
    host: str = "127.0.0.1"
    port: int = 4000
    log_level: str = "INFO"
    cors_origins: tuple[str, ...] = field(default=("*",))
    api_base: str = "http://localhost:4000"


def _parse_origins(raw: str) -> tuple[str, ...]:
    origins = tuple(o.strip() for o in raw.split(",") if o.strip())
    return origins or ("*",)


def load_settings(environ: dict[str, str] | None = None) -> Settings:
    env = environ if environ is not None else os.environ
    db_path = Path(env.get("TAGNOTES_DB_PATH", "./notes.db")).expanduser()
    host = env.get("TAGNOTES_HOST", "127.0.0.1")
    port_raw = env.get("TAGNOTES_PORT", "4000")
    try:
        port = int(port_raw)
    except ValueError as e:
        raise ValueError(f"Invalid TAGNOTES_PORT: {port_raw}") from e

    log_level = env.get("TAGNOTES_LOG_LEVEL", "INFO").upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise ValueError(f"Invalid TAGNOTES_LOG_LEVEL: {log_level}")

    cors_origins = _parse_origins(env.get("TAGNOTES_CORS_ORIGINS", "*"))
    api_base = env.get("TAGNOTES_API_BASE", "http://localhost:4000").rstrip("/")

    return Settings(
        db_path=db_path,
        host=host,
        port=port,
        log_level=log_level,
        cors_origins=cors_origins,
        api_base=api_base,
    )
