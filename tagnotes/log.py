from __future__ import annotations

import logging
import sys

FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger and the uvicorn loggers to the same level."""
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=numeric, format=FORMAT, stream=sys.stdout)
    logging.getLogger("tagnotes").setLevel(numeric)
    logging.getLogger("uvicorn").setLevel(numeric)
    logging.getLogger("uvicorn.access").setLevel(numeric)


def get_logger(name: str | None = None) -> logging.Logger:
    if not name:
        return logging.getLogger("tagnotes")
    if name == "tagnotes" or name.startswith("tagnotes."):
        return logging.getLogger(name)
    return logging.getLogger(f"tagnotes.{name}")
