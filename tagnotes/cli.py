from __future__ import annotations

import argparse
import sys

import uvicorn

from .client import ApiError, NotesApi, NoteStore
from .config import load_settings
from .log import setup_logging


def _cmd_run(args: argparse.Namespace, settings) -> int:
    host = args.host or settings.host
    port = args.port or settings.port
    uvicorn.run(
        "tagnotes.web:create_app",
        factory=True,
        host=host,
        port=port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
    return 0


def _cmd_list(args: argparse.Namespace, settings) -> int:
    with NotesApi(args.api or settings.api_base) as api:
        store = NoteStore(api)
        store.refresh()
        for note in store.visible(title=args.title, tag_ids=args.tag):
            labels = ", ".join(t.label for t in note.tags)
            mark = "*" if note.pinned else " "
            print(f"{mark} {note.id}  {note.title}" + (f"  [{labels}]" if labels else ""))
    return 0


def _cmd_tags(args: argparse.Namespace, settings) -> int:
    with NotesApi(args.api or settings.api_base) as api:
        for tag in api.list_tags():
            print(f"{tag.id}  {tag.label}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="tagnotes", description="TagNotes - Markdown notes with tags.")
    sub = parser.add_subparsers(dest="cmd", required=True)

    run = sub.add_parser("run", help="Run the web server")
    run.add_argument("--host", default=None, help="Bind host (override TAGNOTES_HOST)")
    run.add_argument("--port", type=int, default=None, help="Bind port (override TAGNOTES_PORT)")
    run.set_defaults(func=_cmd_run)

    ls = sub.add_parser("list", help="List notes from a running server, pinned first")
    ls.add_argument("--title", default="", help="Case-insensitive title substring")
    ls.add_argument("--tag", action="append", default=[], help="Required tag id (repeatable)")
    ls.add_argument("--api", default=None, help="API base URL (override TAGNOTES_API_BASE)")
    ls.set_defaults(func=_cmd_list)

    tags = sub.add_parser("tags", help="List tags from a running server")
    tags.add_argument("--api", default=None, help="API base URL (override TAGNOTES_API_BASE)")
    tags.set_defaults(func=_cmd_tags)

    args = parser.parse_args(argv)
    settings = load_settings()
    setup_logging(settings.log_level)

    try:
        return args.func(args, settings)
    except ApiError as e:
        print(f"tagnotes: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
