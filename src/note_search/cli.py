"""Command line entry point: index a JSON Lines file of notes and query it."""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
import sys

import orjson

from note_search.client import NoteSearchClient
from note_search.config import Settings
from note_search.errors import NoteSearchError
from note_search.observability import configure_logging


logger = logging.getLogger(__name__)


def load_notes(path: Path) -> list[dict]:
    """Read one ``{"id": ..., "text": ...}`` object per non-blank line."""
    notes: list[dict] = []
    with path.open("rb") as handle:
        for line_no, line in enumerate(handle, start=1):
            if not line.strip():
                continue
            try:
                notes.append(orjson.loads(line))
            except orjson.JSONDecodeError as exc:
                raise ValueError(f"{path}:{line_no}: invalid JSON ({exc})") from exc
    return notes


async def run(notes_path: Path, terms: list[str], *, rank: bool, limit: int | None, settings: Settings) -> dict:
    notes = load_notes(notes_path)
    async with NoteSearchClient(settings) as client:
        await client.index(notes)
        logger.info("Indexed %d notes from %s", len(notes), notes_path)
        if rank:
            ranked = await client.rank(terms, limit=limit)
            return {"ranked": [item.to_dict() for item in ranked]}
        hits = await client.search(terms)
        return {term: [posting.to_dict() for posting in postings] for term, postings in hits.items()}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="note-search", description=__doc__)
    parser.add_argument("notes", type=Path, help="JSON Lines file of notes")
    parser.add_argument("terms", nargs="+", help="Literal terms to look up")
    parser.add_argument("--rank", action="store_true", help="Rank matching notes with BM25")
    parser.add_argument("--limit", type=int, default=None, help="Maximum ranked notes to print")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings()
    configure_logging(settings.log_level, settings.log_json)

    try:
        payload = asyncio.run(run(args.notes, args.terms, rank=args.rank, limit=args.limit, settings=settings))
    except (NoteSearchError, OSError, ValueError) as exc:
        logger.error("note-search failed: %s", exc)
        return 1

    sys.stdout.write(orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode("utf-8") + "\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
