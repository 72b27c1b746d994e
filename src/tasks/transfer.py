"""
Command line import and export.

Usage:
    python -m tasks.transfer --import linkding.json
    python -m tasks.transfer --export-html bookmarks.html
    python -m tasks.transfer --export-json -      # JSON to stdout

Exports go to stdout when no file (or "-") is given. The database is the one
configured through DATABASE_URL; its schema is created if it doesn't exist.
"""
import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import TextIO

from sqlalchemy.ext.asyncio import AsyncSession

from db.session import async_session_factory, init_db
from services.exceptions import InvalidInputError
from services.export_service import export_json, export_netscape_html
from services.import_service import ImportSummary, import_posts, load_import_document
from services.query_service import fetch_all_posts

logger = logging.getLogger(__name__)

STDOUT = "-"


async def run_import(path: Path, db: AsyncSession | None = None) -> ImportSummary:
    """
    Import a linkding JSON export file.

    Args:
        path: File holding a JSON array of bookmarks (or linkding's
            paginated ``{"results": [...]}`` response).
        db: Database session. If None, creates one from async_session_factory.

    Raises:
        InvalidInputError: If the file isn't a usable import document.
    """
    records = load_import_document(path.read_text(encoding="utf-8"))
    logger.info("Importing %d records from %s", len(records), path)

    if db is not None:
        return await import_posts(db, records)
    async with async_session_factory() as session:
        return await import_posts(session, records)


async def render_export(fmt: str, db: AsyncSession | None = None) -> str:
    """
    Render every bookmark as ``html`` (Netscape) or ``json``.

    Args:
        fmt: "html" or "json".
        db: Database session. If None, creates one from async_session_factory.
    """
    if db is not None:
        posts = await fetch_all_posts(db)
    else:
        async with async_session_factory() as session:
            posts = await fetch_all_posts(session)

    logger.info("Exporting %d bookmarks as %s", len(posts), fmt)
    if fmt == "json":
        return json.dumps(export_json(posts), indent=2, ensure_ascii=False) + "\n"
    return export_netscape_html(posts)


def write_output(content: str, destination: str, stdout: TextIO | None = None) -> None:
    """Write to a file, or to stdout for "-"."""
    if destination == STDOUT:
        (stdout or sys.stdout).write(content)
        return
    Path(destination).write_text(content, encoding="utf-8")
    logger.info("Wrote %s", destination)


def build_parser() -> argparse.ArgumentParser:
    """Command line options; exactly one action per run."""
    parser = argparse.ArgumentParser(
        description="Import a linkding JSON export or export all bookmarks.",
    )
    action = parser.add_mutually_exclusive_group(required=True)
    action.add_argument(
        "--import",
        dest="import_file",
        metavar="FILE",
        type=Path,
        help="Import bookmarks from a linkding JSON export",
    )
    action.add_argument(
        "--export-html",
        nargs="?",
        const=STDOUT,
        metavar="FILE",
        help="Export bookmarks as a Netscape bookmark file (default: stdout)",
    )
    action.add_argument(
        "--export-json",
        nargs="?",
        const=STDOUT,
        metavar="FILE",
        help="Export bookmarks as linkding JSON (default: stdout)",
    )
    return parser


async def run(args: argparse.Namespace) -> int:
    """Execute the parsed command. Returns the process exit code."""
    await init_db()

    if args.import_file is not None:
        try:
            summary = await run_import(args.import_file)
        except (OSError, InvalidInputError) as e:
            logger.error("Import of %s failed: %s", args.import_file, e)
            return 1
        for failure in summary.failures:
            logger.warning("Record %d (%s) skipped: %s", failure.index, failure.url, failure.reason)
        logger.info(
            "Imported %d bookmarks (%d created, %d updated), skipped %d",
            summary.imported,
            summary.created,
            summary.updated,
            summary.skipped,
        )
        return 0

    if args.export_html is not None:
        write_output(await render_export("html"), args.export_html)
    else:
        write_output(await render_export("json"), args.export_json)
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for running import/export as a script."""
    args = build_parser().parse_args(argv)

    # Logs go to stderr so an export on stdout stays clean
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
