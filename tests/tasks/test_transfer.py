"""Tests for the command line import/export task."""
import io
import json
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from schemas.bookmark import PostCreate
from services.exceptions import InvalidInputError
from services.post_service import create_post, get_post_by_url
from tasks.transfer import STDOUT, build_parser, render_export, run_import, write_output


class TestParser:
    """Tests for command line parsing."""

    def test_import_file(self) -> None:
        """--import takes a path."""
        args = build_parser().parse_args(["--import", "export.json"])
        assert args.import_file == Path("export.json")
        assert args.export_html is None

    def test_export_defaults_to_stdout(self) -> None:
        """--export-html without a file writes to stdout."""
        args = build_parser().parse_args(["--export-html"])
        assert args.export_html == STDOUT

    def test_export_json_to_file(self) -> None:
        """--export-json accepts a destination."""
        args = build_parser().parse_args(["--export-json", "out.json"])
        assert args.export_json == "out.json"

    def test_actions_are_exclusive(self) -> None:
        """Only one action per run."""
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--import", "a.json", "--export-html"])

    def test_action_required(self) -> None:
        """Running without an action is an error."""
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


async def test__run_import__reads_file(db_session: AsyncSession, tmp_path: Path) -> None:
    """A linkding export file is imported and summarized."""
    export_file = tmp_path / "linkding.json"
    export_file.write_text(
        json.dumps(
            [
                {"url": "https://a.example", "title": "A", "tag_names": ["x"]},
                {"title": "broken"},
                {"url": "https://b.example", "unread": True},
            ],
        ),
        encoding="utf-8",
    )

    summary = await run_import(export_file, db=db_session)

    assert (summary.imported, summary.skipped) == (2, 1)
    post = await get_post_by_url(db_session, "https://a.example")
    assert post is not None
    assert post.tag_names == ["x"]


async def test__run_import__invalid_document(db_session: AsyncSession, tmp_path: Path) -> None:
    """A file that isn't a list of records is rejected as a whole."""
    export_file = tmp_path / "bad.json"
    export_file.write_text('{"hello": "world"}', encoding="utf-8")

    with pytest.raises(InvalidInputError):
        await run_import(export_file, db=db_session)


async def test__render_export__html_and_json(db_session: AsyncSession) -> None:
    """Both export formats render the stored bookmarks."""
    await create_post(db_session, PostCreate(url="https://a.example", title="A"))

    html = await render_export("html", db=db_session)
    records = json.loads(await render_export("json", db=db_session))

    assert '<DT><A HREF="https://a.example"' in html
    assert [record["url"] for record in records] == ["https://a.example"]


def test__write_output__stdout_and_file(tmp_path: Path) -> None:
    """'-' writes to stdout, anything else is a file path."""
    stdout = io.StringIO()
    write_output("content", STDOUT, stdout=stdout)
    assert stdout.getvalue() == "content"

    destination = tmp_path / "bookmarks.html"
    write_output("file content", str(destination))
    assert destination.read_text(encoding="utf-8") == "file content"
