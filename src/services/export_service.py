"""
Bulk export to Netscape bookmark HTML and to linkding-style JSON.

Both renderers take posts with their tags already loaded (see
query_service.fetch_all_posts) and keep the order they are given.
"""
from collections.abc import Iterable
from datetime import datetime
from html import escape
from typing import Any

from models.post import Post

NETSCAPE_HEADER = (
    "<!DOCTYPE NETSCAPE-Bookmark-file-1>",
    "<!-- This is an automatically generated file.",
    "     It will be read and overwritten.",
    "     DO NOT EDIT! -->",
    '<META HTTP-EQUIV="Content-Type" CONTENT="text/html; charset=UTF-8">',
    "<TITLE>Bookmarks</TITLE>",
    "<H1>Bookmarks</H1>",
    "<DL><p>",
)
NETSCAPE_FOOTER = "</DL><p>"


def _epoch(value: datetime | None) -> str:
    return str(int(value.timestamp())) if value is not None else ""


def _flag(value: bool) -> str:
    return "1" if value else "0"


def _netscape_entry(post: Post) -> list[str]:
    """Render one post as a <DT> line, plus a <DD> line when it has a description."""
    attributes = {
        "HREF": post.url,
        "ADD_DATE": _epoch(post.created_at),
        "LAST_MODIFIED": _epoch(post.updated_at),
        "PRIVATE": _flag(not post.shared),
        "TOREAD": _flag(post.unread),
        "TAGS": ",".join(post.tag_names),
    }
    rendered = " ".join(
        f'{name}="{escape(value, quote=True)}"' for name, value in attributes.items()
    )
    lines = [f"    <DT><A {rendered}>{escape(post.title or '')}</A>"]
    if post.description:
        lines.append(f"    <DD>{escape(post.description)}")
    return lines


def export_netscape_html(posts: Iterable[Post]) -> str:
    """
    Render posts as a Netscape Bookmark File.

    Each post becomes ``<DT><A HREF ADD_DATE LAST_MODIFIED PRIVATE TOREAD TAGS>``
    with its title as link text. Notes have no place in the format and are
    dropped.

    Returns:
        The complete HTML document, newline terminated.
    """
    lines = list(NETSCAPE_HEADER)
    for post in posts:
        lines.extend(_netscape_entry(post))
    lines.append(NETSCAPE_FOOTER)
    return "\n".join(lines) + "\n"


def post_to_record(post: Post) -> dict[str, Any]:
    """A post in the JSON shape the importer reads back."""
    return {
        "url": post.url,
        "title": post.title,
        "description": post.description,
        "notes": post.notes,
        "tag_names": post.tag_names,
        "unread": post.unread,
        "shared": post.shared,
        "date_added": post.created_at.isoformat(),
        "date_modified": post.updated_at.isoformat(),
    }


def export_json(posts: Iterable[Post]) -> list[dict[str, Any]]:
    """Render posts as a list of linkding bookmark records."""
    return [post_to_record(post) for post in posts]
