"""Tests for the bulk import and export endpoints."""
from httpx import AsyncClient


async def test_import_array(client: AsyncClient) -> None:
    """A linkding export array is imported with a summary."""
    response = await client.post(
        "/api/bookmarks/import/",
        json=[
            {"url": "https://a.example", "title": "A", "tag_names": ["x"]},
            {"title": "missing url"},
            {"url": "https://c.example", "tags": "y, z", "is_archived": True},
        ],
    )

    assert response.status_code == 200
    data = response.json()
    assert data["imported"] == 2
    assert data["created"] == 2
    assert data["updated"] == 0
    assert data["skipped"] == 1
    assert data["failures"][0]["index"] == 1

    listing = (await client.get("/api/bookmarks/")).json()
    assert listing["count"] == 2


async def test_import_paginated_response(client: AsyncClient) -> None:
    """linkding's paginated list response can be imported as is."""
    response = await client.post(
        "/api/bookmarks/import",
        json={"count": 1, "next": None, "previous": None, "results": [{"url": "https://a.example"}]},
    )

    assert response.status_code == 200
    assert response.json()["imported"] == 1


async def test_import_updates_existing(client: AsyncClient) -> None:
    """Import merges into a bookmark created through the API."""
    created = (
        await client.post("/api/bookmarks/", json={"url": "https://a.example", "notes": "mine"})
    ).json()

    response = await client.post(
        "/api/bookmarks/import/", json=[{"url": "https://a.example", "title": "Imported"}],
    )
    assert response.json()["updated"] == 1

    bookmark = (await client.get(f"/api/bookmarks/{created['id']}/")).json()
    assert bookmark["title"] == "Imported"
    assert bookmark["notes"] == "mine"


async def test_import_rejects_non_list_document(client: AsyncClient) -> None:
    """A single object without results is not an import document."""
    response = await client.post("/api/bookmarks/import/", json={"url": "https://a.example"})
    assert response.status_code == 422


async def test_export_html(client: AsyncClient) -> None:
    """The default export is a Netscape bookmark file download."""
    await client.post(
        "/api/bookmarks/",
        json={"url": "https://a.example", "title": "A & B", "tag_names": ["t"]},
    )

    response = await client.get("/api/bookmarks/export/")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "attachment" in response.headers["content-disposition"]
    assert response.text.startswith("<!DOCTYPE NETSCAPE-Bookmark-file-1>")
    assert 'HREF="https://a.example"' in response.text
    assert 'TAGS="t"' in response.text
    assert ">A &amp; B</A>" in response.text


async def test_export_json_round_trip(client: AsyncClient) -> None:
    """JSON export can be imported back without changes."""
    await client.post(
        "/api/bookmarks/",
        json={"url": "https://a.example", "notes": "n", "tag_names": ["a", "b"], "unread": True},
    )
    await client.post("/api/bookmarks/", json={"url": "https://b.example", "shared": True})

    exported = (await client.get("/api/bookmarks/export/", params={"format": "json"})).json()
    assert [record["url"] for record in exported] == ["https://b.example", "https://a.example"]

    summary = (await client.post("/api/bookmarks/import/", json=exported)).json()
    assert (summary["created"], summary["updated"], summary["skipped"]) == (0, 2, 0)

    again = (await client.get("/api/bookmarks/export/", params={"format": "json"})).json()
    assert again == exported
