"""Tests for token authentication on the API routes."""
import pytest
from httpx import AsyncClient


@pytest.mark.parametrize(
    "path",
    ["/api/bookmarks/", "/api/bookmarks/1/", "/api/bookmarks/check/?url=x", "/api/tags/"],
)
async def test_missing_token_is_401(client: AsyncClient, path: str) -> None:
    """Every /api route requires a token."""
    response = await client.get(path, headers={"Authorization": ""})

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Token"


async def test_wrong_token_is_401(client: AsyncClient) -> None:
    """A token that doesn't match API_TOKEN is rejected."""
    response = await client.get(
        "/api/bookmarks/", headers={"Authorization": "Token not-the-token"},
    )
    assert response.status_code == 401


async def test_bearer_scheme_accepted(client: AsyncClient) -> None:
    """Bearer works as well as linkding's Token scheme."""
    token = client.headers["Authorization"].split()[1]

    response = await client.get("/api/bookmarks/", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200


async def test_rejected_write_changes_nothing(client: AsyncClient) -> None:
    """An unauthenticated create doesn't store anything."""
    response = await client.post(
        "/api/bookmarks/",
        json={"url": "https://example.com"},
        headers={"Authorization": "Token wrong"},
    )
    assert response.status_code == 401

    listing = (await client.get("/api/bookmarks/")).json()
    assert listing["count"] == 0


async def test_health_needs_no_token(client: AsyncClient) -> None:
    """The health check is open."""
    response = await client.get("/health", headers={"Authorization": ""})
    assert response.status_code == 200
