"""Tests for chirp API endpoints."""

import uuid
from datetime import timedelta

import pytest
from httpx import AsyncClient

from chirpy.core.config import AuthConfig
from chirpy.core.tokens import create_access_token
from chirpy.models.user import User


def _headers_for(user: User, config: AuthConfig) -> dict[str, str]:
    token = create_access_token(user.id, config.secret, timedelta(minutes=30), issuer=config.issuer)
    return {"Authorization": f"Bearer {token}"}


class TestChirpsAPI:
    """Test chirp endpoints."""

    @pytest.mark.asyncio
    async def test_create_chirp(self, async_client: AsyncClient, test_user: User, auth_headers: dict):
        """Test posting a chirp as the authenticated user."""
        response = await async_client.post(
            "/api/chirps", json={"body": "Hello, world"}, headers=auth_headers
        )

        assert response.status_code == 201
        data = response.json()
        assert data["body"] == "Hello, world"
        assert data["user_id"] == str(test_user.id)

    @pytest.mark.asyncio
    async def test_create_chirp_requires_token(self, async_client: AsyncClient):
        response = await async_client.post("/api/chirps", json={"body": "Hello"})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_create_chirp_too_long(self, async_client: AsyncClient, auth_headers: dict):
        response = await async_client.post(
            "/api/chirps", json={"body": "x" * 141}, headers=auth_headers
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Chirp is too long"

    @pytest.mark.asyncio
    async def test_create_chirp_at_limit(self, async_client: AsyncClient, auth_headers: dict):
        response = await async_client.post(
            "/api/chirps", json={"body": "x" * 140}, headers=auth_headers
        )

        assert response.status_code == 201

    @pytest.mark.asyncio
    async def test_list_chirps(
        self,
        async_client: AsyncClient,
        test_user: User,
        other_user: User,
        auth_config: AuthConfig,
    ):
        """Test listing, filtering by author and sorting."""
        await async_client.post(
            "/api/chirps", json={"body": "first"}, headers=_headers_for(test_user, auth_config)
        )
        await async_client.post(
            "/api/chirps", json={"body": "second"}, headers=_headers_for(other_user, auth_config)
        )

        all_chirps = await async_client.get("/api/chirps")
        assert [c["body"] for c in all_chirps.json()] == ["first", "second"]

        descending = await async_client.get("/api/chirps", params={"sort": "desc"})
        assert [c["body"] for c in descending.json()] == ["second", "first"]

        by_author = await async_client.get("/api/chirps", params={"author_id": str(other_user.id)})
        assert [c["body"] for c in by_author.json()] == ["second"]

    @pytest.mark.asyncio
    async def test_list_chirps_invalid_sort(self, async_client: AsyncClient):
        response = await async_client.get("/api/chirps", params={"sort": "sideways"})

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_get_chirp(self, async_client: AsyncClient, auth_headers: dict):
        created = await async_client.post(
            "/api/chirps", json={"body": "find me"}, headers=auth_headers
        )

        response = await async_client.get(f"/api/chirps/{created.json()['id']}")

        assert response.status_code == 200
        assert response.json()["body"] == "find me"

    @pytest.mark.asyncio
    async def test_get_chirp_not_found(self, async_client: AsyncClient):
        response = await async_client.get(f"/api/chirps/{uuid.uuid4()}")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_chirp(self, async_client: AsyncClient, auth_headers: dict):
        created = await async_client.post(
            "/api/chirps", json={"body": "bye"}, headers=auth_headers
        )
        chirp_id = created.json()["id"]

        response = await async_client.delete(f"/api/chirps/{chirp_id}", headers=auth_headers)

        assert response.status_code == 204
        assert (await async_client.get(f"/api/chirps/{chirp_id}")).status_code == 404

    @pytest.mark.asyncio
    async def test_delete_someone_elses_chirp(
        self,
        async_client: AsyncClient,
        auth_headers: dict,
        other_user: User,
        auth_config: AuthConfig,
    ):
        """Test that only the author can delete a chirp."""
        created = await async_client.post(
            "/api/chirps", json={"body": "mine"}, headers=auth_headers
        )

        response = await async_client.delete(
            f"/api/chirps/{created.json()['id']}",
            headers=_headers_for(other_user, auth_config),
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_delete_chirp_requires_token(self, async_client: AsyncClient):
        response = await async_client.delete(f"/api/chirps/{uuid.uuid4()}")

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_delete_chirp_not_found(self, async_client: AsyncClient, auth_headers: dict):
        response = await async_client.delete(f"/api/chirps/{uuid.uuid4()}", headers=auth_headers)

        assert response.status_code == 404
