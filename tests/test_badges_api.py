import pytest
from httpx import AsyncClient

from trustbadges.main import API_PREFIX

BADGES_URL = f"{API_PREFIX}/badges"


async def _create(client: AsyncClient, name="Secure checkout", settings=None):
    response = await client.post(BADGES_URL, json={"name": name, "settings": settings or {"style": "card"}})
    assert response.status_code == 201
    return response.json()


class TestBadgeCrud:
    @pytest.mark.asyncio
    async def test_create_badge(self, admin_client: AsyncClient):
        badge = await _create(admin_client, settings={"size": "large"})
        assert badge["id"] > 0
        assert badge["name"] == "Secure checkout"
        assert badge["settings"] == {"size": "large"}
        assert badge["isActive"] is True

    @pytest.mark.asyncio
    async def test_create_requires_name(self, admin_client: AsyncClient):
        response = await admin_client.post(BADGES_URL, json={"name": "  ", "settings": {}})
        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "name"

    @pytest.mark.asyncio
    async def test_public_listing_shows_active_badges(self, admin_client: AsyncClient):
        first = await _create(admin_client, name="First")
        second = await _create(admin_client, name="Second")
        await admin_client.put(f"{BADGES_URL}/{second['id']}", json={"isActive": False})

        response = await admin_client.get(BADGES_URL)
        assert response.status_code == 200
        assert [b["id"] for b in response.json()] == [first["id"]]

    @pytest.mark.asyncio
    async def test_listing_is_refreshed_after_writes(self, admin_client: AsyncClient):
        assert (await admin_client.get(BADGES_URL)).json() == []
        await _create(admin_client)
        assert len((await admin_client.get(BADGES_URL)).json()) == 1

    @pytest.mark.asyncio
    async def test_update_badge(self, admin_client: AsyncClient):
        badge = await _create(admin_client)
        response = await admin_client.put(
            f"{BADGES_URL}/{badge['id']}",
            json={"name": "Renamed", "settings": {"style": "mono"}},
        )
        assert response.status_code == 200
        assert response.json()["name"] == "Renamed"
        assert response.json()["settings"] == {"style": "mono"}

    @pytest.mark.asyncio
    async def test_update_without_fields(self, admin_client: AsyncClient):
        badge = await _create(admin_client)
        response = await admin_client.put(f"{BADGES_URL}/{badge['id']}", json={})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_update_unknown_badge(self, admin_client: AsyncClient):
        response = await admin_client.put(f"{BADGES_URL}/999", json={"name": "Nope"})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_badge(self, admin_client: AsyncClient):
        badge = await _create(admin_client)
        response = await admin_client.delete(f"{BADGES_URL}/{badge['id']}")
        assert response.status_code == 204
        assert (await admin_client.delete(f"{BADGES_URL}/{badge['id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_writes_need_admin(self, client: AsyncClient):
        response = await client.post(BADGES_URL, json={"name": "X", "settings": {}})
        assert response.status_code == 401


class TestPublicRateLimit:
    @pytest.mark.asyncio
    async def test_listing_is_public(self, client: AsyncClient):
        response = await client.get(BADGES_URL)
        assert response.status_code == 200
        assert response.headers["X-RateLimit-Limit"] == "100"
        assert response.headers["X-RateLimit-Remaining"] == "99"

    @pytest.mark.asyncio
    async def test_limit_is_enforced_per_ip(self, client: AsyncClient, monkeypatch):
        from trustbadges.core.config import settings

        monkeypatch.setattr(settings, "PUBLIC_RATE_LIMIT_PER_HOUR", 2)
        headers = {"X-Forwarded-For": "203.0.113.7"}

        assert (await client.get(BADGES_URL, headers=headers)).status_code == 200
        assert (await client.get(BADGES_URL, headers=headers)).status_code == 200

        response = await client.get(BADGES_URL, headers=headers)
        assert response.status_code == 429
        assert "Retry-After" in response.headers
        assert response.headers["X-RateLimit-Remaining"] == "0"

        other = await client.get(BADGES_URL, headers={"X-Forwarded-For": "198.51.100.1"})
        assert other.status_code == 200
