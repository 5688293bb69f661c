"""Integration tests for the users API."""

import pytest
from httpx import AsyncClient

from tests.fakes import FakeIdentityProvider, FakePasswordGrant


async def _register(client: AsyncClient, username: str, password: str = "Secret123") -> dict:
    response = await client.post(
        "/users",
        json={"username": username, "password": password, "confirmPassword": password},
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestRegisterAndLogin:
    """Registration and login through the full stack."""

    @pytest.mark.asyncio
    async def test_register_then_login(
        self, api_client: AsyncClient, identity: FakeIdentityProvider
    ) -> None:
        """A registered user can log in and gets the provider's token."""
        created = await _register(api_client, "alice")

        assert created["message"] == "User created"
        assert created["username"] == "alice"
        assert "serverFallback" not in created
        assert created["uid"] in identity.accounts

        response = await api_client.post(
            "/users/login", json={"username": "alice", "password": "Secret123"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["uid"] == created["uid"]
        assert data["token"] == f"id-token-{created['uid']}"
        assert data["username"] == "alice"
        assert "serverFallback" not in data

    @pytest.mark.asyncio
    async def test_wrong_password_is_401(
        self, api_client: AsyncClient, password_grant: FakePasswordGrant
    ) -> None:
        await _register(api_client, "alice")

        response = await api_client.post(
            "/users/login", json={"username": "alice", "password": "wrong"}
        )

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid credentials"
        assert password_grant.calls == 1

    @pytest.mark.asyncio
    async def test_register_password_mismatch(self, api_client: AsyncClient) -> None:
        response = await api_client.post(
            "/users",
            json={"username": "alice", "password": "a", "confirmPassword": "b"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Passwords do not match"

    @pytest.mark.asyncio
    async def test_register_missing_fields(self, api_client: AsyncClient) -> None:
        response = await api_client.post("/users", json={"username": "alice"})

        assert response.status_code == 400
        assert response.json()["error"] == "All fields are required"

    @pytest.mark.asyncio
    async def test_login_missing_fields(self, api_client: AsyncClient) -> None:
        response = await api_client.post("/users/login", json={"username": "alice"})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_register_without_provider_account(self, api_client: AsyncClient) -> None:
        """A provider failure still stores a local profile."""
        await _register(api_client, "alice")

        # Same derived email again: the provider refuses, the profile is local
        created = await _register(api_client, "alice")

        assert created["uid"].startswith("local-")


class TestUserReads:
    """Listing, filtering and fetching users."""

    @pytest.mark.asyncio
    async def test_list_users(self, api_client: AsyncClient) -> None:
        await _register(api_client, "alice")
        await _register(api_client, "bob")

        response = await api_client.get("/users")

        assert response.status_code == 200
        users = response.json()
        assert {u["username"] for u in users} == {"alice", "bob"}
        assert all("passwordHash" not in u for u in users)
        assert all("createdAt" in u for u in users)

    @pytest.mark.asyncio
    async def test_filter_by_provider(self, api_client: AsyncClient) -> None:
        await _register(api_client, "alice")

        firebase = await api_client.get("/users/filter", params={"provider": "firebase"})
        local = await api_client.get("/users/filter", params={"provider": "local"})

        assert [u["username"] for u in firebase.json()] == ["alice"]
        assert firebase.json()[0]["provider"] == "firebase"
        assert local.json() == []

    @pytest.mark.asyncio
    async def test_filter_requires_provider(self, api_client: AsyncClient) -> None:
        response = await api_client.get("/users/filter")

        assert response.status_code == 400
        assert response.json()["error"] == "Provider is required"

    @pytest.mark.asyncio
    async def test_sort_desc(self, api_client: AsyncClient) -> None:
        for name in ("bob", "Zed", "alice"):
            await _register(api_client, name)

        response = await api_client.get("/users/sort/desc")

        assert [u["username"] for u in response.json()] == ["Zed", "bob", "alice"]
        assert set(response.json()[0]) == {"id", "username"}

    @pytest.mark.asyncio
    async def test_get_user(self, api_client: AsyncClient) -> None:
        created = await _register(api_client, "alice")

        response = await api_client.get(f"/users/{created['uid']}")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == created["uid"]
        assert data["email"] == "alice@example.com"
        assert "passwordHash" not in data

    @pytest.mark.asyncio
    async def test_get_missing_user(self, api_client: AsyncClient) -> None:
        response = await api_client.get("/users/nope")

        assert response.status_code == 404
        assert response.json()["error"] == "User not found"


class TestUserMutations:
    """Updating and deleting users."""

    @pytest.mark.asyncio
    async def test_update_user(self, api_client: AsyncClient) -> None:
        created = await _register(api_client, "alice")

        response = await api_client.put(
            f"/users/{created['uid']}",
            json={"profileDescription": "Mahilig sa kape", "settings": {"theme": "dark"}},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "User updated successfully"
        assert data["profileDescription"] == "Mahilig sa kape"
        assert data["settings"] == {"theme": "dark"}
        assert data["username"] == "alice"

    @pytest.mark.asyncio
    async def test_password_change_applies_to_login(self, api_client: AsyncClient) -> None:
        created = await _register(api_client, "alice")

        await api_client.put(f"/users/{created['uid']}", json={"password": "NewSecret1"})
        old = await api_client.post(
            "/users/login", json={"username": "alice", "password": "Secret123"}
        )
        new = await api_client.post(
            "/users/login", json={"username": "alice", "password": "NewSecret1"}
        )

        assert old.status_code == 401
        assert new.status_code == 200

    @pytest.mark.asyncio
    async def test_update_missing_user(self, api_client: AsyncClient) -> None:
        response = await api_client.put("/users/nope", json={"username": "x"})

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_user(
        self, api_client: AsyncClient, identity: FakeIdentityProvider
    ) -> None:
        created = await _register(api_client, "alice")

        response = await api_client.delete(f"/users/{created['uid']}")

        assert response.status_code == 200
        assert response.json() == {"id": created["uid"], "message": "User deleted successfully"}
        assert created["uid"] not in identity.accounts
        assert (await api_client.get(f"/users/{created['uid']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_delete_missing_user(self, api_client: AsyncClient) -> None:
        response = await api_client.delete("/users/nope")

        assert response.status_code == 404
