"""Unit tests for password hashing."""

import pytest

from infrastructure.auth.passwords import PasswordHasher


class TestPasswordHasher:
    """Tests for PasswordHasher."""

    @pytest.mark.asyncio
    async def test_hash_verifies(self, hasher: PasswordHasher):
        hashed = await hasher.hash("Secret123")

        assert hashed != "Secret123"
        assert await hasher.verify("Secret123", hashed)
        assert not await hasher.verify("Secret124", hashed)

    @pytest.mark.asyncio
    async def test_hashes_are_salted(self, hasher: PasswordHasher):
        assert await hasher.hash("same") != await hasher.hash("same")

    @pytest.mark.asyncio
    async def test_malformed_hash_does_not_verify(self, hasher: PasswordHasher):
        assert not await hasher.verify("Secret123", "not-a-bcrypt-hash")

    @pytest.mark.asyncio
    async def test_long_passwords_are_accepted(self, hasher: PasswordHasher):
        password = "x" * 100

        hashed = await hasher.hash(password)

        assert await hasher.verify(password, hashed)
