"""Password hashing with bcrypt."""

import asyncio

import bcrypt


class PasswordHasher:
    """One-way password hashing.

    bcrypt is CPU bound, so both operations run in a worker thread to keep
    the event loop responsive.
    """

    def __init__(self, rounds: int = 10) -> None:
        self._rounds = rounds

    async def hash(self, password: str) -> str:
        return await asyncio.to_thread(self._hash, password)

    async def verify(self, password: str, password_hash: str) -> bool:
        return await asyncio.to_thread(self._verify, password, password_hash)

    def _hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(_secret(password), salt).decode()

    @staticmethod
    def _verify(password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(_secret(password), password_hash.encode())
        except ValueError:
            # Malformed stored hash
            return False


def _secret(password: str) -> bytes:
    # bcrypt only reads the first 72 bytes; newer releases reject longer input
    return password.encode()[:72]
