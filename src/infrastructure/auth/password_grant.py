"""Identity Toolkit password grant client.

Delegates password verification to the provider's REST endpoint:

    POST {base}/accounts:signInWithPassword?key=<web key>
    {"email": ..., "password": ..., "returnSecureToken": true}

Success returns ``localId`` and ``idToken``. Failures come back as
``{"error": {"code": 400, "message": "INVALID_PASSWORD"}}``, where the
message may carry a suffix such as ``" : Too many attempts"``.
"""

import logging
from typing import Any, Optional

import httpx

from core.exceptions import BackendError, InvalidCredentialsError
from infrastructure.auth.provider import PasswordGrant
from infrastructure.errors import IDENTITY_PROVIDER, provider_http_errors

logger = logging.getLogger(__name__)

# Provider error messages that mean the caller got the credentials wrong
CREDENTIAL_ERRORS = frozenset(
    {
        "EMAIL_NOT_FOUND",
        "INVALID_PASSWORD",
        "INVALID_LOGIN_CREDENTIALS",
        "INVALID_EMAIL",
        "MISSING_PASSWORD",
        "USER_DISABLED",
    }
)


def provider_error_code(payload: Any) -> Optional[str]:
    """Extract the bare error code from an Identity Toolkit error body."""
    if not isinstance(payload, dict):
        return None
    error = payload.get("error")
    if not isinstance(error, dict):
        return None
    message = error.get("message")
    if not isinstance(message, str):
        return None
    return message.split(":", 1)[0].strip()


class IdentityToolkitClient:
    """IPasswordGrant over the Identity Toolkit REST API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://identitytoolkit.googleapis.com/v1",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._url = f"{base_url.rstrip('/')}/accounts:signInWithPassword"
        self._timeout = timeout
        self._transport = transport

    async def sign_in_with_password(self, email: str, password: str) -> PasswordGrant:
        """Verify credentials at the provider.

        Raises:
            InvalidCredentialsError: If the provider rejects the credentials
            BackendError: If the provider is unreachable or answers oddly
        """
        with provider_http_errors():
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    self._url,
                    params={"key": self._api_key},
                    json={"email": email, "password": password, "returnSecureToken": True},
                )

        try:
            data = response.json()
        except ValueError as e:
            raise BackendError(
                f"Identity provider returned a non-JSON response ({response.status_code})",
                backend=IDENTITY_PROVIDER,
            ) from e

        if response.is_error:
            code = provider_error_code(data)
            if code in CREDENTIAL_ERRORS:
                logger.info("Password grant rejected: %s", code)
                raise InvalidCredentialsError(details={"providerError": code})
            logger.error("Password grant failed (%s): %s", response.status_code, code)
            raise BackendError(
                f"Identity provider error: {code or response.status_code}",
                backend=IDENTITY_PROVIDER,
                details={"providerError": code},
            )

        try:
            return PasswordGrant(
                local_id=data["localId"],
                id_token=data["idToken"],
                email=data.get("email"),
                refresh_token=data.get("refreshToken"),
                expires_in=int(data["expiresIn"]) if data.get("expiresIn") else None,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise BackendError(
                "Identity provider returned an incomplete sign-in response",
                backend=IDENTITY_PROVIDER,
            ) from e
