"""Security related functions.

Caller identity is resolved through the ``IdentityResolver`` capability so the
identity provider can be swapped without touching service logic.
``ClerkAuthenticator`` is the Clerk-backed implementation.
"""

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx
import jwt
from fastapi import Request
from jwt import InvalidTokenError, PyJWK, PyJWTError

from app.core.config import settings


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallerIdentity:
    """Identity of the caller as asserted by the identity provider."""

    subject: str
    email: str | None = None
    name: str | None = None


class IdentityResolver(Protocol):
    async def resolve_caller(self, request: Request) -> CallerIdentity | None:
        """Return the caller's identity, or None when the request is unauthenticated."""
        ...


def get_bearer_token(request: Request) -> str | None:
    authorization = request.headers.get("Authorization")
    if not authorization:
        return None
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() != "bearer" or not credentials.strip():
        return None
    return credentials.strip()


class ClerkAuthenticator:
    """
    Handles Clerk API authentication and token verification.

    Session tokens are verified against Clerk's JWKS. Contact details are
    taken from the token claims and, when a secret key is configured, refreshed
    from Clerk's Backend API.

    :ivar clerk_api_url: The base URL of the Clerk API.
    :type clerk_api_url: str
    :ivar secret_key: The Clerk secret key used for Backend API calls.
    :type secret_key: str
    """

    def __init__(self):
        self.clerk_api_url = str(settings.clerk_api_url).rstrip("/")
        self.secret_key = settings.clerk_secret_key
        self.jwks_url = settings.effective_jwks_url
        self.issuer = settings.clerk_issuer
        self.verify_signature = settings.auth_verify_signature
        self.timeout = settings.ai_request_timeout
        self._jwks: dict | None = None

    async def get_jwks(self, refresh: bool = False) -> dict:
        """Get JWKS from Clerk for token verification."""
        if self._jwks is not None and not refresh:
            return self._jwks

        headers = {"Authorization": f"Bearer {self.secret_key}"} if self.secret_key else {}
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(self.jwks_url, headers=headers)
            response.raise_for_status()
            self._jwks = response.json()
        return self._jwks

    async def _signing_key(self, token: str) -> PyJWK:
        kid = jwt.get_unverified_header(token).get("kid")
        for refresh in (False, True):
            jwks = await self.get_jwks(refresh=refresh)
            for key in jwks.get("keys", []):
                if kid is None or key.get("kid") == kid:
                    return PyJWK(key)
        raise InvalidTokenError(f"No signing key found for kid {kid!r}")

    async def verify_token(self, token: str) -> dict:
        """
        Verifies a given JSON Web Token (JWT) issued by Clerk and returns its claims.

        With ``auth_verify_signature`` disabled (local development only) the token
        is decoded without checking its signature.

        :param token: The JWT token to be verified.
        :return: A dictionary containing the decoded payload of the token.
        :raises InvalidTokenError: If the token is malformed, expired or forged.
        """
        if not self.verify_signature:
            return jwt.decode(
                token,
                options={"verify_signature": False, "verify_aud": False, "verify_exp": False},
            )

        signing_key = await self._signing_key(token)
        options = {"verify_aud": False, "require": ["sub", "exp"]}
        return jwt.decode(
            token,
            key=signing_key.key,
            algorithms=["RS256"],
            issuer=self.issuer,
            options={**options, "verify_iss": bool(self.issuer)},
            leeway=5,
        )

    async def fetch_user_profile(self, clerk_user_id: str) -> dict:
        """Fetch email and name from Clerk's Backend API. Best-effort, returns {} on failure."""
        if not self.secret_key:
            return {}

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    f"{self.clerk_api_url}/v1/users/{clerk_user_id}",
                    headers={"Authorization": f"Bearer {self.secret_key}"},
                )
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Could not fetch Clerk profile for %s: %s", clerk_user_id, str(e))
            return {}

        email = None
        primary_id = data.get("primary_email_address_id")
        for address in data.get("email_addresses") or []:
            if address.get("id") == primary_id:
                email = address.get("email_address")
                break

        full_name = " ".join(part for part in (data.get("first_name"), data.get("last_name")) if part)
        return {"email": email, "name": full_name or data.get("username")}

    async def resolve_caller(self, request: Request) -> CallerIdentity | None:
        token = get_bearer_token(request)
        if not token:
            return None

        try:
            payload = await self.verify_token(token)
        except (PyJWTError, httpx.HTTPError, ValueError) as e:
            logger.info("Rejected authentication token: %s", str(e))
            return None

        subject = payload.get("sub")
        if not subject:
            return None

        email = payload.get("email")
        name = payload.get("name") or payload.get("username")
        if not (email and name):
            profile = await self.fetch_user_profile(subject)
            email = email or profile.get("email")
            name = name or profile.get("name")

        return CallerIdentity(subject=subject, email=email, name=name)
