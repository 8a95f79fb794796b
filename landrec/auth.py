# landrec/auth.py
"""
Identity collaborator: exchanges a bearer token for an ``Identity``.

The hosted auth server exposes ``GET /auth/v1/user``; a 200 means the
token is valid and the body describes the user. Anything else fails the
whole request with 401.
"""

from typing import Optional

import requests
from fastapi import Depends, Header
from loguru import logger

from landrec.config import get_settings
from landrec.errors import AuthError
from landrec.schemas.land import Identity


class IdentityProvider:
    def get_user(self, token: str) -> Identity:
        raise NotImplementedError


class SupabaseIdentityProvider(IdentityProvider):

    def __init__(self, auth_url: str, api_key: str, timeout: float = 10.0, http=None):
        self.auth_url = auth_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.http = http or requests.Session()

    def get_user(self, token: str) -> Identity:
        try:
            resp = self.http.get(
                f"{self.auth_url}/auth/v1/user",
                headers={"Authorization": f"Bearer {token}", "apikey": self.api_key},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"Identity lookup failed: {e}")
            raise AuthError("Unauthorized") from e

        if resp.status_code != 200:
            logger.warning(f"Identity lookup rejected token ({resp.status_code})")
            raise AuthError("Unauthorized")

        user = resp.json() or {}
        if not user.get("id"):
            raise AuthError("Unauthorized")

        meta = user.get("user_metadata") or {}
        handle = user.get("email") or meta.get("user_name") or user.get("phone") or None
        return Identity(id=str(user["id"]), email_or_handle=handle)


def token_from_header(authorization: Optional[str]) -> str:
    if not authorization:
        raise AuthError("No authorization header")

    token = authorization.replace("Bearer ", "", 1).strip()
    if not token:
        raise AuthError("Unauthorized")
    return token


# ---------------- FastAPI dependencies ----------------

def bearer_token(authorization: Optional[str] = Header(None)) -> str:
    return token_from_header(authorization)


def get_identity_provider() -> IdentityProvider:
    settings = get_settings()
    if not settings.auth_url:
        logger.error("AUTH_URL is not set; every request will be rejected")
        raise AuthError("Unauthorized")
    return SupabaseIdentityProvider(settings.auth_url, settings.auth_api_key, settings.auth_timeout_s)


def get_current_identity(
    token: str = Depends(bearer_token),
    provider: IdentityProvider = Depends(get_identity_provider),
) -> Identity:
    return provider.get_user(token)
