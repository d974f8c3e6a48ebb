"""Authentication via Supabase Auth (GoTrue).

Sessions live on the client side; the API only exchanges credentials for
tokens and resolves a bearer token back to its user.
"""

import time
from typing import Any

from supabase import Client

from app.core.logging import log_auth_call, logger
from app.models.auth import AuthSession, AuthUser
from app.services.data_store import get_supabase_client


class AuthError(Exception):
    """Credentials were rejected or the auth backend failed."""


def _to_user(user: Any) -> AuthUser:
    metadata = getattr(user, "user_metadata", None) or {}
    return AuthUser(
        id=str(user.id),
        email=getattr(user, "email", None),
        full_name=metadata.get("full_name"),
    )


def _to_session(response: Any) -> AuthSession:
    session = getattr(response, "session", None)
    user = getattr(response, "user", None) or getattr(session, "user", None)
    if session is None or user is None:
        raise AuthError("No session returned")
    return AuthSession(
        access_token=session.access_token,
        refresh_token=getattr(session, "refresh_token", None),
        expires_at=getattr(session, "expires_at", None),
        user=_to_user(user),
    )


class AuthService:
    """Thin wrapper over ``client.auth``."""

    def __init__(self, client: Client | None = None) -> None:
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = get_supabase_client()
        return self._client

    def sign_up(
        self,
        email: str,
        password: str,
        full_name: str,
        mobile_number: str | None = None,
    ) -> AuthUser:
        start = time.time()
        data: dict[str, Any] = {"full_name": full_name}
        if mobile_number:
            data["mobile_number"] = mobile_number
        try:
            response = self.client.auth.sign_up(
                {"email": email, "password": password, "options": {"data": data}}
            )
        except Exception as e:
            log_auth_call("sign_up", False, (time.time() - start) * 1000)
            raise AuthError(str(e)) from e
        log_auth_call("sign_up", True, (time.time() - start) * 1000)

        if response.user is None:
            raise AuthError("Sign-up did not return a user")
        return _to_user(response.user)

    def sign_in(self, email: str, password: str) -> AuthSession:
        start = time.time()
        try:
            response = self.client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except Exception as e:
            log_auth_call("sign_in", False, (time.time() - start) * 1000)
            raise AuthError(str(e)) from e
        log_auth_call("sign_in", True, (time.time() - start) * 1000)
        return _to_session(response)

    def sign_out(self, access_token: str) -> None:
        """Revoke the refresh tokens behind an access token."""
        try:
            self.client.auth.admin.sign_out(access_token)
        except Exception as e:
            log_auth_call("sign_out", False)
            raise AuthError(str(e)) from e
        log_auth_call("sign_out", True)

    def get_user(self, access_token: str) -> AuthUser | None:
        """Resolve a bearer token to its user; None if the token is invalid."""
        try:
            response = self.client.auth.get_user(access_token)
        except Exception as e:
            logger.warning(f"Token lookup failed: {e}")
            return None
        if response is None or response.user is None:
            return None
        return _to_user(response.user)
