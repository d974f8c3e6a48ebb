"""FastAPI dependency injection."""

from typing import Annotated

from fastapi import Depends, Header, HTTPException

from app.models.auth import AuthUser
from app.services.auth import AuthService
from app.services.data_store import DataStore

_data_store: DataStore | None = None
_auth_service: AuthService | None = None


def get_data_store() -> DataStore:
    """Dependency for the shared DataStore."""
    global _data_store
    if _data_store is None:
        _data_store = DataStore()
    return _data_store


def get_auth_service() -> AuthService:
    """Dependency for the shared AuthService."""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService()
    return _auth_service


def get_bearer_token(
    authorization: Annotated[str | None, Header()] = None,
) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        raise HTTPException(status_code=401, detail="Missing Authorization header")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=401, detail="Expected a Bearer token")
    return token.strip()


def get_current_user(
    token: Annotated[str, Depends(get_bearer_token)],
    auth: Annotated[AuthService, Depends(get_auth_service)],
) -> AuthUser:
    """Resolve the signed-in user or respond 401."""
    user = auth.get_user(token)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid or expired session")
    return user
