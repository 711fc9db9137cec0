from __future__ import annotations

import secrets
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from .settings import Settings

_security = HTTPBasic(auto_error=False)


# PUBLIC_INTERFACE
def get_owner_id(request: Request) -> str:
    """
    Resolve the owning identity for the current request.

    The identity comes from the header named by settings.user_id_header. When
    the header is absent, settings.default_user_id is used. A header that is
    present but empty yields the empty-string owner, which is an ordinary owner
    like any other.
    """
    settings: Settings = request.app.state.settings
    value = request.headers.get(settings.user_id_header)
    if value is None:
        return settings.default_user_id
    return value


# PUBLIC_INTERFACE
def get_basic_auth_dependency(settings: Settings):
    """
    Return a FastAPI dependency callable that enforces HTTP Basic Auth only when
    settings.enable_basic_auth is set. When disabled, the dependency is a no-op.

    This only gates access to the service as a whole. Which tasks a caller can
    see is still decided by the owner identity alone.

    Behavior:
    - If settings.enable_basic_auth is False (default): returns a dependency that does nothing.
    - If True: validates provided credentials against BASIC_AUTH_USERNAME/BASIC_AUTH_PASSWORD.
      If credentials are missing or invalid, raises 401 with WWW-Authenticate: Basic.

    Usage:
        auth_dep = get_basic_auth_dependency(settings)
        app.include_router(router, dependencies=[Depends(auth_dep)])
    """
    if not settings.enable_basic_auth:
        async def _noop() -> None:  # noqa: D401 - trivial
            """No-op dependency (auth disabled)."""
            return None

        return _noop

    expected_user: Optional[str] = settings.basic_auth_username
    expected_pass: Optional[str] = settings.basic_auth_password

    async def _enforce(creds: Optional[HTTPBasicCredentials] = Depends(_security)) -> None:
        """
        Enforce HTTP Basic authentication when enabled.

        Raises:
            HTTPException(401) if credentials are missing or invalid.
        """
        if creds is None or creds.username is None or creds.password is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Not authenticated",
                headers={"WWW-Authenticate": "Basic"},
            )

        if expected_user is None or expected_pass is None:
            # Auth enabled but username/password not provided
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Server authentication not configured",
                headers={"WWW-Authenticate": "Basic"},
            )

        user_ok = secrets.compare_digest(creds.username.encode(), expected_user.encode())
        pass_ok = secrets.compare_digest(creds.password.encode(), expected_pass.encode())
        if not (user_ok and pass_ok):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid authentication credentials",
                headers={"WWW-Authenticate": "Basic"},
            )

    return _enforce
