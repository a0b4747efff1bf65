"""
Bearer-token dependencies for the API routers.
"""
from typing import Optional

from fastapi import Depends, Header, HTTPException

from .state import AppState, get_state


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def optional_user(
    authorization: Optional[str] = Header(None),
    state: AppState = Depends(get_state),
) -> Optional[dict]:
    """The calling user, or None for anonymous requests."""
    token = _bearer_token(authorization)
    if token is None:
        return None
    user = state.users.authenticate(token)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid token")
    return user


async def require_user(user: Optional[dict] = Depends(optional_user)) -> dict:
    if user is None:
        raise HTTPException(status_code=401, detail="No token provided")
    return user


async def require_admin(user: dict = Depends(require_user)) -> dict:
    if user.get('role') != 'admin':
        raise HTTPException(status_code=403, detail="Admin access required")
    return user
