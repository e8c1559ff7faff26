"""
Bearer token authentication.

Access tokens are compact HS256 JWTs signed with ``SECRET_KEY``.  The
``sub`` claim holds the user id and ``exp`` the expiry as a UNIX
timestamp; no other claims are interpreted.

``get_current_user`` turns the ``Authorization`` header into the
caller's identity and ``require_roles`` restricts a route to certain
roles.  The role is always read from the stored profile, the same
field ``UserService.verify_admin`` checks, never from the token.
"""

import base64
import hashlib
import hmac
import json
import time
from typing import Any, Callable, Dict, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64decode(text: str) -> bytes:
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


def _segment(obj: Dict[str, Any]) -> str:
    return _b64encode(json.dumps(obj, separators=(",", ":")).encode("utf-8"))


def _signature(signing_input: str) -> str:
    key = settings.secret_key.encode("utf-8")
    return _b64encode(hmac.new(key, signing_input.encode("utf-8"), hashlib.sha256).digest())


_HEADER = _segment({"alg": "HS256", "typ": "JWT"})


def create_access_token(data: Dict[str, Any], expires_delta: Optional[int] = None) -> str:
    """Return a signed token carrying ``data`` and an ``exp`` claim.

    ``expires_delta`` is the lifetime in seconds and defaults to
    ``ACCESS_TOKEN_EXPIRE_MINUTES``.
    """
    lifetime = expires_delta or settings.access_token_expire_minutes * 60
    claims = dict(data, exp=int(time.time()) + lifetime)
    signing_input = f"{_HEADER}.{_segment(claims)}"
    return f"{signing_input}.{_signature(signing_input)}"


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Return the claims of a correctly signed, unexpired token, else ``None``."""
    try:
        header, claims_segment, signature = token.split(".")
    except ValueError:
        return None
    expected = _signature(f"{header}.{claims_segment}")
    if not hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8")):
        return None
    try:
        claims = json.loads(_b64decode(claims_segment))
        expires_at = int(claims["exp"])
    except (KeyError, TypeError, ValueError):
        return None
    if expires_at < time.time():
        return None
    return claims


security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Dict[str, Any]:
    """Dependency that retrieves the current authenticated user.

    Raises HTTP 401 when the header is missing, the token is invalid
    or expired, the profile no longer exists or the account is
    suspended.  On success returns the token payload extended with
    ``user_id``, ``role`` and ``display_name``.
    """
    from volunteer_board_api.app.services.user_service import UserService

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    payload = decode_access_token(credentials.credentials)
    if not payload or not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user = await UserService.find_by_id(str(payload["sub"]))
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User no longer exists",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if user.is_suspended:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User account suspended",
            headers={"WWW-Authenticate": "Bearer"},
        )
    payload["user_id"] = user.id
    payload["role"] = user.role.value if user.role else None
    payload["display_name"] = user.display_name
    return payload


def require_roles(*roles: str) -> Callable[..., Any]:
    """Dependency factory enforcing that the current user has one of ``roles``.

    Use as ``Depends(require_roles("admin"))``.  Raises HTTP 403 for
    any other role.
    """

    async def _role_dependency(current_user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
        if current_user.get("role") not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return current_user

    return _role_dependency


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[Dict[str, Any]]:
    """Like ``get_current_user`` but returns ``None`` when no token is sent.

    A token that is sent but invalid is still rejected with 401.
    """
    if credentials is None:
        return None
    return await get_current_user(credentials)
