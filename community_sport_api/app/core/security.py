"""
Security helpers for password hashing and token authentication.

Tokens are compact JWTs signed with HMAC‑SHA256 over base64url
encoded header and payload.  They carry the user's ``uid`` as ``sub``
and an ``exp`` timestamp; the role is deliberately *not* trusted from
the token.  ``get_current_user`` reloads the user on every request so
the role claim stored on the user record is the single source of
truth.

Passwords are hashed with PBKDF2‑HMAC‑SHA256 and a random salt.
"""

import base64
import hashlib
import hmac
import json
import os
import time
from typing import Any, Callable, Dict, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .context import AppContext, get_context

PBKDF2_ITERATIONS = 100_000

CurrentUser = Dict[str, Any]


def _b64_url_encode(data: bytes) -> str:
    """Base64‑url encode bytes without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _b64_url_decode(data: str) -> bytes:
    """Decode base64‑url encoded string, adding padding if necessary."""
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _sign(message: bytes, secret: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).digest()


def create_access_token(data: Dict[str, Any], secret_key: str, expires_seconds: int) -> str:
    """Create a signed token with the given claims.

    The payload is extended with an ``exp`` field (UNIX timestamp).
    Clients send the token as ``Authorization: Bearer <token>``.
    """
    to_encode = data.copy()
    to_encode["exp"] = int(time.time()) + expires_seconds
    header = {"alg": "HS256", "typ": "JWT"}
    header_b64 = _b64_url_encode(json.dumps(header, separators=(",", ":")).encode("utf-8"))
    payload_b64 = _b64_url_encode(json.dumps(to_encode, separators=(",", ":")).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    signature_b64 = _b64_url_encode(_sign(signing_input, secret_key))
    return f"{header_b64}.{payload_b64}.{signature_b64}"


def decode_access_token(token: str, secret_key: str) -> Optional[Dict[str, Any]]:
    """Verify and decode a token.

    Returns the payload when the signature is valid and the token has
    not expired, otherwise ``None``.
    """
    parts = token.split(".")
    if len(parts) != 3:
        return None
    header_b64, payload_b64, signature_b64 = parts
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    try:
        actual_sig = _b64_url_decode(signature_b64)
        if not hmac.compare_digest(_sign(signing_input, secret_key), actual_sig):
            return None
        data = json.loads(_b64_url_decode(payload_b64).decode("utf-8"))
        if not isinstance(data, dict) or data.get("exp") is None or int(data["exp"]) < int(time.time()):
            return None
    except (TypeError, ValueError):
        return None
    return data


security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"kind": "unauthenticated", "message": detail},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    ctx: AppContext = Depends(get_context),
) -> CurrentUser:
    """Dependency that resolves the authenticated caller.

    Returns a dict with ``uid``, ``email``, ``role`` and ``privileged``.
    The static ``ADMIN_TOKEN`` (when configured) authenticates a
    privileged caller without a user record.
    """
    if credentials is None:
        raise _unauthorized("Please log in to continue.")
    token = credentials.credentials

    admin_token = ctx.settings.admin_token
    if admin_token and hmac.compare_digest(token.encode("utf-8"), admin_token.encode("utf-8")):
        return {"uid": None, "email": None, "role": None, "privileged": True}

    payload = decode_access_token(token, ctx.settings.secret_key)
    if not payload:
        raise _unauthorized("Invalid or expired token")

    from ..services.user_service import UserService

    user = await UserService(ctx.store.db_path).get_user(payload.get("sub", ""))
    if user is None:
        raise _unauthorized("User no longer exists")
    if user.disabled:
        raise _unauthorized("User account disabled")
    return {"uid": user.uid, "email": user.email, "role": user.role, "privileged": False}


def require_roles(*roles: str) -> Callable[..., CurrentUser]:
    """Dependency factory allowing only callers holding one of ``roles``.

    Roles are disjoint labels, not levels: ``require_roles("organizer")``
    rejects members and users without any role.
    """

    async def _role_dependency(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.get("privileged") or current_user.get("role") in roles:
            return current_user
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"kind": "permission_denied", "message": "You do not have permission to perform this action."},
        )

    return _role_dependency


def hash_password(password: str) -> str:
    """Hash a password using PBKDF2‑HMAC with SHA‑256.

    Returns ``"<salt hex>$<hash hex>"``.
    """
    salt = os.urandom(16)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, PBKDF2_ITERATIONS)
    return f"{salt.hex()}${dk.hex()}"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a stored ``salt$hash`` string."""
    try:
        salt_hex, hash_hex = hashed_password.split("$", 1)
        salt = bytes.fromhex(salt_hex)
        stored_hash = bytes.fromhex(hash_hex)
    except ValueError:
        return False
    dk = hashlib.pbkdf2_hmac("sha256", plain_password.encode("utf-8"), salt, PBKDF2_ITERATIONS)
    return hmac.compare_digest(dk, stored_hash)
