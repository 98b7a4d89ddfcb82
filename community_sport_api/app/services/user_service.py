"""
Business logic for user accounts.

The ``users`` table plays the part of the identity provider: it maps a
store‑assigned ``uid`` to an e‑mail, a password hash and the role
claim.  Registration and sign‑in failures use the same wording the web
client shows its users.
"""

import logging
import re
import sqlite3
import uuid
from typing import Optional

from ..core.errors import AuthenticationError, ConflictError, PermissionDeniedError, UpstreamError, ValidationError
from ..core.db import get_connection
from ..core.store import utc_now
from ..schemas.user import UserRead

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class UserService:
    """Service for registering, authenticating and loading users."""

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> UserRead:
        return UserRead(
            uid=row["uid"],
            email=row["email"],
            role=row["role"],
            disabled=bool(row["disabled"]),
        )

    async def create_user(self, email: str, password: str) -> UserRead:
        """Register a new account without a role.

        Raises ``ValidationError`` for a malformed e‑mail or a short
        password and ``ConflictError`` when the e‑mail is taken.
        """
        from ..core.security import hash_password

        email = (email or "").strip().lower()
        if not _EMAIL_RE.match(email):
            raise ValidationError("Please enter a valid email address.")
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password should be at least {MIN_PASSWORD_LENGTH} characters.")

        uid = uuid.uuid4().hex
        now = utc_now()
        conn = get_connection(self.db_path)
        try:
            conn.execute(
                "INSERT INTO users (uid, email, password, role, created_at, updated_at) VALUES (?, ?, ?, NULL, ?, ?)",
                (uid, email, hash_password(password), now, now),
            )
            conn.commit()
        except sqlite3.IntegrityError as exc:
            raise ConflictError("An account with this email already exists.") from exc
        except sqlite3.Error as exc:
            logger.exception("Failed to register user %s", email)
            raise UpstreamError("Registration failed. Please try again later.") from exc
        finally:
            conn.close()
        logger.info("Registered user %s (%s)", email, uid)
        return UserRead(uid=uid, email=email)

    async def authenticate(self, email: str, password: str, expected_role: Optional[str] = None) -> UserRead:
        """Check credentials and, optionally, the sign‑in portal's role."""
        from ..core.security import verify_password

        email = (email or "").strip().lower()
        conn = get_connection(self.db_path)
        try:
            row = conn.execute(
                "SELECT uid, email, password, role, disabled FROM users WHERE email = ?",
                (email,),
            ).fetchone()
        except sqlite3.Error as exc:
            logger.exception("Failed to load user %s", email)
            raise UpstreamError("Sign in failed. Please try again later.") from exc
        finally:
            conn.close()

        if not row:
            raise AuthenticationError("No account found with this email address.")
        if not verify_password(password or "", row["password"]):
            raise AuthenticationError("Incorrect password.")
        if row["disabled"]:
            raise AuthenticationError("User account disabled")

        user = self._row_to_user(row)
        if expected_role is not None:
            if user.role is None:
                raise PermissionDeniedError("No role found on account. Please register again or contact support.")
            if user.role != expected_role:
                raise PermissionDeniedError(
                    f"This account does not have {expected_role} access. Please use the correct login portal."
                )
        return user

    async def get_user(self, uid: str) -> Optional[UserRead]:
        conn = get_connection(self.db_path)
        try:
            row = conn.execute(
                "SELECT uid, email, role, disabled FROM users WHERE uid = ?",
                (uid,),
            ).fetchone()
            return self._row_to_user(row) if row else None
        finally:
            conn.close()
