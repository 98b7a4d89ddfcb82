"""
Service layer for role assignment.

Every user carries at most one role claim, ``member`` or
``organizer``.  The two roles are disjoint labels rather than levels of
privilege, and a user without a claim is denied every role‑gated
action.  The claim stored on the user record is authoritative; nothing
else caches it between requests.
"""

import logging
import sqlite3

from ..core.db import get_connection
from ..core.errors import NotFoundError, UpstreamError, ValidationError
from ..core.store import utc_now
from ..schemas.user import ROLES, RoleRead, RoleSetResult

logger = logging.getLogger(__name__)


class RoleService:
    """Reads and writes the role claim of a user."""

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path

    @staticmethod
    def validate_role(role: str) -> str:
        if role not in ROLES:
            raise ValidationError(f"Role must be one of: {', '.join(ROLES)}")
        return role

    async def set_role(self, uid: str, role: str) -> RoleSetResult:
        """Persist ``role`` as the claim of user ``uid``."""
        if not uid:
            raise ValidationError("Missing required field: uid")
        self.validate_role(role)
        conn = get_connection(self.db_path)
        try:
            cursor = conn.execute(
                "UPDATE users SET role = ?, updated_at = ? WHERE uid = ?",
                (role, utc_now(), uid),
            )
            conn.commit()
            updated = cursor.rowcount
        except sqlite3.Error as exc:
            logger.exception("Failed to set role for user %s", uid)
            raise UpstreamError("Failed to set user role. Please try again later.") from exc
        finally:
            conn.close()
        if not updated:
            raise NotFoundError(f"User {uid} not found")
        logger.info("Assigned role %s to user %s", role, uid)
        return RoleSetResult(message=f"Role {role} assigned successfully", uid=uid, role=role)

    async def get_role(self, uid: str) -> RoleRead:
        """Return the role claim of ``uid``; ``role`` is ``None`` when unset."""
        conn = get_connection(self.db_path)
        try:
            row = conn.execute(
                "SELECT uid, email, role FROM users WHERE uid = ?",
                (uid,),
            ).fetchone()
        except sqlite3.Error as exc:
            logger.exception("Failed to read role for user %s", uid)
            raise UpstreamError("Failed to get user role. Please try again later.") from exc
        finally:
            conn.close()
        if not row:
            raise NotFoundError(f"User {uid} not found")
        return RoleRead(uid=row["uid"], role=row["role"], email=row["email"])
