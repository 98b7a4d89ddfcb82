"""
Role endpoints for API v1.

A signed‑in user may read the role claim on their own account and may
choose a role once, while the account has none.  Changing an existing
role, or touching another account, needs the privileged admin token.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from community_sport_api.app.core.context import AppContext, get_context
from community_sport_api.app.core.errors import ServiceError, to_http_exception
from community_sport_api.app.core.security import get_current_user
from community_sport_api.app.schemas.user import RoleAssignment, RoleRead, RoleSetResult
from community_sport_api.app.services.role_service import RoleService

router = APIRouter()


def get_role_service(ctx: AppContext = Depends(get_context)) -> RoleService:
    return RoleService(ctx.store.db_path)


@router.get("/me/role", response_model=RoleRead)
async def get_my_role(
    service: RoleService = Depends(get_role_service),
    current_user: dict = Depends(get_current_user),
) -> RoleRead:
    if not current_user.get("uid"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"kind": "validation", "message": "The admin token has no user account"},
        )
    try:
        return await service.get_role(current_user["uid"])
    except ServiceError as e:
        raise to_http_exception(e) from e


@router.get("/{uid}/role", response_model=RoleRead)
async def get_user_role(
    uid: str,
    service: RoleService = Depends(get_role_service),
    current_user: dict = Depends(get_current_user),
) -> RoleRead:
    if not current_user.get("privileged") and current_user.get("uid") != uid:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"kind": "permission_denied", "message": "You can only read your own role"},
        )
    try:
        return await service.get_role(uid)
    except ServiceError as e:
        raise to_http_exception(e) from e


@router.put("/{uid}/role", response_model=RoleSetResult)
async def set_user_role(
    uid: str,
    body: RoleAssignment,
    service: RoleService = Depends(get_role_service),
    current_user: dict = Depends(get_current_user),
) -> RoleSetResult:
    """Assign ``member`` or ``organizer`` to ``uid``."""
    if not current_user.get("privileged") and current_user.get("uid") != uid:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"kind": "permission_denied", "message": "You can only set your own role"},
        )
    if not current_user.get("privileged") and current_user.get("role") is not None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"kind": "permission_denied", "message": "Only an administrator can change an existing role"},
        )
    try:
        return await service.set_role(uid, body.role)
    except ServiceError as e:
        raise to_http_exception(e) from e
