"""
Authentication endpoints for API v1.

``/register`` creates an account (optionally with a role claim) and
``/login`` exchanges credentials for a bearer token.  Sign‑in through a
role‑specific portal passes ``expected_role`` and is refused when the
account's claim differs.
"""

from fastapi import APIRouter, Depends, status

from community_sport_api.app.core.context import AppContext, get_context
from community_sport_api.app.core.errors import ServiceError, to_http_exception
from community_sport_api.app.core.security import create_access_token
from community_sport_api.app.schemas.user import TokenResponse, UserLogin, UserRead, UserRegister
from community_sport_api.app.services.role_service import RoleService
from community_sport_api.app.services.user_service import UserService

router = APIRouter()


def _token_for(ctx: AppContext, user: UserRead) -> TokenResponse:
    token = create_access_token(
        {"sub": user.uid, "email": user.email},
        ctx.settings.secret_key,
        ctx.settings.access_token_expire_minutes * 60,
    )
    return TokenResponse(access_token=token, uid=user.uid, email=user.email, role=user.role)


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(body: UserRegister, ctx: AppContext = Depends(get_context)) -> TokenResponse:
    """Create an account and return a token for it.

    When ``role`` is given it is validated and stored as the account's
    role claim; an invalid role is rejected before the account is
    created.
    """
    try:
        if body.role is not None:
            RoleService.validate_role(body.role)
        user = await UserService(ctx.store.db_path).create_user(body.email, body.password)
        if body.role is not None:
            result = await RoleService(ctx.store.db_path).set_role(user.uid, body.role)
            user = user.model_copy(update={"role": result.role})
    except ServiceError as e:
        raise to_http_exception(e) from e
    return _token_for(ctx, user)


@router.post("/login", response_model=TokenResponse)
async def login(body: UserLogin, ctx: AppContext = Depends(get_context)) -> TokenResponse:
    try:
        user = await UserService(ctx.store.db_path).authenticate(body.email, body.password, body.expected_role)
    except ServiceError as e:
        raise to_http_exception(e) from e
    return _token_for(ctx, user)
