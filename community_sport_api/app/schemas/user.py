"""
Pydantic models for users, tokens and role claims.

A user is identified by a store‑assigned ``uid`` and a unique e‑mail.
The role is a single claim on the user record, either ``member`` or
``organizer``; it is ``None`` until assigned.
"""

from typing import Optional

from pydantic import BaseModel, Field

ROLE_MEMBER = "member"
ROLE_ORGANIZER = "organizer"
ROLES = (ROLE_MEMBER, ROLE_ORGANIZER)


class UserRegister(BaseModel):
    email: str = Field(..., examples=["a@x.com"])
    password: str = Field(..., examples=["s3cret!"])
    role: Optional[str] = Field(None, examples=[ROLE_MEMBER])


class UserLogin(BaseModel):
    email: str = Field(..., examples=["a@x.com"])
    password: str = Field(..., examples=["s3cret!"])
    # Portal the user is signing in through; must match the stored role.
    expected_role: Optional[str] = Field(None, examples=[ROLE_ORGANIZER])


class UserRead(BaseModel):
    uid: str
    email: str
    role: Optional[str] = None
    disabled: bool = False


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    uid: str
    email: str
    role: Optional[str] = None


class RoleAssignment(BaseModel):
    role: Optional[str] = Field(None, examples=[ROLE_ORGANIZER])


class RoleRead(BaseModel):
    uid: str
    role: Optional[str] = None
    email: Optional[str] = None


class RoleSetResult(BaseModel):
    success: bool = True
    message: str
    uid: str
    role: str
