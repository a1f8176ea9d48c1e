# app/schemas/auth.py
from __future__ import annotations

from typing import Optional

from pydantic import Field, model_validator

from app.schemas.common import CamelModel
from app.schemas.user import UserOut


# ──────────────── Login ────────────────
class LoginRequest(CamelModel):
    """Sign in with either `email` or `username`."""

    email: Optional[str] = None
    username: Optional[str] = None
    password: str = Field(min_length=1)

    @model_validator(mode="after")
    def _identifier_required(self) -> "LoginRequest":
        if not (self.email or "").strip() and not (self.username or "").strip():
            raise ValueError("username or email is required")
        return self


class TokensOut(CamelModel):
    access_token: str
    refresh_token: str


class LoginOut(TokensOut):
    user: UserOut


# ──────────────── Refresh ────────────────
class RefreshRequest(CamelModel):
    refresh_token: Optional[str] = None
