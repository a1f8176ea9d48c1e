# tests/fixtures/auth.py

from typing import Awaitable, Callable, Dict, Tuple

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import User
from app.services.token_service import TokenService
from tests.utils.factory import create_user

# ─────────────────────────────────────────────────────────────
# 🔐 Token + Auth Fixtures for Testing
# ─────────────────────────────────────────────────────────────


def bearer(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


# ─── Fixture: Create user and return (user, access token) ─────
@pytest.fixture
def user_with_token(db_session: AsyncSession, token_service: TokenService) -> Callable[..., Awaitable[Tuple[User, str]]]:
    """
    Creates a test user and returns (user, access_token) tuple.
    """
    async def _create(**kwargs):
        user = await create_user(db_session, **kwargs)
        return user, token_service.mint(user).access_token

    return _create


@pytest.fixture
def user_with_headers(user_with_token) -> Callable[..., Awaitable[Tuple[User, Dict[str, str]]]]:
    """
    Same as user_with_token but returns (user, headers) instead of (user, token).
    """
    async def _create(**kwargs):
        user, token = await user_with_token(**kwargs)
        return user, bearer(token)

    return _create
