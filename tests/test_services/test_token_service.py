# tests/test_services/test_token_service.py

import asyncio
from uuid import uuid4

import pytest
from jose import jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import UnauthorizedException
from app.core.security import hash_token
from app.db.models import User
from app.services.token_service import TokenService
from tests.utils.factory import create_user


@pytest.fixture()
def service(test_settings) -> TokenService:
    return TokenService(test_settings)


def _user(**overrides) -> User:
    fields = dict(id=uuid4(), username="neo", email="neo@example.com", fullname="Thomas Anderson", avatar="a")
    fields.update(overrides)
    return User(hashed_password="x", **fields)


async def _stored_hash(db: AsyncSession, user_id):
    return (await db.execute(select(User.refresh_token_hash).where(User.id == user_id))).scalar_one()


# ─────────────────────────────────────────────────────────────
# 🪪 Minting / decoding
# ─────────────────────────────────────────────────────────────
def test_access_token_claims(service: TokenService, test_settings):
    user = _user()

    pair = service.mint(user)
    claims = jwt.decode(
        pair.access_token,
        test_settings.ACCESS_TOKEN_SECRET.get_secret_value(),
        algorithms=[test_settings.JWT_ALGORITHM],
    )

    assert claims["sub"] == str(user.id)
    assert claims["username"] == "neo"
    assert claims["email"] == "neo@example.com"
    assert claims["fullname"] == "Thomas Anderson"
    assert claims["token_type"] == "access"


def test_refresh_token_carries_only_the_id(service: TokenService, test_settings):
    user = _user()

    claims = jwt.decode(
        service.mint(user).refresh_token,
        test_settings.REFRESH_TOKEN_SECRET.get_secret_value(),
        algorithms=[test_settings.JWT_ALGORITHM],
    )

    assert claims["sub"] == str(user.id)
    assert "email" not in claims and "username" not in claims


def test_tokens_are_signed_with_separate_secrets(service: TokenService):
    user = _user()
    pair = service.mint(user)

    with pytest.raises(UnauthorizedException):
        service.decode_refresh(pair.access_token)
    with pytest.raises(UnauthorizedException):
        service.decode_access(pair.refresh_token)
    assert service.decode_refresh(pair.refresh_token)["sub"] == str(user.id)


def test_foreign_signature_rejected(service: TokenService):
    forged = jwt.encode({"sub": str(uuid4()), "token_type": "access"}, "not-our-secret", algorithm="HS256")

    with pytest.raises(UnauthorizedException):
        service.decode_access(forged)


def test_two_mints_differ(service: TokenService):
    user = _user()

    assert service.mint(user).refresh_token != service.mint(user).refresh_token


# ─────────────────────────────────────────────────────────────
# 🔁 Issue / renew / revoke
# ─────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_issue_stores_only_a_digest(service: TokenService, db_session: AsyncSession):
    user = await create_user(db_session)

    pair = await service.issue(db_session, user)

    stored = await _stored_hash(db_session, user.id)
    assert stored == hash_token(pair.refresh_token)
    assert stored != pair.refresh_token


@pytest.mark.anyio
async def test_renew_rotates_once(service: TokenService, db_session: AsyncSession):
    user = await create_user(db_session)
    first = await service.issue(db_session, user)

    renewed_user, second = await service.renew(db_session, first.refresh_token)

    assert renewed_user.id == user.id
    assert await _stored_hash(db_session, user.id) == hash_token(second.refresh_token)
    with pytest.raises(UnauthorizedException):
        await service.renew(db_session, first.refresh_token)


@pytest.mark.anyio
async def test_racing_renewals_rotate_once(service: TokenService, session_maker, db_session: AsyncSession):
    user = await create_user(db_session)
    stale = (await service.issue(db_session, user)).refresh_token

    async def attempt():
        async with session_maker() as db:
            return await service.renew(db, stale)

    results = await asyncio.gather(attempt(), attempt(), attempt(), return_exceptions=True)

    winners = [r for r in results if not isinstance(r, Exception)]
    losers = [r for r in results if isinstance(r, Exception)]
    assert len(winners) == 1
    assert all(isinstance(e, UnauthorizedException) for e in losers)
    _, pair = winners[0]
    assert await _stored_hash(db_session, user.id) == hash_token(pair.refresh_token)


@pytest.mark.anyio
async def test_revoke_forgets_live_token(service: TokenService, db_session: AsyncSession):
    user = await create_user(db_session)
    pair = await service.issue(db_session, user)

    await service.revoke(db_session, user.id)

    assert await _stored_hash(db_session, user.id) is None
    with pytest.raises(UnauthorizedException):
        await service.renew(db_session, pair.refresh_token)


@pytest.mark.anyio
async def test_renew_with_garbage(service: TokenService, db_session: AsyncSession):
    with pytest.raises(UnauthorizedException):
        await service.renew(db_session, "not-a-jwt")
    with pytest.raises(UnauthorizedException):
        await service.renew(db_session, None)
