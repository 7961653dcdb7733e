"""Tests for the refresh token store."""

import uuid
from datetime import datetime, timedelta

import pytest
from sqlalchemy import update
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from chirpy.core.exceptions import InvalidToken, StoreUnavailable
from chirpy.crud import refresh_token as refresh_token_crud
from chirpy.models.refresh_token import RefreshToken
from chirpy.models.user import User
from chirpy.services.refresh_token_store import (
    RefreshTokenState,
    RefreshTokenStore,
    refresh_token_state,
)

NOW = datetime(2026, 1, 1, 12, 0, 0)


class FrozenClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def _record(expires_at: datetime, revoked_at: datetime | None = None) -> RefreshToken:
    return RefreshToken(
        token="0" * 64,
        user_id=uuid.uuid4(),
        created_at=NOW,
        updated_at=NOW,
        expires_at=expires_at,
        revoked_at=revoked_at,
    )


class TestRefreshTokenState:
    """Test evaluation of stored refresh tokens."""

    def test_active(self):
        assert refresh_token_state(_record(NOW + timedelta(days=1)), NOW) is RefreshTokenState.ACTIVE

    def test_expired_at_boundary(self):
        assert refresh_token_state(_record(NOW), NOW) is RefreshTokenState.EXPIRED

    def test_revoked(self):
        record = _record(NOW + timedelta(days=1), revoked_at=NOW - timedelta(minutes=1))

        assert refresh_token_state(record, NOW) is RefreshTokenState.REVOKED

    def test_revoked_wins_over_expired(self):
        record = _record(NOW - timedelta(days=1), revoked_at=NOW - timedelta(days=2))

        assert refresh_token_state(record, NOW) is RefreshTokenState.REVOKED


class TestRefreshTokenStore:
    """Test refresh token create, lookup and revoke."""

    @pytest.fixture
    def clock(self) -> FrozenClock:
        return FrozenClock(NOW)

    @pytest.fixture
    def store(self, db_session: AsyncSession, clock: FrozenClock) -> RefreshTokenStore:
        return RefreshTokenStore(db_session, timedelta(days=60), clock)

    @pytest.mark.asyncio
    async def test_create(self, store: RefreshTokenStore, test_user: User):
        """Test that a new token is 64 hex chars and expires after the TTL."""
        record = await store.create(test_user.id)

        assert len(record.token) == 64
        assert int(record.token, 16) >= 0
        assert record.user_id == test_user.id
        assert record.created_at == NOW
        assert record.expires_at == NOW + timedelta(days=60)
        assert record.revoked_at is None

    @pytest.mark.asyncio
    async def test_create_is_unique(self, store: RefreshTokenStore, test_user: User):
        first = await store.create(test_user.id)
        second = await store.create(test_user.id)

        assert first.token != second.token

    @pytest.mark.asyncio
    async def test_lookup(self, store: RefreshTokenStore, test_user: User):
        record = await store.create(test_user.id)

        found = await store.lookup(record.token)

        assert found.user_id == test_user.id

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", ["", "f" * 64])
    async def test_lookup_unknown(self, store: RefreshTokenStore, token: str):
        with pytest.raises(InvalidToken):
            await store.lookup(token)

    @pytest.mark.asyncio
    async def test_revoke_is_idempotent(
        self, store: RefreshTokenStore, clock: FrozenClock, test_user: User
    ):
        """Test that the first revocation time survives later revokes."""
        record = await store.create(test_user.id)

        clock.now = NOW + timedelta(minutes=1)
        assert await store.revoke(record.token) is True
        clock.now = NOW + timedelta(minutes=2)
        assert await store.revoke(record.token) is False

        found = await store.lookup(record.token)
        assert found.revoked_at == NOW + timedelta(minutes=1)
        assert refresh_token_state(found, clock.now) is RefreshTokenState.REVOKED

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", ["", "f" * 64])
    async def test_revoke_unknown(self, store: RefreshTokenStore, token: str):
        assert await store.revoke(token) is False

    @pytest.mark.asyncio
    async def test_store_failure(self, store: RefreshTokenStore, monkeypatch):
        """Test that database errors surface as StoreUnavailable."""

        async def broken(*args, **kwargs):
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))

        monkeypatch.setattr(refresh_token_crud, "get_refresh_token", broken)

        with pytest.raises(StoreUnavailable):
            await store.lookup("f" * 64)

    @pytest.mark.asyncio
    async def test_rotate(self, store: RefreshTokenStore, clock: FrozenClock, test_user: User):
        """Test that rotation revokes the old token and creates a fresh one."""
        old = await store.create(test_user.id)
        old_token = old.token

        clock.now = NOW + timedelta(days=1)
        new = await store.rotate(old_token, test_user.id)

        assert new is not None
        assert new.token != old_token
        assert new.expires_at == NOW + timedelta(days=61)
        found = await store.lookup(old_token)
        assert found.revoked_at == NOW + timedelta(days=1)

    @pytest.mark.asyncio
    async def test_rotate_revoked_token(self, store: RefreshTokenStore, test_user: User):
        """Test that a token revoked in the meantime is not rotated."""
        old = await store.create(test_user.id)
        old_token = old.token
        await store.revoke(old_token)

        assert await store.rotate(old_token, test_user.id) is None

    @pytest.mark.asyncio
    async def test_rotate_failure_is_all_or_nothing(
        self, store: RefreshTokenStore, test_user: User, monkeypatch
    ):
        """Test that a failed insert keeps the presented token active."""
        old = await store.create(test_user.id)
        old_token = old.token

        async def broken(db, **kwargs):
            await db.execute(
                update(RefreshToken)
                .where(RefreshToken.token == kwargs["token"])
                .values(revoked_at=kwargs["now"])
            )
            raise OperationalError("INSERT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(refresh_token_crud, "rotate_refresh_token", broken)

        with pytest.raises(StoreUnavailable):
            await store.rotate(old_token, test_user.id)

        found = await store.lookup(old_token)
        assert found.revoked_at is None
