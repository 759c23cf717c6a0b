"""Tests for the database store and error translation."""

import sqlite3
import time

import pytest
from sqlalchemy import exc as sa_exc
from sqlalchemy.engine import make_url

from community_rewards.core.errors import (
    RedemptionErrorKind,
    StoreConflictError,
    StoreConstraintError,
    StoreTimeoutError,
)
from community_rewards.infrastructure.database import Database, translate_store_error
from community_rewards.models import Member
from community_rewards.services.redemption import RedemptionEngine


class FakeDriverError(Exception):
    """Driver exception carrying an optional SQLSTATE."""

    def __init__(self, message: str, sqlstate: str | None = None):
        super().__init__(message)
        self.sqlstate = sqlstate


class TestTranslateStoreError:
    """Tests for translate_store_error."""

    @pytest.mark.parametrize("sqlstate", ["55P03", "57014"])
    def test_lock_timeout_codes(self, sqlstate):
        """Test PostgreSQL lock timeout and cancel codes."""
        exc = sa_exc.DBAPIError("SELECT 1", {}, FakeDriverError("timeout", sqlstate))

        translated = translate_store_error(exc)

        assert isinstance(translated, StoreTimeoutError)
        assert translated.retryable is True
        assert translated.details == {"sqlstate": sqlstate}

    @pytest.mark.parametrize("sqlstate", ["40001", "40P01"])
    def test_conflict_codes(self, sqlstate):
        """Test serialization failures and deadlocks."""
        exc = sa_exc.DBAPIError("UPDATE", {}, FakeDriverError("conflict", sqlstate))

        translated = translate_store_error(exc)

        assert isinstance(translated, StoreConflictError)
        assert translated.kind == RedemptionErrorKind.STORE_CONFLICT

    def test_sqlite_database_locked(self):
        """Test the SQLite busy error."""
        exc = sa_exc.OperationalError("BEGIN", {}, FakeDriverError("database is locked"))

        assert isinstance(translate_store_error(exc), StoreTimeoutError)

    def test_integrity_error_is_not_retryable(self):
        """Test that constraint violations are not reported as retryable."""
        exc = sa_exc.IntegrityError("INSERT", {}, FakeDriverError("CHECK constraint failed"))

        translated = translate_store_error(exc)

        assert isinstance(translated, StoreConstraintError)
        assert translated.kind == RedemptionErrorKind.STORE_CONFLICT
        assert translated.retryable is False
        assert translated.status_code == 409
        assert "retry" not in translated.message

    def test_integrity_error_with_serialization_code_is_retryable(self):
        """Test that SQLSTATE 40001 wins over the exception class."""
        exc = sa_exc.IntegrityError("UPDATE", {}, FakeDriverError("could not serialize", "40001"))

        translated = translate_store_error(exc)

        assert type(translated) is StoreConflictError
        assert translated.retryable is True

    def test_other_operational_error_has_neutral_message(self):
        """Test that non-lock operational failures do not mention locks."""
        exc = sa_exc.OperationalError("SELECT", {}, FakeDriverError("no such table: rewards"))

        translated = translate_store_error(exc)

        assert isinstance(translated, StoreTimeoutError)
        assert "locks" not in translated.message
        assert "no such table" in translated.message

    def test_locked_database_mentions_locks(self):
        """Test the lock wait message."""
        exc = sa_exc.OperationalError("BEGIN", {}, FakeDriverError("database is locked"))

        assert "could not acquire locks" in translate_store_error(exc).message

    def test_programming_error_not_translated(self):
        """Test that bugs propagate untouched."""
        exc = sa_exc.ProgrammingError("SELEC", {}, FakeDriverError("syntax error"))

        assert translate_store_error(exc) is None

    def test_store_errors_map_to_503(self):
        """Test HTTP status of store errors."""
        assert StoreTimeoutError("x").status_code == 503
        assert StoreConflictError("x").status_code == 503


class TestDatabase:
    """Tests for Database lifecycle and transactions."""

    def test_engine_requires_open(self):
        """Test using a database before open()."""
        database = Database("sqlite+aiosqlite:///:memory:")

        with pytest.raises(RuntimeError):
            database.engine

    def test_from_settings_skips_pool_options_for_sqlite(self, settings):
        """Test SQLite databases get no pool sizing."""
        database = Database.from_settings(settings)

        assert database.is_sqlite
        assert database.lock_timeout_ms == settings.store_lock_timeout_ms

    @pytest.mark.asyncio
    async def test_transaction_commits(self, database, seed):
        """Test that a clean block is committed."""
        member = await seed.member(coin=10)

        async with database.transaction() as session:
            row = await session.get(Member, member.id)
            row.coin = 25

        assert (await seed.get_member(member.id)).coin == 25

    @pytest.mark.asyncio
    async def test_transaction_rolls_back_on_error(self, database, seed):
        """Test that a failing block leaves no partial write."""
        member = await seed.member(coin=10)

        with pytest.raises(ValueError):
            async with database.transaction() as session:
                row = await session.get(Member, member.id)
                row.coin = 99
                await session.flush()
                raise ValueError("abort")

        assert (await seed.get_member(member.id)).coin == 10

    @pytest.mark.asyncio
    async def test_check_constraint_violation_is_rejected(self, database, seed):
        """Test that a negative balance is refused by the store."""
        member = await seed.member(coin=10)

        with pytest.raises(StoreConstraintError):
            async with database.transaction() as session:
                row = await session.get(Member, member.id)
                row.coin = -5

        assert (await seed.get_member(member.id)).coin == 10

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, settings):
        """Test closing twice."""
        database = Database.from_settings(settings)
        database.open()
        database.open()

        await database.close()
        await database.close()


class TestLockWait:
    """Tests for transactions that cannot get their locks in time."""

    @pytest.mark.asyncio
    async def test_held_lock_times_out_then_store_recovers(self, database, seed, settings, notifier):
        """Test a redeem blocked by another writer fails fast and later succeeds."""
        member = await seed.member(coin=1000)
        reward = await seed.reward(point_cost=100, stock=5)

        short_wait = Database(settings.database_url, lock_timeout_ms=300)
        short_wait.open()
        engine = RedemptionEngine(short_wait, notifier, settings=settings)

        blocker = sqlite3.connect(make_url(settings.database_url).database, isolation_level=None)
        try:
            blocker.execute("BEGIN IMMEDIATE")

            started = time.monotonic()
            with pytest.raises(StoreTimeoutError) as exc_info:
                await engine.redeem(member.id, reward.id)
            elapsed = time.monotonic() - started

            assert exc_info.value.retryable is True
            assert "could not acquire locks" in exc_info.value.message
            assert elapsed < 3

            blocker.execute("ROLLBACK")

            result = await engine.redeem(member.id, reward.id)

            assert result.remaining_stock == 4
            assert result.remaining_balance == 900
        finally:
            blocker.close()
            await short_wait.close()

        assert await seed.count_redemptions() == 1
