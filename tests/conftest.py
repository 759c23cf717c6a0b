"""Pytest configuration and fixtures."""

from datetime import datetime
from typing import Any

import pytest
import pytest_asyncio

from community_rewards.core.config import Settings
from community_rewards.infrastructure.database import Database
from community_rewards.models import (
    LedgerEntry,
    Member,
    Notification,
    Reward,
    RewardRedemption,
    UserPrivilege,
)
from community_rewards.repositories import (
    LedgerRepository,
    NotificationRepository,
    RedemptionRepository,
)
from community_rewards.services.redemption import RedemptionEngine


class RecordingNotifier:
    """Notifier double that remembers every notification."""

    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []

    async def notify(self, member_id: int, message: str, link_url: str | None = None) -> int:
        self.sent.append({"member_id": member_id, "message": message, "link_url": link_url})
        return 1


class StoreSeeder:
    """Inserts and reads back rows for tests."""

    def __init__(self, database: Database) -> None:
        self.database = database

    async def member(
        self,
        coin: int = 1000,
        loyalty_point: int = 0,
        full_name: str = "Test Member",
        privilege: str | None = None,
    ) -> Member:
        async with self.database.transaction() as session:
            member = Member(full_name=full_name, coin=coin, loyalty_point=loyalty_point)
            session.add(member)
            await session.flush()
            if privilege:
                session.add(UserPrivilege(member_id=member.id, privilege=privilege))
        return member

    async def privilege(
        self,
        member_id: int,
        privilege: str,
        is_active: bool = True,
        expires_at: datetime | None = None,
    ) -> UserPrivilege:
        async with self.database.transaction() as session:
            grant = UserPrivilege(
                member_id=member_id,
                privilege=privilege,
                is_active=is_active,
                expires_at=expires_at,
            )
            session.add(grant)
        return grant

    async def reward(
        self,
        point_cost: int = 300,
        stock: int = 5,
        reward_name: str = "Community T-Shirt",
        is_active: bool = True,
        required_privilege: str | None = None,
    ) -> Reward:
        async with self.database.transaction() as session:
            reward = Reward(
                reward_name=reward_name,
                point_cost=point_cost,
                stock=stock,
                is_active=is_active,
                required_privilege=required_privilege,
            )
            session.add(reward)
        return reward

    async def get_member(self, member_id: int) -> Member:
        async with self.database.session() as session:
            return await session.get(Member, member_id)

    async def get_reward(self, reward_id: int) -> Reward:
        async with self.database.session() as session:
            return await session.get(Reward, reward_id)

    async def get_redemption(self, redemption_id: int) -> RewardRedemption:
        async with self.database.session() as session:
            return await session.get(RewardRedemption, redemption_id)

    async def count_redemptions(self) -> int:
        async with self.database.session() as session:
            return await RedemptionRepository(session).count()

    async def ledger(self, member_id: int, event_type: str | None = None) -> list[LedgerEntry]:
        async with self.database.session() as session:
            repo = LedgerRepository(session)
            return list(await repo.get_by_member(member_id, event_type=event_type))

    async def ledger_total(self, member_id: int) -> int:
        async with self.database.session() as session:
            return await LedgerRepository(session).sum_for_member(member_id)

    async def notifications(self, member_id: int) -> list[Notification]:
        async with self.database.session() as session:
            return list(await NotificationRepository(session).get_by_member(member_id))


@pytest.fixture(scope="function")
def settings(tmp_path):
    """Create settings instance for testing, backed by a temporary SQLite file."""
    return Settings(
        environment="testing",
        db_url=f"sqlite+aiosqlite:///{tmp_path / 'rewards.db'}",
        log_format="console",
        secret_key="test-secret-key",
    )


@pytest_asyncio.fixture
async def database(settings):
    """Open a database with all tables created."""
    db = Database.from_settings(settings)
    db.open()
    await db.create_all()
    yield db
    await db.close()


@pytest.fixture
def notifier():
    """Recording notifier."""
    return RecordingNotifier()


@pytest.fixture
def engine(database, notifier, settings):
    """Redemption engine over the test database."""
    return RedemptionEngine(database, notifier, settings=settings)


@pytest.fixture
def seed(database):
    """Row seeding helper."""
    return StoreSeeder(database)
