"""Tests for privilege tiers and resolution."""

from datetime import timedelta

import pytest

from community_rewards.models.base import utcnow
from community_rewards.services.privileges import (
    DatabasePrivilegeResolver,
    Privilege,
    highest_privilege,
)


class TestPrivilege:
    """Tests for the Privilege ordering."""

    def test_ranks_are_ordered(self):
        """Test the total order of tiers."""
        ordered = [Privilege.USER, Privilege.BERKOMUNITASPLUS, Privilege.PARTNER, Privilege.ADMIN]

        assert [p.rank for p in ordered] == sorted(p.rank for p in ordered)
        assert len({p.rank for p in ordered}) == 4

    def test_satisfies(self):
        """Test the privilege gate comparison."""
        assert Privilege.ADMIN.satisfies(Privilege.PARTNER)
        assert Privilege.PARTNER.satisfies(Privilege.PARTNER)
        assert not Privilege.BERKOMUNITASPLUS.satisfies(Privilege.PARTNER)
        assert Privilege.USER.satisfies(None)

    def test_display_names(self):
        """Test human-readable tier names."""
        assert Privilege.BERKOMUNITASPLUS.display_name == "BerkomunitasPlus"
        assert Privilege.USER.display_name == "User"

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, Privilege.USER),
            ("partner", Privilege.PARTNER),
            (" Admin ", Privilege.ADMIN),
            ("superuser", Privilege.USER),
            (Privilege.PARTNER, Privilege.PARTNER),
        ],
    )
    def test_parse(self, value, expected):
        """Test parsing stored privilege names."""
        assert Privilege.parse(value) == expected

    def test_highest_privilege(self):
        """Test picking the highest of several grants."""
        assert highest_privilege(["user", "partner", "berkomunitasplus"]) == Privilege.PARTNER
        assert highest_privilege([]) == Privilege.USER


class TestDatabasePrivilegeResolver:
    """Tests for DatabasePrivilegeResolver."""

    @pytest.mark.asyncio
    async def test_member_without_grants_is_user(self, database, seed):
        """Test the default tier."""
        member = await seed.member()

        async with database.session() as session:
            privilege = await DatabasePrivilegeResolver().resolve(session, member.id)

        assert privilege == Privilege.USER

    @pytest.mark.asyncio
    async def test_highest_active_grant_wins(self, database, seed):
        """Test several grants with inactive and expired ones ignored."""
        member = await seed.member()
        await seed.privilege(member.id, "berkomunitasplus")
        await seed.privilege(member.id, "admin", is_active=False)
        await seed.privilege(member.id, "partner", expires_at=utcnow() - timedelta(hours=1))

        async with database.session() as session:
            privilege = await DatabasePrivilegeResolver().resolve(session, member.id)

        assert privilege == Privilege.BERKOMUNITASPLUS

    @pytest.mark.asyncio
    async def test_future_expiry_still_valid(self, database, seed):
        """Test a grant that expires later."""
        member = await seed.member()
        await seed.privilege(member.id, "partner", expires_at=utcnow() + timedelta(days=30))

        async with database.session() as session:
            privilege = await DatabasePrivilegeResolver().resolve(session, member.id)

        assert privilege == Privilege.PARTNER
