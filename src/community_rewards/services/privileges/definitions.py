"""Member privilege tiers.

Tiers are totally ordered:

    user < berkomunitasplus < partner < admin

A reward gated on a tier is open to members holding that tier or any tier
above it.
"""

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class Privilege(str, Enum):
    """Member privilege tier."""

    USER = "user"
    BERKOMUNITASPLUS = "berkomunitasplus"
    PARTNER = "partner"
    ADMIN = "admin"

    @property
    def rank(self) -> int:
        return PRIVILEGE_RANK[self]

    @property
    def display_name(self) -> str:
        return PRIVILEGE_DISPLAY_NAMES[self]

    def satisfies(self, required: "Privilege | None") -> bool:
        """Check whether this tier meets a requirement (None is unrestricted)."""
        if required is None:
            return True
        return self.rank >= required.rank

    @classmethod
    def parse(cls, value: "str | Privilege | None") -> "Privilege":
        """Parse a stored privilege name, falling back to the lowest tier."""
        if value is None:
            return cls.USER
        if isinstance(value, cls):
            return value
        try:
            return cls(value.strip().lower())
        except ValueError:
            logger.warning(f"Unknown privilege {value!r}, treating as {cls.USER.value}")
            return cls.USER


PRIVILEGE_RANK = {
    Privilege.USER: 1,
    Privilege.BERKOMUNITASPLUS: 2,
    Privilege.PARTNER: 3,
    Privilege.ADMIN: 4,
}

PRIVILEGE_DISPLAY_NAMES = {
    Privilege.USER: "User",
    Privilege.BERKOMUNITASPLUS: "BerkomunitasPlus",
    Privilege.PARTNER: "Partner",
    Privilege.ADMIN: "Admin",
}


def highest_privilege(values: "list[str] | tuple[str, ...]") -> Privilege:
    """Pick the highest tier among stored privilege names (default: user)."""
    privileges = [Privilege.parse(value) for value in values]
    if not privileges:
        return Privilege.USER
    return max(privileges, key=lambda privilege: privilege.rank)
