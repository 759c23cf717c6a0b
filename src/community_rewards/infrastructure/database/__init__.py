"""Database infrastructure module."""

from community_rewards.infrastructure.database.session import (
    Database,
    translate_store_error,
)

__all__ = [
    "Database",
    "translate_store_error",
]
