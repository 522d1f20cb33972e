"""Persistence contracts and adapters."""

from tokensmith.stores.base import RefreshTokenPersistence, UserStore
from tokensmith.stores.memory import (
    InMemoryDatabase,
    InMemoryRefreshTokenPersistence,
    InMemoryUserStore,
)

__all__ = [
    "InMemoryDatabase",
    "InMemoryRefreshTokenPersistence",
    "InMemoryUserStore",
    "RefreshTokenPersistence",
    "UserStore",
]
