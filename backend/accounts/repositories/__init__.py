"""Persistence-only repositories (no commits, no business rules)."""

from accounts.repositories.base import BaseRepository
from accounts.repositories.user import UserRepository

__all__ = ["BaseRepository", "UserRepository"]
