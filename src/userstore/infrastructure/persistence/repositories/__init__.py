"""Repositories for user persistence."""

from userstore.infrastructure.persistence.repositories.user_repository import UserRepository

__all__ = ["UserRepository"]
