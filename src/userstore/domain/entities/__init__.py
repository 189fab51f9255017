"""Domain entities for the user store.

Entities are plain Python classes with no dependency on infrastructure.
"""

from userstore.domain.entities.user import (
    USER_STATUS_ACTIVE,
    USER_STATUS_DELETED,
    USER_STATUS_INACTIVE,
    USER_STATUS_UNVERIFIED,
    USER_STATUSES,
    User,
)
from userstore.domain.entities.user_query import UserQuery

__all__ = [
    "USER_STATUSES",
    "USER_STATUS_ACTIVE",
    "USER_STATUS_DELETED",
    "USER_STATUS_INACTIVE",
    "USER_STATUS_UNVERIFIED",
    "User",
    "UserQuery",
]
