"""userstore - persistence for user records with tokenized sensitive columns.

Maps user records to a relational table, builds filtered queries from
typed query options, writes only changed columns, soft deletes, and keeps
configured sensitive columns (names, email) in an external token vault.
"""

__version__ = "0.1.0"

from userstore.core.config import Settings, StoreOptions, get_settings
from userstore.core.exceptions import (
    InvalidArgumentError,
    QueryError,
    StorageUnavailableError,
    UserStoreError,
    VaultError,
)
from userstore.domain.entities import (
    USER_STATUS_ACTIVE,
    USER_STATUS_DELETED,
    USER_STATUS_INACTIVE,
    USER_STATUS_UNVERIFIED,
    User,
    UserQuery,
)
from userstore.infrastructure.persistence import SQLAlchemyBackend, StorageBackend
from userstore.infrastructure.persistence.repositories import UserRepository
from userstore.infrastructure.vault import CallableTokenVault, TokenVault

__all__ = [
    "CallableTokenVault",
    "InvalidArgumentError",
    "QueryError",
    "SQLAlchemyBackend",
    "Settings",
    "StorageBackend",
    "StorageUnavailableError",
    "StoreOptions",
    "TokenVault",
    "USER_STATUS_ACTIVE",
    "USER_STATUS_DELETED",
    "USER_STATUS_INACTIVE",
    "USER_STATUS_UNVERIFIED",
    "User",
    "UserQuery",
    "UserRepository",
    "UserStoreError",
    "VaultError",
    "__version__",
    "get_settings",
]
