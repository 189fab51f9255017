"""Exceptions raised by the user store.

Not-found is never an exception: lookups return None and by-id deletes
return False.
"""


class UserStoreError(Exception):
    """Base class for all user store errors."""

    pass


class InvalidArgumentError(UserStoreError, ValueError):
    """Raised when a required input is missing or out of range."""

    pass


class StorageUnavailableError(UserStoreError):
    """Raised when no storage backend is configured."""

    pass


class QueryError(UserStoreError):
    """Raised when a statement cannot be built or its result cannot be read."""

    pass


class VaultError(UserStoreError):
    """Raised when a token vault operation fails.

    A VaultError on a write path always means the primary table was not
    touched.
    """

    pass
