"""User record with field-level change tracking.

A user is a flat mapping of column name to string value. Two snapshots are
kept: the original values (as loaded, or as last persisted) and the current
values. Only the persistence layer promotes current to original, right after
a successful write, which is what lets updates touch only changed columns.
"""

import uuid
from datetime import datetime

from userstore.core.clock import MAX_DATETIME, now_string, parse_datetime

COLUMN_ID = "id"
COLUMN_STATUS = "status"
COLUMN_FIRST_NAME = "first_name"
COLUMN_LAST_NAME = "last_name"
COLUMN_EMAIL = "email"
COLUMN_MEMO = "memo"
COLUMN_CREATED_AT = "created_at"
COLUMN_UPDATED_AT = "updated_at"
COLUMN_SOFT_DELETED_AT = "soft_deleted_at"

USER_COLUMNS = (
    COLUMN_ID,
    COLUMN_STATUS,
    COLUMN_FIRST_NAME,
    COLUMN_LAST_NAME,
    COLUMN_EMAIL,
    COLUMN_MEMO,
    COLUMN_CREATED_AT,
    COLUMN_UPDATED_AT,
    COLUMN_SOFT_DELETED_AT,
)

USER_STATUS_ACTIVE = "active"
USER_STATUS_UNVERIFIED = "unverified"
USER_STATUS_INACTIVE = "inactive"
USER_STATUS_DELETED = "deleted"

USER_STATUSES = (
    USER_STATUS_ACTIVE,
    USER_STATUS_UNVERIFIED,
    USER_STATUS_INACTIVE,
    USER_STATUS_DELETED,
)


class User:
    """A user record backed by a string attribute map.

    Use User.new() for a record that has never been persisted (every column
    counts as changed, so create() inserts all of them) and
    User.from_existing_data() for a row read from storage (clean).
    """

    def __init__(self, data: dict[str, str] | None = None) -> None:
        self._original: dict[str, str] = {}
        self._current: dict[str, str] = dict(data or {})

    @classmethod
    def new(cls) -> "User":
        """Create an unsaved user with default column values."""
        now = now_string()
        return cls(
            {
                COLUMN_ID: uuid.uuid4().hex,
                COLUMN_STATUS: USER_STATUS_UNVERIFIED,
                COLUMN_FIRST_NAME: "",
                COLUMN_LAST_NAME: "",
                COLUMN_EMAIL: "",
                COLUMN_MEMO: "",
                COLUMN_CREATED_AT: now,
                COLUMN_UPDATED_AT: now,
                COLUMN_SOFT_DELETED_AT: MAX_DATETIME,
            }
        )

    @classmethod
    def from_existing_data(cls, data: dict[str, str]) -> "User":
        """Create a clean user from a storage row."""
        user = cls(data)
        user.mark_as_not_dirty()
        return user

    # Attribute map ------------------------------------------------------

    def get(self, column: str) -> str:
        """Return the current value of a column, or "" when absent."""
        return self._current.get(column, "")

    def set(self, column: str, value: str) -> "User":
        """Set the current value of a column. The original snapshot is untouched."""
        self._current[column] = value
        return self

    def get_original(self, column: str) -> str:
        """Return the value of a column as last loaded or persisted."""
        return self._original.get(column, "")

    def data(self) -> dict[str, str]:
        """Return a copy of all current values."""
        return dict(self._current)

    def data_changed(self) -> dict[str, str]:
        """Return the columns whose current value differs from the original."""
        return {
            column: value
            for column, value in self._current.items()
            if column not in self._original or self._original[column] != value
        }

    def is_dirty(self) -> bool:
        return bool(self.data_changed())

    def mark_as_not_dirty(self) -> None:
        """Promote current values to the original snapshot."""
        self._original = dict(self._current)

    # Typed accessors ----------------------------------------------------

    @property
    def id(self) -> str:
        return self.get(COLUMN_ID)

    def set_id(self, value: str) -> "User":
        return self.set(COLUMN_ID, value)

    @property
    def status(self) -> str:
        return self.get(COLUMN_STATUS)

    def set_status(self, value: str) -> "User":
        return self.set(COLUMN_STATUS, value)

    @property
    def first_name(self) -> str:
        return self.get(COLUMN_FIRST_NAME)

    def set_first_name(self, value: str) -> "User":
        return self.set(COLUMN_FIRST_NAME, value)

    @property
    def last_name(self) -> str:
        return self.get(COLUMN_LAST_NAME)

    def set_last_name(self, value: str) -> "User":
        return self.set(COLUMN_LAST_NAME, value)

    @property
    def email(self) -> str:
        return self.get(COLUMN_EMAIL)

    def set_email(self, value: str) -> "User":
        return self.set(COLUMN_EMAIL, value)

    @property
    def memo(self) -> str:
        return self.get(COLUMN_MEMO)

    def set_memo(self, value: str) -> "User":
        return self.set(COLUMN_MEMO, value)

    @property
    def created_at(self) -> str:
        return self.get(COLUMN_CREATED_AT)

    def set_created_at(self, value: str) -> "User":
        return self.set(COLUMN_CREATED_AT, value)

    @property
    def updated_at(self) -> str:
        return self.get(COLUMN_UPDATED_AT)

    def set_updated_at(self, value: str) -> "User":
        return self.set(COLUMN_UPDATED_AT, value)

    @property
    def soft_deleted_at(self) -> str:
        return self.get(COLUMN_SOFT_DELETED_AT)

    def set_soft_deleted_at(self, value: str) -> "User":
        return self.set(COLUMN_SOFT_DELETED_AT, value)

    @property
    def created_at_datetime(self) -> datetime | None:
        return parse_datetime(self.created_at)

    @property
    def updated_at_datetime(self) -> datetime | None:
        return parse_datetime(self.updated_at)

    @property
    def soft_deleted_at_datetime(self) -> datetime | None:
        return parse_datetime(self.soft_deleted_at)

    # Status helpers -----------------------------------------------------

    def is_active(self) -> bool:
        return self.status == USER_STATUS_ACTIVE

    def is_inactive(self) -> bool:
        return self.status == USER_STATUS_INACTIVE

    def is_unverified(self) -> bool:
        return self.status == USER_STATUS_UNVERIFIED

    def is_deleted(self) -> bool:
        return self.status == USER_STATUS_DELETED

    def is_soft_deleted(self) -> bool:
        """Check whether the soft-delete timestamp is set and already in the past."""
        deleted_at = self.soft_deleted_at_datetime
        if deleted_at is None:
            return False
        return deleted_at <= parse_datetime(now_string())

    def __repr__(self) -> str:
        return f"User(id={self.id!r}, status={self.status!r})"
