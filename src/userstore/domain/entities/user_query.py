"""Query options for selecting users.

UserQuery is an immutable value object. Every setter validates its input
and returns a new query, so partially built queries can be shared and
extended safely:

    query = UserQuery().set_status(USER_STATUS_ACTIVE).set_limit(10)
"""

from dataclasses import dataclass, replace
from datetime import datetime

from userstore.core.clock import normalize_datetime
from userstore.core.exceptions import InvalidArgumentError
from userstore.domain.entities.user import USER_COLUMNS

SORT_ASC = "asc"
SORT_DESC = "desc"


@dataclass(frozen=True)
class UserQuery:
    """Filters, ordering and pagination for a user listing.

    Attributes:
        id: Exact id match ("" means no filter).
        id_in: Match any of these ids (empty means no filter).
        status: Exact status match.
        status_in: Match any of these statuses.
        email: Exact email match.
        created_at_gte: Inclusive lower bound on created_at (storage format).
        created_at_lte: Inclusive upper bound on created_at (storage format).
        limit: Maximum rows (0 means unlimited). Ignored when count_only.
        offset: Rows to skip. Ignored when count_only.
        order_by: User column to order by ("" means unordered). Ignored when count_only.
        sort_order: "asc" or "desc".
        count_only: Select a single count instead of rows.
        with_soft_deleted: Do not exclude soft-deleted users.
    """

    id: str = ""
    id_in: tuple[str, ...] = ()
    status: str = ""
    status_in: tuple[str, ...] = ()
    email: str = ""
    created_at_gte: str = ""
    created_at_lte: str = ""
    limit: int = 0
    offset: int = 0
    order_by: str = ""
    sort_order: str = SORT_DESC
    count_only: bool = False
    with_soft_deleted: bool = False

    def set_id(self, id: str) -> "UserQuery":
        if not id:
            return self
        return replace(self, id=id)

    def set_id_in(self, ids: list[str] | tuple[str, ...]) -> "UserQuery":
        return replace(self, id_in=tuple(i for i in ids if i))

    def set_status(self, status: str) -> "UserQuery":
        return replace(self, status=status)

    def set_status_in(self, statuses: list[str] | tuple[str, ...]) -> "UserQuery":
        return replace(self, status_in=tuple(s for s in statuses if s))

    def set_email(self, email: str) -> "UserQuery":
        if not email:
            return self
        return replace(self, email=email)

    def set_created_at_gte(self, value: str | datetime) -> "UserQuery":
        return replace(self, created_at_gte=self._timestamp(value, "created_at_gte"))

    def set_created_at_lte(self, value: str | datetime) -> "UserQuery":
        return replace(self, created_at_lte=self._timestamp(value, "created_at_lte"))

    def set_limit(self, limit: int) -> "UserQuery":
        if limit < 0:
            raise InvalidArgumentError("limit cannot be negative")
        return replace(self, limit=limit)

    def set_offset(self, offset: int) -> "UserQuery":
        if offset < 0:
            raise InvalidArgumentError("offset cannot be negative")
        return replace(self, offset=offset)

    def set_order_by(self, column: str) -> "UserQuery":
        if column and column not in USER_COLUMNS:
            raise InvalidArgumentError(f"Invalid order by column: {column}")
        return replace(self, order_by=column)

    def set_sort_order(self, sort_order: str) -> "UserQuery":
        normalized = sort_order.lower()
        if normalized not in (SORT_ASC, SORT_DESC):
            raise InvalidArgumentError(f"Invalid sort order: {sort_order}")
        return replace(self, sort_order=normalized)

    def set_count_only(self, count_only: bool) -> "UserQuery":
        return replace(self, count_only=count_only)

    def set_with_soft_deleted(self, with_soft_deleted: bool) -> "UserQuery":
        return replace(self, with_soft_deleted=with_soft_deleted)

    @staticmethod
    def _timestamp(value: str | datetime, name: str) -> str:
        try:
            return normalize_datetime(value)
        except ValueError as e:
            raise InvalidArgumentError(f"Invalid {name} timestamp: {value}") from e
