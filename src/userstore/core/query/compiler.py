"""SQL compiler for user queries and write statements.

Compiles UserQuery options into a backend-agnostic QueryPlan (a list of
predicates plus ordering and pagination) and renders plans and write
statements to SQL text with named bind parameters (:param_0, :param_1, ...).
Values are always bound, never interpolated; identifiers are validated and
double-quoted.
"""

from dataclasses import dataclass, field
from typing import Any

from userstore.core.clock import now_string
from userstore.core.config import IDENTIFIER_PATTERN
from userstore.core.exceptions import QueryError
from userstore.core.query.predicates import (
    OP_EQ,
    OP_GT,
    OP_GTE,
    OP_IN,
    OP_LTE,
    OPERATORS,
    Ordering,
    Predicate,
)
from userstore.domain.entities.user import (
    COLUMN_CREATED_AT,
    COLUMN_EMAIL,
    COLUMN_ID,
    COLUMN_SOFT_DELETED_AT,
    COLUMN_STATUS,
)
from userstore.domain.entities.user_query import SORT_ASC, UserQuery


def quote_identifier(name: str) -> str:
    """Quote a table or column name.

    Raises:
        QueryError: If the name is not a plain identifier.
    """
    if not name or not IDENTIFIER_PATTERN.match(name):
        raise QueryError(f"Invalid identifier: {name!r}")
    return f'"{name}"'


@dataclass(frozen=True)
class QueryPlan:
    """A compiled SELECT.

    Attributes:
        table: Table to select from.
        predicates: Conjunction of predicates (empty means no WHERE clause).
        ordering: ORDER BY, None when unordered or count-only.
        limit: LIMIT, None when unlimited or count-only.
        offset: OFFSET, None when zero or count-only.
        count_only: Select COUNT(*) AS count instead of rows.
    """

    table: str
    predicates: tuple[Predicate, ...] = ()
    ordering: Ordering | None = None
    limit: int | None = None
    offset: int | None = None
    count_only: bool = False


@dataclass
class Statement:
    """Rendered SQL text with its bind parameters."""

    sql: str
    params: dict[str, Any] = field(default_factory=dict)


class QueryCompiler:
    """Compiles user queries to plans and renders plans to SQL."""

    def __init__(self, dialect: str = "sqlite") -> None:
        self.dialect = dialect
        self.param_counter = 0
        self.params: dict[str, Any] = {}

    # Planning -----------------------------------------------------------

    def compile(self, query: UserQuery, table: str, now: str | None = None) -> QueryPlan:
        """Compile query options into a plan.

        Args:
            query: The query options.
            table: Target table name.
            now: Reference time for soft-delete visibility (defaults to current UTC).

        Returns:
            QueryPlan with only the predicates whose filters are present.
        """
        predicates: list[Predicate] = []

        if query.id:
            predicates.append(Predicate(COLUMN_ID, OP_EQ, query.id))

        if query.id_in:
            predicates.append(Predicate(COLUMN_ID, OP_IN, tuple(query.id_in)))

        if query.status:
            predicates.append(Predicate(COLUMN_STATUS, OP_EQ, query.status))

        if query.status_in:
            predicates.append(Predicate(COLUMN_STATUS, OP_IN, tuple(query.status_in)))

        if query.email:
            predicates.append(Predicate(COLUMN_EMAIL, OP_EQ, query.email))

        if query.created_at_gte:
            predicates.append(Predicate(COLUMN_CREATED_AT, OP_GTE, query.created_at_gte))

        if query.created_at_lte:
            predicates.append(Predicate(COLUMN_CREATED_AT, OP_LTE, query.created_at_lte))

        if not query.with_soft_deleted:
            predicates.append(
                Predicate(COLUMN_SOFT_DELETED_AT, OP_GT, now or now_string())
            )

        if query.count_only:
            return QueryPlan(table=table, predicates=tuple(predicates), count_only=True)

        ordering = None
        if query.order_by:
            ordering = Ordering(query.order_by, descending=query.sort_order != SORT_ASC)

        return QueryPlan(
            table=table,
            predicates=tuple(predicates),
            ordering=ordering,
            limit=query.limit if query.limit > 0 else None,
            offset=query.offset if query.offset > 0 else None,
        )

    # Rendering ----------------------------------------------------------

    def render(self, plan: QueryPlan) -> Statement:
        """Render a plan to a SELECT statement.

        Raises:
            QueryError: If an identifier or operator is invalid.
        """
        self._reset()

        columns = "COUNT(*) AS count" if plan.count_only else "*"
        sql = f"SELECT {columns} FROM {quote_identifier(plan.table)}"

        if plan.predicates:
            conditions = [self._render_predicate(p) for p in plan.predicates]
            sql += " WHERE " + " AND ".join(conditions)

        if not plan.count_only:
            if plan.ordering is not None:
                direction = "DESC" if plan.ordering.descending else "ASC"
                sql += f" ORDER BY {quote_identifier(plan.ordering.column)} {direction}"

            if plan.limit is not None:
                sql += f" LIMIT {self._bind(plan.limit)}"
            elif plan.offset is not None and self.dialect == "sqlite":
                # SQLite requires a LIMIT before OFFSET
                sql += " LIMIT -1"

            if plan.offset is not None:
                sql += f" OFFSET {self._bind(plan.offset)}"

        return Statement(sql, self.params)

    def insert(self, table: str, data: dict[str, str]) -> Statement:
        """Render an INSERT of every column in data."""
        if not data:
            raise QueryError("Cannot insert an empty row")

        self._reset()
        columns = ", ".join(quote_identifier(column) for column in data)
        placeholders = ", ".join(self._bind(value) for value in data.values())
        sql = f"INSERT INTO {quote_identifier(table)} ({columns}) VALUES ({placeholders})"
        return Statement(sql, self.params)

    def update(self, table: str, data: dict[str, str], id: str) -> Statement:
        """Render an UPDATE of the given columns keyed by id."""
        if not data:
            raise QueryError("Cannot update with no columns")

        self._reset()
        assignments = ", ".join(
            f"{quote_identifier(column)} = {self._bind(value)}" for column, value in data.items()
        )
        sql = (
            f"UPDATE {quote_identifier(table)} SET {assignments} "
            f"WHERE {quote_identifier(COLUMN_ID)} = {self._bind(id)}"
        )
        return Statement(sql, self.params)

    def delete(self, table: str, id: str) -> Statement:
        """Render a DELETE keyed by id."""
        self._reset()
        sql = (
            f"DELETE FROM {quote_identifier(table)} "
            f"WHERE {quote_identifier(COLUMN_ID)} = {self._bind(id)}"
        )
        return Statement(sql, self.params)

    def _render_predicate(self, predicate: Predicate) -> str:
        if predicate.operator not in OPERATORS:
            raise QueryError(f"Unknown operator: {predicate.operator}")

        column = quote_identifier(predicate.column)

        if predicate.operator == OP_IN:
            values = tuple(predicate.value)
            if not values:
                raise QueryError(f"Empty IN list for column {predicate.column}")
            placeholders = ", ".join(self._bind(value) for value in values)
            return f"{column} IN ({placeholders})"

        return f"{column} {predicate.operator} {self._bind(predicate.value)}"

    def _bind(self, value: Any) -> str:
        param_name = f"param_{self.param_counter}"
        self.param_counter += 1
        self.params[param_name] = value
        return f":{param_name}"

    def _reset(self) -> None:
        self.param_counter = 0
        self.params = {}


def compile_to_sql(
    query: UserQuery, table: str, now: str | None = None, dialect: str = "sqlite"
) -> Statement:
    """Compile and render a user query in one step.

    Examples:
        >>> compile_to_sql(UserQuery(status="active", with_soft_deleted=True), "users").sql
        'SELECT * FROM "users" WHERE "status" = :param_0'
    """
    compiler = QueryCompiler(dialect)
    return compiler.render(compiler.compile(query, table, now))
